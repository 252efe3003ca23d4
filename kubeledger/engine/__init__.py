"""Quantitative estimation engine."""
