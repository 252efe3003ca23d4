"""KubeLedger — Kubernetes cost ranges, savings scenarios and security risk cost."""

__version__ = "0.1.0"
