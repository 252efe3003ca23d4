"""Error kinds raised by the estimation engine.

All errors are terminal for the computation that raised them: the engine is
pure, so a retry would reproduce the same failure.
"""

from __future__ import annotations


class EstimationError(Exception):
    """Base class for every engine failure."""


class InvalidInput(EstimationError, ValueError):
    """Non-positive total cost or cluster capacity."""


class DivisionByZero(EstimationError, ZeroDivisionError):
    """A zero capacity or pod-count denominator reached a ratio."""


class UndefinedROI(EstimationError):
    """ROI requested while the estimated remediation cost is zero."""


class UndefinedPayback(EstimationError):
    """Payback requested while the annual risk reduction is zero."""
