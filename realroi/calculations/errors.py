"""
Calculation Errors

Error kinds raised by the calculation engine. Both derive from ValueError
so callers that already guard calculations with ``except ValueError`` keep
working.
"""

import math


class CalculationError(ValueError):
    """Base class for calculation engine errors."""


class InvalidInput(CalculationError):
    """Raised when an input cannot produce a meaningful result."""


class DidNotConverge(CalculationError):
    """Raised when an iterative solver fails to find a root."""


def require_finite(name: str, value: float) -> float:
    """Reject NaN and infinite numbers."""
    if value is None or not math.isfinite(value):
        raise InvalidInput(f"{name} must be a finite number, got {value!r}")
    return value


def require_non_negative(name: str, value: float) -> float:
    """Reject negative or non-finite numbers."""
    require_finite(name, value)
    if value < 0:
        raise InvalidInput(f"{name} must be >= 0, got {value!r}")
    return value
