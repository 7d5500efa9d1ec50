"""
Error taxonomy for the geometry engine.

- InvalidParameterError: the caller broke an input contract (non-positive
  size, bad count, offset too large, malformed chord, skewed plane vectors).
- DegenerateGeometryError: a computation hit a zero-length direction.

Both derive from ValueError so callers that already guard numeric input
with `except ValueError` keep working.
"""

import math
from numbers import Integral, Real
from typing import Any


class GeometryError(ValueError):
    """Base class for all rc_detail geometry errors."""


class InvalidParameterError(GeometryError):
    """An input parameter violates the builder's contract."""


class DegenerateGeometryError(GeometryError):
    """A direction or segment has zero length where one is required."""


def require_finite(name: str, value: Any) -> float:
    """Return `value` as float, rejecting non-numbers, NaN and infinities."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidParameterError(f"{name} must be a real number, got {value!r}")
    value = float(value)
    if not math.isfinite(value):
        raise InvalidParameterError(f"{name} must be finite, got {value!r}")
    return value


def require_positive(name: str, value: Any) -> float:
    """Return `value` as float, requiring value > 0."""
    value = require_finite(name, value)
    if value <= 0.0:
        raise InvalidParameterError(f"{name} must be positive, got {value!r}")
    return value


def require_non_negative(name: str, value: Any) -> float:
    """Return `value` as float, requiring value >= 0."""
    value = require_finite(name, value)
    if value < 0.0:
        raise InvalidParameterError(f"{name} must be non-negative, got {value!r}")
    return value


def require_less_than(name: str, value: float, limit: float, limit_name: str) -> float:
    """Require value < limit (e.g. an offset against half a span)."""
    if not value < limit:
        raise InvalidParameterError(
            f"{name}={value!r} must be less than {limit_name}={limit!r}"
        )
    return value


def require_count(name: str, value: Any, minimum: int = 1) -> int:
    """Return `value` as int, requiring an integer >= minimum."""
    if isinstance(value, bool) or not isinstance(value, Integral):
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
    value = int(value)
    if value < minimum:
        raise InvalidParameterError(f"{name} must be >= {minimum}, got {value}")
    return value
