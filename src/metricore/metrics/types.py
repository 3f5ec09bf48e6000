"""Metric kinds and shared observation validation."""

import math
from enum import Enum
from numbers import Integral, Real

import numpy as np

from ..errors import ArgumentError

INT64_MIN = int(np.iinfo(np.int64).min)
INT64_MAX = int(np.iinfo(np.int64).max)


class MetricType(Enum):
    """Kinds of metric the registry partitions its contexts by."""

    TIMER = "timer"
    HISTOGRAM = "histogram"
    METER = "meter"
    COUNTER = "counter"
    GAUGE = "gauge"


def ensure_finite(value, what: str = "value") -> Real:
    """Reject non-numeric, boolean, NaN and infinite observations."""
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ArgumentError(f"{what} must be a real number, got {value!r}")
    if math.isnan(value) or math.isinf(value):
        raise ArgumentError(f"{what} must be finite, got {value}")
    return value


def ensure_count(amount, what: str = "amount") -> int:
    """Reject anything that is not a whole number."""
    if isinstance(amount, bool) or not isinstance(amount, Integral):
        raise ArgumentError(f"{what} must be an integer, got {amount!r}")
    return int(amount)


def ensure_int64(value: int, what: str = "value") -> int:
    """Reject whole numbers that do not fit the int64 reservoir storage."""
    if value < INT64_MIN or value > INT64_MAX:
        raise ArgumentError(f"{what} is outside the int64 range, got {value}")
    return value
