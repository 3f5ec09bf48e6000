"""Gauge metrics: instantaneous values, set directly or computed on read."""

import logging
import math
import threading
from typing import Callable

from .types import ensure_finite

logger = logging.getLogger(__name__)


class GaugeMetric:
    """Holds the last value it was set to."""

    def __init__(self, value: float = 0.0) -> None:
        self._lock = threading.Lock()
        self._value = float(value)

    @property
    def value(self) -> float:
        return self._value

    def set_value(self, value: float) -> None:
        # NaN is a legitimate "unknown" reading for a gauge
        if not (isinstance(value, float) and math.isnan(value)):
            ensure_finite(value)
        with self._lock:
            self._value = float(value)

    def get_value(self, reset: bool = False) -> float:
        with self._lock:
            value = self._value
            if reset:
                self._value = 0.0
        return value

    def reset(self) -> None:
        with self._lock:
            self._value = 0.0


class FunctionGauge(GaugeMetric):
    """Reads its value from a callback every time it is reported."""

    def __init__(self, value_provider: Callable[[], float]) -> None:
        super().__init__()
        self._value_provider = value_provider

    @property
    def value(self) -> float:
        return self.get_value()

    def set_value(self, value: float) -> None:
        raise TypeError("FunctionGauge values are computed by their callback and cannot be set")

    def get_value(self, reset: bool = False) -> float:
        try:
            return float(self._value_provider())
        except Exception as e:
            logger.warning(f"Gauge callback {self._value_provider!r} failed: {e}")
            return math.nan

    def reset(self) -> None:
        pass


class RatioGauge(FunctionGauge):
    """Reports ``numerator() / denominator()``, NaN when the ratio is undefined."""

    def __init__(self, numerator: Callable[[], float], denominator: Callable[[], float]) -> None:
        super().__init__(self._ratio)
        self._numerator = numerator
        self._denominator = denominator

    def _ratio(self) -> float:
        denominator = self._denominator()
        if not denominator or math.isnan(denominator) or math.isinf(denominator):
            return math.nan
        return self._numerator() / denominator
