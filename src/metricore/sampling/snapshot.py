"""Immutable statistical snapshots produced by reservoirs.

A snapshot owns a private, read-only copy of the sample it was built from,
so later updates to the reservoir never show through.
"""

import math
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Dict, Iterable, Optional, Sequence

import numpy as np

from ..errors import ArgumentError

if TYPE_CHECKING:
    from .base import WeightedSample


def validate_quantile(quantile: float) -> float:
    if isinstance(quantile, bool) or not isinstance(quantile, (int, float)):
        raise ArgumentError(f"Quantile must be a number, got {quantile!r}")
    if math.isnan(quantile) or quantile < 0.0 or quantile > 1.0:
        raise ArgumentError(f"Quantile must be within [0.0, 1.0], got {quantile}")
    return float(quantile)


def _read_only(array: np.ndarray) -> np.ndarray:
    array.setflags(write=False)
    return array


class Snapshot(ABC):
    """Statistics over a sample captured at one instant."""

    def __init__(self, count: int, total: int) -> None:
        self._count = count
        self._sum = total

    @property
    def count(self) -> int:
        """Observations offered to the reservoir, retained or not."""
        return self._count

    @property
    def sum(self) -> int:
        return self._sum

    @property
    @abstractmethod
    def values(self) -> np.ndarray:
        """Retained values in ascending order."""

    @abstractmethod
    def value(self, quantile: float) -> float:
        """Value at ``quantile`` in [0.0, 1.0]."""

    @property
    @abstractmethod
    def mean(self) -> float:
        pass

    @property
    @abstractmethod
    def std_dev(self) -> float:
        pass

    @property
    @abstractmethod
    def min_user_value(self) -> Optional[str]:
        pass

    @property
    @abstractmethod
    def max_user_value(self) -> Optional[str]:
        pass

    @property
    def size(self) -> int:
        return len(self.values)

    @property
    def min(self) -> int:
        return int(self.values[0]) if self.size else 0

    @property
    def max(self) -> int:
        return int(self.values[-1]) if self.size else 0

    @property
    def median(self) -> float:
        return self.value(0.5)

    @property
    def percentile_75(self) -> float:
        return self.value(0.75)

    @property
    def percentile_95(self) -> float:
        return self.value(0.95)

    @property
    def percentile_98(self) -> float:
        return self.value(0.98)

    @property
    def percentile_99(self) -> float:
        return self.value(0.99)

    @property
    def percentile_999(self) -> float:
        return self.value(0.999)

    def percentiles(self, quantiles: Iterable[float]) -> Dict[float, float]:
        return {q: self.value(q) for q in quantiles}


class UniformSnapshot(Snapshot):
    """Snapshot over an equally weighted sample."""

    def __init__(
        self,
        count: int,
        total: int,
        values: Sequence[int],
        user_values: Optional[Sequence[Optional[str]]] = None,
    ) -> None:
        super().__init__(count, total)
        raw = np.asarray(values, dtype=np.int64)
        order = np.argsort(raw, kind="stable")
        self._values = _read_only(raw[order])

        self._min_user_value: Optional[str] = None
        self._max_user_value: Optional[str] = None
        if user_values is not None and len(order):
            self._min_user_value = user_values[int(order[0])]
            self._max_user_value = user_values[int(order[-1])]

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def min_user_value(self) -> Optional[str]:
        return self._min_user_value

    @property
    def max_user_value(self) -> Optional[str]:
        return self._max_user_value

    @property
    def mean(self) -> float:
        if not self.size:
            return 0.0
        return float(np.mean(self._values, dtype=np.float64))

    @property
    def std_dev(self) -> float:
        if self.size <= 1:
            return 0.0
        return float(np.std(self._values.astype(np.float64), ddof=1))

    def value(self, quantile: float) -> float:
        quantile = validate_quantile(quantile)
        if not self.size:
            return 0.0
        # Position q * (n + 1) with linear interpolation, clamped to the sample ends
        return float(np.quantile(self._values, quantile, method="weibull"))


class WeightedSnapshot(Snapshot):
    """Snapshot over a sample whose elements carry decay weights."""

    def __init__(self, count: int, total: int, samples: Iterable["WeightedSample"]) -> None:
        super().__init__(count, total)
        ordered = sorted(samples, key=lambda sample: sample.value)

        self._values = _read_only(np.array([s.value for s in ordered], dtype=np.int64))
        weights = np.array([s.weight for s in ordered], dtype=np.float64)
        total_weight = weights.sum()
        if total_weight > 0:
            norm_weights = weights / total_weight
        else:
            norm_weights = np.zeros_like(weights)
        self._norm_weights = _read_only(norm_weights)
        # Cumulative weight preceding each value
        cumulative = np.cumsum(norm_weights)
        self._quantiles = _read_only(np.concatenate(([0.0], cumulative[:-1])))

        self._min_user_value = ordered[0].user_value if ordered else None
        self._max_user_value = ordered[-1].user_value if ordered else None

    @property
    def values(self) -> np.ndarray:
        return self._values

    @property
    def min_user_value(self) -> Optional[str]:
        return self._min_user_value

    @property
    def max_user_value(self) -> Optional[str]:
        return self._max_user_value

    @property
    def mean(self) -> float:
        if not self.size:
            return 0.0
        return float(np.sum(self._values * self._norm_weights))

    @property
    def std_dev(self) -> float:
        if self.size <= 1:
            return 0.0
        mean = self.mean
        variance = float(np.sum(self._norm_weights * (self._values - mean) ** 2))
        return math.sqrt(variance)

    def value(self, quantile: float) -> float:
        quantile = validate_quantile(quantile)
        if not self.size:
            return 0.0

        position = int(np.searchsorted(self._quantiles, quantile, side="right")) - 1
        if position < 1:
            return float(self._values[0])
        if position >= self.size:
            return float(self._values[-1])
        return float(self._values[position])
