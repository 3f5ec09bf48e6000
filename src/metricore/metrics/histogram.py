"""Histogram metric: exact running totals plus sampled percentiles."""

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..sampling.base import Reservoir
from ..sampling.snapshot import Snapshot
from .types import ensure_finite, ensure_int64


@dataclass(frozen=True)
class HistogramValue:
    """Point-in-time histogram statistics.

    ``count``, ``sum``, ``mean``, ``min`` and ``max`` cover every observation
    ever made; the remaining statistics come from the reservoir sample.
    """

    count: int
    sum: float
    last_value: float
    last_user_value: Optional[str]
    max: float
    max_user_value: Optional[str]
    mean: float
    min: float
    min_user_value: Optional[str]
    std_dev: float
    median: float
    percentile_75: float
    percentile_95: float
    percentile_98: float
    percentile_99: float
    percentile_999: float
    sample_size: int
    _snapshot: Optional[Snapshot] = field(default=None, repr=False, compare=False)
    _divisor: float = field(default=1.0, repr=False, compare=False)

    def percentile(self, quantile: float) -> float:
        """Sampled value at ``quantile`` in [0.0, 1.0], in this value's unit."""
        if self._snapshot is None:
            return 0.0
        return self._snapshot.value(quantile) / self._divisor

    def scaled(self, divisor: float) -> "HistogramValue":
        """Return a copy with every magnitude divided by ``divisor``."""
        if divisor == 1:
            return self

        def scale(value: float) -> float:
            return value / divisor

        return HistogramValue(
            count=self.count,
            sum=scale(self.sum),
            last_value=scale(self.last_value),
            last_user_value=self.last_user_value,
            max=scale(self.max),
            max_user_value=self.max_user_value,
            mean=scale(self.mean),
            min=scale(self.min),
            min_user_value=self.min_user_value,
            std_dev=scale(self.std_dev),
            median=scale(self.median),
            percentile_75=scale(self.percentile_75),
            percentile_95=scale(self.percentile_95),
            percentile_98=scale(self.percentile_98),
            percentile_99=scale(self.percentile_99),
            percentile_999=scale(self.percentile_999),
            sample_size=self.sample_size,
            _snapshot=self._snapshot,
            _divisor=self._divisor * divisor,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "sum": self.sum,
            "last_value": self.last_value,
            "last_user_value": self.last_user_value,
            "min": self.min,
            "min_user_value": self.min_user_value,
            "max": self.max,
            "max_user_value": self.max_user_value,
            "mean": self.mean,
            "std_dev": self.std_dev,
            "median": self.median,
            "p75": self.percentile_75,
            "p95": self.percentile_95,
            "p98": self.percentile_98,
            "p99": self.percentile_99,
            "p999": self.percentile_999,
            "sample_size": self.sample_size,
        }


class HistogramMetric:
    """Feeds observations into a reservoir and keeps exact running totals."""

    def __init__(self, reservoir: Reservoir) -> None:
        self._reservoir = reservoir
        self._lock = threading.Lock()
        self._clear()

    @property
    def reservoir(self) -> Reservoir:
        return self._reservoir

    @property
    def count(self) -> int:
        return self._count

    def update(self, value, user_value: Optional[str] = None) -> None:
        """Record one observation.

        Args:
            value: Finite number; non-integral values are rounded
            user_value: Optional label attributed to this observation
        """
        value = ensure_int64(int(round(ensure_finite(value))))

        with self._lock:
            self._reservoir.update(value, user_value)

            self._count += 1
            self._sum += value
            self._last_value = value
            self._last_user_value = user_value
            if self._min is None or value < self._min:
                self._min = value
                self._min_user_value = user_value
            if self._max is None or value > self._max:
                self._max = value
                self._max_user_value = user_value

    def get_value(self, reset: bool = False) -> HistogramValue:
        with self._lock:
            snapshot = self._reservoir.get_snapshot(reset)
            count, total = self._count, self._sum
            last_value, last_user_value = self._last_value, self._last_user_value
            minimum, min_user_value = self._min, self._min_user_value
            maximum, max_user_value = self._max, self._max_user_value
            if reset:
                self._clear()

        return HistogramValue(
            count=count,
            sum=total,
            last_value=last_value,
            last_user_value=last_user_value,
            max=maximum if maximum is not None else 0,
            max_user_value=max_user_value,
            mean=total / count if count else 0.0,
            min=minimum if minimum is not None else 0,
            min_user_value=min_user_value,
            std_dev=snapshot.std_dev,
            median=snapshot.median,
            percentile_75=snapshot.percentile_75,
            percentile_95=snapshot.percentile_95,
            percentile_98=snapshot.percentile_98,
            percentile_99=snapshot.percentile_99,
            percentile_999=snapshot.percentile_999,
            sample_size=snapshot.size,
            _snapshot=snapshot,
        )

    def reset(self) -> None:
        with self._lock:
            self._reservoir.reset()
            self._clear()

    def _clear(self) -> None:
        self._count = 0
        self._sum = 0
        self._last_value = 0
        self._last_user_value: Optional[str] = None
        self._min: Optional[int] = None
        self._min_user_value: Optional[str] = None
        self._max: Optional[int] = None
        self._max_user_value: Optional[str] = None
