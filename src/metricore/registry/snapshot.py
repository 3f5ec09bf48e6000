"""Immutable registry snapshot handed to exporters.

Shape: context -> metric kind -> metric name -> value. Each value is
internally consistent, but values of different metrics are read one after
another, so the tree as a whole is not an atomic point-in-time view.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Iterator, Optional, Tuple, Union

from ..metrics.counter import CounterValue
from ..metrics.histogram import HistogramValue
from ..metrics.meter import MeterValue
from ..metrics.timer import TimerValue
from ..metrics.types import MetricType
from ..tagging import MetricTags

MetricValue = Union[TimerValue, HistogramValue, MeterValue, CounterValue, float]

KIND_KEYS = {
    MetricType.TIMER: "timers",
    MetricType.HISTOGRAM: "histograms",
    MetricType.METER: "meters",
    MetricType.COUNTER: "counters",
    MetricType.GAUGE: "gauges",
}


@dataclass(frozen=True)
class MetricValueSource:
    """One metric's value together with the identity it is registered under."""

    name: str
    base_name: str
    metric_type: MetricType
    value: MetricValue
    unit: str
    tags: MetricTags
    reset_on_reporting: bool = False

    def to_dict(self) -> Dict[str, Any]:
        if isinstance(self.value, float):
            result: Dict[str, Any] = {"value": self.value}
        else:
            result = self.value.to_dict()
        result["unit"] = self.unit
        if self.tags:
            result["tags"] = self.tags.to_dict()
        return result


@dataclass(frozen=True)
class ContextSnapshot:
    context: str
    timers: Tuple[MetricValueSource, ...] = ()
    histograms: Tuple[MetricValueSource, ...] = ()
    meters: Tuple[MetricValueSource, ...] = ()
    counters: Tuple[MetricValueSource, ...] = ()
    gauges: Tuple[MetricValueSource, ...] = ()

    def by_type(self, metric_type: MetricType) -> Tuple[MetricValueSource, ...]:
        return getattr(self, KIND_KEYS[metric_type])

    def __iter__(self) -> Iterator[MetricValueSource]:
        for metric_type in MetricType:
            yield from self.by_type(metric_type)

    @property
    def is_empty(self) -> bool:
        return not any(self.by_type(metric_type) for metric_type in MetricType)

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        return {
            KIND_KEYS[metric_type]: {source.name: source.to_dict() for source in self.by_type(metric_type)}
            for metric_type in MetricType
            if self.by_type(metric_type)
        }


@dataclass(frozen=True)
class RegistrySnapshot:
    timestamp: datetime
    contexts: Tuple[ContextSnapshot, ...] = ()

    def filter_context(self, context: str) -> Optional[ContextSnapshot]:
        for snapshot in self.contexts:
            if snapshot.context == context:
                return snapshot
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "contexts": {snapshot.context: snapshot.to_dict() for snapshot in self.contexts},
        }
