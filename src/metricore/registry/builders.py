"""Builders for stand-alone metric instances.

Builders never touch the registry. Providers use them to construct a metric
the first time a key is requested, and callers use them to pre-build a
metric they then hand to a provider.
"""

from typing import Callable, Optional

from ..core.clock import Clock
from ..metrics.counter import CounterMetric
from ..metrics.gauge import FunctionGauge, GaugeMetric
from ..metrics.histogram import HistogramMetric
from ..metrics.meter import MeterMetric
from ..metrics.timer import TimerMetric
from .options import ReservoirFactory


class HistogramBuilder:
    def build(self, reservoir: ReservoirFactory) -> HistogramMetric:
        return HistogramMetric(reservoir())


class TimerBuilder:
    def build(self, reservoir: ReservoirFactory, clock: Clock) -> TimerMetric:
        return TimerMetric(HistogramMetric(reservoir()), clock)

    def build_with_histogram(self, histogram: HistogramMetric, clock: Clock) -> TimerMetric:
        return TimerMetric(histogram, clock)


class MeterBuilder:
    def build(self, clock: Clock) -> MeterMetric:
        return MeterMetric(clock)


class CounterBuilder:
    def build(self) -> CounterMetric:
        return CounterMetric()


class GaugeBuilder:
    def build(self, value_provider: Optional[Callable[[], float]] = None) -> GaugeMetric:
        if value_provider is not None:
            return FunctionGauge(value_provider)
        return GaugeMetric()


class MetricBuilders:
    """One builder per metric kind."""

    def __init__(self) -> None:
        self.timer = TimerBuilder()
        self.histogram = HistogramBuilder()
        self.meter = MeterBuilder()
        self.counter = CounterBuilder()
        self.gauge = GaugeBuilder()
