"""One-call recording helpers that resolve the metric and record in one step."""

from typing import Callable, Optional, TypeVar

from .core.time_unit import TimeUnit
from .registry.options import CounterOptions, GaugeOptions, HistogramOptions, MeterOptions, TimerOptions
from .registry.providers import MetricsProvider, TagsLike

T = TypeVar("T")


class MeasureTimer:
    def __init__(self, provider: MetricsProvider) -> None:
        self._provider = provider

    def time(
        self,
        options: TimerOptions,
        tags: TagsLike = None,
        action: Optional[Callable[[], T]] = None,
        user_value: Optional[str] = None,
    ):
        """Time ``action``, or return a context manager when no action is given."""
        return self._provider.timer.instance(options, tags).time(action, user_value)

    def record(
        self,
        options: TimerOptions,
        duration: float,
        unit: TimeUnit,
        tags: TagsLike = None,
        user_value: Optional[str] = None,
    ) -> None:
        self._provider.timer.instance(options, tags).record(duration, unit, user_value)


class MeasureHistogram:
    def __init__(self, provider: MetricsProvider) -> None:
        self._provider = provider

    def update(self, options: HistogramOptions, value: float, tags: TagsLike = None,
               user_value: Optional[str] = None) -> None:
        self._provider.histogram.instance(options, tags).update(value, user_value)


class MeasureMeter:
    def __init__(self, provider: MetricsProvider) -> None:
        self._provider = provider

    def mark(self, options: MeterOptions, amount: int = 1, item: Optional[str] = None,
             tags: TagsLike = None) -> None:
        self._provider.meter.instance(options, tags).mark(amount, item)


class MeasureCounter:
    def __init__(self, provider: MetricsProvider) -> None:
        self._provider = provider

    def increment(self, options: CounterOptions, amount: int = 1, item: Optional[str] = None,
                  tags: TagsLike = None) -> None:
        self._provider.counter.instance(options, tags).increment(amount, item)

    def decrement(self, options: CounterOptions, amount: int = 1, item: Optional[str] = None,
                  tags: TagsLike = None) -> None:
        self._provider.counter.instance(options, tags).decrement(amount, item)


class MeasureGauge:
    def __init__(self, provider: MetricsProvider) -> None:
        self._provider = provider

    def set_value(self, options: GaugeOptions, value: float, tags: TagsLike = None) -> None:
        self._provider.gauge.instance(options, tags).set_value(value)


class MeasureMetrics:
    def __init__(self, provider: MetricsProvider) -> None:
        self.timer = MeasureTimer(provider)
        self.histogram = MeasureHistogram(provider)
        self.meter = MeasureMeter(provider)
        self.counter = MeasureCounter(provider)
        self.gauge = MeasureGauge(provider)
