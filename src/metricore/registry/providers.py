"""Providers: get-or-create access to each metric kind.

Without an explicit builder a provider builds a fresh metric, with a fresh
reservoir from ``options.reservoir`` or the configured default, for every
distinct key. A builder or histogram factory is only evaluated when its key
is created; later calls for the same key return the existing metric and
ignore it.
"""

from typing import Callable, Mapping, Optional, Union

from ..core.clock import Clock
from ..metrics.counter import CounterMetric
from ..metrics.gauge import GaugeMetric
from ..metrics.histogram import HistogramMetric
from ..metrics.meter import MeterMetric
from ..metrics.timer import TimerMetric
from ..metrics.types import MetricType
from ..tagging import MetricTags
from .builders import MetricBuilders
from .options import CounterOptions, GaugeOptions, HistogramOptions, MeterOptions, ReservoirFactory, TimerOptions
from .registry import MetricsRegistry

TagsLike = Union[MetricTags, Mapping[str, str], None]


def as_tags(tags: TagsLike) -> MetricTags:
    if tags is None:
        return MetricTags.EMPTY
    if isinstance(tags, MetricTags):
        return tags
    return MetricTags.from_mapping(tags)


class _MetricProvider:
    metric_type: MetricType

    def __init__(self, registry: MetricsRegistry, builders: MetricBuilders, clock: Clock) -> None:
        self._registry = registry
        self._builders = builders
        self._clock = clock

    def _get_or_add(self, options, tags: TagsLike, factory: Callable, explicit: bool):
        return self._registry.get_or_add(self.metric_type, options, as_tags(tags), factory, explicit_factory=explicit)


class TimerProvider(_MetricProvider):
    metric_type = MetricType.TIMER

    def __init__(self, registry: MetricsRegistry, builders: MetricBuilders, clock: Clock,
                 default_reservoir: ReservoirFactory) -> None:
        super().__init__(registry, builders, clock)
        self._default_reservoir = default_reservoir

    def instance(
        self,
        options: TimerOptions,
        tags: TagsLike = None,
        builder: Optional[Callable[[], TimerMetric]] = None,
    ) -> TimerMetric:
        if builder is not None:
            return self._get_or_add(options, tags, builder, explicit=True)

        reservoir = options.reservoir or self._default_reservoir
        return self._get_or_add(
            options, tags, lambda: self._builders.timer.build(reservoir, self._clock), explicit=False
        )

    def with_histogram(
        self,
        options: TimerOptions,
        histogram_factory: Callable[[], HistogramMetric],
        tags: TagsLike = None,
    ) -> TimerMetric:
        """Get or create a timer whose durations go to a caller-supplied histogram."""
        return self._get_or_add(
            options,
            tags,
            lambda: self._builders.timer.build_with_histogram(histogram_factory(), self._clock),
            explicit=True,
        )


class HistogramProvider(_MetricProvider):
    metric_type = MetricType.HISTOGRAM

    def __init__(self, registry: MetricsRegistry, builders: MetricBuilders, clock: Clock,
                 default_reservoir: ReservoirFactory) -> None:
        super().__init__(registry, builders, clock)
        self._default_reservoir = default_reservoir

    def instance(
        self,
        options: HistogramOptions,
        tags: TagsLike = None,
        builder: Optional[Callable[[], HistogramMetric]] = None,
    ) -> HistogramMetric:
        if builder is not None:
            return self._get_or_add(options, tags, builder, explicit=True)

        reservoir = options.reservoir or self._default_reservoir
        return self._get_or_add(options, tags, lambda: self._builders.histogram.build(reservoir), explicit=False)


class MeterProvider(_MetricProvider):
    metric_type = MetricType.METER

    def instance(
        self,
        options: MeterOptions,
        tags: TagsLike = None,
        builder: Optional[Callable[[], MeterMetric]] = None,
    ) -> MeterMetric:
        if builder is not None:
            return self._get_or_add(options, tags, builder, explicit=True)
        return self._get_or_add(options, tags, lambda: self._builders.meter.build(self._clock), explicit=False)


class CounterProvider(_MetricProvider):
    metric_type = MetricType.COUNTER

    def instance(
        self,
        options: CounterOptions,
        tags: TagsLike = None,
        builder: Optional[Callable[[], CounterMetric]] = None,
    ) -> CounterMetric:
        if builder is not None:
            return self._get_or_add(options, tags, builder, explicit=True)
        return self._get_or_add(options, tags, self._builders.counter.build, explicit=False)


class GaugeProvider(_MetricProvider):
    metric_type = MetricType.GAUGE

    def instance(
        self,
        options: GaugeOptions,
        tags: TagsLike = None,
        value_provider: Optional[Callable[[], float]] = None,
        builder: Optional[Callable[[], GaugeMetric]] = None,
    ) -> GaugeMetric:
        """Get or create a gauge; ``value_provider`` makes it a function gauge."""
        if builder is not None:
            return self._get_or_add(options, tags, builder, explicit=True)
        return self._get_or_add(
            options,
            tags,
            lambda: self._builders.gauge.build(value_provider),
            explicit=value_provider is not None,
        )


class MetricsProvider:
    """Entry point grouping the per-kind providers."""

    def __init__(self, registry: MetricsRegistry, builders: MetricBuilders, clock: Clock,
                 default_reservoir: ReservoirFactory) -> None:
        self.timer = TimerProvider(registry, builders, clock, default_reservoir)
        self.histogram = HistogramProvider(registry, builders, clock, default_reservoir)
        self.meter = MeterProvider(registry, builders, clock)
        self.counter = CounterProvider(registry, builders, clock)
        self.gauge = GaugeProvider(registry, builders, clock)
