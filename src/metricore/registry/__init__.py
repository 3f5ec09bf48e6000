"""Metric registry, providers, builders and creation options."""

from .builders import MetricBuilders
from .options import (
    CounterOptions,
    GaugeOptions,
    HistogramOptions,
    MeterOptions,
    MetricOptions,
    TimerOptions,
)
from .providers import MetricsProvider
from .registry import MetricsContextRegistry, MetricsRegistry, RegistryEntry
from .snapshot import ContextSnapshot, MetricValueSource, RegistrySnapshot

__all__ = [
    "ContextSnapshot",
    "CounterOptions",
    "GaugeOptions",
    "HistogramOptions",
    "MeterOptions",
    "MetricBuilders",
    "MetricOptions",
    "MetricValueSource",
    "MetricsContextRegistry",
    "MetricsProvider",
    "MetricsRegistry",
    "RegistryEntry",
    "RegistrySnapshot",
    "TimerOptions",
]
