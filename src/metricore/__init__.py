"""metricore: in-process metrics with reservoir sampling and tagged registries."""

from .config import MetricsConfig, ReservoirConfig
from .core import Clock, SimulationClock, StopwatchClock, TestClock, TimeUnit
from .errors import ArgumentError, ConfigurationError, DuplicateMetricError, MetricsError
from .filtering import MetricsFilter
from .metrics import MetricType
from .registry import (
    CounterOptions,
    GaugeOptions,
    HistogramOptions,
    MeterOptions,
    MetricOptions,
    TimerOptions,
)
from .root import Metrics
from .tagging import MetricTags

__version__ = "0.1.0"

__all__ = [
    "ArgumentError",
    "Clock",
    "ConfigurationError",
    "CounterOptions",
    "DuplicateMetricError",
    "GaugeOptions",
    "HistogramOptions",
    "MeterOptions",
    "MetricOptions",
    "MetricTags",
    "MetricType",
    "Metrics",
    "MetricsConfig",
    "MetricsError",
    "MetricsFilter",
    "ReservoirConfig",
    "SimulationClock",
    "StopwatchClock",
    "TestClock",
    "TimeUnit",
    "TimerOptions",
]
