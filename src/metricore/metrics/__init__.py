"""Metric kinds: timers, histograms, meters, counters and gauges."""

from .counter import CounterItemValue, CounterMetric, CounterValue
from .gauge import FunctionGauge, GaugeMetric, RatioGauge
from .histogram import HistogramMetric, HistogramValue
from .meter import ExponentiallyWeightedMovingAverage, MeterItemValue, MeterMetric, MeterValue
from .timer import TimerContext, TimerMetric, TimerValue
from .types import MetricType

__all__ = [
    "CounterItemValue",
    "CounterMetric",
    "CounterValue",
    "ExponentiallyWeightedMovingAverage",
    "FunctionGauge",
    "GaugeMetric",
    "HistogramMetric",
    "HistogramValue",
    "MeterItemValue",
    "MeterMetric",
    "MeterValue",
    "MetricType",
    "RatioGauge",
    "TimerContext",
    "TimerMetric",
    "TimerValue",
]
