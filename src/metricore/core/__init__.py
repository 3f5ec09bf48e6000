"""Time sources and time unit conversions."""

from .clock import Clock, SimulationClock, StopwatchClock, TestClock
from .time_unit import TimeUnit

__all__ = ["Clock", "SimulationClock", "StopwatchClock", "TestClock", "TimeUnit"]
