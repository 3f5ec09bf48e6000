"""Timer metric: a duration histogram combined with a throughput meter."""

import threading
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar

from ..core.clock import Clock
from ..core.time_unit import TimeUnit
from ..errors import ArgumentError
from .histogram import HistogramMetric, HistogramValue
from .meter import MeterMetric, MeterValue
from .types import ensure_finite, ensure_int64

T = TypeVar("T")


@dataclass(frozen=True)
class TimerValue:
    """Timer statistics with durations in ``duration_unit``."""

    rate: MeterValue
    histogram: HistogramValue
    active_sessions: int
    total_time: float
    duration_unit: TimeUnit

    def to_dict(self) -> Dict[str, Any]:
        return {
            "active_sessions": self.active_sessions,
            "total_time": self.total_time,
            "duration_unit": self.duration_unit.abbreviation,
            "histogram": self.histogram.to_dict(),
            "rate": self.rate.to_dict(),
        }


class TimerContext:
    """A single scoped measurement.

    The start time is captured on construction. The elapsed time is recorded
    exactly once: on leaving the ``with`` block, whether normally or through
    an exception, or on the first explicit :meth:`end` call.
    """

    def __init__(self, timer: "TimerMetric", user_value: Optional[str] = None) -> None:
        self._timer = timer
        self._user_value = user_value
        self._lock = threading.Lock()
        self._ended = False
        self._elapsed: Optional[int] = None
        self._start = timer.start_recording()
        timer._session_started()

    @property
    def start(self) -> int:
        return self._start

    @property
    def ended(self) -> bool:
        return self._ended

    @property
    def elapsed(self) -> int:
        """Elapsed nanoseconds so far, or the recorded duration once ended."""
        if self._elapsed is not None:
            return self._elapsed
        return self._timer.current_time() - self._start

    def track_user_value(self, user_value: Optional[str]) -> None:
        self._user_value = user_value

    def end(self) -> int:
        """Record the elapsed time; later calls return the same duration."""
        with self._lock:
            if self._ended:
                return self._elapsed
            self._ended = True
            try:
                self._elapsed = self._timer.end_recording(self._start, self._user_value)
            finally:
                self._timer._session_ended()
            return self._elapsed

    def __enter__(self) -> "TimerContext":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.end()
        return False


class TimerMetric:
    """Records durations into a histogram (in nanoseconds) and marks a meter."""

    def __init__(self, histogram: HistogramMetric, clock: Clock, meter: Optional[MeterMetric] = None) -> None:
        self._histogram = histogram
        self._clock = clock
        self._meter = meter if meter is not None else MeterMetric(clock)
        self._sessions_lock = threading.Lock()
        self._active_sessions = 0

    @property
    def histogram(self) -> HistogramMetric:
        return self._histogram

    @property
    def meter(self) -> MeterMetric:
        return self._meter

    @property
    def active_sessions(self) -> int:
        return self._active_sessions

    def record(self, duration, unit: TimeUnit, user_value: Optional[str] = None) -> None:
        """Record an externally measured duration."""
        ensure_finite(duration, "duration")
        if duration < 0:
            raise ArgumentError(f"Duration cannot be negative, got {duration}")

        nanoseconds = ensure_int64(unit.to_nanoseconds(duration), "duration in nanoseconds")
        self._histogram.update(nanoseconds, user_value)
        self._meter.mark()

    def current_time(self) -> int:
        return self._clock.nanoseconds

    def start_recording(self) -> int:
        return self.current_time()

    def end_recording(self, start: int, user_value: Optional[str] = None) -> int:
        """Record the time elapsed since ``start`` and return it in nanoseconds."""
        elapsed = max(self.current_time() - start, 0)
        self.record(elapsed, TimeUnit.NANOSECONDS, user_value)
        return elapsed

    def new_context(self, user_value: Optional[str] = None) -> TimerContext:
        return TimerContext(self, user_value)

    def time(self, action: Optional[Callable[[], T]] = None, user_value: Optional[str] = None):
        """Time ``action`` and return its result, or return a new context when no action is given."""
        if action is None:
            return self.new_context(user_value)
        with self.new_context(user_value):
            return action()

    def get_value(
        self,
        duration_unit: TimeUnit = TimeUnit.MILLISECONDS,
        rate_unit: TimeUnit = TimeUnit.SECONDS,
        reset: bool = False,
    ) -> TimerValue:
        histogram = self._histogram.get_value(reset).scaled(duration_unit.nanoseconds)
        rate = self._meter.get_value(rate_unit, reset)
        return TimerValue(
            rate=rate,
            histogram=histogram,
            active_sessions=self._active_sessions,
            total_time=histogram.sum,
            duration_unit=duration_unit,
        )

    def reset(self) -> None:
        self._histogram.reset()
        self._meter.reset()

    def _session_started(self) -> None:
        with self._sessions_lock:
            self._active_sessions += 1

    def _session_ended(self) -> None:
        with self._sessions_lock:
            self._active_sessions -= 1
