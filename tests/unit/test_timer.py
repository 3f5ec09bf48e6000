"""
Unit tests for timers and timer contexts.
"""

import threading

import pytest

from metricore.core.clock import StopwatchClock, TestClock
from metricore.core.time_unit import TimeUnit
from metricore.errors import ArgumentError
from metricore.metrics import HistogramMetric, TimerMetric
from metricore.sampling import AlgorithmRReservoir


class TestTimerMetric:
    """Test duration recording and rate tracking."""

    @pytest.fixture
    def clock(self):
        return TestClock()

    @pytest.fixture
    def timer(self, clock):
        return TimerMetric(HistogramMetric(AlgorithmRReservoir(sample_size=1028)), clock)

    def test_record_explicit_duration(self, timer):
        timer.record(100, TimeUnit.SECONDS)

        value = timer.get_value()
        assert value.histogram.count == 1
        assert value.histogram.mean == 100_000.0
        assert value.duration_unit is TimeUnit.MILLISECONDS
        assert value.rate.count == 1

    def test_duration_unit_conversion(self, timer):
        timer.record(1500, TimeUnit.MILLISECONDS)

        assert timer.get_value(duration_unit=TimeUnit.SECONDS).histogram.max == pytest.approx(1.5)
        assert timer.get_value(duration_unit=TimeUnit.MICROSECONDS).histogram.max == pytest.approx(1_500_000)

    def test_total_time(self, timer):
        timer.record(10, TimeUnit.MILLISECONDS)
        timer.record(30, TimeUnit.MILLISECONDS)

        value = timer.get_value()
        assert value.total_time == pytest.approx(40.0)
        assert value.histogram.mean == pytest.approx(20.0)

    @pytest.mark.parametrize("duration", [-1, float("nan"), float("inf")])
    def test_rejects_invalid_durations(self, timer, duration):
        with pytest.raises(ArgumentError):
            timer.record(duration, TimeUnit.MILLISECONDS)
        assert timer.histogram.count == 0

    def test_rejects_duration_beyond_int64_nanoseconds(self, timer):
        timer.record(5, TimeUnit.SECONDS)

        with pytest.raises(ArgumentError):
            timer.record(1e10, TimeUnit.SECONDS)

        value = timer.get_value()
        assert value.histogram.count == 1
        assert timer.histogram.reservoir.count == 1
        assert value.rate.count == 1

    def test_context_records_elapsed_time(self, timer, clock):
        with timer.new_context():
            clock.advance(TimeUnit.MILLISECONDS, 100)

        value = timer.get_value()
        assert value.histogram.count == 1
        assert value.histogram.min == 100.0
        assert value.histogram.max == 100.0

    def test_context_records_once_on_exception(self, timer, clock):
        with pytest.raises(RuntimeError):
            with timer.new_context():
                clock.advance(TimeUnit.MILLISECONDS, 50)
                raise RuntimeError("boom")

        value = timer.get_value()
        assert value.histogram.count == 1
        assert value.histogram.mean == pytest.approx(50.0)
        assert value.active_sessions == 0

    def test_context_end_is_idempotent(self, timer, clock):
        context = timer.new_context()
        clock.advance(TimeUnit.MILLISECONDS, 10)

        assert context.end() == 10_000_000
        clock.advance(TimeUnit.MILLISECONDS, 10)
        assert context.end() == 10_000_000
        with context:
            pass

        assert context.ended
        assert timer.histogram.count == 1

    def test_context_elapsed(self, timer, clock):
        context = timer.new_context()
        clock.advance(TimeUnit.MICROSECONDS, 5)
        assert context.elapsed == 5_000
        context.end()
        clock.advance(TimeUnit.MICROSECONDS, 5)
        assert context.elapsed == 5_000

    def test_nested_contexts_are_independent(self, timer, clock):
        with timer.new_context():
            clock.advance(TimeUnit.MILLISECONDS, 10)
            with timer.new_context():
                clock.advance(TimeUnit.MILLISECONDS, 5)
            clock.advance(TimeUnit.MILLISECONDS, 5)

        value = timer.get_value()
        assert value.histogram.count == 2
        assert value.histogram.min == pytest.approx(5.0)
        assert value.histogram.max == pytest.approx(20.0)

    def test_user_value_is_tracked(self, timer, clock):
        with timer.new_context("request-1") as context:
            clock.advance(TimeUnit.MILLISECONDS, 1)
            context.track_user_value("request-2")

        assert timer.get_value().histogram.last_user_value == "request-2"

    def test_active_sessions(self, timer):
        assert timer.active_sessions == 0
        with timer.new_context():
            assert timer.active_sessions == 1
            assert timer.get_value().active_sessions == 1
        assert timer.active_sessions == 0

    def test_time_action_returns_result(self, timer, clock):
        def action():
            clock.advance(TimeUnit.MILLISECONDS, 7)
            return "done"

        assert timer.time(action) == "done"
        assert timer.get_value().histogram.mean == pytest.approx(7.0)

    def test_time_without_action_returns_context(self, timer, clock):
        with timer.time(user_value="job") as context:
            clock.advance(TimeUnit.MILLISECONDS, 3)

        assert context.ended
        assert timer.get_value().histogram.max_user_value == "job"

    def test_start_and_end_recording(self, timer, clock):
        start = timer.start_recording()
        clock.advance(TimeUnit.SECONDS, 2)

        assert timer.end_recording(start) == 2_000_000_000
        assert timer.get_value(duration_unit=TimeUnit.SECONDS).histogram.mean == pytest.approx(2.0)

    def test_rate_is_tracked(self, timer, clock):
        for _ in range(10):
            timer.record(1, TimeUnit.MILLISECONDS)
        clock.advance(TimeUnit.SECONDS, 5)

        rate = timer.get_value().rate
        assert rate.count == 10
        assert rate.mean_rate == pytest.approx(2.0)
        assert rate.one_minute_rate == pytest.approx(2.0)

    def test_reset(self, timer):
        timer.record(5, TimeUnit.MILLISECONDS)
        timer.reset()

        value = timer.get_value()
        assert value.histogram.count == 0
        assert value.rate.count == 0

    def test_get_value_with_reset(self, timer):
        timer.record(5, TimeUnit.MILLISECONDS)

        assert timer.get_value(reset=True).histogram.count == 1
        assert timer.get_value().histogram.count == 0

    def test_concurrent_contexts(self):
        timer = TimerMetric(HistogramMetric(AlgorithmRReservoir(sample_size=64)), StopwatchClock())

        def worker():
            for _ in range(50):
                with timer.new_context():
                    pass

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        value = timer.get_value()
        assert value.histogram.count == 400
        assert value.rate.count == 400
        assert value.active_sessions == 0
