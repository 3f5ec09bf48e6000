"""
Unit tests for reservoir sampling strategies.
"""

import threading

import pytest

from metricore.core.clock import TestClock
from metricore.core.time_unit import TimeUnit
from metricore.errors import ConfigurationError
from metricore.sampling import (
    AlgorithmRReservoir,
    ForwardDecayingReservoir,
    SlidingWindowReservoir,
)


class TestAlgorithmRReservoir:
    """Test the uniform Algorithm R reservoir."""

    def test_keeps_every_value_below_capacity(self):
        """Test that n <= k observations are all retained."""
        reservoir = AlgorithmRReservoir(sample_size=10, rng=7)
        for value in [5, 3, 9, 1, 7, 3, 8]:
            reservoir.update(value)

        snapshot = reservoir.get_snapshot()
        assert sorted(snapshot.values.tolist()) == [1, 3, 3, 5, 7, 8, 9]
        assert snapshot.count == 7
        assert snapshot.sum == 36

    def test_exactly_capacity_values(self):
        """Test the boundary where n == k."""
        reservoir = AlgorithmRReservoir(sample_size=5, rng=1)
        for value in range(5):
            reservoir.update(value)

        assert sorted(reservoir.get_snapshot().values.tolist()) == [0, 1, 2, 3, 4]

    def test_sample_is_bounded_above_capacity(self):
        """Test that the sample never exceeds k once n > k."""
        reservoir = AlgorithmRReservoir(sample_size=100, rng=42)
        for value in range(1000):
            reservoir.update(value)
            assert reservoir.size == min(value + 1, 100)

        snapshot = reservoir.get_snapshot()
        assert snapshot.size == 100
        assert snapshot.count == 1000
        assert snapshot.sum == sum(range(1000))
        # Every retained value must come from the stream
        assert set(snapshot.values.tolist()) <= set(range(1000))

    def test_sample_spreads_over_the_stream(self):
        """Test that late observations can still replace early ones."""
        reservoir = AlgorithmRReservoir(sample_size=100, rng=3)
        for value in range(10_000):
            reservoir.update(value)

        values = reservoir.get_snapshot().values
        assert values.max() >= 1000

    def test_snapshot_does_not_disturb_future_sampling(self):
        """Test that taking snapshots leaves the live sample untouched."""
        first = AlgorithmRReservoir(sample_size=4, rng=11)
        second = AlgorithmRReservoir(sample_size=4, rng=11)

        for value in [40, 10, 30, 20]:
            first.update(value)
            second.update(value)
        first.get_snapshot()

        for value in range(100, 140):
            first.update(value)
            second.update(value)

        assert first.get_snapshot().values.tolist() == second.get_snapshot().values.tolist()

    def test_user_values_follow_min_and_max(self):
        """Test that user values are attributed to the extreme samples."""
        reservoir = AlgorithmRReservoir(sample_size=10)
        reservoir.update(50, "mid")
        reservoir.update(10, "low")
        reservoir.update(90, "high")

        snapshot = reservoir.get_snapshot()
        assert snapshot.min_user_value == "low"
        assert snapshot.max_user_value == "high"

    def test_reset(self):
        """Test that reset clears samples and counters."""
        reservoir = AlgorithmRReservoir(sample_size=10)
        for value in range(20):
            reservoir.update(value)
        reservoir.reset()

        snapshot = reservoir.get_snapshot()
        assert snapshot.size == 0
        assert snapshot.count == 0
        assert snapshot.sum == 0

    def test_snapshot_with_reset(self):
        """Test that get_snapshot(reset=True) returns data and then clears."""
        reservoir = AlgorithmRReservoir(sample_size=10)
        reservoir.update(1)
        reservoir.update(2)

        assert reservoir.get_snapshot(reset=True).size == 2
        assert reservoir.get_snapshot().size == 0

    @pytest.mark.parametrize("sample_size", [0, -1, 2.5, None])
    def test_invalid_sample_size(self, sample_size):
        """Test that non-positive capacities are configuration errors."""
        with pytest.raises(ConfigurationError):
            AlgorithmRReservoir(sample_size=sample_size)

    def test_concurrent_updates(self):
        """Test that concurrent writers never corrupt the counters."""
        reservoir = AlgorithmRReservoir(sample_size=50)

        def writer():
            for value in range(1000):
                reservoir.update(value)

        threads = [threading.Thread(target=writer) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        snapshot = reservoir.get_snapshot()
        assert snapshot.count == 8000
        assert snapshot.size == 50


class TestSlidingWindowReservoir:
    """Test the sliding window reservoir."""

    def test_keeps_most_recent_values(self):
        reservoir = SlidingWindowReservoir(sample_size=3)
        for value in [1, 2, 3, 4, 5]:
            reservoir.update(value)

        snapshot = reservoir.get_snapshot()
        assert snapshot.values.tolist() == [3, 4, 5]
        assert snapshot.count == 5

    def test_invalid_sample_size(self):
        with pytest.raises(ConfigurationError):
            SlidingWindowReservoir(sample_size=0)


class TestForwardDecayingReservoir:
    """Test the exponentially decaying reservoir."""

    @pytest.fixture
    def clock(self):
        return TestClock()

    def test_keeps_every_value_below_capacity(self, clock):
        reservoir = ForwardDecayingReservoir(sample_size=100, clock=clock, rng=5)
        for value in range(10):
            reservoir.update(value)

        snapshot = reservoir.get_snapshot()
        assert sorted(snapshot.values.tolist()) == list(range(10))
        assert snapshot.count == 10

    def test_sample_is_bounded(self, clock):
        reservoir = ForwardDecayingReservoir(sample_size=50, clock=clock, rng=5)
        for value in range(1000):
            reservoir.update(value)

        snapshot = reservoir.get_snapshot()
        assert snapshot.size == 50
        # Dropped observations still count towards the reservoir totals
        assert snapshot.count == 1000
        assert snapshot.sum == sum(range(1000))

    def test_recent_values_dominate(self, clock):
        """Test that observations made much later displace older ones."""
        reservoir = ForwardDecayingReservoir(sample_size=10, clock=clock, rng=9)
        for _ in range(100):
            reservoir.update(1)

        clock.advance(TimeUnit.MINUTES, 30)
        for _ in range(10):
            reservoir.update(2)

        snapshot = reservoir.get_snapshot()
        assert snapshot.values.tolist() == [2] * 10
        assert snapshot.median == 2

    def test_rescale_moves_landmark(self, clock):
        """Test that an update after the rescale interval rescales the sample."""
        reservoir = ForwardDecayingReservoir(sample_size=10, clock=clock, rng=2)
        for value in range(1, 6):
            reservoir.update(value)
        assert reservoir.start_time == 0.0

        clock.advance(TimeUnit.HOURS, 2)
        reservoir.update(100)

        assert reservoir.start_time == pytest.approx(7200.0)
        snapshot = reservoir.get_snapshot()
        assert snapshot.size == 6
        # The fresh observation carries almost all of the weight
        assert snapshot.median == 100
        assert snapshot.mean == pytest.approx(100.0)

    def test_snapshot_triggers_rescale(self, clock):
        reservoir = ForwardDecayingReservoir(sample_size=10, clock=clock)
        reservoir.update(1)
        clock.advance(TimeUnit.HOURS, 1)

        reservoir.get_snapshot()
        assert reservoir.start_time == pytest.approx(3600.0)

    def test_reset(self, clock):
        reservoir = ForwardDecayingReservoir(sample_size=10, clock=clock)
        reservoir.update(1)
        clock.advance(TimeUnit.MINUTES, 5)
        reservoir.reset()

        assert reservoir.size == 0
        assert reservoir.count == 0
        assert reservoir.start_time == pytest.approx(300.0)

    @pytest.mark.parametrize("alpha", [0, -0.5, float("nan"), "fast"])
    def test_invalid_alpha(self, clock, alpha):
        with pytest.raises(ConfigurationError):
            ForwardDecayingReservoir(alpha=alpha, clock=clock)

    def test_invalid_sample_size(self, clock):
        with pytest.raises(ConfigurationError):
            ForwardDecayingReservoir(sample_size=-5, clock=clock)
