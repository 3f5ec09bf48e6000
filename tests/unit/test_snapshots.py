"""
Unit tests for uniform and weighted snapshots.
"""

import math

import numpy as np
import pytest

from metricore.errors import ArgumentError
from metricore.sampling import UniformSnapshot, WeightedSample, WeightedSnapshot

QUANTILES = [0.0, 0.01, 0.1, 0.25, 0.5, 0.75, 0.9, 0.95, 0.98, 0.99, 0.999, 1.0]


def weighted(values, weights=None):
    weights = weights or [1.0] * len(values)
    samples = [WeightedSample(v, None, w) for v, w in zip(values, weights)]
    return WeightedSnapshot(len(values), sum(values), samples)


class TestUniformSnapshot:
    """Test statistics over equally weighted samples."""

    @pytest.fixture
    def snapshot(self):
        return UniformSnapshot(5, 15, [5, 1, 4, 2, 3])

    def test_values_are_sorted(self, snapshot):
        assert snapshot.values.tolist() == [1, 2, 3, 4, 5]
        assert snapshot.size == 5

    def test_basic_statistics(self, snapshot):
        assert snapshot.min == 1
        assert snapshot.max == 5
        assert snapshot.mean == pytest.approx(3.0)
        assert snapshot.std_dev == pytest.approx(math.sqrt(2.5))

    def test_quantiles(self, snapshot):
        assert snapshot.median == pytest.approx(3.0)
        assert snapshot.percentile_75 == pytest.approx(4.5)
        assert snapshot.value(0.0) == 1
        assert snapshot.value(1.0) == 5

    def test_values_are_read_only(self, snapshot):
        with pytest.raises(ValueError):
            snapshot.values[0] = 100

    def test_input_is_copied(self):
        source = np.array([3, 1, 2], dtype=np.int64)
        snapshot = UniformSnapshot(3, 6, source)
        source[0] = 1000

        assert snapshot.values.tolist() == [1, 2, 3]

    def test_empty_snapshot(self):
        snapshot = UniformSnapshot(0, 0, [])

        assert snapshot.size == 0
        assert snapshot.min == 0
        assert snapshot.max == 0
        assert snapshot.mean == 0.0
        assert snapshot.std_dev == 0.0
        assert snapshot.median == 0.0
        assert snapshot.min_user_value is None

    def test_single_value(self):
        snapshot = UniformSnapshot(1, 7, [7], ["only"])

        assert snapshot.std_dev == 0.0
        assert snapshot.percentile_999 == 7
        assert snapshot.min_user_value == "only"
        assert snapshot.max_user_value == "only"

    def test_percentiles_are_monotonic(self):
        rng = np.random.default_rng(1234)
        values = rng.integers(0, 10_000, size=500)
        snapshot = UniformSnapshot(500, int(values.sum()), values)

        results = [snapshot.value(q) for q in QUANTILES]
        assert results == sorted(results)
        assert snapshot.min <= snapshot.median <= snapshot.max

    def test_percentiles_mapping(self, snapshot):
        result = snapshot.percentiles([0.5, 1.0])
        assert result == pytest.approx({0.5: 3.0, 1.0: 5.0})

    @pytest.mark.parametrize("quantile", [-0.1, 1.1, float("nan"), "0.5", None, True])
    def test_invalid_quantile(self, snapshot, quantile):
        with pytest.raises(ArgumentError):
            snapshot.value(quantile)


class TestWeightedSnapshot:
    """Test statistics over decay-weighted samples."""

    def test_equal_weights(self):
        snapshot = weighted([5, 1, 4, 2, 3])

        assert snapshot.values.tolist() == [1, 2, 3, 4, 5]
        assert snapshot.median == 3
        assert snapshot.value(0.0) == 1
        assert snapshot.value(1.0) == 5
        assert snapshot.mean == pytest.approx(3.0)
        assert snapshot.std_dev == pytest.approx(math.sqrt(2.0))

    def test_heavy_weight_dominates(self):
        snapshot = weighted([1, 2, 100], [1.0, 1.0, 1000.0])

        assert snapshot.median == 100
        assert snapshot.mean == pytest.approx((1 + 2 + 100_000) / 1002)

    def test_percentiles_are_monotonic(self):
        rng = np.random.default_rng(99)
        values = rng.integers(0, 1000, size=200).tolist()
        weights = rng.random(200).tolist()
        snapshot = weighted(values, weights)

        results = [snapshot.value(q) for q in QUANTILES]
        assert results == sorted(results)

    def test_user_values(self):
        samples = [
            WeightedSample(10, "b", 1.0),
            WeightedSample(1, "a", 1.0),
            WeightedSample(50, "c", 1.0),
        ]
        snapshot = WeightedSnapshot(3, 61, samples)

        assert snapshot.min_user_value == "a"
        assert snapshot.max_user_value == "c"

    def test_empty_snapshot(self):
        snapshot = WeightedSnapshot(0, 0, [])

        assert snapshot.size == 0
        assert snapshot.mean == 0.0
        assert snapshot.percentile_99 == 0.0
        assert snapshot.max_user_value is None

    def test_values_are_read_only(self):
        snapshot = weighted([1, 2, 3])
        with pytest.raises(ValueError):
            snapshot.values[1] = 7

    def test_invalid_quantile(self):
        with pytest.raises(ArgumentError):
            weighted([1, 2, 3]).value(2.0)
