"""Equal-probability reservoirs: Algorithm R and the sliding window."""

import threading
from typing import List, Optional

import numpy as np

from .base import DEFAULT_SAMPLE_SIZE, Reservoir, validate_sample_size
from .snapshot import UniformSnapshot


class AlgorithmRReservoir(Reservoir):
    """Vitter's Algorithm R over a fixed-capacity sample.

    Every observation ends up in the sample with probability k/n, regardless
    of arrival order.
    """

    def __init__(self, sample_size: int = DEFAULT_SAMPLE_SIZE, rng=None) -> None:
        """Initialize the reservoir.

        Args:
            sample_size: Capacity k of the retained sample
            rng: numpy Generator or seed; a fresh generator is used when omitted
        """
        self._sample_size = validate_sample_size(sample_size)
        self._rng = np.random.default_rng(rng)
        self._lock = threading.Lock()

        self._values = np.zeros(self._sample_size, dtype=np.int64)
        self._user_values: List[Optional[str]] = [None] * self._sample_size
        self._count = 0
        self._sum = 0

    @property
    def sample_size(self) -> int:
        return self._sample_size

    @property
    def count(self) -> int:
        return self._count

    @property
    def size(self) -> int:
        return min(self._count, self._sample_size)

    def update(self, value: int, user_value: Optional[str] = None) -> None:
        with self._lock:
            seen = self._count
            self._count += 1
            self._sum += value

            if seen < self._sample_size:
                index = seen
            else:
                index = int(self._rng.integers(0, seen + 1))
                if index >= self._sample_size:
                    return

            self._values[index] = value
            self._user_values[index] = user_value

    def get_snapshot(self, reset: bool = False) -> UniformSnapshot:
        with self._lock:
            size = min(self._count, self._sample_size)
            values = self._values[:size].copy()
            user_values = self._user_values[:size]
            count, total = self._count, self._sum
            if reset:
                self._clear()

        # Sorting happens on the private copy, outside the lock
        return UniformSnapshot(count, total, values, user_values)

    def reset(self) -> None:
        with self._lock:
            self._clear()

    def _clear(self) -> None:
        self._count = 0
        self._sum = 0
        self._values.fill(0)
        self._user_values = [None] * self._sample_size


class SlidingWindowReservoir(Reservoir):
    """Keeps only the most recent ``sample_size`` observations."""

    def __init__(self, sample_size: int = DEFAULT_SAMPLE_SIZE) -> None:
        self._sample_size = validate_sample_size(sample_size)
        self._lock = threading.Lock()

        self._values = np.zeros(self._sample_size, dtype=np.int64)
        self._user_values: List[Optional[str]] = [None] * self._sample_size
        self._count = 0
        self._sum = 0

    @property
    def count(self) -> int:
        return self._count

    @property
    def size(self) -> int:
        return min(self._count, self._sample_size)

    def update(self, value: int, user_value: Optional[str] = None) -> None:
        with self._lock:
            index = self._count % self._sample_size
            self._count += 1
            self._sum += value
            self._values[index] = value
            self._user_values[index] = user_value

    def get_snapshot(self, reset: bool = False) -> UniformSnapshot:
        with self._lock:
            size = min(self._count, self._sample_size)
            values = self._values[:size].copy()
            user_values = self._user_values[:size]
            count, total = self._count, self._sum
            if reset:
                self._clear()

        return UniformSnapshot(count, total, values, user_values)

    def reset(self) -> None:
        with self._lock:
            self._clear()

    def _clear(self) -> None:
        self._count = 0
        self._sum = 0
        self._values.fill(0)
        self._user_values = [None] * self._sample_size
