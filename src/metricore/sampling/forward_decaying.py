"""Exponentially decaying reservoir using forward decay.

Each observation gets the weight ``exp(alpha * (t - t0))`` relative to a
landmark ``t0`` and the priority ``weight / u`` for a uniform ``u`` in
(0, 1]. The sample keeps the ``sample_size`` highest priorities (A-Res
weighted reservoir sampling), so recent observations are favoured.

Because weights grow with time, the landmark is moved forward once per
rescale interval and every stored weight and priority is scaled down by the
same factor, which preserves their relative order.

Observations whose priority does not beat the smallest retained priority are
dropped from the sample. They still count towards :attr:`count` and the
reservoir sum; histograms keep exact totals on their own.
"""

import heapq
import itertools
import logging
import math
import threading
from typing import List, Optional, Tuple

import numpy as np

from ..core.clock import Clock, StopwatchClock
from ..core.time_unit import TimeUnit
from ..errors import ConfigurationError
from .base import DEFAULT_ALPHA, DEFAULT_SAMPLE_SIZE, Reservoir, WeightedSample, validate_sample_size
from .snapshot import WeightedSnapshot

logger = logging.getLogger(__name__)

RESCALE_THRESHOLD_NS = TimeUnit.HOURS.nanoseconds

_HeapEntry = Tuple[float, int, WeightedSample]


class ForwardDecayingReservoir(Reservoir):
    """Weighted reservoir biased towards the last few minutes of data."""

    def __init__(
        self,
        sample_size: int = DEFAULT_SAMPLE_SIZE,
        alpha: float = DEFAULT_ALPHA,
        clock: Optional[Clock] = None,
        rng=None,
    ) -> None:
        """Initialize the reservoir.

        Args:
            sample_size: Number of samples to keep
            alpha: Decay factor; higher values favour recent observations more
            clock: Time source for weights and rescaling
            rng: numpy Generator or seed for the priority draws
        """
        self._sample_size = validate_sample_size(sample_size)
        if isinstance(alpha, bool) or not isinstance(alpha, (int, float)) or not alpha > 0:
            raise ConfigurationError(f"Decay alpha must be a positive number, got {alpha!r}")

        self._alpha = float(alpha)
        self._clock = clock if clock is not None else StopwatchClock()
        self._rng = np.random.default_rng(rng)
        self._lock = threading.Lock()

        self._heap: List[_HeapEntry] = []
        self._sequence = itertools.count()
        self._count = 0
        self._sum = 0
        self._start_time = self._clock.seconds
        self._next_scale_time = self._clock.nanoseconds + RESCALE_THRESHOLD_NS

    @property
    def alpha(self) -> float:
        return self._alpha

    @property
    def count(self) -> int:
        return self._count

    @property
    def size(self) -> int:
        return len(self._heap)

    @property
    def start_time(self) -> float:
        """Current landmark in clock seconds."""
        return self._start_time

    def update(self, value: int, user_value: Optional[str] = None) -> None:
        with self._lock:
            self._rescale_if_needed()

            weight = math.exp(self._alpha * (self._clock.seconds - self._start_time))
            priority = weight / (1.0 - self._rng.random())
            self._count += 1
            self._sum += value

            entry = (priority, next(self._sequence), WeightedSample(value, user_value, weight))
            if len(self._heap) < self._sample_size:
                heapq.heappush(self._heap, entry)
            elif priority > self._heap[0][0]:
                heapq.heapreplace(self._heap, entry)

    def get_snapshot(self, reset: bool = False) -> WeightedSnapshot:
        with self._lock:
            self._rescale_if_needed()
            samples = [sample for _, _, sample in self._heap]
            count, total = self._count, self._sum
            if reset:
                self._clear()

        return WeightedSnapshot(count, total, samples)

    def reset(self) -> None:
        with self._lock:
            self._clear()

    def _clear(self) -> None:
        self._heap = []
        self._count = 0
        self._sum = 0
        self._start_time = self._clock.seconds
        self._next_scale_time = self._clock.nanoseconds + RESCALE_THRESHOLD_NS

    def _rescale_if_needed(self) -> None:
        now = self._clock.nanoseconds
        if now >= self._next_scale_time:
            self._rescale(now)

    def _rescale(self, now: int) -> None:
        self._next_scale_time = now + RESCALE_THRESHOLD_NS
        old_start = self._start_time
        self._start_time = now / TimeUnit.SECONDS.value
        factor = math.exp(-self._alpha * (self._start_time - old_start))

        rescaled: List[_HeapEntry] = []
        for priority, sequence, sample in self._heap:
            weight = sample.weight * factor
            # Underflowed weights can no longer influence any statistic
            if weight == 0.0:
                continue
            rescaled.append((priority * factor, sequence, WeightedSample(sample.value, sample.user_value, weight)))

        heapq.heapify(rescaled)
        dropped = len(self._heap) - len(rescaled)
        self._heap = rescaled
        logger.debug(
            f"Rescaled decaying reservoir by {factor:.3e} at t={self._start_time:.1f}s "
            f"({len(rescaled)} samples kept, {dropped} underflowed)"
        )
