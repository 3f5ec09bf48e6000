"""Clock abstractions consumed by timers, meters and decaying reservoirs.

The engine reads time exclusively through a :class:`Clock` so that elapsed
durations and decay weights are deterministic under test.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Callable, List

import simpy

from ..errors import ArgumentError
from .time_unit import TimeUnit

logger = logging.getLogger(__name__)


class Clock(ABC):
    """Monotonic time source measured in nanoseconds."""

    @property
    @abstractmethod
    def nanoseconds(self) -> int:
        """Current monotonic time in nanoseconds."""

    @property
    def seconds(self) -> float:
        return self.nanoseconds / TimeUnit.SECONDS.value

    def now(self) -> int:
        """Alias for :attr:`nanoseconds`."""
        return self.nanoseconds

    def utc_date_time(self) -> datetime:
        return datetime.now(timezone.utc)


class StopwatchClock(Clock):
    """Production clock backed by ``time.perf_counter_ns``."""

    @property
    def nanoseconds(self) -> int:
        return time.perf_counter_ns()


class TestClock(Clock):
    """Manually driven clock for deterministic tests.

    Time starts at zero and only moves when :meth:`advance` is called.
    """

    __test__ = False

    def __init__(self) -> None:
        self._nanoseconds = 0
        self._lock = threading.Lock()
        self._listeners: List[Callable[[int], None]] = []

    @property
    def nanoseconds(self) -> int:
        return self._nanoseconds

    def utc_date_time(self) -> datetime:
        return datetime.fromtimestamp(self.seconds, tz=timezone.utc)

    def add_listener(self, listener: Callable[[int], None]) -> None:
        """Register a callback invoked with the elapsed nanoseconds on each advance."""
        self._listeners.append(listener)

    def advance(self, unit: TimeUnit, amount: float) -> None:
        """Move the clock forward by ``amount`` of ``unit``."""
        if amount < 0:
            raise ArgumentError(f"Cannot move the clock backwards (amount={amount})")

        elapsed = unit.to_nanoseconds(amount)
        with self._lock:
            self._nanoseconds += elapsed

        for listener in self._listeners:
            listener(elapsed)


class SimulationClock(Clock):
    """Clock that reads simulated time from a SimPy environment.

    SimPy time is interpreted as seconds, the convention used by simulations
    that drive this engine.
    """

    def __init__(self, env: simpy.Environment) -> None:
        self.env = env

    @property
    def nanoseconds(self) -> int:
        return int(round(self.env.now * TimeUnit.SECONDS.value))

    @property
    def seconds(self) -> float:
        return float(self.env.now)

    def advance(self, unit: TimeUnit, amount: float) -> None:
        """Run the simulation forward by ``amount`` of ``unit``."""
        if amount < 0:
            raise ArgumentError(f"Cannot move the clock backwards (amount={amount})")
        if amount == 0:
            return

        target = self.env.now + unit.to_seconds(amount)
        logger.debug(f"Advancing simulation from {self.env.now} to {target}")
        self.env.run(until=target)
