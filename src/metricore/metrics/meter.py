"""Meter metric: event counts with mean and exponentially weighted rates."""

import math
import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from ..core.clock import Clock
from ..core.time_unit import TimeUnit
from ..errors import ArgumentError
from .types import ensure_count

TICK_INTERVAL_NS = 5 * TimeUnit.SECONDS.nanoseconds
_TICK_INTERVAL_S = TICK_INTERVAL_NS / TimeUnit.SECONDS.nanoseconds


class ExponentiallyWeightedMovingAverage:
    """UNIX load-average style EWMA, ticked every five seconds.

    Not thread-safe on its own; the owning meter serialises access.
    """

    def __init__(self, alpha: float, interval_s: float = _TICK_INTERVAL_S) -> None:
        self._alpha = alpha
        self._interval_s = interval_s
        self._uncounted = 0
        self._rate = 0.0
        self._initialized = False

    @classmethod
    def for_window(cls, minutes: int) -> "ExponentiallyWeightedMovingAverage":
        return cls(1 - math.exp(-_TICK_INTERVAL_S / 60.0 / minutes))

    def update(self, count: int) -> None:
        self._uncounted += count

    def tick(self, times: int = 1) -> None:
        """Advance ``times`` intervals; only the first sees pending events."""
        if times <= 0:
            return

        instant_rate = self._uncounted / self._interval_s
        self._uncounted = 0
        if self._initialized:
            self._rate += self._alpha * (instant_rate - self._rate)
        else:
            self._rate = instant_rate
            self._initialized = True

        # Remaining intervals saw no events, so the rate only decays
        if times > 1:
            self._rate *= (1 - self._alpha) ** (times - 1)

    def rate(self, unit: TimeUnit = TimeUnit.SECONDS) -> float:
        """Current rate expressed per ``unit``."""
        return self._rate * unit.to_seconds(1)

    def reset(self) -> None:
        self._uncounted = 0
        self._rate = 0.0
        self._initialized = False


@dataclass(frozen=True)
class MeterItemValue:
    item: str
    percent: float
    value: "MeterValue"


@dataclass(frozen=True)
class MeterValue:
    count: int
    mean_rate: float
    one_minute_rate: float
    five_minute_rate: float
    fifteen_minute_rate: float
    rate_unit: TimeUnit
    items: Tuple[MeterItemValue, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "count": self.count,
            "mean_rate": self.mean_rate,
            "m1_rate": self.one_minute_rate,
            "m5_rate": self.five_minute_rate,
            "m15_rate": self.fifteen_minute_rate,
            "rate_unit": self.rate_unit.abbreviation,
        }
        if self.items:
            result["items"] = {
                item.item: {"percent": item.percent, **item.value.to_dict()}
                for item in self.items
            }
        return result


class MeterMetric:
    """Counts events and tracks their rate over 1, 5 and 15 minute windows."""

    def __init__(self, clock: Clock) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        self._items: Dict[str, MeterMetric] = {}
        self._m1 = ExponentiallyWeightedMovingAverage.for_window(1)
        self._m5 = ExponentiallyWeightedMovingAverage.for_window(5)
        self._m15 = ExponentiallyWeightedMovingAverage.for_window(15)
        self._clear()

    @property
    def count(self) -> int:
        return self._count

    def mark(self, amount: int = 1, item: Optional[str] = None) -> None:
        amount = ensure_count(amount)
        if amount < 0:
            raise ArgumentError(f"Meter cannot be marked with a negative amount ({amount})")

        with self._lock:
            self._tick_if_necessary()
            self._count += amount
            for ewma in (self._m1, self._m5, self._m15):
                ewma.update(amount)

            item_meter = None
            if item is not None:
                item_meter = self._items.get(item)
                if item_meter is None:
                    item_meter = MeterMetric(self._clock)
                    self._items[item] = item_meter

        if item_meter is not None:
            item_meter.mark(amount)

    def get_value(self, rate_unit: TimeUnit = TimeUnit.SECONDS, reset: bool = False) -> MeterValue:
        with self._lock:
            self._tick_if_necessary()
            count = self._count
            elapsed_s = (self._clock.nanoseconds - self._start_time) / TimeUnit.SECONDS.nanoseconds
            mean_rate = count / elapsed_s * rate_unit.to_seconds(1) if elapsed_s > 0 else 0.0
            rates = (self._m1.rate(rate_unit), self._m5.rate(rate_unit), self._m15.rate(rate_unit))
            item_meters = dict(self._items)
            if reset:
                self._clear()

        items = tuple(
            MeterItemValue(
                item=name,
                percent=(meter.count / count * 100.0) if count > 0 else 0.0,
                value=meter.get_value(rate_unit, reset),
            )
            for name, meter in sorted(item_meters.items())
        )

        return MeterValue(
            count=count,
            mean_rate=mean_rate,
            one_minute_rate=rates[0],
            five_minute_rate=rates[1],
            fifteen_minute_rate=rates[2],
            rate_unit=rate_unit,
            items=items,
        )

    def reset(self) -> None:
        with self._lock:
            self._clear()

    def _clear(self) -> None:
        self._count = 0
        self._start_time = self._clock.nanoseconds
        self._last_tick = self._start_time
        self._items = {}
        for ewma in (self._m1, self._m5, self._m15):
            ewma.reset()

    def _tick_if_necessary(self) -> None:
        now = self._clock.nanoseconds
        age = now - self._last_tick
        if age < TICK_INTERVAL_NS:
            return

        ticks = age // TICK_INTERVAL_NS
        self._last_tick = now - age % TICK_INTERVAL_NS
        for ewma in (self._m1, self._m5, self._m15):
            ewma.tick(ticks)
