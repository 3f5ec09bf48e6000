"""Counter metric with optional per-item breakdown."""

import threading
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .types import ensure_count


@dataclass(frozen=True)
class CounterItemValue:
    item: str
    count: int
    percent: Optional[float]


@dataclass(frozen=True)
class CounterValue:
    count: int
    items: Tuple[CounterItemValue, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"count": self.count}
        if self.items:
            result["items"] = {item.item: _item_dict(item) for item in self.items}
        return result


def _item_dict(item: CounterItemValue) -> Dict[str, Any]:
    if item.percent is None:
        return {"count": item.count}
    return {"count": item.count, "percent": item.percent}


class CounterMetric:
    """Signed running total; items track how the total splits by label."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._count = 0
        self._items: Dict[str, int] = {}

    @property
    def count(self) -> int:
        return self._count

    def increment(self, amount: int = 1, item: Optional[str] = None) -> None:
        self._add(ensure_count(amount), item)

    def decrement(self, amount: int = 1, item: Optional[str] = None) -> None:
        self._add(-ensure_count(amount), item)

    def get_value(self, reset: bool = False) -> CounterValue:
        with self._lock:
            count = self._count
            items = dict(self._items)
            if reset:
                self._count = 0
                self._items = {}

        return CounterValue(
            count=count,
            items=tuple(
                CounterItemValue(
                    item=name,
                    count=item_count,
                    percent=(item_count / count * 100.0) if count else 0.0,
                )
                for name, item_count in sorted(items.items())
            ),
        )

    def reset(self) -> None:
        with self._lock:
            self._count = 0
            self._items = {}

    def _add(self, amount: int, item: Optional[str]) -> None:
        with self._lock:
            self._count += amount
            if item is not None:
                self._items[item] = self._items.get(item, 0) + amount
