"""Time units used for recording durations and reporting rates."""

from enum import Enum
from typing import Union

Number = Union[int, float]


class TimeUnit(Enum):
    """Duration units, each valued by its length in nanoseconds."""

    NANOSECONDS = 1
    MICROSECONDS = 1_000
    MILLISECONDS = 1_000_000
    SECONDS = 1_000_000_000
    MINUTES = 60 * 1_000_000_000
    HOURS = 60 * 60 * 1_000_000_000
    DAYS = 24 * 60 * 60 * 1_000_000_000

    @property
    def nanoseconds(self) -> int:
        return self.value

    @property
    def abbreviation(self) -> str:
        return _ABBREVIATIONS[self]

    def to_nanoseconds(self, amount: Number) -> int:
        """Convert an amount of this unit to whole nanoseconds."""
        if isinstance(amount, int):
            return amount * self.value
        return int(round(amount * self.value))

    def to_seconds(self, amount: Number) -> float:
        return amount * self.value / TimeUnit.SECONDS.value

    def convert(self, amount: Number, target: "TimeUnit") -> float:
        """Convert an amount of this unit into ``target`` units."""
        return amount * self.value / target.value

    def scaling_factor_to(self, target: "TimeUnit") -> float:
        """Multiplier turning a value in this unit into ``target`` units."""
        return self.value / target.value

    @classmethod
    def from_name(cls, name: Union[str, "TimeUnit"]) -> "TimeUnit":
        """Resolve a unit from its name or abbreviation (case-insensitive)."""
        if isinstance(name, TimeUnit):
            return name
        key = name.strip().lower()
        for unit in cls:
            if key in (unit.name.lower(), unit.abbreviation):
                return unit
        raise ValueError(f"Unknown time unit: {name}")


_ABBREVIATIONS = {
    TimeUnit.NANOSECONDS: "ns",
    TimeUnit.MICROSECONDS: "us",
    TimeUnit.MILLISECONDS: "ms",
    TimeUnit.SECONDS: "s",
    TimeUnit.MINUTES: "min",
    TimeUnit.HOURS: "h",
    TimeUnit.DAYS: "d",
}
