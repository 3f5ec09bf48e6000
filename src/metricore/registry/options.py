"""Creation-time options for each metric kind.

Options are immutable; whatever a metric was created with stays fixed for
the lifetime of that registry entry. Units left as ``None`` fall back to
the engine configuration defaults when values are reported.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from ..core.time_unit import TimeUnit
from ..errors import ConfigurationError
from ..sampling.base import Reservoir
from ..tagging import MetricTags

ReservoirFactory = Callable[[], Reservoir]


@dataclass(frozen=True)
class MetricOptions:
    """Options common to every metric kind."""

    name: Optional[str] = None
    context: Optional[str] = None
    measurement_unit: str = "none"
    tags: MetricTags = field(default=MetricTags.EMPTY)
    reset_on_reporting: bool = False

    def validate(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ConfigurationError(f"{type(self).__name__} requires a non-empty name, got {self.name!r}")
        if self.context is not None and (not isinstance(self.context, str) or not self.context.strip()):
            raise ConfigurationError(f"Context label must be a non-empty string, got {self.context!r}")
        if not isinstance(self.tags, MetricTags):
            raise ConfigurationError(f"Options tags must be MetricTags, got {type(self.tags).__name__}")


@dataclass(frozen=True)
class TimerOptions(MetricOptions):
    reservoir: Optional[ReservoirFactory] = None
    duration_unit: Optional[TimeUnit] = None
    rate_unit: Optional[TimeUnit] = None
    measurement_unit: str = "calls"

    def validate(self) -> None:
        super().validate()
        if self.reservoir is not None and not callable(self.reservoir):
            raise ConfigurationError("TimerOptions.reservoir must be a callable returning a reservoir")


@dataclass(frozen=True)
class HistogramOptions(MetricOptions):
    reservoir: Optional[ReservoirFactory] = None

    def validate(self) -> None:
        super().validate()
        if self.reservoir is not None and not callable(self.reservoir):
            raise ConfigurationError("HistogramOptions.reservoir must be a callable returning a reservoir")


@dataclass(frozen=True)
class MeterOptions(MetricOptions):
    rate_unit: Optional[TimeUnit] = None
    report_set_items: bool = True


@dataclass(frozen=True)
class CounterOptions(MetricOptions):
    report_item_percentages: bool = True
    report_set_items: bool = True


@dataclass(frozen=True)
class GaugeOptions(MetricOptions):
    pass
