"""Top-level object wiring the clock, registry, providers and snapshots."""

import logging
from pathlib import Path
from typing import Optional, Union

from .config import MetricsConfig
from .core.clock import Clock, StopwatchClock
from .filtering import MetricsFilter
from .measure import MeasureMetrics
from .registry.builders import MetricBuilders
from .registry.providers import MetricsProvider
from .registry.registry import MetricsRegistry
from .registry.snapshot import ContextSnapshot, RegistrySnapshot

logger = logging.getLogger(__name__)


class MetricsSnapshot:
    """Read access to the registry for exporters."""

    def __init__(self, registry: MetricsRegistry) -> None:
        self._registry = registry

    def get(self, metrics_filter: Optional[MetricsFilter] = None) -> RegistrySnapshot:
        return self._registry.get_data(metrics_filter)

    def get_for_context(self, context: str) -> Optional[ContextSnapshot]:
        return self._registry.get_data(MetricsFilter().where_context(context)).filter_context(context)


class Metrics:
    """Metrics engine root.

    Attributes:
        clock: Time source shared by every timer, meter and decaying reservoir
        registry: Owner of all metric instances
        build: Builders for stand-alone metrics
        provider: Get-or-create access by metric kind
        measure: Resolve-and-record shortcuts
        snapshot: Filtered, immutable reads for exporters
    """

    def __init__(self, config: Optional[MetricsConfig] = None, clock: Optional[Clock] = None) -> None:
        self.config = config if config is not None else MetricsConfig()
        self.clock = clock if clock is not None else StopwatchClock()

        self.registry = MetricsRegistry(self.clock, self.config)
        self.build = MetricBuilders()
        self.provider = MetricsProvider(
            self.registry, self.build, self.clock, self.config.reservoir.create_factory(self.clock)
        )
        self.measure = MeasureMetrics(self.provider)
        self.snapshot = MetricsSnapshot(self.registry)

        logger.info(
            f"Metrics initialized (reservoir={self.config.reservoir.type}, "
            f"sample_size={self.config.reservoir.sample_size})"
        )

    @classmethod
    def from_config_file(cls, file_path: Union[str, Path], clock: Optional[Clock] = None) -> "Metrics":
        return cls(MetricsConfig.from_file(file_path), clock)

    def clear(self) -> None:
        self.registry.clear()
