"""Metrics registry: owns every metric instance, keyed by context and name."""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Optional, Tuple

from ..config import MetricsConfig
from ..core.clock import Clock
from ..errors import DuplicateMetricError
from ..filtering import NO_FILTER, MetricsFilter
from ..metrics.types import MetricType
from ..tagging import MetricTags
from .options import CounterOptions, MeterOptions, MetricOptions
from .snapshot import KIND_KEYS, ContextSnapshot, MetricValueSource, RegistrySnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RegistryEntry:
    """A registered metric and the identity it was created with."""

    name: str
    base_name: str
    metric_type: MetricType
    metric: Any
    options: MetricOptions
    tags: MetricTags


class MetricsContextRegistry:
    """All metrics of one context, partitioned by kind.

    A single lock guards the check-then-insert, so concurrent first-time
    callers for one key all receive the same instance. Factories run while
    that lock is held; it is reentrant, so a factory may resolve other
    metrics of the same context from the calling thread.
    """

    def __init__(self, context: str) -> None:
        self.context = context
        self._lock = threading.RLock()
        self._entries: Dict[MetricType, Dict[str, RegistryEntry]] = {kind: {} for kind in MetricType}
        self._kinds: Dict[str, MetricType] = {}

    def get_or_add(
        self,
        metric_type: MetricType,
        name: str,
        options: MetricOptions,
        tags: MetricTags,
        factory: Callable[[], Any],
    ) -> Tuple[Any, bool]:
        """Return ``(metric, created)``; ``factory`` only runs when the name is new."""
        with self._lock:
            existing_kind = self._kinds.get(name)
            if existing_kind is not None and existing_kind is not metric_type:
                raise DuplicateMetricError(self.context, name, existing_kind.value, metric_type.value)

            entry = self._entries[metric_type].get(name)
            if entry is not None:
                return entry.metric, False

            metric = factory()
            self._entries[metric_type][name] = RegistryEntry(
                name=name,
                base_name=options.name,
                metric_type=metric_type,
                metric=metric,
                options=options,
                tags=tags,
            )
            self._kinds[name] = metric_type
            return metric, True

    def entries(self, metric_type: MetricType) -> List[RegistryEntry]:
        with self._lock:
            return list(self._entries[metric_type].values())

    def clear(self) -> None:
        with self._lock:
            for entries in self._entries.values():
                entries.clear()
            self._kinds.clear()

    def __len__(self) -> int:
        return len(self._kinds)


class MetricsRegistry:
    """Get-or-create access to metrics plus filtered snapshot extraction."""

    def __init__(self, clock: Clock, config: Optional[MetricsConfig] = None) -> None:
        self.clock = clock
        self.config = config if config is not None else MetricsConfig()
        self._global_tags = self.config.global_metric_tags
        self._lock = threading.Lock()
        self._contexts: Dict[str, MetricsContextRegistry] = {}

        logger.info(f"MetricsRegistry initialized (default context '{self.config.default_context_label}')")

    @property
    def contexts(self) -> Tuple[str, ...]:
        with self._lock:
            return tuple(self._contexts)

    def metric_name(self, options: MetricOptions, tags: Optional[MetricTags] = None) -> str:
        """Registry name for ``options`` qualified by global, option and call tags."""
        return self._merge_tags(options, tags).as_metric_name(options.name)

    def get_or_add(
        self,
        metric_type: MetricType,
        options: MetricOptions,
        tags: Optional[MetricTags],
        factory: Callable[[], Any],
        explicit_factory: bool = False,
    ) -> Any:
        """Return the metric registered for ``options``/``tags``, creating it if needed.

        Args:
            metric_type: Kind of metric requested
            options: Creation options; validated before anything is registered
            tags: Call-site tags, combined with global and option tags
            factory: Builds the metric; invoked at most once per key, under the context lock
            explicit_factory: Whether the caller supplied the factory itself
        """
        options.validate()
        merged_tags = self._merge_tags(options, tags)
        name = merged_tags.as_metric_name(options.name)
        context = self._get_or_add_context(options.context or self.config.default_context_label)

        metric, created = context.get_or_add(metric_type, name, options, merged_tags, factory)
        if created:
            logger.debug(f"Registered {metric_type.value} '{name}' in context '{context.context}'")
        elif explicit_factory:
            logger.warning(
                f"{metric_type.value.capitalize()} '{name}' already exists in context "
                f"'{context.context}'; ignoring the supplied factory"
            )
        return metric

    def get_data(self, metrics_filter: Optional[MetricsFilter] = None) -> RegistrySnapshot:
        """Read every metric matching ``metrics_filter`` into an immutable snapshot."""
        metrics_filter = metrics_filter if metrics_filter is not None else NO_FILTER
        with self._lock:
            contexts = list(self._contexts.values())

        snapshots = []
        for context in contexts:
            if not metrics_filter.is_context_match(context.context):
                continue

            by_kind: Dict[str, Tuple[MetricValueSource, ...]] = {}
            for metric_type in MetricType:
                if not metrics_filter.is_type_match(metric_type):
                    continue
                by_kind[KIND_KEYS[metric_type]] = tuple(
                    self._read(entry)
                    for entry in context.entries(metric_type)
                    if metrics_filter.is_metric_match(entry.name, entry.tags)
                )

            snapshot = ContextSnapshot(context=context.context, **by_kind)
            if not snapshot.is_empty:
                snapshots.append(snapshot)

        return RegistrySnapshot(timestamp=self.clock.utc_date_time(), contexts=tuple(snapshots))

    def clear(self) -> None:
        """Drop every metric in every context."""
        with self._lock:
            contexts = list(self._contexts.values())
            self._contexts.clear()
        for context in contexts:
            context.clear()
        logger.info(f"Cleared {len(contexts)} metric contexts")

    def remove_context(self, context: str) -> bool:
        with self._lock:
            removed = self._contexts.pop(context, None)
        if removed is None:
            return False
        removed.clear()
        logger.info(f"Removed metric context '{context}'")
        return True

    def _get_or_add_context(self, label: str) -> MetricsContextRegistry:
        with self._lock:
            context = self._contexts.get(label)
            if context is None:
                context = MetricsContextRegistry(label)
                self._contexts[label] = context
            return context

    def _merge_tags(self, options: MetricOptions, tags: Optional[MetricTags]) -> MetricTags:
        return MetricTags.concat(self._global_tags, options.tags, tags)

    def _read(self, entry: RegistryEntry) -> MetricValueSource:
        options = entry.options
        reset = options.reset_on_reporting
        metric = entry.metric

        if entry.metric_type is MetricType.TIMER:
            duration_unit = getattr(options, "duration_unit", None) or self.config.default_duration_unit
            rate_unit = getattr(options, "rate_unit", None) or self.config.default_rate_unit
            value = metric.get_value(duration_unit=duration_unit, rate_unit=rate_unit, reset=reset)
        elif entry.metric_type is MetricType.METER:
            rate_unit = getattr(options, "rate_unit", None) or self.config.default_rate_unit
            value = metric.get_value(rate_unit, reset)
            if isinstance(options, MeterOptions) and not options.report_set_items:
                value = replace(value, items=())
        elif entry.metric_type is MetricType.COUNTER:
            value = metric.get_value(reset)
            if isinstance(options, CounterOptions):
                if not options.report_set_items:
                    value = replace(value, items=())
                elif not options.report_item_percentages:
                    value = replace(value, items=tuple(replace(item, percent=None) for item in value.items))
        else:
            value = metric.get_value(reset)

        return MetricValueSource(
            name=entry.name,
            base_name=entry.base_name,
            metric_type=entry.metric_type,
            value=value,
            unit=options.measurement_unit,
            tags=entry.tags,
            reset_on_reporting=reset,
        )
