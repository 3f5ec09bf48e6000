"""Composable predicates selecting which metrics a snapshot includes."""

from dataclasses import dataclass, replace
from typing import Callable, FrozenSet, Optional, Tuple, Union

from .metrics.types import MetricType
from .tagging import MetricTags

NamePredicate = Callable[[str], bool]
ContextPredicate = Callable[[str], bool]


@dataclass(frozen=True)
class MetricsFilter:
    """Immutable filter; every ``where_*`` call returns a narrowed copy.

    Name predicates receive the registered (possibly multidimensional) name.
    """

    types: Optional[FrozenSet[MetricType]] = None
    name_predicate: Optional[NamePredicate] = None
    context_predicate: Optional[ContextPredicate] = None
    tag_keys: Tuple[str, ...] = ()
    tag_values: Tuple[Tuple[str, FrozenSet[str]], ...] = ()

    def where_type(self, *types: MetricType) -> "MetricsFilter":
        return replace(self, types=frozenset(types))

    def where_metric_name(self, predicate: NamePredicate) -> "MetricsFilter":
        return replace(self, name_predicate=predicate)

    def where_metric_name_starts_with(self, prefix: str) -> "MetricsFilter":
        return replace(self, name_predicate=lambda name: name.startswith(prefix))

    def where_context(self, context: Union[str, ContextPredicate]) -> "MetricsFilter":
        if isinstance(context, str):
            label = context
            return replace(self, context_predicate=lambda name: name == label)
        return replace(self, context_predicate=context)

    def where_metric_tagged(self, *keys: str) -> "MetricsFilter":
        return replace(self, tag_keys=self.tag_keys + tuple(keys))

    def where_metric_tag_has_value(self, key: str, *values: str) -> "MetricsFilter":
        return replace(self, tag_values=self.tag_values + ((key, frozenset(values)),))

    def is_context_match(self, context: str) -> bool:
        return self.context_predicate is None or bool(self.context_predicate(context))

    def is_type_match(self, metric_type: MetricType) -> bool:
        return self.types is None or metric_type in self.types

    def is_metric_match(self, name: str, tags: MetricTags = MetricTags.EMPTY) -> bool:
        if self.name_predicate is not None and not self.name_predicate(name):
            return False
        if any(key not in tags for key in self.tag_keys):
            return False
        for key, allowed in self.tag_values:
            if tags.get(key) not in allowed:
                return False
        return True

    def is_match(self, context: str, metric_type: MetricType, name: str,
                 tags: MetricTags = MetricTags.EMPTY) -> bool:
        return (
            self.is_context_match(context)
            and self.is_type_match(metric_type)
            and self.is_metric_match(name, tags)
        )


NO_FILTER = MetricsFilter()
