"""Metric tags and the multidimensional names derived from them.

A tagged metric is registered under ``base|k1:v1,k2:v2`` with the pairs
sorted by key, so the same tags given in any order map to one registry
entry, and an empty tag set maps to the bare base name.
"""

from typing import Dict, Iterator, Mapping, Optional, Sequence, Tuple, Union

from .errors import ArgumentError

NAME_SEPARATOR = "|"
PAIR_DELIMITER = ","
KEY_VALUE_SEPARATOR = ":"
_RESERVED = (NAME_SEPARATOR, PAIR_DELIMITER, KEY_VALUE_SEPARATOR)

_Strings = Union[str, Sequence[str], None]


def _as_tuple(items: _Strings) -> Tuple[str, ...]:
    if items is None:
        return ()
    if isinstance(items, str):
        return (items,)
    return tuple(items)


class MetricTags:
    """Ordered set of unique key/value pairs.

    Iteration follows insertion order; equality and hashing use the
    canonical sorted-by-key form.
    """

    EMPTY: "MetricTags"

    __slots__ = ("_keys", "_values", "_canonical")

    def __init__(self, keys: _Strings = None, values: _Strings = None) -> None:
        keys = _as_tuple(keys)
        values = _as_tuple(values)

        if len(keys) != len(values):
            raise ArgumentError(f"Tag keys and values differ in length ({len(keys)} keys, {len(values)} values)")
        for key in keys:
            if not isinstance(key, str) or not key.strip():
                raise ArgumentError(f"Tag keys must be non-empty strings, got {key!r}")
        if len(set(keys)) != len(keys):
            raise ArgumentError(f"Tag keys must be unique, got {list(keys)}")

        values = tuple("" if value is None else str(value) for value in values)
        for text in keys + values:
            if any(delimiter in text for delimiter in _RESERVED):
                raise ArgumentError(f"Tag keys and values cannot contain any of {''.join(_RESERVED)!r}, got {text!r}")

        self._keys = keys
        self._values = values
        self._canonical = tuple(sorted(zip(self._keys, self._values)))

    @classmethod
    def from_mapping(cls, tags: Optional[Mapping[str, str]]) -> "MetricTags":
        if not tags:
            return cls.EMPTY
        return cls(list(tags.keys()), [tags[key] for key in tags])

    @classmethod
    def from_metric_name(cls, metric_name: str) -> Tuple[str, "MetricTags"]:
        """Split a derived name back into its base name and tags."""
        if NAME_SEPARATOR not in metric_name:
            return metric_name, cls.EMPTY

        base, _, encoded = metric_name.rpartition(NAME_SEPARATOR)
        keys, values = [], []
        for pair in encoded.split(PAIR_DELIMITER):
            key, separator, value = pair.partition(KEY_VALUE_SEPARATOR)
            if not separator or KEY_VALUE_SEPARATOR in value:
                return metric_name, cls.EMPTY
            keys.append(key)
            values.append(value)
        return base, cls(keys, values)

    @staticmethod
    def concat(*tag_sets: Optional["MetricTags"]) -> "MetricTags":
        """Combine tag sets; a later set overrides earlier values for the same key."""
        merged: Dict[str, str] = {}
        for tags in tag_sets:
            if tags:
                merged.update(tags.to_dict())
        return MetricTags.from_mapping(merged)

    @property
    def keys(self) -> Tuple[str, ...]:
        return self._keys

    @property
    def values(self) -> Tuple[str, ...]:
        return self._values

    @property
    def count(self) -> int:
        return len(self._keys)

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        for tag_key, value in zip(self._keys, self._values):
            if tag_key == key:
                return value
        return default

    def to_dict(self) -> Dict[str, str]:
        return dict(zip(self._keys, self._values))

    def as_metric_name(self, base_name: str) -> str:
        """Derive the multidimensional metric name for ``base_name``."""
        if not self._canonical:
            return base_name
        encoded = PAIR_DELIMITER.join(f"{key}{KEY_VALUE_SEPARATOR}{value}" for key, value in self._canonical)
        return f"{base_name}{NAME_SEPARATOR}{encoded}"

    def __iter__(self) -> Iterator[Tuple[str, str]]:
        return iter(zip(self._keys, self._values))

    def __len__(self) -> int:
        return len(self._keys)

    def __contains__(self, key: object) -> bool:
        return key in self._keys

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MetricTags):
            return NotImplemented
        return self._canonical == other._canonical

    def __hash__(self) -> int:
        return hash(self._canonical)

    def __repr__(self) -> str:
        pairs = ", ".join(f"{key}={value!r}" for key, value in self)
        return f"MetricTags({pairs})"


MetricTags.EMPTY = MetricTags()
