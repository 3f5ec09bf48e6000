"""Reservoir capability shared by all sampling strategies."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from ..errors import ConfigurationError
from .snapshot import Snapshot

DEFAULT_SAMPLE_SIZE = 1028
DEFAULT_ALPHA = 0.015


@dataclass(frozen=True)
class WeightedSample:
    """A retained observation together with its decay weight."""

    value: int
    user_value: Optional[str]
    weight: float


class Reservoir(ABC):
    """Bounded statistical sample of observed values.

    Custom strategies subclass this, or simply provide the same three
    methods; the engine only ever calls ``update``, ``get_snapshot`` and
    ``reset``.
    """

    @abstractmethod
    def update(self, value: int, user_value: Optional[str] = None) -> None:
        """Offer one observation to the sample."""

    @abstractmethod
    def get_snapshot(self, reset: bool = False) -> Snapshot:
        """Return statistics over the retained sample, optionally clearing it."""

    @abstractmethod
    def reset(self) -> None:
        """Drop all retained samples and counters."""

    @property
    @abstractmethod
    def size(self) -> int:
        """Number of samples currently retained."""


def validate_sample_size(sample_size: int) -> int:
    if not isinstance(sample_size, int) or isinstance(sample_size, bool) or sample_size <= 0:
        raise ConfigurationError(f"Reservoir sample size must be a positive integer, got {sample_size!r}")
    return sample_size
