"""Reservoir sampling strategies and their snapshots."""

from .base import DEFAULT_ALPHA, DEFAULT_SAMPLE_SIZE, Reservoir, WeightedSample
from .forward_decaying import ForwardDecayingReservoir
from .snapshot import Snapshot, UniformSnapshot, WeightedSnapshot
from .uniform import AlgorithmRReservoir, SlidingWindowReservoir

__all__ = [
    "DEFAULT_ALPHA",
    "DEFAULT_SAMPLE_SIZE",
    "AlgorithmRReservoir",
    "ForwardDecayingReservoir",
    "Reservoir",
    "SlidingWindowReservoir",
    "Snapshot",
    "UniformSnapshot",
    "WeightedSample",
    "WeightedSnapshot",
]
