"""Concurrent tip-set propagation simulator for block DAGs."""

from dagtips.config import SimulationConfig
from dagtips.core.topology import (
    FULL_MESH,
    RANDOM,
    RING,
    TopologyPolicy,
)

__all__ = [
    "FULL_MESH",
    "RANDOM",
    "RING",
    "SimulationConfig",
    "TopologyPolicy",
]
