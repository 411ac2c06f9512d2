"""Simulation configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from dagtips.core.topology import TopologyPolicy


@dataclass(frozen=True)
class SimulationConfig:
    """Configuration for the DAG tip propagation simulation."""

    # Block production
    block_count: int = 10  # target total, genesis included
    creation_interval: float = 3.0  # seconds between creations
    poll_interval: float = 0.5  # driver sleep granularity while waiting
    parent_threshold: int = 127  # tip becomes a parent when its random byte exceeds this

    # Network
    miner_count: int = 10
    topology_policy: TopologyPolicy = None  # type: ignore[assignment]
    mesh_degree: int = 4  # peers per miner for non full-mesh policies
    propagation_delay: float = 3.0  # base one-way delay in seconds
    jitter_ratio: float = 0.1  # delay varies uniformly within +/- this fraction
    max_workers: int | None = None  # delivery thread pool size

    # Block ids
    genesis_id: str = "00"
    id_max_length: int = 1  # 1 gives "A".."Z"

    # Simulation parameters
    seed: int = 42

    def __post_init__(self) -> None:
        if self.topology_policy is None:
            from dagtips.core.topology import FULL_MESH

            object.__setattr__(self, "topology_policy", FULL_MESH)

        if self.block_count < 1:
            raise ValueError("block_count must be at least 1")
        if self.miner_count < 1:
            raise ValueError("miner_count must be at least 1")
        if self.creation_interval < 0:
            raise ValueError("creation_interval must be non-negative")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if self.propagation_delay < 0:
            raise ValueError("propagation_delay must be non-negative")
        if not 0 <= self.jitter_ratio < 1:
            raise ValueError("jitter_ratio must be in [0, 1)")
        if not 0 <= self.parent_threshold <= 254:
            raise ValueError("parent_threshold must be in [0, 254]")
        if self.mesh_degree < 1:
            raise ValueError("mesh_degree must be at least 1")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        if self.id_max_length < 1:
            raise ValueError("id_max_length must be at least 1")
