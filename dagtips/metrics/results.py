"""Simulation event records and result data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..core.types import BlockId, MinerIndex


@dataclass(frozen=True)
class BlockCreated:
    """A miner created a block on top of the listed parents."""

    timestamp: float  # seconds since the collector started
    miner_index: MinerIndex
    block_id: BlockId
    parent_ids: tuple[BlockId, ...]


@dataclass(frozen=True)
class BlockDelivered:
    """A block reached a peer after its propagation delay."""

    timestamp: float
    miner_index: MinerIndex
    block_id: BlockId
    delay: float  # as drawn
    elapsed: float  # as observed, queueing included
    applied: bool


@dataclass
class SimulationResults:
    """Derived metrics computed after a simulation run."""

    blocks_created: int  # genesis excluded
    deliveries: int
    duplicate_deliveries: int  # deliveries of a block that was already a tip
    mean_delivery_delay: float
    max_delivery_delay: float
    mean_parent_count: float

    # Final DAG views
    tips_per_miner: dict[MinerIndex, list[BlockId]] = field(default_factory=dict)

    @property
    def converged(self) -> bool:
        """True when every miner ended up with the same tips."""
        views = {frozenset(tips) for tips in self.tips_per_miner.values()}
        return len(views) <= 1

    @property
    def mean_tip_count(self) -> float:
        if not self.tips_per_miner:
            return 0.0
        return sum(len(tips) for tips in self.tips_per_miner.values()) / len(self.tips_per_miner)

    def to_dict(self) -> dict[str, object]:
        return {
            "blocks_created": self.blocks_created,
            "deliveries": self.deliveries,
            "duplicate_deliveries": self.duplicate_deliveries,
            "mean_delivery_delay": self.mean_delivery_delay,
            "max_delivery_delay": self.max_delivery_delay,
            "mean_parent_count": self.mean_parent_count,
            "mean_tip_count": self.mean_tip_count,
            "converged": self.converged,
            "tips_per_miner": {
                str(index): list(tips) for index, tips in self.tips_per_miner.items()
            },
        }
