"""Per-miner view of the DAG frontier."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .block import Block
    from .types import BlockId

logger = logging.getLogger(__name__)


class TipSet:
    """Blocks with no known child in one miner's view of the DAG.

    Tips are keyed by block id and kept newest first. The only mutation is
    ``update``, which runs under a lock owned by this instance. Different
    TipSets share nothing, so updates to them never contend.

    Blocks are applied in arrival order and the set keeps no record of
    blocks it has already retired. When a parent arrives after its child,
    the parent becomes a tip next to the child, so "no tip is a parent of
    another tip" only holds if blocks arrive in creation order.
    """

    def __init__(self, genesis: Block) -> None:
        self._tips: dict[BlockId, Block] = {genesis.id: genesis}
        self._lock = threading.Lock()

    @property
    def tips(self) -> tuple[Block, ...]:
        """Snapshot of the current tips, newest first."""
        with self._lock:
            return tuple(self._tips.values())

    @property
    def tip_ids(self) -> frozenset[BlockId]:
        with self._lock:
            return frozenset(self._tips)

    def tip_ids_ordered(self) -> list[BlockId]:
        with self._lock:
            return list(self._tips)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tips)

    def __contains__(self, item: object) -> bool:
        block_id = getattr(item, "id", item)
        with self._lock:
            return block_id in self._tips

    def update(self, block: Block) -> bool:
        """Insert ``block`` as a tip and drop every tip it names as a parent.

        The new mapping is built before it is swapped in, so a failure part
        way through leaves the previous tips untouched. Re-applying a block
        that is already a tip is a no-op. Returns True when the tips changed.
        """
        parent_ids = set(block.parent_ids)

        with self._lock:
            if block.id in self._tips:
                logger.debug("Block %s already a tip, ignoring", block.id)
                return False

            new_tips: dict[BlockId, Block] = {block.id: block}
            for tip_id, tip in self._tips.items():
                if tip_id not in parent_ids:
                    new_tips[tip_id] = tip

            self._tips = new_tips
            return True

    def __repr__(self) -> str:
        return f"TipSet({', '.join(self.tip_ids_ordered())})"
