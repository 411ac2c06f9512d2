"""Block data model."""

from __future__ import annotations

from dataclasses import dataclass, field

from .types import BlockId


class InvalidBlock(Exception):
    """Block rejected because it has no parents and is not the genesis block."""

    def __init__(self, block_id: BlockId) -> None:
        self.block_id = block_id
        super().__init__(f"Block {block_id} has no parents and is not the genesis block")


@dataclass(frozen=True)
class Block:
    """An immutable block in the DAG.

    Blocks are shared by reference between every miner view that learns of
    them. Identity is the block id: two instances with the same id compare
    and hash equal regardless of their parents.
    """

    id: BlockId
    parents: tuple[Block, ...] = field(default=(), compare=False, repr=False)
    is_genesis: bool = field(default=False, compare=False, repr=False)

    def __post_init__(self) -> None:
        # Accept any sequence of parents but store a tuple
        if not isinstance(self.parents, tuple):
            object.__setattr__(self, "parents", tuple(self.parents))
        if not self.parents and not self.is_genesis:
            raise InvalidBlock(self.id)

    @property
    def parent_ids(self) -> tuple[BlockId, ...]:
        return tuple(parent.id for parent in self.parents)

    def __str__(self) -> str:
        return self.id


def make_genesis(block_id: str = "00") -> Block:
    """Create the parentless origin block."""
    return Block(id=BlockId(block_id), is_genesis=True)
