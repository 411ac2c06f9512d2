"""Tests for the block data model."""

import pytest

from dagtips.core.block import Block, InvalidBlock, make_genesis
from dagtips.core.types import BlockId


class TestBlock:
    def test_genesis_has_no_parents(self) -> None:
        """Genesis is the only block allowed without parents."""
        genesis = make_genesis()

        assert genesis.id == "00"
        assert genesis.parents == ()
        assert genesis.is_genesis

    def test_block_without_parents_rejected(self) -> None:
        """A regular block with zero parents raises InvalidBlock."""
        with pytest.raises(InvalidBlock, match="no parents") as exc_info:
            Block(id=BlockId("A"))

        assert exc_info.value.block_id == "A"

    def test_parents_stored_as_tuple(self, genesis: Block) -> None:
        """Parents given as a list are frozen into a tuple."""
        block = Block(id=BlockId("A"), parents=[genesis])  # type: ignore[arg-type]

        assert block.parents == (genesis,)
        assert block.parent_ids == ("00",)

    def test_parent_order_preserved(self, genesis: Block) -> None:
        """Parent ids come back in the order they were given."""
        a = Block(id=BlockId("A"), parents=(genesis,))
        b = Block(id=BlockId("B"), parents=(genesis,))
        c = Block(id=BlockId("C"), parents=(b, a))

        assert c.parent_ids == ("B", "A")

    def test_block_is_immutable(self, genesis: Block) -> None:
        """Blocks cannot be modified after construction."""
        block = Block(id=BlockId("A"), parents=(genesis,))

        with pytest.raises(AttributeError):
            block.parents = ()  # type: ignore[misc]

    def test_identity_is_id(self, genesis: Block) -> None:
        """Blocks with the same id compare and hash equal."""
        a1 = Block(id=BlockId("A"), parents=(genesis,))
        b = Block(id=BlockId("B"), parents=(genesis,))
        a2 = Block(id=BlockId("A"), parents=(b,))

        assert a1 == a2
        assert hash(a1) == hash(a2)
        assert a1 != b

    def test_str_is_id(self, genesis: Block) -> None:
        assert str(Block(id=BlockId("Q"), parents=(genesis,))) == "Q"
