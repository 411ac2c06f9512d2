"""Tests for the per-miner TipSet."""

from concurrent.futures import ThreadPoolExecutor

from hypothesis import given, settings
from hypothesis import strategies as st

from dagtips.core.block import Block, make_genesis
from dagtips.core.tipset import TipSet
from dagtips.core.types import BlockId


def make_block(block_id: str, *parents: Block) -> Block:
    """Create a block with the given parents."""
    return Block(id=BlockId(block_id), parents=parents)


class TestTipSetUpdate:
    def test_initial_tips_is_genesis(self, genesis: Block) -> None:
        """A fresh TipSet holds only genesis."""
        tipset = TipSet(genesis)

        assert tipset.tips == (genesis,)
        assert len(tipset) == 1

    def test_child_of_genesis_replaces_it(self, genesis: Block) -> None:
        """Tips [genesis] + block with parents [genesis] -> [block]."""
        tipset = TipSet(genesis)
        a = make_block("A", genesis)

        assert tipset.update(a) is True
        assert tipset.tips == (a,)

    def test_unreferenced_tip_survives(self, genesis: Block) -> None:
        """Tips [A, B] + block with parents [A] -> [new, B]."""
        tipset = TipSet(genesis)
        a = make_block("A", genesis)
        b = make_block("B", genesis)
        tipset.update(a)
        tipset.update(b)

        new = make_block("C", a)
        tipset.update(new)

        assert tipset.tips == (new, b)

    def test_all_referenced_tips_removed(self, genesis: Block) -> None:
        """Tips [A, B] + block with parents [A, B] -> [new]."""
        tipset = TipSet(genesis)
        a = make_block("A", genesis)
        b = make_block("B", genesis)
        tipset.update(a)
        tipset.update(b)

        new = make_block("C", a, b)
        tipset.update(new)

        assert tipset.tips == (new,)

    def test_reapply_is_noop(self, genesis: Block) -> None:
        """Applying the same block twice leaves a single copy."""
        tipset = TipSet(genesis)
        a = make_block("A", genesis)

        assert tipset.update(a) is True
        assert tipset.update(a) is False
        assert tipset.tips == (a,)

    def test_parent_match_is_by_id(self, genesis: Block) -> None:
        """A parent equal by id removes the tip even if it is another instance."""
        tipset = TipSet(genesis)
        a = make_block("A", genesis)
        tipset.update(a)

        a_copy = make_block("A", genesis)
        tipset.update(make_block("B", a_copy))

        assert tipset.tip_ids == {"B"}

    def test_unknown_parent_ignored(self, genesis: Block) -> None:
        """Parents that are not tips do not affect the remaining tips."""
        tipset = TipSet(genesis)
        elsewhere = make_block("X", genesis)

        tipset.update(make_block("Y", elsewhere))

        assert tipset.tip_ids == {"Y", "00"}

    def test_out_of_order_parent_becomes_tip(self, genesis: Block) -> None:
        """A parent arriving after its child becomes a tip alongside the child."""
        tipset = TipSet(genesis)
        a = make_block("A", genesis)
        b = make_block("B", a)

        tipset.update(b)
        tipset.update(a)

        assert tipset.tip_ids_ordered() == ["A", "B"]

    def test_contains_by_block_or_id(self, genesis: Block) -> None:
        tipset = TipSet(genesis)

        assert genesis in tipset
        assert "00" in tipset
        assert "A" not in tipset

    def test_tips_is_snapshot(self, genesis: Block) -> None:
        """The returned tuple does not change with later updates."""
        tipset = TipSet(genesis)
        before = tipset.tips

        tipset.update(make_block("A", genesis))

        assert before == (genesis,)


class TestTipSetConcurrency:
    def test_concurrent_siblings_all_become_tips(self, genesis: Block) -> None:
        """Many children of genesis applied from many threads all end up as tips."""
        tipset = TipSet(genesis)
        blocks = [make_block(f"B{i}", genesis) for i in range(200)]

        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(tipset.update, blocks))

        assert all(results)
        assert tipset.tip_ids == {b.id for b in blocks}

    def test_concurrent_duplicates_applied_once(self, genesis: Block) -> None:
        """The same block racing from many threads is applied exactly once."""
        tipset = TipSet(genesis)
        a = make_block("A", genesis)

        with ThreadPoolExecutor(max_workers=16) as pool:
            results = list(pool.map(lambda _: tipset.update(a), range(100)))

        assert results.count(True) == 1
        assert tipset.tips == (a,)

    def test_independent_tipsets(self, genesis: Block) -> None:
        """Updating one TipSet never changes another."""
        first = TipSet(genesis)
        second = TipSet(genesis)

        first.update(make_block("A", genesis))

        assert second.tips == (genesis,)


# Each step picks a subset of the current tips (by position) as parents
parent_choices = st.lists(
    st.lists(st.integers(min_value=0, max_value=63), min_size=1, max_size=4),
    min_size=1,
    max_size=30,
)


class TestTipSetProperties:
    @given(steps=parent_choices)
    @settings(max_examples=100)
    def test_update_invariants(self, steps: list[list[int]]) -> None:
        """After every update the new block is a tip and none of its parents are."""
        tipset = TipSet(make_genesis())

        for n, picks in enumerate(steps):
            tips = tipset.tips
            parents = tuple(dict.fromkeys(tips[i % len(tips)] for i in picks))
            block = make_block(f"N{n}", *parents)
            before = set(tipset.tip_ids)

            tipset.update(block)

            assert block in tipset
            assert not (tipset.tip_ids & set(block.parent_ids))
            assert tipset.tip_ids == (before - set(block.parent_ids)) | {block.id}

    @given(steps=parent_choices)
    @settings(max_examples=50)
    def test_update_is_idempotent(self, steps: list[list[int]]) -> None:
        """Applying each block twice gives the same tips as applying it once."""
        once = TipSet(make_genesis())
        twice = TipSet(make_genesis())

        for n, picks in enumerate(steps):
            tips = once.tips
            parents = tuple(dict.fromkeys(tips[i % len(tips)] for i in picks))
            block = make_block(f"N{n}", *parents)

            once.update(block)
            twice.update(block)
            twice.update(block)

            assert once.tip_ids_ordered() == twice.tip_ids_ordered()
