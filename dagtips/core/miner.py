"""Miner owning a local view of the DAG."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .tipset import TipSet

if TYPE_CHECKING:
    from collections.abc import Iterable

    from .block import Block
    from .types import MinerIndex


class Miner:
    """A node that creates blocks and keeps its own TipSet.

    The peer list is fixed once at setup. Peers are referenced, not owned.
    """

    def __init__(self, index: MinerIndex, genesis: Block) -> None:
        self._index = index
        self._tipset = TipSet(genesis)
        self._peers: tuple[Miner, ...] | None = None

    @property
    def index(self) -> MinerIndex:
        return self._index

    @property
    def tipset(self) -> TipSet:
        return self._tipset

    @property
    def peers(self) -> tuple[Miner, ...]:
        if self._peers is None:
            return ()
        return self._peers

    def connect(self, peers: Iterable[Miner]) -> None:
        """Set the peer list. May only be called once."""
        if self._peers is not None:
            raise RuntimeError(f"Miner {self._index} already connected")
        peer_tuple = tuple(peers)
        if any(peer is self for peer in peer_tuple):
            raise ValueError(f"Miner {self._index} cannot peer with itself")
        self._peers = peer_tuple

    def __str__(self) -> str:
        return str(self._index)

    def __repr__(self) -> str:
        return f"Miner(index={self._index}, peers={[p.index for p in self.peers]})"
