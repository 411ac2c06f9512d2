"""Miner interconnection policies."""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, NamedTuple, TypeAlias

import networkx as nx

from .types import MinerIndex

if TYPE_CHECKING:
    from dagtips.config import SimulationConfig

    from .rng import RandomSource


TopologyPolicy: TypeAlias = "Callable[[int, int, RandomSource], list[tuple[MinerIndex, MinerIndex]]]"


class Topology(NamedTuple):
    """Peer lists for every miner plus the undirected edges they came from."""

    peers: dict[MinerIndex, tuple[MinerIndex, ...]]
    edges: list[tuple[MinerIndex, MinerIndex]]


def build_topology(config: SimulationConfig, rng: RandomSource) -> Topology:
    """Build peer lists for ``config.miner_count`` miners using the configured policy."""
    edges = config.topology_policy(config.miner_count, config.mesh_degree, rng)
    return Topology(peers=peers_from_edges(config.miner_count, edges), edges=edges)


def peers_from_edges(
    miner_count: int,
    edges: list[tuple[MinerIndex, MinerIndex]],
) -> dict[MinerIndex, tuple[MinerIndex, ...]]:
    """Turn undirected edges into a sorted peer tuple per miner."""
    adjacency: dict[MinerIndex, set[MinerIndex]] = {
        MinerIndex(i): set() for i in range(miner_count)
    }
    for a, b in edges:
        if a == b:
            continue
        adjacency[a].add(b)
        adjacency[b].add(a)
    return {index: tuple(sorted(peers)) for index, peers in adjacency.items()}


def full_mesh_policy(
    miner_count: int,
    mesh_degree: int,
    rng: RandomSource,
) -> list[tuple[MinerIndex, MinerIndex]]:
    """Every miner knows every other miner. ``mesh_degree`` is ignored."""
    G = nx.complete_graph(miner_count)
    return [_normalize_edge(MinerIndex(u), MinerIndex(v)) for u, v in G.edges()]


def ring_policy(
    miner_count: int,
    mesh_degree: int,
    rng: RandomSource,
) -> list[tuple[MinerIndex, MinerIndex]]:
    """Each miner is connected to its two neighbours on a ring."""
    if miner_count < 2:
        return []
    G = nx.cycle_graph(miner_count)
    return sorted({_normalize_edge(MinerIndex(u), MinerIndex(v)) for u, v in G.edges()})


def random_policy(
    miner_count: int,
    mesh_degree: int,
    rng: RandomSource,
) -> list[tuple[MinerIndex, MinerIndex]]:
    """Each miner picks ``mesh_degree`` random peers."""
    n = miner_count

    if (n * mesh_degree) % 2 == 0 and mesh_degree < n:
        try:
            G = nx.random_regular_graph(mesh_degree, n, seed=rng.randint(0, 2**32 - 1))
            return sorted(_normalize_edge(MinerIndex(u), MinerIndex(v)) for u, v in G.edges())
        except nx.NetworkXError:
            pass

    edges: set[tuple[MinerIndex, MinerIndex]] = set()
    for i in range(n):
        candidates = [j for j in range(n) if j != i]
        targets = rng.sample(candidates, min(mesh_degree, len(candidates)))
        for j in targets:
            edges.add(_normalize_edge(MinerIndex(i), MinerIndex(j)))

    return sorted(edges)


def _normalize_edge(a: MinerIndex, b: MinerIndex) -> tuple[MinerIndex, MinerIndex]:
    """Normalize edge to avoid duplicates (smaller index first)."""
    return (a, b) if a < b else (b, a)


# Standard interconnection policies
FULL_MESH = full_mesh_policy
RANDOM = random_policy
RING = ring_policy
