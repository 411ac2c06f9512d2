"""Seeded random source shared by the simulation components."""

from __future__ import annotations

import threading
from random import Random
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from collections.abc import Sequence

T = TypeVar("T")


class RandomSource:
    """Lock-guarded wrapper around a seeded ``random.Random``.

    Parent selection, miner selection and delay jitter all draw from one
    instance so that a run is reproducible from its seed. Every draw holds the
    lock, so the source can be shared between the driver and any additional
    creation threads.
    """

    def __init__(self, seed: int = 42) -> None:
        self._seed = seed
        self._rng = Random(seed)
        self._lock = threading.Lock()

    @property
    def seed(self) -> int:
        return self._seed

    def randbytes(self, n: int) -> bytes:
        with self._lock:
            return self._rng.randbytes(n)

    def uniform(self, a: float, b: float) -> float:
        with self._lock:
            return self._rng.uniform(a, b)

    def randrange(self, stop: int) -> int:
        with self._lock:
            return self._rng.randrange(stop)

    def randint(self, a: int, b: int) -> int:
        with self._lock:
            return self._rng.randint(a, b)

    def sample(self, population: Sequence[T], k: int) -> list[T]:
        with self._lock:
            return self._rng.sample(population, k)
