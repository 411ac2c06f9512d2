"""Unique block-id sources."""

from __future__ import annotations

import itertools
import threading
from string import ascii_uppercase
from typing import TYPE_CHECKING, Protocol

from .types import BlockId

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator


class IDSpaceExhausted(Exception):
    """The id source cannot produce another identifier."""

    def __init__(self, issued: int) -> None:
        self.issued = issued
        super().__init__(f"Block id space exhausted after {issued} ids")


class IdSource(Protocol):
    """Anything able to hand out fresh, never repeated block ids."""

    def next_id(self) -> BlockId: ...


class AlphabetIdSource:
    """Human-readable ids: "A".."Z", then "AA".."ZZ" up to ``max_length``.

    Ids listed in ``reserved`` (typically the genesis id) are never issued.
    Raises IDSpaceExhausted once every combination has been handed out.
    """

    def __init__(
        self,
        alphabet: str = ascii_uppercase,
        max_length: int = 1,
        reserved: Iterable[str] = (),
    ) -> None:
        if not alphabet:
            raise ValueError("alphabet must not be empty")
        if len(set(alphabet)) != len(alphabet):
            raise ValueError("alphabet must not contain repeated characters")
        if max_length < 1:
            raise ValueError("max_length must be at least 1")

        self._alphabet = alphabet
        self._max_length = max_length
        self._reserved = frozenset(reserved)
        self._ids = self._generate()
        self._issued = 0
        self._lock = threading.Lock()

    @property
    def issued(self) -> int:
        return self._issued

    @property
    def capacity(self) -> int:
        """Total number of ids this source can issue."""
        total = sum(len(self._alphabet) ** n for n in range(1, self._max_length + 1))
        reserved = sum(1 for r in self._reserved if self._in_space(r))
        return total - reserved

    def next_id(self) -> BlockId:
        with self._lock:
            try:
                block_id = next(self._ids)
            except StopIteration:
                raise IDSpaceExhausted(self._issued) from None
            self._issued += 1
            return BlockId(block_id)

    def _generate(self) -> Iterator[str]:
        for length in range(1, self._max_length + 1):
            for chars in itertools.product(self._alphabet, repeat=length):
                candidate = "".join(chars)
                if candidate not in self._reserved:
                    yield candidate

    def _in_space(self, candidate: str) -> bool:
        return 1 <= len(candidate) <= self._max_length and all(
            c in self._alphabet for c in candidate
        )


class CounterIdSource:
    """Unbounded ids of the form ``<prefix><n>``."""

    def __init__(self, prefix: str = "B", start: int = 1) -> None:
        self._prefix = prefix
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> BlockId:
        with self._lock:
            return BlockId(f"{self._prefix}{next(self._counter)}")
