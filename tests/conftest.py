"""Shared pytest fixtures for dagtips tests."""

import pytest

from dagtips.core.block import Block, make_genesis
from dagtips.core.rng import RandomSource


class FakeClock:
    """Manually advanced clock whose sleep just moves time forward."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def genesis() -> Block:
    """Create the default genesis block."""
    return make_genesis()


@pytest.fixture
def rng() -> RandomSource:
    """Create a random source with the default seed."""
    return RandomSource(seed=42)


@pytest.fixture
def fake_clock() -> FakeClock:
    """Create a fake clock starting at t=0."""
    return FakeClock()
