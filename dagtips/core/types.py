"""Core type aliases for the simulation."""

from typing import NewType

# Block identifier - opaque string, unique across a run
BlockId = NewType("BlockId", str)

# Miner identification - position of the miner in the roster
MinerIndex = NewType("MinerIndex", int)
