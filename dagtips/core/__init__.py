"""Core simulation infrastructure."""

from dagtips.core.block import Block, InvalidBlock, make_genesis
from dagtips.core.ids import AlphabetIdSource, CounterIdSource, IdSource, IDSpaceExhausted
from dagtips.core.miner import Miner
from dagtips.core.propagation import Delivery, PropagationScheduler
from dagtips.core.rng import RandomSource
from dagtips.core.selection import draw_subset, select_parents
from dagtips.core.simulator import BlockCreationFailed, DriverState, Simulator
from dagtips.core.tipset import TipSet
from dagtips.core.types import BlockId, MinerIndex

__all__ = [
    "AlphabetIdSource",
    "Block",
    "BlockCreationFailed",
    "BlockId",
    "CounterIdSource",
    "Delivery",
    "DriverState",
    "IDSpaceExhausted",
    "IdSource",
    "InvalidBlock",
    "Miner",
    "MinerIndex",
    "PropagationScheduler",
    "RandomSource",
    "Simulator",
    "TipSet",
    "draw_subset",
    "make_genesis",
    "select_parents",
]
