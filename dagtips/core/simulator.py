"""Block creation driver."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from enum import Enum, auto
from string import ascii_uppercase
from typing import TYPE_CHECKING

from .block import Block, make_genesis
from .ids import AlphabetIdSource
from .miner import Miner
from .propagation import PropagationScheduler
from .rng import RandomSource
from .selection import select_parents
from .types import MinerIndex

if TYPE_CHECKING:
    from dagtips.config import SimulationConfig
    from dagtips.metrics.collector import MetricsCollector
    from dagtips.metrics.results import SimulationResults

    from .ids import IdSource
    from .topology import Topology

logger = logging.getLogger(__name__)


class DriverState(Enum):
    """State of the creation loop."""

    IDLE = auto()  # Waiting for the next creation tick
    CREATING = auto()  # Creating a block on the selected miner
    DONE = auto()  # Target block count reached
    FAILED = auto()  # A creation raised; loop stopped


class BlockCreationFailed(Exception):
    """A block could not be created; the driver loop stopped."""

    def __init__(self, miner_index: MinerIndex, attempt: int) -> None:
        self.miner_index = miner_index
        self.attempt = attempt
        super().__init__(f"Block creation #{attempt} failed on miner #{miner_index}")


class Simulator:
    """Drives block creation across a set of miners.

    A single control thread polls a creation timer, picks a miner uniformly at
    random when the interval has elapsed, and creates a block on it. New
    blocks are applied to the creator's TipSet immediately and handed to the
    PropagationScheduler for delayed delivery to its peers. The loop stops as
    soon as the target count is reached; outstanding deliveries are left
    running, use ``drain`` to wait for them.
    """

    def __init__(
        self,
        config: SimulationConfig,
        rng: RandomSource,
        genesis: Block,
        miners: list[Miner],
        id_source: IdSource,
        scheduler: PropagationScheduler,
        metrics: MetricsCollector | None = None,
        topology: Topology | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if not miners:
            raise ValueError("Simulator needs at least one miner")

        self._config = config
        self._rng = rng
        self._genesis = genesis
        self._miners = miners
        self._id_source = id_source
        self._scheduler = scheduler
        self._metrics = metrics
        self._topology = topology
        self._clock = clock
        self._sleep = sleep

        self._state = DriverState.IDLE
        # Genesis counts toward the target
        self._blocks_created = 1

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def rng(self) -> RandomSource:
        return self._rng

    @property
    def genesis(self) -> Block:
        return self._genesis

    @property
    def miners(self) -> list[Miner]:
        return self._miners

    @property
    def state(self) -> DriverState:
        return self._state

    @property
    def blocks_created(self) -> int:
        return self._blocks_created

    @property
    def scheduler(self) -> PropagationScheduler:
        return self._scheduler

    @property
    def metrics(self) -> MetricsCollector:
        if self._metrics is None:
            raise RuntimeError("Simulator not configured with metrics")
        return self._metrics

    @property
    def topology(self) -> Topology:
        if self._topology is None:
            raise RuntimeError("Simulator not configured with topology")
        return self._topology

    def run(self) -> None:
        """Create blocks until ``config.block_count`` is reached."""
        interval = self._config.creation_interval
        last_creation = self._clock()

        while self._blocks_created < self._config.block_count:
            remaining = last_creation + interval - self._clock()
            if remaining > 0:
                self._state = DriverState.IDLE
                self._sleep(min(self._config.poll_interval, remaining))
                continue

            miner = self._miners[self._rng.randrange(len(self._miners))]
            attempt = self._blocks_created

            self._state = DriverState.CREATING
            try:
                self.create_block(miner)
            except Exception as exc:
                self._state = DriverState.FAILED
                logger.error(
                    "Block creation #%d failed on miner #%d: %s", attempt, miner.index, exc
                )
                raise BlockCreationFailed(miner.index, attempt) from exc

            self._blocks_created += 1
            last_creation = self._clock()
            self._state = DriverState.IDLE

        self._state = DriverState.DONE
        logger.info("Created %d blocks, stopping", self._blocks_created)

    def create_block(self, miner: Miner) -> Block:
        """Create a block on ``miner`` and start propagating it to its peers.

        The id is allocated before any TipSet is touched, so an exhausted id
        source leaves every view unchanged.
        """
        parents = select_parents(miner.tipset.tips, self._rng, self._config.parent_threshold)
        block = Block(id=self._id_source.next_id(), parents=parents)

        logger.info(
            "Miner #%d created new block with ID = '%s' and parents: %s",
            miner.index,
            block.id,
            ", ".join(block.parent_ids),
        )

        miner.tipset.update(block)
        if self._metrics is not None:
            self._metrics.record_created(miner.index, block)

        self._scheduler.propagate(block, miner)
        return block

    def drain(self, timeout: float | None = None) -> int:
        """Wait for every scheduled delivery to finish."""
        return self._scheduler.drain(timeout)

    def shutdown(self, cancel_pending: bool = False) -> None:
        self._scheduler.shutdown(wait=True, cancel_pending=cancel_pending)

    def finalize_metrics(self) -> SimulationResults:
        return self.metrics.finalize(self._miners)

    def __enter__(self) -> Simulator:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    @classmethod
    def build(
        cls,
        config: SimulationConfig | None = None,
        *,
        id_source: IdSource | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> Simulator:
        """Build a fully configured simulator.

        Spawns the miners with a TipSet holding only genesis, connects them
        according to the configured topology policy, and wires the
        propagation scheduler and metrics collector.
        """
        from dagtips.config import SimulationConfig
        from dagtips.metrics.collector import MetricsCollector

        from .topology import build_topology

        if config is None:
            config = SimulationConfig()

        rng = RandomSource(config.seed)
        genesis = make_genesis(config.genesis_id)

        if id_source is None:
            id_source = AlphabetIdSource(
                ascii_uppercase,
                max_length=config.id_max_length,
                reserved=[config.genesis_id],
            )
            if config.block_count - 1 > id_source.capacity:
                raise ValueError(
                    f"block_count {config.block_count} needs more ids than "
                    f"id_max_length {config.id_max_length} allows ({id_source.capacity})"
                )

        miners: list[Miner] = []
        for i in range(config.miner_count):
            miners.append(Miner(MinerIndex(i), genesis))
            logger.info("Spawned miner #%d", i)

        topology = build_topology(config, rng)
        for miner in miners:
            miner.connect(miners[j] for j in topology.peers[miner.index])

        metrics = MetricsCollector(clock=clock)
        scheduler = PropagationScheduler(
            rng=rng,
            base_delay=config.propagation_delay,
            jitter_ratio=config.jitter_ratio,
            max_workers=config.max_workers,
            sleep=sleep,
            clock=clock,
            on_delivered=metrics.record_delivery,
        )

        return cls(
            config=config,
            rng=rng,
            genesis=genesis,
            miners=miners,
            id_source=id_source,
            scheduler=scheduler,
            metrics=metrics,
            topology=topology,
            clock=clock,
            sleep=sleep,
        )
