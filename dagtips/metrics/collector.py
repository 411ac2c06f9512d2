"""Metrics collection for simulation analysis."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from statistics import mean
from typing import TYPE_CHECKING

from dagtips.metrics.results import BlockCreated, BlockDelivered, SimulationResults

if TYPE_CHECKING:
    from collections.abc import Iterable

    from dagtips.core.block import Block
    from dagtips.core.miner import Miner
    from dagtips.core.propagation import Delivery
    from dagtips.core.types import MinerIndex


@dataclass
class MetricsCollector:
    """Collects block creation and delivery events.

    Deliveries are recorded from worker threads, so every mutation goes
    through the collector's lock. Timestamps are seconds since the collector
    was created, measured with ``clock``.
    """

    clock: Callable[[], float] = time.monotonic
    created: list[BlockCreated] = field(default_factory=list)
    delivered: list[BlockDelivered] = field(default_factory=list)

    _started_at: float = field(init=False)
    _lock: threading.Lock = field(init=False, repr=False, default_factory=threading.Lock)

    def __post_init__(self) -> None:
        self._started_at = self.clock()

    def elapsed(self) -> float:
        return self.clock() - self._started_at

    def record_created(self, miner_index: MinerIndex, block: Block) -> None:
        event = BlockCreated(
            timestamp=self.elapsed(),
            miner_index=miner_index,
            block_id=block.id,
            parent_ids=block.parent_ids,
        )
        with self._lock:
            self.created.append(event)

    def record_delivery(self, delivery: Delivery) -> None:
        event = BlockDelivered(
            timestamp=self.elapsed(),
            miner_index=delivery.miner_index,
            block_id=delivery.block_id,
            delay=delivery.delay,
            elapsed=delivery.elapsed,
            applied=delivery.applied,
        )
        with self._lock:
            self.delivered.append(event)

    def finalize(self, miners: Iterable[Miner] = ()) -> SimulationResults:
        with self._lock:
            created = list(self.created)
            delivered = list(self.delivered)

        delays = [d.elapsed for d in delivered]

        return SimulationResults(
            blocks_created=len(created),
            deliveries=len(delivered),
            duplicate_deliveries=sum(1 for d in delivered if not d.applied),
            mean_delivery_delay=mean(delays) if delays else 0.0,
            max_delivery_delay=max(delays, default=0.0),
            mean_parent_count=mean(len(c.parent_ids) for c in created) if created else 0.0,
            tips_per_miner={
                miner.index: miner.tipset.tip_ids_ordered() for miner in miners
            },
        )
