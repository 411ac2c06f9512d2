"""Delayed, concurrent delivery of new blocks to peers."""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .block import Block
    from .miner import Miner
    from .rng import RandomSource
    from .types import BlockId, MinerIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Delivery:
    """Outcome of applying one block to one peer's TipSet."""

    block_id: BlockId
    miner_index: MinerIndex
    delay: float  # drawn when the delivery was scheduled
    elapsed: float  # measured from scheduling to the TipSet update
    applied: bool  # False when the block was already a tip at the peer


class PropagationScheduler:
    """Schedules one delivery task per peer on a thread pool.

    Each delivery gets a deadline of now plus its jittered delay when it is
    scheduled. The task sleeps only for whatever is left of that deadline once
    a worker picks it up, so time spent queued behind other deliveries is not
    added on top of the delay. The task then updates the peer's TipSet.

    Tasks are unordered with respect to each other: a block can reach a peer
    before its parents do. The sleep happens before the TipSet lock is taken,
    so waiting deliveries never block one another.

    Delivery is best effort. Nothing is retried, and tasks still queued when
    the scheduler is shut down with ``cancel_pending`` are lost for good.
    """

    def __init__(
        self,
        rng: RandomSource,
        base_delay: float,
        jitter_ratio: float = 0.1,
        max_workers: int | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        on_delivered: Callable[[Delivery], None] | None = None,
    ) -> None:
        if base_delay < 0:
            raise ValueError("base_delay must be non-negative")
        if not 0 <= jitter_ratio < 1:
            raise ValueError("jitter_ratio must be in [0, 1)")

        self._rng = rng
        self._base_delay = base_delay
        self._jitter_ratio = jitter_ratio
        self._sleep = sleep
        self._clock = clock
        self._on_delivered = on_delivered
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="propagation"
        )

        self._lock = threading.Lock()
        self._outstanding: set[Future[Delivery]] = set()
        self._unreported: list[Exception] = []
        self._scheduled = 0
        self._completed = 0
        self._failed = 0
        self._abandoned = 0
        self._closed = False

    @property
    def base_delay(self) -> float:
        return self._base_delay

    @property
    def jitter_ratio(self) -> float:
        return self._jitter_ratio

    @property
    def scheduled_deliveries(self) -> int:
        return self._scheduled

    @property
    def completed_deliveries(self) -> int:
        return self._completed

    @property
    def failed_deliveries(self) -> int:
        return self._failed

    @property
    def abandoned_deliveries(self) -> int:
        return self._abandoned

    def pending_delivery_count(self) -> int:
        with self._lock:
            return len(self._outstanding)

    def compute_delay(self) -> float:
        """Base delay perturbed by a uniform offset in [-jitter, +jitter]."""
        if self._jitter_ratio == 0:
            return self._base_delay
        offset = self._rng.uniform(-self._jitter_ratio, self._jitter_ratio)
        return self._base_delay * (1 + offset)

    def propagate(self, block: Block, from_miner: Miner) -> list[Future[Delivery]]:
        """Schedule delivery of ``block`` to every peer of ``from_miner``."""
        return [self.schedule(block, peer) for peer in from_miner.peers]

    def schedule(
        self, block: Block, to_miner: Miner, delay: float | None = None
    ) -> Future[Delivery]:
        """Schedule a single delivery.

        The delay is drawn here, on the calling thread, and the delivery is due
        that many seconds from now regardless of how long it waits for a worker.
        """
        if delay is None:
            delay = self.compute_delay()
        scheduled_at = self._clock()

        with self._lock:
            if self._closed:
                raise RuntimeError("Cannot schedule delivery on a shut down scheduler")
            future = self._executor.submit(
                self._run_delivery, block, to_miner, delay, scheduled_at
            )
            self._outstanding.add(future)
            self._scheduled += 1

        future.add_done_callback(self._on_done)
        return future

    def drain(self, timeout: float | None = None) -> int:
        """Block until no delivery is outstanding.

        Deliveries scheduled while draining are waited on too. Returns the
        number of deliveries waited for. Raises TimeoutError if ``timeout``
        elapses first. A delivery failure not yet reported by an earlier
        drain is re-raised once everything has settled.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        waited = 0

        while True:
            with self._lock:
                pending = set(self._outstanding)
            if not pending:
                break

            remaining = None if deadline is None else max(0.0, deadline - time.monotonic())
            done, not_done = wait(pending, timeout=remaining, return_when=FIRST_COMPLETED)
            if not done and not_done:
                raise TimeoutError(f"{len(not_done)} deliveries still outstanding")
            waited += len(done)
            # Done callbacks can run after wait() returns
            with self._lock:
                self._outstanding.difference_update(done)

        with self._lock:
            failures, self._unreported = self._unreported, []
        if failures:
            raise failures[0]
        return waited

    def shutdown(self, wait: bool = True, cancel_pending: bool = False) -> None:
        """Stop accepting deliveries and release the worker threads."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            outstanding = len(self._outstanding)

        if cancel_pending and outstanding:
            logger.warning("Shutting down with %d deliveries outstanding", outstanding)
        self._executor.shutdown(wait=wait, cancel_futures=cancel_pending)

    def __enter__(self) -> PropagationScheduler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()

    def _run_delivery(
        self, block: Block, to_miner: Miner, delay: float, scheduled_at: float
    ) -> Delivery:
        try:
            delivery = self._deliver(block, to_miner, delay, scheduled_at)
        except Exception as exc:
            with self._lock:
                self._failed += 1
                self._unreported.append(exc)
            logger.error(
                "Delivery of block %s to miner #%d failed",
                block.id,
                to_miner.index,
                exc_info=exc,
            )
            raise

        with self._lock:
            self._completed += 1
        return delivery

    def _deliver(
        self, block: Block, to_miner: Miner, delay: float, scheduled_at: float
    ) -> Delivery:
        remaining = scheduled_at + delay - self._clock()
        if remaining > 0:
            self._sleep(remaining)

        applied = to_miner.tipset.update(block)
        elapsed = self._clock() - scheduled_at
        delivery = Delivery(
            block_id=block.id,
            miner_index=to_miner.index,
            delay=delay,
            elapsed=elapsed,
            applied=applied,
        )

        logger.info(
            "Added block with ID = %s to miner #%d after %.3f seconds",
            block.id,
            to_miner.index,
            elapsed,
        )

        if self._on_delivered is not None:
            self._on_delivered(delivery)
        return delivery

    def _on_done(self, future: Future[Delivery]) -> None:
        with self._lock:
            self._outstanding.discard(future)
            if not future.cancelled():
                return
            self._abandoned += 1

        logger.warning("Delivery abandoned before it ran")
