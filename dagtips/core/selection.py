"""Random parent selection for new blocks."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .block import Block
    from .rng import RandomSource

logger = logging.getLogger(__name__)

# A tip is drawn when its random byte exceeds this value (about half of them)
DEFAULT_PARENT_THRESHOLD = 127


def draw_subset(
    tips: Sequence[Block],
    rng: RandomSource,
    threshold: int = DEFAULT_PARENT_THRESHOLD,
) -> list[Block]:
    """Draw each tip independently; the result may be empty."""
    buffer = rng.randbytes(len(tips))
    return [tip for tip, b in zip(tips, buffer, strict=True) if b > threshold]


def select_parents(
    tips: Sequence[Block],
    rng: RandomSource,
    threshold: int = DEFAULT_PARENT_THRESHOLD,
) -> tuple[Block, ...]:
    """Choose a random non-empty subset of ``tips`` as the parents of a new block.

    A single tip is returned without consuming randomness. Otherwise the whole
    set is redrawn until at least one tip is selected.
    """
    if not tips:
        raise ValueError("Cannot select parents from an empty tip set")
    if len(tips) == 1:
        return (tips[0],)

    attempts = 1
    parents = draw_subset(tips, rng, threshold)
    while not parents:
        attempts += 1
        parents = draw_subset(tips, rng, threshold)

    if attempts > 1:
        logger.debug("Parent draw over %d tips took %d attempts", len(tips), attempts)

    return tuple(parents)
