"""
Relocation of stale anchors after document edits.

Strategies run strictly in order and the first success wins:

1. EXACT_ID    the anchor's block id still exists (text drift is accepted)
2. EXACT_TEXT  exactly one block's text equals the snapshot verbatim
3. FUZZY       best context/text score, if it clears the threshold
4. FAILED      nothing qualified
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum

from ..config import DEFAULT_ANCHOR_CONFIG, AnchorConfig
from .locator import BlockIndex, index_blocks
from .model import BlockAnchor
from .scorer import pick_best
from .tree import DocumentLike

logger = logging.getLogger(__name__)


class MatchStrategy(Enum):
    EXACT_ID = "exact_id"
    EXACT_TEXT = "exact_text"
    FUZZY = "fuzzy"
    FAILED = "failed"


@dataclass(frozen=True)
class RelocationResult:
    block_id: str | None
    strategy: MatchStrategy
    score: float | None = None  # fuzzy matches only
    text_drifted: bool = False  # EXACT_ID hit whose text no longer equals the snapshot
    position: int | None = None  # index of the matched block among all blocks

    @property
    def found(self) -> bool:
        return self.block_id is not None


def relocate_in_index(
    index: BlockIndex,
    anchor: BlockAnchor,
    config: AnchorConfig = DEFAULT_ANCHOR_CONFIG,
) -> RelocationResult:
    for position, span in enumerate(index.spans):
        if span.block_id != anchor.block_id:
            continue
        drifted = index.text_of(span) != anchor.text_snapshot
        if drifted:
            logger.debug(f"Block {anchor.block_id} matched by id with drifted text")
        return RelocationResult(
            anchor.block_id, MatchStrategy.EXACT_ID, text_drifted=drifted, position=position
        )

    candidates = index.candidates()

    exact = [i for i, c in enumerate(candidates) if c.text == anchor.text_snapshot]
    if len(exact) == 1:
        match = candidates[exact[0]]
        logger.debug(f"Block {anchor.block_id} relocated to {match.block_id} by exact text")
        return RelocationResult(match.block_id, MatchStrategy.EXACT_TEXT, position=exact[0])

    best = pick_best(anchor, candidates, config)
    if best is not None:
        logger.debug(
            f"Block {anchor.block_id} relocated to {best.candidate.block_id} "
            f"by fuzzy match (score {best.score:.2f})"
        )
        return RelocationResult(
            best.candidate.block_id, MatchStrategy.FUZZY, score=best.score, position=best.position
        )

    logger.debug(f"Block {anchor.block_id} could not be relocated")
    return RelocationResult(None, MatchStrategy.FAILED)


def relocate(
    document: DocumentLike,
    anchor: BlockAnchor,
    config: AnchorConfig = DEFAULT_ANCHOR_CONFIG,
) -> RelocationResult:
    """Resolve ``anchor`` against the current state of ``document``."""
    return relocate_in_index(index_blocks(document), anchor, config)


def relocate_block(
    document: DocumentLike,
    anchor: BlockAnchor,
    config: AnchorConfig = DEFAULT_ANCHOR_CONFIG,
) -> str | None:
    """Current block id for ``anchor``, or None if relocation failed."""
    return relocate(document, anchor, config).block_id
