"""Batch validation and repair of shot anchors against loaded documents."""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace

from ..config import DEFAULT_ANCHOR_CONFIG, AnchorConfig
from .capture import anchor_from_span
from .locator import BlockIndex, BlockSpan, index_blocks
from .model import BlockAnchor, Shot
from .relocator import MatchStrategy, RelocationResult, relocate_in_index
from .tree import DocumentLike

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShotOutcome:
    """What happened to one anchored shot during a pass."""
    shot_id: str
    document_id: str
    old_block_id: str
    new_block_id: str | None
    strategy: MatchStrategy
    document_missing: bool = False
    text_drifted: bool = False

    @property
    def resolved(self) -> bool:
        return self.new_block_id is not None

    def to_dict(self) -> dict:
        return {
            "shot": self.shot_id,
            "document": self.document_id,
            "old_block": self.old_block_id,
            "new_block": self.new_block_id,
            "strategy": self.strategy.value,
            "document_missing": self.document_missing,
            "text_drifted": self.text_drifted,
        }


@dataclass
class RepairReport:
    shots: list[Shot]
    outcomes: list[ShotOutcome] = field(default_factory=list)
    changed: set[str] = field(default_factory=set)  # ids of shots whose record changed

    @property
    def unlinked(self) -> set[str]:
        return {o.shot_id for o in self.outcomes if not o.resolved}


class _Indexes:
    """Per-pass lazy index cache so each document is folded once."""

    def __init__(self, documents_by_id: Mapping[str, DocumentLike]):
        self.documents_by_id = documents_by_id
        self._cache: dict[str, BlockIndex] = {}

    def get(self, document_id: str) -> BlockIndex | None:
        if document_id not in self._cache:
            document = self.documents_by_id.get(document_id)
            if document is None:
                return None
            self._cache[document_id] = index_blocks(document)
        return self._cache[document_id]


def _resolve(
    shot_id: str, anchor: BlockAnchor, indexes: _Indexes, config: AnchorConfig
) -> tuple[ShotOutcome, BlockIndex | None, BlockSpan | None]:
    index = indexes.get(anchor.document_id)
    if index is None:
        outcome = ShotOutcome(
            shot_id=shot_id,
            document_id=anchor.document_id,
            old_block_id=anchor.block_id,
            new_block_id=None,
            strategy=MatchStrategy.FAILED,
            document_missing=True,
        )
        return outcome, None, None

    result: RelocationResult = relocate_in_index(index, anchor, config)
    outcome = ShotOutcome(
        shot_id=shot_id,
        document_id=anchor.document_id,
        old_block_id=anchor.block_id,
        new_block_id=result.block_id,
        strategy=result.strategy,
        text_drifted=result.text_drifted,
    )
    span = index.spans[result.position] if result.position is not None else None
    return outcome, index, span


def check(
    shots: Sequence[Shot],
    documents_by_id: Mapping[str, DocumentLike],
    config: AnchorConfig = DEFAULT_ANCHOR_CONFIG,
) -> list[ShotOutcome]:
    """Relocation outcome for every anchored shot, in list order. Read-only."""
    indexes = _Indexes(documents_by_id)
    return [
        _resolve(shot.id, shot.linked_block, indexes, config)[0]
        for shot in shots
        if shot.linked_block is not None
    ]


def find_unlinked(
    shots: Sequence[Shot],
    documents_by_id: Mapping[str, DocumentLike],
    config: AnchorConfig = DEFAULT_ANCHOR_CONFIG,
) -> set[str]:
    """
    Ids of anchored shots that no longer resolve.

    A shot is unlinked when its document is not in ``documents_by_id`` or its
    anchor cannot be relocated. Shots without an anchor are ignored.
    """
    return {o.shot_id for o in check(shots, documents_by_id, config) if not o.resolved}


def repair_with_report(
    shots: Sequence[Shot],
    documents_by_id: Mapping[str, DocumentLike],
    config: AnchorConfig = DEFAULT_ANCHOR_CONFIG,
) -> RepairReport:
    """
    Re-resolve every anchored shot and return new shot records.

    Resolved shots get an anchor recaptured at the resolved block and
    ``is_unlinked=False``. Unresolved shots keep their stale anchor and get
    ``is_unlinked=True``. Input shots are never mutated.
    """
    indexes = _Indexes(documents_by_id)
    report = RepairReport(shots=[])

    for shot in shots:
        anchor = shot.linked_block
        if anchor is None:
            report.shots.append(shot)
            continue

        outcome, index, span = _resolve(shot.id, anchor, indexes, config)
        report.outcomes.append(outcome)

        if index is None or span is None:
            new_shot = replace(shot, is_unlinked=True)
        else:
            # Recapture the occurrence that matched, not the first with its id
            fresh = anchor_from_span(index, span, anchor.document_id, config)
            # Keep the existing record when recapture reproduces it
            new_anchor = anchor if fresh == anchor else fresh
            new_shot = replace(shot, linked_block=new_anchor, is_unlinked=False)

        if new_shot != shot:
            report.changed.add(shot.id)
            if new_shot.is_unlinked:
                logger.info(f"Shot {shot.id} unlinked from block {anchor.block_id}")
            else:
                logger.info(
                    f"Shot {shot.id} relinked {anchor.block_id} -> "
                    f"{outcome.new_block_id} ({outcome.strategy.value})"
                )
        report.shots.append(new_shot)

    return report


def repair(
    shots: Sequence[Shot],
    documents_by_id: Mapping[str, DocumentLike],
    config: AnchorConfig = DEFAULT_ANCHOR_CONFIG,
) -> list[Shot]:
    """New shot list with every anchored shot re-resolved."""
    return repair_with_report(shots, documents_by_id, config).shots
