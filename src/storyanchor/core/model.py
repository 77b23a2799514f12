from __future__ import annotations
from dataclasses import dataclass

ShotId = str
DocumentId = str
BlockId = str


@dataclass(frozen=True)
class BlockAnchor:
    block_id: BlockId
    document_id: DocumentId
    prefix_hash: int  # context_hash of the last K chars before the block
    suffix_hash: int  # context_hash of the first K chars after the block
    text_snapshot: str  # full block text at capture time, never truncated


@dataclass(frozen=True)
class Shot:
    id: ShotId
    asset_id: str
    order: int = 0
    duration_ms: int | None = None  # manual override
    linked_block: BlockAnchor | None = None
    is_unlinked: bool = False


@dataclass(frozen=True)
class BlockText:
    block_id: BlockId
    text: str


@dataclass(frozen=True)
class CandidateBlock:
    """A block considered during relocation. Never persisted."""

    block_id: BlockId
    text: str
    preceding_text: str
    following_text: str
