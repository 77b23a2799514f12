"""Anchor capture: pin a block by id, surrounding context and text."""

from __future__ import annotations

from ..config import DEFAULT_ANCHOR_CONFIG, AnchorConfig
from .hashing import context_hash
from .locator import BlockIndex, BlockSpan, index_blocks
from .model import BlockAnchor
from .tree import DocumentLike


def prefix_context(preceding_text: str, window: int) -> str:
    """Last ``window`` UTF-16 code units before a block."""
    if window <= 0:
        return ""
    units = preceding_text.encode("utf-16-le", "surrogatepass")
    return units[-2 * window :].decode("utf-16-le", "surrogatepass")


def suffix_context(following_text: str, window: int) -> str:
    """First ``window`` UTF-16 code units after a block."""
    if window <= 0:
        return ""
    units = following_text.encode("utf-16-le", "surrogatepass")
    return units[: 2 * window].decode("utf-16-le", "surrogatepass")


def anchor_from_span(
    index: BlockIndex,
    span: BlockSpan,
    document_id: str,
    config: AnchorConfig = DEFAULT_ANCHOR_CONFIG,
) -> BlockAnchor:
    return BlockAnchor(
        block_id=span.block_id,
        document_id=document_id,
        prefix_hash=context_hash(prefix_context(index.before(span), config.context_window)),
        suffix_hash=context_hash(suffix_context(index.after(span), config.context_window)),
        text_snapshot=index.text_of(span),
    )


def capture_anchor(
    document: DocumentLike,
    block_id: str,
    document_id: str,
    config: AnchorConfig = DEFAULT_ANCHOR_CONFIG,
) -> BlockAnchor | None:
    """
    Capture an anchor for the first block carrying ``block_id``.

    Returns None if no such block exists. Capturing the same unedited block
    twice yields equal anchors.
    """
    index = index_blocks(document)
    span = index.first(block_id)
    if span is None:
        return None
    return anchor_from_span(index, span, document_id, config)
