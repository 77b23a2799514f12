"""Playback duration estimates for storyboard shots."""

from __future__ import annotations

from collections.abc import Mapping

from ..config import DEFAULT_DURATION_CONFIG, DurationConfig
from .locator import text_of
from .model import Shot
from .tree import DocumentLike


def estimate_duration_ms(text: str | None, config: DurationConfig = DEFAULT_DURATION_CONFIG) -> float:
    """
    Narration-paced duration for ``text``.

    Blank text gets ``default_ms``; otherwise words at ``words_per_minute``,
    clamped to ``[min_ms, max_ms]``.
    """
    if not text or not text.strip():
        return config.default_ms
    words = len(text.split())
    ms = words / config.words_per_minute * 60 * 1000
    return max(config.min_ms, min(ms, config.max_ms))


def shot_duration_ms(
    shot: Shot,
    documents_by_id: Mapping[str, DocumentLike],
    config: DurationConfig = DEFAULT_DURATION_CONFIG,
) -> float:
    """Manual override, else estimate from the linked block, else the default."""
    if shot.duration_ms is not None:
        return shot.duration_ms

    anchor = shot.linked_block
    if anchor is not None and not shot.is_unlinked:
        document = documents_by_id.get(anchor.document_id)
        if document is not None:
            text = text_of(document, anchor.block_id)
            if text:
                return estimate_duration_ms(text, config)

    return config.default_ms
