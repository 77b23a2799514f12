"""Similarity scoring of candidate blocks against a stale anchor."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from ..config import DEFAULT_ANCHOR_CONFIG, AnchorConfig
from .capture import prefix_context, suffix_context
from .hashing import context_hash
from .model import BlockAnchor, CandidateBlock

PREFIX_WEIGHT = 2.0
SUFFIX_WEIGHT = 2.0
TEXT_WEIGHT = 3.0


def _tokens(text: str) -> frozenset[str]:
    return frozenset(text.lower().split())


def jaccard(a: str, b: str) -> float:
    """
    Jaccard similarity of the lower-cased whitespace token sets.

    Examples:
        >>> jaccard("the cat sat", "the cat sat")
        1.0
        >>> jaccard("", "")
        1.0
        >>> jaccard("a b", "")
        0.0
    """
    left, right = _tokens(a), _tokens(b)
    if not left and not right:
        return 1.0
    if not left or not right:
        return 0.0
    return len(left & right) / len(left | right)


def score(
    anchor: BlockAnchor,
    candidate: CandidateBlock,
    config: AnchorConfig = DEFAULT_ANCHOR_CONFIG,
) -> float:
    """
    Score a candidate block against an anchor.

    +2 for a matching prefix hash, +2 for a matching suffix hash, plus
    3 x jaccard(candidate text, snapshot). Range is [0, 7].
    """
    total = 0.0
    prefix = context_hash(prefix_context(candidate.preceding_text, config.context_window))
    if prefix == anchor.prefix_hash:
        total += PREFIX_WEIGHT
    suffix = context_hash(suffix_context(candidate.following_text, config.context_window))
    if suffix == anchor.suffix_hash:
        total += SUFFIX_WEIGHT
    total += TEXT_WEIGHT * jaccard(candidate.text, anchor.text_snapshot)
    return total


@dataclass(frozen=True)
class ScoredCandidate:
    candidate: CandidateBlock
    position: int  # index in document order
    score: float


def rank(
    anchor: BlockAnchor,
    candidates: Sequence[CandidateBlock],
    config: AnchorConfig = DEFAULT_ANCHOR_CONFIG,
) -> list[ScoredCandidate]:
    """All candidates, best first; equal scores keep document order."""
    scored = [
        ScoredCandidate(candidate=c, position=i, score=score(anchor, c, config))
        for i, c in enumerate(candidates)
    ]
    return sorted(scored, key=lambda s: (-s.score, s.position))


def pick_best(
    anchor: BlockAnchor,
    candidates: Sequence[CandidateBlock],
    config: AnchorConfig = DEFAULT_ANCHOR_CONFIG,
) -> ScoredCandidate | None:
    """The top-ranked candidate if it clears the acceptance threshold."""
    ranked = rank(anchor, candidates, config)
    if not ranked or ranked[0].score < config.acceptance_threshold:
        return None
    return ranked[0]
