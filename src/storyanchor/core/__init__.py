"""Block anchoring: pin shots to document blocks and recover them after edits."""

from .capture import capture_anchor
from .duration import estimate_duration_ms, shot_duration_ms
from .hashing import context_hash
from .locator import all_blocks_in_order, index_blocks, text_after, text_before, text_of
from .model import BlockAnchor, CandidateBlock, Shot
from .relocator import MatchStrategy, RelocationResult, relocate, relocate_block
from .scorer import jaccard, score
from .tree import parse_node
from .validation import find_unlinked, repair, repair_with_report

__all__ = [
    "BlockAnchor",
    "CandidateBlock",
    "MatchStrategy",
    "RelocationResult",
    "Shot",
    "all_blocks_in_order",
    "capture_anchor",
    "context_hash",
    "estimate_duration_ms",
    "find_unlinked",
    "index_blocks",
    "jaccard",
    "parse_node",
    "relocate",
    "relocate_block",
    "repair",
    "repair_with_report",
    "score",
    "shot_duration_ms",
    "text_after",
    "text_before",
    "text_of",
]
