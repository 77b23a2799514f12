"""Tests for anchor relocation after document edits."""

from storyanchor.config import AnchorConfig
from storyanchor.core.capture import capture_anchor
from storyanchor.core.hashing import context_hash
from storyanchor.core.model import BlockAnchor
from storyanchor.core.relocator import MatchStrategy, relocate, relocate_block


def para(block_id, text):
    return {"type": "paragraph", "attrs": {"blockId": block_id}, "content": [{"type": "text", "text": text}]}


def doc(*blocks):
    return {"type": "doc", "content": list(blocks)}


KITCHEN = doc(
    para("h1", "INT. KITCHEN - NIGHT"),
    para("b1", "Sam opens the fridge."),
    para("t1", "The light flickers."),
)


def test_round_trip_every_block():
    """Test a freshly captured anchor relocates to its own block."""
    for block_id in ("h1", "b1", "t1"):
        anchor = capture_anchor(KITCHEN, block_id, "script")
        assert relocate_block(KITCHEN, anchor) == block_id


def test_exact_id_accepts_text_drift():
    """Test an id-preserved edit resolves by id despite new text."""
    before = doc(para("b1", "Hello"))
    after = doc(para("b1", "Goodbye"))
    anchor = capture_anchor(before, "b1", "script")

    result = relocate(after, anchor)

    assert result.block_id == "b1"
    assert result.strategy is MatchStrategy.EXACT_ID
    assert result.text_drifted is True


def test_exact_id_unchanged_has_no_drift():
    """Test an untouched block is matched by id without drift."""
    anchor = capture_anchor(KITCHEN, "b1", "script")
    result = relocate(KITCHEN, anchor)

    assert result.strategy is MatchStrategy.EXACT_ID
    assert result.text_drifted is False


def test_exact_text_after_id_loss():
    """Test a block whose id changed is found by its unchanged text."""
    anchor = capture_anchor(KITCHEN, "b1", "script")
    edited = doc(
        para("h1", "INT. KITCHEN - NIGHT"),
        para("c1", "Sam opens the fridge."),
        para("t1", "The light flickers."),
    )

    result = relocate(edited, anchor)

    assert result.block_id == "c1"
    assert result.strategy is MatchStrategy.EXACT_TEXT


def test_fuzzy_after_id_loss_and_rewording():
    """Test a retyped, reworded block is found by context and token overlap."""
    anchor = capture_anchor(KITCHEN, "b1", "script")
    edited = doc(
        para("h1", "INT. KITCHEN - NIGHT"),
        para("c9", "Sam slowly opens the fridge."),
        para("t1", "The light flickers."),
    )

    result = relocate(edited, anchor)

    assert result.block_id == "c9"
    assert result.strategy is MatchStrategy.FUZZY
    assert result.score >= 4.0


def test_fuzzy_uses_context_after_reorder():
    """Test a reworded block moved elsewhere still wins on context."""
    anchor = capture_anchor(KITCHEN, "b1", "script")
    edited = doc(
        para("x0", "Opening credits."),
        para("h1", "INT. KITCHEN - NIGHT"),
        para("c2", "Sam yanks the fridge open."),
        para("t1", "The light flickers."),
    )
    assert relocate_block(edited, anchor) == "c2"


def test_deleted_block_fails():
    """Test relocation fails when nothing similar remains."""
    anchor = capture_anchor(KITCHEN, "b1", "script")
    edited = doc(
        para("h1", "EXT. GARDEN - DAY"),
        para("t1", "Birds sing loudly."),
    )

    result = relocate(edited, anchor)

    assert result.block_id is None
    assert result.strategy is MatchStrategy.FAILED
    assert result.found is False


def test_deleted_block_neighbor_context_can_rescue():
    """Test a deleted middle block relinks to the neighbor sharing its prefix."""
    anchor = capture_anchor(KITCHEN, "b1", "script")
    edited = doc(
        para("h1", "INT. KITCHEN - NIGHT"),
        para("t1", "The light flickers."),
    )
    # t1 now follows the same text b1 did (2.0) and shares "the" (0.5);
    # h1 only matches the suffix (2.0)
    assert relocate_block(edited, anchor) == "t1"


def test_duplicate_text_tie_breaks_to_earliest():
    """Test identical blocks resolve to the earliest, every time."""
    anchor = BlockAnchor(
        block_id="gone",
        document_id="script",
        prefix_hash=context_hash("unrelated"),
        suffix_hash=context_hash("also unrelated"),
        text_snapshot="Same line.",
    )
    document = doc(para("x1", "Same line."), para("x2", "Same line."))

    results = {relocate_block(document, anchor) for _ in range(10)}

    assert results == {"x1"}
    assert relocate(document, anchor).strategy is MatchStrategy.FUZZY


def test_duplicate_text_context_disambiguates():
    """Test context hashes pick the right copy of duplicated text."""
    original = doc(
        para("a", "Opening."),
        para("x1", "Same line."),
        para("m", "Middle."),
        para("x2", "Same line."),
        para("z", "End."),
    )
    anchor = capture_anchor(original, "x2", "script")
    edited = doc(
        para("a", "Opening."),
        para("y1", "Same line."),
        para("m", "Middle."),
        para("y2", "Same line."),
        para("z", "End."),
    )

    result = relocate(edited, anchor)

    assert result.block_id == "y2"
    assert result.strategy is MatchStrategy.FUZZY


def test_duplicate_ids_resolve_to_first():
    """Test a duplicated id resolves to its first occurrence."""
    document = doc(para("dup", "First"), para("dup", "Second"))
    anchor = capture_anchor(document, "dup", "script")
    assert anchor.text_snapshot == "First"
    assert relocate_block(document, anchor) == "dup"


def test_threshold_is_configurable():
    """Test a stricter threshold rejects a weak fuzzy match."""
    anchor = capture_anchor(KITCHEN, "b1", "script")
    edited = doc(
        para("h1", "INT. KITCHEN - NIGHT"),
        para("t1", "The light flickers."),
    )
    assert relocate_block(edited, anchor, AnchorConfig(acceptance_threshold=5.0)) is None


def test_relocate_accepts_parsed_trees():
    """Test relocation works on already-parsed documents."""
    from storyanchor.core.tree import parse_node

    anchor = capture_anchor(KITCHEN, "t1", "script")
    assert relocate_block(parse_node(KITCHEN), anchor) == "t1"


def test_result_reports_position_of_matched_block():
    """Test the matched occurrence is identified by its position."""
    anchor = capture_anchor(KITCHEN, "b1", "script")
    assert relocate(KITCHEN, anchor).position == 1

    edited = doc(
        para("x", "Birds sing loudly."),
        para("x", "Sam opens the fridge."),
    )
    result = relocate(edited, anchor)
    assert result.strategy is MatchStrategy.EXACT_TEXT
    assert result.position == 1

    assert relocate(doc(para("z", "Nothing alike.")), anchor).position is None
