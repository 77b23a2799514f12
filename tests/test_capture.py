"""Tests for anchor capture."""

import dataclasses

import pytest

from storyanchor.config import AnchorConfig
from storyanchor.core.capture import capture_anchor
from storyanchor.core.hashing import context_hash


def para(block_id, text):
    return {"type": "paragraph", "attrs": {"blockId": block_id}, "content": [{"type": "text", "text": text}]}


def doc(*blocks):
    return {"type": "doc", "content": list(blocks)}


LONG = doc(para("p0", "x" * 80), para("b1", "Target block text"), para("p2", "y" * 80))


def test_capture_anchor_fields():
    """Test anchor records id, document, hashes and snapshot."""
    anchor = capture_anchor(LONG, "b1", "script")

    assert anchor is not None
    assert anchor.block_id == "b1"
    assert anchor.document_id == "script"
    assert anchor.prefix_hash == context_hash("x" * 50)
    assert anchor.suffix_hash == context_hash("y" * 50)
    assert anchor.text_snapshot == "Target block text"


def test_capture_anchor_custom_window():
    """Test the context window is configurable."""
    anchor = capture_anchor(LONG, "b1", "script", AnchorConfig(context_window=10))
    assert anchor.prefix_hash == context_hash("x" * 10)
    assert anchor.suffix_hash == context_hash("y" * 10)


def test_capture_anchor_snapshot_is_not_truncated():
    """Test the snapshot keeps the full block text."""
    text = "word " * 200
    anchor = capture_anchor(doc(para("b1", text)), "b1", "script")
    assert anchor.text_snapshot == text


def test_capture_anchor_edges_hash_empty_context():
    """Test first/last blocks hash the empty string on the open side."""
    anchor = capture_anchor(LONG, "p0", "script")
    assert anchor.prefix_hash == context_hash("")

    anchor = capture_anchor(LONG, "p2", "script")
    assert anchor.suffix_hash == context_hash("")


def test_capture_anchor_missing_block():
    """Test capture of an unknown block returns None."""
    assert capture_anchor(LONG, "nope", "script") is None


def test_capture_anchor_is_idempotent():
    """Test capturing an unedited block twice gives equal anchors."""
    assert capture_anchor(LONG, "b1", "script") == capture_anchor(LONG, "b1", "script")


def test_anchor_is_immutable():
    """Test anchors cannot be partially mutated."""
    anchor = capture_anchor(LONG, "b1", "script")
    with pytest.raises(dataclasses.FrozenInstanceError):
        anchor.block_id = "other"  # type: ignore[misc]


def utf16_units(text):
    data = text.encode("utf-16-le", "surrogatepass")
    return [data[i] | data[i + 1] << 8 for i in range(0, len(data), 2)]


def djb2(units):
    h = 5381
    for unit in units:
        h = (h * 33 + unit) & 0xFFFFFFFF
    return h


def test_capture_window_counts_utf16_units():
    """Test astral characters take two units of the context window."""
    before = "🎬" * 30
    anchor = capture_anchor(doc(para("p0", before), para("b", "Target")), "b", "script")

    assert anchor.prefix_hash == djb2(utf16_units(before)[-50:])
    assert anchor.prefix_hash == context_hash("🎬" * 25)


def test_capture_window_may_split_surrogate_pairs():
    """Test a window edge inside an emoji hashes the half it keeps."""
    before = "🎬" * 30 + "a"
    after = "a" + "🎬" * 30
    anchor = capture_anchor(
        doc(para("p0", before), para("b", "Target"), para("p2", after)), "b", "script"
    )

    assert anchor.prefix_hash == djb2(utf16_units(before)[-50:])
    assert anchor.suffix_hash == djb2(utf16_units(after)[:50])
