"""Tests for shot duration estimates."""

import pytest

from storyanchor.config import DurationConfig
from storyanchor.core.capture import capture_anchor
from storyanchor.core.duration import estimate_duration_ms, shot_duration_ms
from storyanchor.core.model import Shot


def para(block_id, text):
    return {"type": "paragraph", "attrs": {"blockId": block_id}, "content": [{"type": "text", "text": text}]}


TEN_WORDS = "one two three four five six seven eight nine ten"
SCRIPT = {"type": "doc", "content": [para("b1", TEN_WORDS)]}


def test_estimate_blank_text_uses_default():
    """Test empty text falls back to the default duration."""
    assert estimate_duration_ms("") == 3500
    assert estimate_duration_ms("   \n") == 3500
    assert estimate_duration_ms(None) == 3500


def test_estimate_narration_pace():
    """Test 150 words per minute."""
    assert estimate_duration_ms(TEN_WORDS) == pytest.approx(4000)


def test_estimate_is_clamped():
    """Test durations stay between min and max."""
    assert estimate_duration_ms("hi") == 3000
    assert estimate_duration_ms("word " * 100) == 15000


def test_estimate_custom_config():
    """Test pacing is configurable."""
    config = DurationConfig(words_per_minute=60, min_ms=0, max_ms=60000, default_ms=1000)
    assert estimate_duration_ms(TEN_WORDS, config) == pytest.approx(10000)
    assert estimate_duration_ms("", config) == 1000


def test_shot_duration_override_wins():
    """Test a manual duration beats the estimate."""
    anchor = capture_anchor(SCRIPT, "b1", "script")
    shot = Shot(id="s1", asset_id="a1", duration_ms=1234, linked_block=anchor)
    assert shot_duration_ms(shot, {"script": SCRIPT}) == 1234


def test_shot_duration_from_linked_text():
    """Test linked shots are timed from the current block text."""
    anchor = capture_anchor(SCRIPT, "b1", "script")
    shot = Shot(id="s1", asset_id="a1", linked_block=anchor)
    assert shot_duration_ms(shot, {"script": SCRIPT}) == pytest.approx(4000)


def test_shot_duration_defaults():
    """Test unlinked, unanchored and orphaned shots use the default."""
    anchor = capture_anchor(SCRIPT, "b1", "script")
    assert shot_duration_ms(Shot(id="s1", asset_id="a1"), {}) == 3500
    assert shot_duration_ms(Shot(id="s1", asset_id="a1", linked_block=anchor, is_unlinked=True), {"script": SCRIPT}) == 3500
    assert shot_duration_ms(Shot(id="s1", asset_id="a1", linked_block=anchor), {}) == 3500
