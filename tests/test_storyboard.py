"""Tests for storyboard shot list operations."""

import pytest

from storyanchor.core.model import BlockAnchor, Shot
from storyanchor.errors import ShotNotFound, StoryboardError
from storyanchor.storyboard import (
    add_shot,
    find_shot,
    link_shot,
    remove_shot,
    reorder_shots,
    set_duration,
    sorted_shots,
    unlink_shot,
)

ANCHOR = BlockAnchor("b1", "script", 1, 2, "Sam opens the fridge.")


def test_add_shot_appends_in_order():
    """Test new shots go to the end, anchorless."""
    shots = add_shot([], "asset-1", "s1")
    shots = add_shot(shots, "asset-2", "s2")

    assert [s.id for s in shots] == ["s1", "s2"]
    assert [s.order for s in shots] == [0, 1]
    assert shots[1].linked_block is None
    assert shots[1].is_unlinked is False


def test_link_shot_clears_unlinked():
    """Test linking stores the anchor and resets the flag."""
    shots = [Shot(id="s1", asset_id="a1", is_unlinked=True, linked_block=ANCHOR)]
    fresh = BlockAnchor("c1", "script", 3, 4, "New text")

    updated = link_shot(shots, "s1", fresh)

    assert updated[0].linked_block == fresh
    assert updated[0].is_unlinked is False
    assert shots[0].linked_block == ANCHOR


def test_unlink_shot_discards_anchor():
    """Test an explicit unlink drops the anchor entirely."""
    shots = [Shot(id="s1", asset_id="a1", linked_block=ANCHOR, is_unlinked=True)]
    updated = unlink_shot(shots, "s1")
    assert updated[0].linked_block is None
    assert updated[0].is_unlinked is False


def test_set_duration():
    """Test manual duration override and reset."""
    shots = [Shot(id="s1", asset_id="a1")]
    assert set_duration(shots, "s1", 5000)[0].duration_ms == 5000
    assert set_duration(shots, "s1", None)[0].duration_ms is None


def test_remove_shot_renumbers():
    """Test removal closes the gap in playback order."""
    shots = [
        Shot(id="s1", asset_id="a1", order=0),
        Shot(id="s2", asset_id="a2", order=1),
        Shot(id="s3", asset_id="a3", order=2),
    ]
    updated = remove_shot(shots, "s2")
    assert [(s.id, s.order) for s in updated] == [("s1", 0), ("s3", 1)]


def test_sorted_shots():
    """Test playback order follows the order field."""
    shots = [Shot(id="b", asset_id="x", order=2), Shot(id="a", asset_id="x", order=0)]
    assert [s.id for s in sorted_shots(shots)] == ["a", "b"]


def test_unknown_shot_raises():
    """Test operations on a missing shot raise ShotNotFound."""
    with pytest.raises(ShotNotFound):
        find_shot([], "nope")
    with pytest.raises(KeyError):
        unlink_shot([Shot(id="s1", asset_id="a1")], "nope")
    with pytest.raises(ShotNotFound):
        remove_shot([], "nope")


def test_set_duration_rejects_non_positive():
    """Test a zero or negative override is refused."""
    shots = [Shot(id="s1", asset_id="a1")]
    with pytest.raises(StoryboardError):
        set_duration(shots, "s1", 0)
    with pytest.raises(StoryboardError):
        set_duration(shots, "s1", -100)


def test_reorder_shots():
    """Test orders follow the given id list."""
    shots = [
        Shot(id="s1", asset_id="a1", order=0),
        Shot(id="s2", asset_id="a2", order=1),
        Shot(id="s3", asset_id="a3", order=2),
    ]
    updated = reorder_shots(shots, ["s3", "s1", "s2"])
    assert [(s.id, s.order) for s in updated] == [("s3", 0), ("s1", 1), ("s2", 2)]
    assert [s.order for s in shots] == [0, 1, 2]


def test_reorder_shots_ignores_unknown_and_repeated_ids():
    """Test bogus ids are dropped and unlisted shots keep their relative order."""
    shots = [
        Shot(id="s1", asset_id="a1", order=0),
        Shot(id="s2", asset_id="a2", order=1),
        Shot(id="s3", asset_id="a3", order=2),
    ]
    updated = reorder_shots(shots, ["nope", "s3", "s3"])
    assert [(s.id, s.order) for s in updated] == [("s3", 0), ("s1", 1), ("s2", 2)]
