"""Storyboard shot list operations. All functions return new lists."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace

from .core.model import BlockAnchor, Shot
from .errors import ShotNotFound, StoryboardError


def find_shot(shots: Sequence[Shot], shot_id: str) -> Shot:
    for shot in shots:
        if shot.id == shot_id:
            return shot
    raise ShotNotFound(shot_id)


def sorted_shots(shots: Sequence[Shot]) -> list[Shot]:
    """Shots in playback order."""
    return sorted(shots, key=lambda s: s.order)


def add_shot(shots: Sequence[Shot], asset_id: str, shot_id: str) -> list[Shot]:
    """Append an anchorless shot at the end of the board."""
    shot = Shot(id=shot_id, asset_id=asset_id, order=len(shots))
    return [*shots, shot]


def _update(shots: Sequence[Shot], shot_id: str, **changes) -> list[Shot]:
    find_shot(shots, shot_id)
    return [replace(s, **changes) if s.id == shot_id else s for s in shots]


def link_shot(shots: Sequence[Shot], shot_id: str, anchor: BlockAnchor) -> list[Shot]:
    """Attach ``anchor`` to a shot; a fresh link is resolvable by definition."""
    return _update(shots, shot_id, linked_block=anchor, is_unlinked=False)


def unlink_shot(shots: Sequence[Shot], shot_id: str) -> list[Shot]:
    """Drop a shot's anchor. The shot is no longer linked, so not 'unlinked' either."""
    return _update(shots, shot_id, linked_block=None, is_unlinked=False)


def set_duration(shots: Sequence[Shot], shot_id: str, duration_ms: int | None) -> list[Shot]:
    """Set or clear (``None``) a shot's manual duration override."""
    if duration_ms is not None and duration_ms <= 0:
        raise StoryboardError(f"Duration must be positive, got {duration_ms}")
    return _update(shots, shot_id, duration_ms=duration_ms)


def reorder_shots(shots: Sequence[Shot], shot_ids: Sequence[str]) -> list[Shot]:
    """
    Put shots into the order given by ``shot_ids``.

    Unknown and repeated ids are ignored. Shots missing from ``shot_ids``
    follow the listed ones in their current playback order. Orders are
    renumbered from 0 and the result is in playback order.
    """
    by_id = {s.id: s for s in shots}
    listed: list[str] = []
    for shot_id in shot_ids:
        if shot_id in by_id and shot_id not in listed:
            listed.append(shot_id)

    ordered = [by_id[i] for i in listed]
    ordered += [s for s in sorted_shots(shots) if s.id not in listed]
    return [replace(s, order=i) for i, s in enumerate(ordered)]


def remove_shot(shots: Sequence[Shot], shot_id: str) -> list[Shot]:
    """Delete a shot and renumber the remaining ones in playback order."""
    find_shot(shots, shot_id)
    remaining = [s for s in sorted_shots(shots) if s.id != shot_id]
    renumbered = {s.id: i for i, s in enumerate(remaining)}
    return [replace(s, order=renumbered[s.id]) for s in shots if s.id != shot_id]
