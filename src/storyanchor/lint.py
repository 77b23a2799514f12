from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Protocol

from .config import DEFAULT_ANCHOR_CONFIG, AnchorConfig
from .core.model import Shot
from .core.relocator import MatchStrategy
from .core.validation import ShotOutcome, check


@dataclass
class Finding:
    severity: str  # "info" | "warn" | "error"
    message: str
    shot_id: str | None = None


class LintRule(Protocol):
    id: str

    def check(self, shot: Shot, outcome: ShotOutcome) -> list[Finding]:
        pass


class MissingDocumentRule:
    id = "missing-document"

    def check(self, shot: Shot, outcome: ShotOutcome) -> list[Finding]:
        if not outcome.document_missing:
            return []
        return [Finding("error", f"Unknown document {outcome.document_id}", shot.id)]


class UnlinkedShotRule:
    id = "unlinked"

    def check(self, shot: Shot, outcome: ShotOutcome) -> list[Finding]:
        if outcome.resolved or outcome.document_missing:
            return []
        return [
            Finding(
                "error",
                f"Block {outcome.old_block_id} no longer found in {outcome.document_id}",
                shot.id,
            )
        ]


class StaleFlagRule:
    """Stored ``isUnlinked`` disagrees with what the documents say now."""

    id = "stale-flag"

    def check(self, shot: Shot, outcome: ShotOutcome) -> list[Finding]:
        if shot.is_unlinked == (not outcome.resolved):
            return []
        state = "unlinked" if shot.is_unlinked else "linked"
        return [Finding("info", f"Stored as {state}; run repair to refresh", shot.id)]


class TextDriftRule:
    """Block found by id, but its text no longer matches the linked snapshot."""

    id = "text-drift"

    def check(self, shot: Shot, outcome: ShotOutcome) -> list[Finding]:
        if outcome.strategy is not MatchStrategy.EXACT_ID or not outcome.text_drifted:
            return []
        return [Finding("warn", f"Text of block {outcome.old_block_id} changed since linking", shot.id)]


DEFAULT_RULES: tuple[LintRule, ...] = (
    MissingDocumentRule(),
    UnlinkedShotRule(),
    TextDriftRule(),
    StaleFlagRule(),
)


def lint_shots(
    shots: Sequence[Shot],
    documents_by_id: Mapping[str, Any],
    config: AnchorConfig = DEFAULT_ANCHOR_CONFIG,
    rules: Sequence[LintRule] = DEFAULT_RULES,
) -> list[Finding]:
    # check() yields one outcome per anchored shot, in list order
    anchored = [s for s in shots if s.linked_block is not None]
    out: list[Finding] = []
    for shot, outcome in zip(anchored, check(shots, documents_by_id, config)):
        for rule in rules:
            out.extend(rule.check(shot, outcome))
    return out
