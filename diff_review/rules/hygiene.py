"""General change-hygiene checks applied to every file."""

from __future__ import annotations

from diff_review.rules.base import AddedLineCount, Rule, added
from diff_review.severity import Severity

OVERSIZED_HUNK_LINES = 200

RULES: tuple[Rule, ...] = (
    Rule(
        rule_id="merge-conflict-marker",
        description="Unresolved merge conflict marker.",
        severity=Severity.HIGH,
        message="Merge conflict marker `{match}` left in the file.",
        detector=added(r"^(?:<{7}|>{7})(?= |$)"),
        category="quality",
        suggestion="Resolve the conflict and remove the markers.",
    ),
    Rule(
        rule_id="todo-marker",
        description="New TODO/FIXME style marker.",
        severity=Severity.LOW,
        message="New `{match}` marker added.",
        detector=added(r"\b(?:TODO|FIXME|HACK)\b"),
        category="quality",
        suggestion="Track the follow-up in an issue or finish it before merging.",
    ),
    Rule(
        rule_id="oversized-hunk",
        description=f"Hunk adding more than {OVERSIZED_HUNK_LINES} lines.",
        severity=Severity.LOW,
        message="Hunk adds {match} lines; large blocks are hard to review.",
        detector=AddedLineCount(limit=OVERSIZED_HUNK_LINES),
        category="maintainability",
        suggestion="Split the change into smaller, reviewable steps.",
    ),
)
