"""Review orchestration: collect, evaluate, classify, report."""

from __future__ import annotations

import logging
from pathlib import Path

from diff_review.collector import WORKING_TREE, collect_changes
from diff_review.diff_parser import ChangeSet, parse_changeset
from diff_review.evaluator import evaluate_changeset
from diff_review.report import Report, build_report
from diff_review.rules import RuleRegistry, default_registry

logger = logging.getLogger(__name__)


def review_changeset(
    changeset: ChangeSet,
    registry: RuleRegistry | None = None,
    *,
    jobs: int = 1,
) -> Report:
    """Evaluate a collected ChangeSet and build its report."""
    active = registry if registry is not None else default_registry()
    findings = evaluate_changeset(changeset, active, jobs=jobs)
    report = build_report(
        findings,
        baseline=changeset.baseline,
        files_reviewed=len(changeset.files),
        hunks_reviewed=changeset.hunk_count,
        paths=changeset.paths(),
    )
    logger.debug("review of %s produced %d finding(s)", changeset.baseline, report.total)
    return report


def review_diff_text(
    diff_text: str,
    registry: RuleRegistry | None = None,
    *,
    jobs: int = 1,
) -> Report:
    """Parse and review unified diff text; empty input yields an empty report."""
    return review_changeset(parse_changeset(diff_text), registry, jobs=jobs)


def run_review(
    repo: Path,
    baseline: str = WORKING_TREE,
    *,
    registry: RuleRegistry | None = None,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
    jobs: int = 1,
) -> Report:
    """Collect changes from git against ``baseline`` and review them."""
    changeset = collect_changes(repo, baseline, include=include, exclude=exclude)
    return review_changeset(changeset, registry, jobs=jobs)
