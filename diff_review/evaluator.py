"""Rule evaluation over a ChangeSet."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from diff_review.diff_parser import ChangeSet, FileChange, Hunk
from diff_review.errors import RuleEvaluationFault
from diff_review.redaction import scrub
from diff_review.rules import RuleRegistry
from diff_review.rules.base import Finding, Rule
from diff_review.severity import Severity, classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Task:
    rule: Rule
    path: str
    hunk: Hunk


def evaluate_rule(rule: Rule, change: FileChange, hunk: Hunk) -> list[Finding]:
    """Apply one rule to one hunk.

    A rule that raises is reported as a single tooling-error finding so the
    remaining rules still contribute their results.
    """
    return _evaluate(rule, change.path, hunk)


def evaluate_changeset(
    changeset: ChangeSet,
    registry: RuleRegistry,
    *,
    jobs: int = 1,
) -> list[Finding]:
    """Evaluate every applicable (rule, hunk) pair; result order is unspecified."""
    tasks = _plan(changeset, registry)
    logger.debug(
        "evaluating %d rule/hunk pairs across %d files with %d worker(s)",
        len(tasks),
        len(changeset.files),
        jobs,
    )
    if jobs <= 1 or len(tasks) <= 1:
        batches = [_run(task) for task in tasks]
    else:
        with ThreadPoolExecutor(max_workers=jobs, thread_name_prefix="diff-review") as pool:
            batches = list(pool.map(_run, tasks))
    return [finding for batch in batches for finding in batch]


def fault_finding(rule: Rule, path: str, hunk: Hunk, fault: RuleEvaluationFault) -> Finding:
    return Finding(
        path=path,
        line=hunk.anchor_line,
        severity=Severity.TOOLING_ERROR,
        rule_id=rule.rule_id,
        message=scrub(f"Rule '{rule.rule_id}' failed: {fault}"),
        category="tooling",
    )


def _plan(changeset: ChangeSet, registry: RuleRegistry) -> list[_Task]:
    tasks: list[_Task] = []
    for change in changeset.files:
        if not change.hunks:
            continue
        rules = registry.rules_for(change.path)
        for hunk in change.hunks:
            tasks.extend(_Task(rule=rule, path=change.path, hunk=hunk) for rule in rules)
    return tasks


def _run(task: _Task) -> list[Finding]:
    return _evaluate(task.rule, task.path, task.hunk)


def _evaluate(rule: Rule, path: str, hunk: Hunk) -> list[Finding]:
    try:
        severity = classify(rule)
        return [
            Finding(
                path=path,
                line=match.line,
                severity=severity,
                rule_id=rule.rule_id,
                message=scrub(rule.render_message(path=path, match=match)),
                snippet=scrub(match.snippet),
                suggestion=rule.suggestion,
                category=rule.category,
            )
            for match in rule.detect(hunk)
        ]
    except Exception as exc:
        fault = RuleEvaluationFault(rule.rule_id, exc)
        logger.warning("rule %s failed on %s (%s): %s", rule.rule_id, path, hunk.header, fault)
        return [fault_finding(rule, path, hunk, fault)]
