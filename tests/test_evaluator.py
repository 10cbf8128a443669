"""Rule evaluation tests: fault isolation and determinism."""

from __future__ import annotations

from dataclasses import dataclass

from diff_review.diff_parser import ChangeSet, Hunk, parse_changeset
from diff_review.report import build_report
from diff_review.review import review_changeset, review_diff_text
from diff_review.rules import BASE_RULE_SET, RuleRegistry, RuleSet, default_registry
from diff_review.rules.base import Match, Rule
from diff_review.severity import Severity
from tests.helpers_diff import build_new_file_diff, build_replace_diff


@dataclass(frozen=True)
class ExplodingDetector:
    def __call__(self, hunk: Hunk) -> list[Match]:
        raise KeyError("boom")


def _mixed_changeset() -> ChangeSet:
    diff_text = "\n".join(
        [
            build_replace_diff("svc/app.py", ["x = 1"], ["print(x)  # TODO", "eval(data)"]),
            build_new_file_diff("web/app.js", ["console.log(1);", "debugger;"]),
            build_new_file_diff(".env", ["DEBUG=true", 'password = "hunter2hunter2"']),
        ]
    )
    return parse_changeset(diff_text, baseline="main")


def test_evaluation_is_deterministic_across_worker_counts() -> None:
    changeset = _mixed_changeset()
    registry = default_registry()

    serial = review_changeset(changeset, registry, jobs=1)
    parallel = review_changeset(changeset, registry, jobs=8)

    assert serial.total > 0
    assert serial.findings == parallel.findings
    assert serial.counts == parallel.counts


def test_faulting_rule_is_isolated_as_tooling_error() -> None:
    broken = Rule(
        rule_id="broken-rule",
        description="Always raises.",
        severity=Severity.CRITICAL,
        message="unused",
        detector=ExplodingDetector(),
    )
    registry = RuleRegistry(
        BASE_RULE_SET,
        (RuleSet(name="broken", patterns=("*.py",), rules=(broken,)),),
    )
    diff_text = build_replace_diff("svc/app.py", ["x = 1"], ["x = 2  # TODO later"])

    report = review_diff_text(diff_text, registry)

    tooling = report.by_tier(Severity.TOOLING_ERROR)
    assert len(tooling) == 1
    assert tooling[0].rule_id == "broken-rule"
    assert tooling[0].line == 1
    assert tooling[0].message == "Rule 'broken-rule' failed: KeyError: 'boom'"
    assert [f.rule_id for f in report.by_tier(Severity.LOW)] == ["todo-marker"]
    assert report.blocking(Severity.LOW) == report.by_tier(Severity.LOW)


def test_changeset_without_hunks_yields_no_findings() -> None:
    diff_text = "\n".join(
        [
            "diff --git a/logo.png b/logo.png",
            "index 1111111..2222222 100644",
            "Binary files a/logo.png and b/logo.png differ",
        ]
    )
    report = review_diff_text(diff_text)

    assert report.is_clean
    assert report.files_reviewed == 1
    assert report.hunks_reviewed == 0


def test_every_finding_matches_its_rule_tier() -> None:
    registry = default_registry()
    report = review_changeset(_mixed_changeset(), registry, jobs=4)

    for finding in report.findings:
        rule = registry.get(finding.rule_id)
        assert rule is not None
        assert finding.severity is rule.severity


def test_report_is_independent_of_input_order() -> None:
    report = review_changeset(_mixed_changeset(), default_registry())
    shuffled = build_report(
        reversed(report.findings),
        baseline=report.baseline,
        files_reviewed=report.files_reviewed,
        hunks_reviewed=report.hunks_reviewed,
    )
    assert shuffled.findings == report.findings
