"""Report ordering, counting and gating tests."""

from __future__ import annotations

import pytest

from diff_review.errors import RenderError
from diff_review.report import Report, build_report, validate_report
from diff_review.rules.base import Finding
from diff_review.severity import RENDER_ORDER, Severity, parse_threshold


def _finding(path: str, line: int, severity: Severity, rule_id: str = "rule") -> Finding:
    return Finding(path=path, line=line, severity=severity, rule_id=rule_id, message=rule_id)


def test_findings_ordered_by_tier_then_location() -> None:
    report = build_report(
        [
            _finding("b.py", 3, Severity.LOW),
            _finding("a.py", 9, Severity.TOOLING_ERROR),
            _finding("b.py", 1, Severity.CRITICAL),
            _finding("a.py", 7, Severity.HIGH),
            _finding("a.py", 2, Severity.HIGH, "z-rule"),
            _finding("a.py", 2, Severity.HIGH, "a-rule"),
        ]
    )

    assert [(f.severity, f.path, f.line, f.rule_id) for f in report.findings] == [
        (Severity.CRITICAL, "b.py", 1, "rule"),
        (Severity.HIGH, "a.py", 2, "a-rule"),
        (Severity.HIGH, "a.py", 2, "z-rule"),
        (Severity.HIGH, "a.py", 7, "rule"),
        (Severity.LOW, "b.py", 3, "rule"),
        (Severity.TOOLING_ERROR, "a.py", 9, "rule"),
    ]


def test_counts_cover_every_tier_and_sum_to_total() -> None:
    report = build_report(
        [_finding("a.py", 1, Severity.MEDIUM), _finding("a.py", 2, Severity.MEDIUM)]
    )

    assert set(report.counts) == set(RENDER_ORDER)
    assert report.counts[Severity.MEDIUM] == 2
    assert report.counts[Severity.CRITICAL] == 0
    assert sum(report.counts.values()) == report.total == 2


def test_empty_report_is_clean() -> None:
    report = build_report([], baseline="main")
    assert report.is_clean
    assert report.total == 0
    assert report.baseline == "main"


def test_validate_report_rejects_mismatched_counts() -> None:
    good = build_report([_finding("a.py", 1, Severity.HIGH)])
    counts = dict(good.counts)
    counts[Severity.HIGH] = 0
    counts[Severity.LOW] = 1
    broken = Report(findings=good.findings, counts=counts)

    with pytest.raises(RenderError, match="does not match"):
        validate_report(broken)


def test_validate_report_rejects_wrong_total() -> None:
    good = build_report([_finding("a.py", 1, Severity.HIGH)])
    counts = dict(good.counts)
    counts[Severity.HIGH] = 5
    with pytest.raises(RenderError, match="sum to 5"):
        validate_report(Report(findings=good.findings, counts=counts))


def test_report_counts_are_read_only() -> None:
    counts = {tier: 0 for tier in RENDER_ORDER}
    counts[Severity.HIGH] = 1
    report = Report(findings=[_finding("a.py", 1, Severity.HIGH)], counts=counts)
    counts[Severity.HIGH] = 7

    assert report.counts[Severity.HIGH] == 1
    assert isinstance(report.findings, tuple)
    with pytest.raises(TypeError):
        report.counts[Severity.HIGH] = 3  # type: ignore[index]
    validate_report(report)


def test_blocking_respects_threshold_and_ignores_tooling_errors() -> None:
    report = build_report(
        [
            _finding("a.py", 1, Severity.HIGH),
            _finding("a.py", 2, Severity.MEDIUM),
            _finding("a.py", 3, Severity.TOOLING_ERROR),
        ]
    )

    assert [f.line for f in report.blocking(Severity.HIGH)] == [1]
    assert [f.line for f in report.blocking(Severity.LOW)] == [1, 2]
    assert report.blocking(None) == []
    assert build_report([_finding("a.py", 3, Severity.TOOLING_ERROR)]).blocking(
        Severity.LOW
    ) == []


def test_parse_threshold() -> None:
    assert parse_threshold(None) is Severity.HIGH
    assert parse_threshold("Critical") is Severity.CRITICAL
    assert parse_threshold("none") is None
    with pytest.raises(ValueError):
        parse_threshold("tooling-error")
    with pytest.raises(ValueError):
        parse_threshold("severe")


def test_severity_labels_and_titles() -> None:
    assert Severity.parse("tooling_error") is Severity.TOOLING_ERROR
    assert Severity.TOOLING_ERROR.label == "tooling-error"
    assert Severity.HIGH.title == "High"
    assert Severity.CRITICAL > Severity.HIGH > Severity.MEDIUM > Severity.LOW
