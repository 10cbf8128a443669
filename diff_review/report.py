"""Report model: severity-ordered findings and summary counts."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from diff_review.errors import RenderError
from diff_review.rules.base import Finding
from diff_review.severity import RENDER_ORDER, REVIEW_TIERS, Severity


@dataclass(frozen=True, slots=True)
class Report:
    """Findings from one review invocation, Critical first."""

    findings: tuple[Finding, ...]
    counts: Mapping[Severity, int]
    baseline: str = "working-tree"
    files_reviewed: int = 0
    hunks_reviewed: int = 0
    paths: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "findings", tuple(self.findings))
        object.__setattr__(self, "counts", MappingProxyType(dict(self.counts)))

    @property
    def total(self) -> int:
        return len(self.findings)

    @property
    def is_clean(self) -> bool:
        return not self.findings

    def by_tier(self, tier: Severity) -> list[Finding]:
        return [finding for finding in self.findings if finding.severity is tier]

    def blocking(self, threshold: Severity | None) -> list[Finding]:
        """Review findings at or above ``threshold``; tooling errors never block."""
        if threshold is None:
            return []
        return [
            finding
            for finding in self.findings
            if finding.severity in REVIEW_TIERS and finding.severity >= threshold
        ]


def sort_key(finding: Finding) -> tuple[int, str, int, str, str]:
    return (
        RENDER_ORDER.index(finding.severity),
        finding.path,
        finding.line,
        finding.rule_id,
        finding.message,
    )


def build_report(
    findings: Iterable[Finding],
    *,
    baseline: str = "working-tree",
    files_reviewed: int = 0,
    hunks_reviewed: int = 0,
    paths: Iterable[str] = (),
) -> Report:
    """Order findings deterministically and count them per tier."""
    ordered = tuple(sorted(findings, key=sort_key))
    counts = {tier: 0 for tier in RENDER_ORDER}
    for finding in ordered:
        counts[finding.severity] += 1
    report = Report(
        findings=ordered,
        counts=counts,
        baseline=baseline,
        files_reviewed=files_reviewed,
        hunks_reviewed=hunks_reviewed,
        paths=tuple(paths),
    )
    validate_report(report)
    return report


def validate_report(report: Report) -> None:
    """Raise ``RenderError`` when the report's counts disagree with its findings."""
    if set(report.counts) != set(RENDER_ORDER):
        raise RenderError("report counts do not cover every severity tier")
    if sum(report.counts.values()) != report.total:
        raise RenderError(
            f"report counts sum to {sum(report.counts.values())} "
            f"but the report holds {report.total} findings"
        )
    for tier in RENDER_ORDER:
        if report.counts[tier] != len(report.by_tier(tier)):
            raise RenderError(f"count for tier '{tier.label}' does not match its findings")
