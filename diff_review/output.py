"""Report rendering."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

import click

from diff_review import __version__
from diff_review.report import Report, validate_report
from diff_review.rules.base import Finding
from diff_review.severity import RENDER_ORDER, Severity

logger = logging.getLogger(__name__)

FORMATS = ("human", "markdown", "json")

_TIER_COLORS = {
    Severity.CRITICAL: "red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "blue",
    Severity.TOOLING_ERROR: "magenta",
}


@dataclass(frozen=True, slots=True)
class RenderIssue:
    """A finding that could not be formatted."""

    rule_id: str
    path: str
    line: int
    error: str


@dataclass(slots=True)
class RenderOutcome:
    """Rendered text plus any findings that had to be replaced by placeholders."""

    text: str
    issues: list[RenderIssue] = field(default_factory=list)


def render(report: Report, output_format: str = "human") -> RenderOutcome:
    """Render a report in one of ``FORMATS``.

    Raises ``RenderError`` when the report's counts are inconsistent; a
    finding that fails to format is replaced by a placeholder instead.
    """
    validate_report(report)
    if output_format == "human":
        return _render_text(report, _human_sections)
    if output_format == "markdown":
        return _render_text(report, _markdown_sections)
    if output_format == "json":
        return _render_json(report)
    raise ValueError(f"format must be one of: {', '.join(FORMATS)}")


def render_human(report: Report) -> str:
    """Render a colourised terminal report."""
    return render(report, "human").text


def render_markdown(report: Report) -> str:
    """Render a Markdown checklist report."""
    return render(report, "markdown").text


def render_json(report: Report) -> str:
    """Render stable JSON output for CI and automation."""
    return render(report, "json").text


def build_json_payload(report: Report, issues: list[RenderIssue] | None = None) -> dict[str, Any]:
    """Build the JSON payload for a report."""
    collected = issues if issues is not None else []
    findings: list[dict[str, Any]] = []
    for finding in report.findings:
        serialized = _guarded(finding, _serialize_finding, collected)
        if serialized is not None:
            findings.append(serialized)
    return {
        "summary": {
            "total": report.total,
            "counts": {tier.label: report.counts[tier] for tier in RENDER_ORDER},
        },
        "findings": findings,
        "meta": {
            "generated_at": datetime.now(tz=UTC)
            .replace(microsecond=0)
            .isoformat()
            .replace("+00:00", "Z"),
            "baseline": report.baseline,
            "files_reviewed": report.files_reviewed,
            "hunks_reviewed": report.hunks_reviewed,
            "render_issues": len(collected),
            "version": __version__,
        },
    }


def _render_json(report: Report) -> RenderOutcome:
    issues: list[RenderIssue] = []
    payload = build_json_payload(report, issues)
    return RenderOutcome(text=json.dumps(payload, sort_keys=True), issues=issues)


def _render_text(
    report: Report,
    sections: Callable[[Report, list[RenderIssue]], list[str]],
) -> RenderOutcome:
    issues: list[RenderIssue] = []
    lines = sections(report, issues)
    return RenderOutcome(text="\n".join(lines), issues=issues)


def _human_sections(report: Report, issues: list[RenderIssue]) -> list[str]:
    lines = [
        click.style(
            f"Review against {report.baseline}: {report.total} finding(s) in "
            f"{report.files_reviewed} file(s), {report.hunks_reviewed} hunk(s)",
            bold=True,
        )
    ]
    if report.is_clean:
        lines.append(click.style("No findings.", fg="green"))

    for tier in RENDER_ORDER:
        lines.append(
            click.style(f"{tier.title} ({report.counts[tier]})", fg=_TIER_COLORS[tier], bold=True)
        )
        tier_findings = report.by_tier(tier)
        if not tier_findings:
            lines.append("  none")
            continue
        for finding in tier_findings:
            lines.extend(_guarded(finding, _human_finding, issues) or _placeholder(finding))

    lines.append(_summary_line(report))
    return lines


def _human_finding(finding: Finding) -> list[str]:
    lines = [f"  {finding.path}:{finding.line} [{finding.rule_id}] {finding.message}"]
    if finding.snippet:
        lines.append(f"      > {finding.snippet}")
    if finding.suggestion:
        lines.append(f"      fix: {finding.suggestion}")
    return lines


def _markdown_sections(report: Report, issues: list[RenderIssue]) -> list[str]:
    lines = [
        "# Review findings",
        "",
        f"Baseline: `{report.baseline}` | Files: {report.files_reviewed} | "
        f"Hunks: {report.hunks_reviewed} | Findings: {report.total}",
        "",
    ]
    if report.is_clean:
        lines.extend(["No findings.", ""])

    for tier in RENDER_ORDER:
        lines.append(f"## {tier.title} ({report.counts[tier]})")
        lines.append("")
        tier_findings = report.by_tier(tier)
        if not tier_findings:
            lines.extend(["_None._", ""])
            continue
        for finding in tier_findings:
            lines.extend(_guarded(finding, _markdown_finding, issues) or _placeholder(finding))
        lines.append("")

    lines.append("## Summary")
    lines.append("")
    lines.append("| Tier | Count |")
    lines.append("| --- | --- |")
    for tier in RENDER_ORDER:
        lines.append(f"| {tier.title} | {report.counts[tier]} |")
    lines.append(f"| Total | {report.total} |")
    return lines


def _markdown_finding(finding: Finding) -> list[str]:
    lines = [f"- [ ] `{finding.path}:{finding.line}` **{finding.rule_id}**: {finding.message}"]
    if finding.snippet:
        code = finding.snippet.replace("`", "'")
        lines.append(f"  - Code: `{code}`")
    if finding.suggestion:
        lines.append(f"  - Fix: {finding.suggestion}")
    return lines


def _serialize_finding(finding: Finding) -> dict[str, Any]:
    return {
        "path": finding.path,
        "line": finding.line,
        "severity": finding.severity.label,
        "rule_id": finding.rule_id,
        "message": finding.message,
        "snippet": finding.snippet,
        "suggestion": finding.suggestion,
        "category": finding.category,
    }


def _summary_line(report: Report) -> str:
    parts = [f"{tier.label}={report.counts[tier]}" for tier in RENDER_ORDER]
    parts.append(f"total={report.total}")
    return "Summary: " + " ".join(parts)


def _guarded(
    finding: Finding,
    formatter: Callable[[Finding], Any],
    issues: list[RenderIssue],
) -> Any:
    try:
        return formatter(finding)
    except (AttributeError, TypeError, ValueError, UnicodeError) as exc:
        logger.warning(
            "could not render finding %s at %s:%s: %s",
            finding.rule_id,
            finding.path,
            finding.line,
            exc,
        )
        issues.append(
            RenderIssue(
                rule_id=str(finding.rule_id),
                path=str(finding.path),
                line=finding.line,
                error=f"{exc.__class__.__name__}: {exc}",
            )
        )
        return None


def _placeholder(finding: Finding) -> list[str]:
    return [f"  <unrenderable finding from {finding.rule_id} at {finding.path}:{finding.line}>"]
