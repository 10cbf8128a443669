"""Go checklist rules."""

from __future__ import annotations

from diff_review.rules.base import Rule, added
from diff_review.severity import Severity

RULES: tuple[Rule, ...] = (
    Rule(
        rule_id="go-tls-skip-verify",
        description="TLS verification disabled.",
        severity=Severity.HIGH,
        message="TLS verification disabled with `{match}`.",
        detector=added(r"\bInsecureSkipVerify\s*:\s*true\b"),
        category="security",
        suggestion="Keep verification on and configure RootCAs instead.",
    ),
    Rule(
        rule_id="go-panic",
        description="panic in library code.",
        severity=Severity.MEDIUM,
        message="`panic` call added; callers cannot recover from it cleanly.",
        detector=added(r"(?<![\w.])panic\s*\(", ignore=r"^\s*//"),
        category="error-handling",
        suggestion="Return an error instead of panicking.",
    ),
)
