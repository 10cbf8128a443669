"""Credential leak checks applied to every file."""

from __future__ import annotations

from diff_review.rules.base import AddedSecret, Rule, added
from diff_review.severity import Severity

RULES: tuple[Rule, ...] = (
    Rule(
        rule_id="hardcoded-secret",
        description="Credential-like literal added to source.",
        severity=Severity.CRITICAL,
        message="Hardcoded secret-like value added.",
        detector=AddedSecret(),
        category="security",
        suggestion="Load the value from the environment or a secret manager and rotate it.",
    ),
    Rule(
        rule_id="private-key",
        description="PEM private key material added.",
        severity=Severity.CRITICAL,
        message="Private key block added.",
        detector=added(r"-----BEGIN (?:[A-Z0-9]+ )*PRIVATE KEY-----"),
        category="security",
        suggestion="Remove the key from history and issue a new one.",
    ),
)
