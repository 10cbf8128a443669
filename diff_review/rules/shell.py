"""Shell script checklist rules."""

from __future__ import annotations

from diff_review.rules.base import Rule, added
from diff_review.severity import Severity

_COMMENT = r"^\s*#"

RULES: tuple[Rule, ...] = (
    Rule(
        rule_id="shell-pipe-to-shell",
        description="Remote script piped into a shell.",
        severity=Severity.HIGH,
        message="Remote content piped straight into a shell: `{snippet}`",
        detector=added(r"\b(?:curl|wget)\b[^|#]*\|\s*(?:sudo\s+)?(?:ba|z)?sh\b", ignore=_COMMENT),
        category="security",
        suggestion="Download, verify a checksum, then execute.",
    ),
    Rule(
        rule_id="shell-recursive-force-remove",
        description="rm -rf usage.",
        severity=Severity.MEDIUM,
        message="Recursive force delete added: `{snippet}`",
        detector=added(r"\brm\s+-[a-zA-Z]*(?:rf|fr)[a-zA-Z]*\b", ignore=_COMMENT),
        category="safety",
        suggestion="Guard the target path (set -u, explicit checks) before deleting.",
    ),
    Rule(
        rule_id="shell-world-writable",
        description="World-writable permissions.",
        severity=Severity.MEDIUM,
        message="World-writable permissions set with `{match}`.",
        detector=added(r"\bchmod\s+(?:-R\s+)?0?777\b", ignore=_COMMENT),
        category="security",
        suggestion="Grant the narrowest permissions that work.",
    ),
)
