"""JavaScript and TypeScript checklist rules."""

from __future__ import annotations

from diff_review.rules.base import Rule, added
from diff_review.severity import Severity

_COMMENT = r"^\s*//"

RULES: tuple[Rule, ...] = (
    Rule(
        rule_id="js-eval",
        description="eval or Function constructor.",
        severity=Severity.HIGH,
        message="Dynamic code execution via `{match}`.",
        detector=added(r"(?<![\w.$])eval\s*\(|\bnew\s+Function\s*\(", ignore=_COMMENT),
        category="security",
        suggestion="Avoid evaluating strings as code.",
    ),
    Rule(
        rule_id="js-inner-html",
        description="Raw HTML injection sink.",
        severity=Severity.HIGH,
        message="Raw HTML sink `{match}` can introduce XSS.",
        detector=added(
            r"\.(?:inner|outer)HTML\s*=(?!=)|dangerouslySetInnerHTML|document\.write\s*\(",
            ignore=_COMMENT,
        ),
        category="security",
        suggestion="Render text with textContent or sanitize the markup first.",
    ),
    Rule(
        rule_id="js-console-log",
        description="console logging left in code.",
        severity=Severity.LOW,
        message="Debug `{match}` call added.",
        detector=added(r"\bconsole\.(?:log|debug|trace)\b", ignore=_COMMENT),
        category="debugging",
        suggestion="Remove the call or route it through the app logger.",
    ),
    Rule(
        rule_id="js-debugger",
        description="debugger statement.",
        severity=Severity.MEDIUM,
        message="`debugger` statement added.",
        detector=added(r"^\s*debugger\s*;?\s*$"),
        category="debugging",
        suggestion="Remove the statement before merging.",
    ),
    Rule(
        rule_id="ts-any-type",
        description="Explicit any type.",
        severity=Severity.LOW,
        message="Explicit `any` weakens type checking.",
        detector=added(r":\s*any\b|\bas\s+any\b|<any>", ignore=_COMMENT),
        category="maintainability",
        suggestion="Use a concrete type or `unknown` with narrowing.",
        paths=("*.ts", "*.tsx"),
    ),
)
