"""Python checklist rules."""

from __future__ import annotations

from diff_review.rules.base import Rule, added, removed
from diff_review.severity import Severity

_COMMENT = r"^\s*#"
TEST_PATHS = ("tests/*", "test_*.py", "*_test.py", "conftest.py")

RULES: tuple[Rule, ...] = (
    Rule(
        rule_id="python-eval-exec",
        description="Dynamic eval/exec usage.",
        severity=Severity.HIGH,
        message="Dynamic `{match}` call added.",
        detector=added(r"(?<![\w.])(?:eval|exec)\s*\(", ignore=_COMMENT),
        category="security",
        suggestion="Replace eval/exec with explicit parsing or dispatch.",
    ),
    Rule(
        rule_id="python-shell-true",
        description="Subprocess call with shell=True.",
        severity=Severity.HIGH,
        message="Subprocess shell execution enabled.",
        detector=added(r"\bshell\s*=\s*True\b", ignore=_COMMENT),
        category="security",
        suggestion="Pass an argument list and keep shell=False.",
    ),
    Rule(
        rule_id="python-unsafe-deserialization",
        description="pickle/marshal style deserialization.",
        severity=Severity.HIGH,
        message="Unsafe deserialization via `{match}`.",
        detector=added(
            r"\b(?:c?[Pp]ickle|marshal|dill|shelve)\.(?:loads?|open)\s*\(",
            ignore=_COMMENT,
        ),
        category="security",
        suggestion="Never deserialize untrusted input with pickle; prefer JSON.",
    ),
    Rule(
        rule_id="python-unsafe-yaml",
        description="yaml.load without a safe loader.",
        severity=Severity.MEDIUM,
        message="`{match}` used without a safe loader.",
        detector=added(r"\byaml\.(?:unsafe_)?load(?:_all)?\s*\(", ignore=r"SafeLoader|^\s*#"),
        category="security",
        suggestion="Use yaml.safe_load.",
    ),
    Rule(
        rule_id="python-bare-except",
        description="Bare except clause.",
        severity=Severity.MEDIUM,
        message="Bare `except:` swallows every exception, including KeyboardInterrupt.",
        detector=added(r"^\s*except\s*:"),
        category="error-handling",
        suggestion="Catch specific exception types and log context.",
    ),
    Rule(
        rule_id="python-tls-verify-disabled",
        description="TLS certificate verification disabled.",
        severity=Severity.HIGH,
        message="TLS verification disabled with `{match}`.",
        detector=added(r"\bverify\s*=\s*False\b", ignore=_COMMENT),
        category="security",
        suggestion="Keep certificate verification on; configure a CA bundle instead.",
    ),
    Rule(
        rule_id="python-debug-print",
        description="print() call left in code.",
        severity=Severity.LOW,
        message="Debug `print()` added.",
        detector=added(r"^\s*print\s*\("),
        category="debugging",
        suggestion="Use the logging module or remove the call.",
    ),
    Rule(
        rule_id="python-debugger",
        description="Interactive debugger breakpoint.",
        severity=Severity.MEDIUM,
        message="Debugger breakpoint added: `{snippet}`.",
        detector=added(
            r"\b(?:i?pdb|pudb)\.set_trace\s*\(|^\s*breakpoint\s*\(\s*\)",
            ignore=_COMMENT,
        ),
        category="debugging",
        suggestion="Remove the breakpoint before merging.",
    ),
    Rule(
        rule_id="python-removed-assertion",
        description="assert/raise guard removed.",
        severity=Severity.LOW,
        message="Guard `{snippet}` was removed.",
        detector=removed(r"^\s*(?:assert|raise)\b"),
        category="error-handling",
        suggestion="Re-check failure-mode handling and invariants.",
    ),
    Rule(
        rule_id="python-skipped-test",
        description="Test marked as skipped.",
        severity=Severity.LOW,
        message="Test skipped with `{match}`.",
        detector=added(r"@(?:pytest\.mark\.skip|unittest\.skip)\w*"),
        category="testing",
        suggestion="Fix the test or link the issue that tracks re-enabling it.",
        paths=TEST_PATHS,
    ),
)
