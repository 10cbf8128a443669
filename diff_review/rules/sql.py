"""SQL migration checklist rules."""

from __future__ import annotations

import re

from diff_review.rules.base import Rule, added, block
from diff_review.severity import Severity

RULES: tuple[Rule, ...] = (
    Rule(
        rule_id="sql-destructive-ddl",
        description="Destructive DDL statement.",
        severity=Severity.CRITICAL,
        message="Destructive statement `{match}` can lose data.",
        detector=added(
            r"\b(?:DROP\s+(?:TABLE|DATABASE|SCHEMA|COLUMN)|TRUNCATE(?:\s+TABLE)?)\b",
            flags=re.IGNORECASE,
            ignore=r"^\s*--",
        ),
        category="data",
        suggestion="Confirm a backup and a rollback path exist for this migration.",
    ),
    Rule(
        rule_id="sql-unbounded-delete",
        description="DELETE/UPDATE without a WHERE clause.",
        severity=Severity.HIGH,
        message="Statement without WHERE touches every row: `{snippet}`",
        detector=block(
            r"\bDELETE\s+FROM\s+[\w.\"`]+\s*;"
            r"|\bUPDATE\s+[\w.\"`]+\s+SET\s+(?:(?!\bWHERE\b)[^;])*;",
            flags=re.IGNORECASE,
        ),
        category="data",
        suggestion="Add a WHERE clause or document why the whole table is affected.",
    ),
)
