"""Severity tiers and the rule-to-finding classifier."""

from __future__ import annotations

from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from diff_review.rules.base import Rule


class Severity(IntEnum):
    """Review tiers, ordered for gate comparison.

    ``TOOLING_ERROR`` is a diagnostic tier for rules that failed to run. It
    sorts below ``LOW`` and never gates the exit status.
    """

    TOOLING_ERROR = 0
    LOW = 1
    MEDIUM = 2
    HIGH = 3
    CRITICAL = 4

    @property
    def label(self) -> str:
        if self is Severity.TOOLING_ERROR:
            return "tooling-error"
        return self.name.lower()

    @property
    def title(self) -> str:
        if self is Severity.TOOLING_ERROR:
            return "Tooling errors"
        return self.name.capitalize()

    @classmethod
    def parse(cls, raw: str) -> Severity:
        """Parse a case-insensitive tier name such as ``high`` or ``tooling-error``."""
        value = raw.strip().lower().replace("_", "-")
        for member in cls:
            if member.label == value:
                return member
        choices = ", ".join(member.label for member in RENDER_ORDER)
        raise ValueError(f"Unknown severity '{raw}'. Expected one of: {choices}")


REVIEW_TIERS: tuple[Severity, ...] = (
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
)
RENDER_ORDER: tuple[Severity, ...] = (*REVIEW_TIERS, Severity.TOOLING_ERROR)


def classify(rule: Rule) -> Severity:
    """Return the tier a rule's findings carry.

    Tiers come straight from the rule declaration (after any configured
    override baked into the registry snapshot); there is no escalation.
    """
    return rule.severity


def parse_threshold(raw: str | None) -> Severity | None:
    """Parse a ``fail_on`` value; ``none`` disables gating."""
    if raw is None:
        return Severity.HIGH
    value = raw.strip().lower()
    if value == "none":
        return None
    threshold = Severity.parse(value)
    if threshold is Severity.TOOLING_ERROR:
        raise ValueError("fail_on must be one of: critical, high, medium, low, none")
    return threshold
