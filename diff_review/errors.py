"""Error types raised across the review pipeline."""

from __future__ import annotations


class ReviewError(Exception):
    """Base class for review pipeline failures."""


class BaselineNotFoundError(ReviewError):
    """Raised when a baseline revision does not resolve."""

    def __init__(self, baseline: str, detail: str = "") -> None:
        self.baseline = baseline
        self.detail = detail
        message = f"Baseline '{baseline}' could not be resolved"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class EmptyChangeSetError(ReviewError):
    """Raised when there is nothing to review against the baseline.

    Recoverable: callers usually ask for a wider baseline and try again.
    """

    def __init__(self, baseline: str) -> None:
        self.baseline = baseline
        super().__init__(f"No changes found against baseline '{baseline}'")


class RuleEvaluationFault(ReviewError):
    """A single rule failed on a single hunk."""

    def __init__(self, rule_id: str, cause: BaseException) -> None:
        self.rule_id = rule_id
        self.cause = cause
        super().__init__(f"{cause.__class__.__name__}: {cause}")


class RenderError(ReviewError):
    """Raised when a report violates its own invariants."""
