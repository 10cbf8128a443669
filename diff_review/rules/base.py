"""Rule model, detectors and the finding record."""

from __future__ import annotations

import fnmatch
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Protocol

from diff_review.diff_parser import Hunk
from diff_review.redaction import REDACTED, find_secrets, scrub
from diff_review.severity import Severity


@dataclass(frozen=True, slots=True)
class Finding:
    """One reported issue: one rule matched at one location."""

    path: str
    line: int
    severity: Severity
    rule_id: str
    message: str
    snippet: str = ""
    suggestion: str = ""
    category: str = "quality"


@dataclass(frozen=True, slots=True)
class Match:
    """A detector hit inside a hunk."""

    line: int
    text: str
    snippet: str = ""


class Detector(Protocol):
    """Detection predicate over a hunk. Must be pure."""

    def __call__(self, hunk: Hunk) -> list[Match]:
        """Return matches found in the hunk."""


@dataclass(frozen=True, slots=True)
class AddedLinePattern:
    """Matches a regex against each added line, at most once per line."""

    pattern: re.Pattern[str]
    ignore: re.Pattern[str] | None = None

    def __call__(self, hunk: Hunk) -> list[Match]:
        matches: list[Match] = []
        for line in hunk.added_lines:
            if line.new_lineno is None:
                continue
            found = self.pattern.search(line.content)
            if found is None:
                continue
            if self.ignore is not None and self.ignore.search(line.content):
                continue
            matches.append(
                Match(
                    line=line.new_lineno,
                    text=scrub(found.group(0)),
                    snippet=clip_line(line.content),
                )
            )
        return matches


@dataclass(frozen=True, slots=True)
class RemovedLinePattern:
    """Matches a regex against each removed line, reported at the old line number."""

    pattern: re.Pattern[str]

    def __call__(self, hunk: Hunk) -> list[Match]:
        matches: list[Match] = []
        for line in hunk.removed_lines:
            if line.old_lineno is None:
                continue
            found = self.pattern.search(line.content)
            if found is not None:
                matches.append(
                    Match(
                        line=line.old_lineno,
                        text=scrub(found.group(0)),
                        snippet=clip_line(line.content),
                    )
                )
        return matches


@dataclass(frozen=True, slots=True)
class AddedBlockPattern:
    """Matches a multi-line regex against the hunk's added text.

    Reports one match per regex hit, anchored at the added line the hit
    starts on.
    """

    pattern: re.Pattern[str]

    def __call__(self, hunk: Hunk) -> list[Match]:
        added_lines = hunk.added_lines
        text = hunk.text
        matches: list[Match] = []
        for found in self.pattern.finditer(text):
            index = text.count("\n", 0, found.start())
            line = added_lines[index]
            if line.new_lineno is None:
                continue
            matches.append(
                Match(
                    line=line.new_lineno,
                    text=scrub(found.group(0)),
                    snippet=clip_line(line.content),
                )
            )
        return matches


@dataclass(frozen=True, slots=True)
class AddedSecret:
    """Fires once per added line holding a credential that is not a placeholder."""

    def __call__(self, hunk: Hunk) -> list[Match]:
        return [
            Match(line=line.new_lineno, text=REDACTED, snippet=clip_line(line.content))
            for line in hunk.added_lines
            if line.new_lineno is not None and find_secrets(line.content)
        ]


@dataclass(frozen=True, slots=True)
class AddedLineCount:
    """Fires once when a hunk adds more than ``limit`` lines."""

    limit: int

    def __call__(self, hunk: Hunk) -> list[Match]:
        added = len(hunk.added_lines)
        if added <= self.limit:
            return []
        return [Match(line=hunk.anchor_line, text=str(added), snippet=hunk.header)]


@dataclass(frozen=True, slots=True)
class Rule:
    """An immutable checklist rule."""

    rule_id: str
    description: str
    severity: Severity
    message: str
    detector: Detector
    category: str = "quality"
    suggestion: str = ""
    paths: tuple[str, ...] = ()

    def applies_to(self, path: str) -> bool:
        """File-pattern predicate; an empty ``paths`` matches everything."""
        if not self.paths:
            return True
        lowered = path.lower()
        name = PurePosixPath(lowered).name
        return any(
            fnmatch.fnmatchcase(lowered, pattern.lower())
            or fnmatch.fnmatchcase(name, pattern.lower())
            for pattern in self.paths
        )

    def detect(self, hunk: Hunk) -> list[Match]:
        return self.detector(hunk)

    def render_message(self, *, path: str, match: Match) -> str:
        return self.message.format(
            path=path,
            line=match.line,
            match=match.text,
            snippet=match.snippet,
        )


def added(
    pattern: str,
    *,
    flags: int = 0,
    ignore: str | None = None,
) -> AddedLinePattern:
    """Shorthand for an added-line regex detector."""
    return AddedLinePattern(
        pattern=re.compile(pattern, flags),
        ignore=re.compile(ignore, flags) if ignore is not None else None,
    )


def removed(pattern: str, *, flags: int = 0) -> RemovedLinePattern:
    """Shorthand for a removed-line regex detector."""
    return RemovedLinePattern(pattern=re.compile(pattern, flags))


def block(pattern: str, *, flags: int = 0) -> AddedBlockPattern:
    """Shorthand for a detector spanning the hunk's added lines."""
    return AddedBlockPattern(pattern=re.compile(pattern, flags))


def clip_line(content: str, max_len: int = 80) -> str:
    """Strip, scrub secrets from and truncate a source line for display."""
    stripped = scrub(content.strip())
    if len(stripped) <= max_len:
        return stripped
    return stripped[: max_len - 3] + "..."
