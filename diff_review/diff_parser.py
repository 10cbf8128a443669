"""Unified diff parser and the ChangeSet model."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from re import Match, compile
from typing import Literal

HUNK_HEADER_RE = compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))? "
    r"\+(?P<new_start>\d+)(?:,(?P<new_count>\d+))? @@(?P<section>.*)$"
)
DIFF_GIT_RE = compile(
    r'^diff --git (?P<old>"(?:[^"\\]|\\.)*"|\S+) '
    r'(?P<new>"(?:[^"\\]|\\.)*"|\S+)$'
)
DEV_NULL = "/dev/null"
_C_ESCAPES = {"a": "\a", "b": "\b", "t": "\t", "n": "\n", "v": "\v", "f": "\f", "r": "\r"}

ChangeKind = Literal["added", "modified", "deleted", "renamed"]


@dataclass(slots=True)
class Line:
    """A single line within a diff hunk."""

    kind: Literal["context", "add", "delete", "meta"]
    content: str
    old_lineno: int | None
    new_lineno: int | None

    @property
    def lineno(self) -> int | None:
        """Line number on the side of the diff this line belongs to."""
        if self.new_lineno is not None:
            return self.new_lineno
        return self.old_lineno


@dataclass(slots=True)
class Hunk:
    """A diff hunk: old range, new range and its lines."""

    header: str
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    section: str
    lines: list[Line] = field(default_factory=list)

    @property
    def added_lines(self) -> list[Line]:
        return [line for line in self.lines if line.kind == "add"]

    @property
    def removed_lines(self) -> list[Line]:
        return [line for line in self.lines if line.kind == "delete"]

    @property
    def text(self) -> str:
        """Text of the lines this hunk adds."""
        return "\n".join(line.content for line in self.added_lines)

    @property
    def anchor_line(self) -> int:
        """Best line number to report hunk-level findings against."""
        if self.new_count > 0 or self.old_count == 0:
            return self.new_start
        return self.old_start


@dataclass(slots=True)
class HunkHeader:
    """Parsed hunk header values."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    section: str


@dataclass(slots=True)
class FileChange:
    """One changed file within a ChangeSet."""

    old_path: str | None
    new_path: str | None
    hunks: list[Hunk] = field(default_factory=list)
    metadata: list[str] = field(default_factory=list)

    @property
    def path(self) -> str:
        """Canonical path for reporting."""
        if self.new_path and self.new_path != DEV_NULL:
            return self.new_path
        if self.old_path and self.old_path != DEV_NULL:
            return self.old_path
        return "<unknown>"

    @property
    def is_new_file(self) -> bool:
        if any(item.startswith("new file mode") for item in self.metadata):
            return True
        return self.old_path == DEV_NULL and self.new_path not in {None, DEV_NULL}

    @property
    def is_deleted_file(self) -> bool:
        if any(item.startswith("deleted file mode") for item in self.metadata):
            return True
        return self.new_path == DEV_NULL and self.old_path not in {None, DEV_NULL}

    @property
    def is_binary(self) -> bool:
        return any(
            item.startswith("Binary files ") or item == "GIT binary patch"
            for item in self.metadata
        )

    @property
    def kind(self) -> ChangeKind:
        if self.is_new_file:
            return "added"
        if self.is_deleted_file:
            return "deleted"
        if any(item.startswith("rename from ") for item in self.metadata) or (
            self.old_path
            and self.new_path
            and DEV_NULL not in {self.old_path, self.new_path}
            and self.old_path != self.new_path
        ):
            return "renamed"
        return "modified"


@dataclass(slots=True)
class ChangeSet:
    """Ordered file changes collected against one baseline."""

    files: list[FileChange] = field(default_factory=list)
    baseline: str = "working-tree"

    def __len__(self) -> int:
        return len(self.files)

    def __iter__(self) -> Iterator[FileChange]:
        return iter(self.files)

    @property
    def hunk_count(self) -> int:
        return sum(len(change.hunks) for change in self.files)

    def paths(self) -> list[str]:
        return [change.path for change in self.files]


def parse_unified_diff(diff_text: str) -> list[FileChange]:
    """Parse unified diff text into file/hunk/line models."""
    files: list[FileChange] = []
    current_file: FileChange | None = None
    current_hunk: Hunk | None = None
    old_lineno: int | None = None
    new_lineno: int | None = None
    old_remaining = 0
    new_remaining = 0

    def flush_hunk() -> None:
        nonlocal current_hunk
        if current_file is not None and current_hunk is not None:
            current_file.hunks.append(current_hunk)
        current_hunk = None

    def flush_file() -> None:
        nonlocal current_file
        flush_hunk()
        if current_file is not None:
            files.append(current_file)
        current_file = None

    for raw_line in diff_text.splitlines():
        in_hunk_body = current_hunk is not None and (old_remaining > 0 or new_remaining > 0)

        if in_hunk_body and raw_line[:1] in {" ", "+", "-", ""}:
            assert current_hunk is not None
            if raw_line.startswith("+"):
                current_hunk.lines.append(
                    Line(kind="add", content=raw_line[1:], old_lineno=None, new_lineno=new_lineno)
                )
                new_lineno = _inc(new_lineno)
                new_remaining -= 1
            elif raw_line.startswith("-"):
                current_hunk.lines.append(
                    Line(
                        kind="delete",
                        content=raw_line[1:],
                        old_lineno=old_lineno,
                        new_lineno=None,
                    )
                )
                old_lineno = _inc(old_lineno)
                old_remaining -= 1
            else:
                current_hunk.lines.append(
                    Line(
                        kind="context",
                        content=raw_line[1:],
                        old_lineno=old_lineno,
                        new_lineno=new_lineno,
                    )
                )
                old_lineno = _inc(old_lineno)
                new_lineno = _inc(new_lineno)
                old_remaining -= 1
                new_remaining -= 1
            continue

        if raw_line.startswith("\\ ") and current_hunk is not None:
            current_hunk.lines.append(
                Line(kind="meta", content=raw_line[2:], old_lineno=None, new_lineno=None)
            )
            continue

        if raw_line.startswith("diff --git "):
            flush_file()
            current_file = _start_file_from_diff_header(raw_line)
            continue

        if raw_line.startswith("--- "):
            if current_file is None or current_file.hunks or current_hunk is not None:
                flush_file()
                current_file = FileChange(old_path=None, new_path=None)
            current_file.old_path = _parse_path(raw_line[4:])
            current_file.metadata.append(raw_line)
            continue

        if raw_line.startswith("+++ "):
            if current_file is None:
                current_file = FileChange(old_path=None, new_path=None)
            current_file.new_path = _parse_path(raw_line[4:])
            current_file.metadata.append(raw_line)
            continue

        if raw_line.startswith("@@ "):
            if current_file is None:
                current_file = FileChange(old_path=None, new_path=None)
            flush_hunk()
            parsed = _parse_hunk_header(raw_line)
            current_hunk = Hunk(
                header=raw_line,
                old_start=parsed.old_start,
                old_count=parsed.old_count,
                new_start=parsed.new_start,
                new_count=parsed.new_count,
                section=parsed.section,
            )
            old_lineno = current_hunk.old_start
            new_lineno = current_hunk.new_start
            old_remaining = current_hunk.old_count
            new_remaining = current_hunk.new_count
            continue

        if current_file is not None and current_hunk is None:
            current_file.metadata.append(raw_line)
            _apply_rename_metadata(current_file, raw_line)

    flush_file()
    return files


def parse_changeset(diff_text: str, *, baseline: str = "diff") -> ChangeSet:
    """Parse unified diff text into a ChangeSet labelled with its baseline."""
    return ChangeSet(files=parse_unified_diff(diff_text), baseline=baseline)


def _start_file_from_diff_header(line: str) -> FileChange:
    match = DIFF_GIT_RE.match(line)
    if match is not None:
        old_path: str | None = _strip_ab_prefix(_unquote_path(match.group("old")))
        new_path: str | None = _strip_ab_prefix(_unquote_path(match.group("new")))
    else:
        parts = line.split(maxsplit=3)
        old_path = _strip_ab_prefix(parts[2]) if len(parts) > 2 else None
        new_path = _strip_ab_prefix(parts[3]) if len(parts) > 3 else None
    file_change = FileChange(old_path=old_path, new_path=new_path)
    file_change.metadata.append(line)
    return file_change


def _apply_rename_metadata(file_change: FileChange, line: str) -> None:
    if line.startswith("rename from "):
        file_change.old_path = _unquote_path(line[len("rename from ") :])
    elif line.startswith("rename to "):
        file_change.new_path = _unquote_path(line[len("rename to ") :])


def _parse_path(value: str) -> str:
    token = value.strip()
    if not token.startswith('"'):
        token = token.split("\t", 1)[0]
    return _strip_ab_prefix(_unquote_path(token))


def _unquote_path(token: str) -> str:
    """Decode a path git wrapped in double quotes with C-style escapes."""
    if len(token) < 2 or not (token.startswith('"') and token.endswith('"')):
        return token
    body = token[1:-1]
    raw = bytearray()
    index = 0
    while index < len(body):
        char = body[index]
        if char != "\\" or index + 1 == len(body):
            raw.extend(char.encode("utf-8"))
            index += 1
            continue
        escaped = body[index + 1]
        octal = body[index + 1 : index + 4]
        if len(octal) == 3 and all(digit in "01234567" for digit in octal):
            raw.append(int(octal, 8) & 0xFF)
            index += 4
            continue
        raw.extend(_C_ESCAPES.get(escaped, escaped).encode("utf-8"))
        index += 2
    return raw.decode("utf-8", errors="replace")


def _strip_ab_prefix(path: str) -> str:
    if path.startswith("a/") or path.startswith("b/"):
        return path[2:]
    return path


def _parse_hunk_header(header: str) -> HunkHeader:
    match: Match[str] | None = HUNK_HEADER_RE.match(header)
    if match is None:
        raise ValueError(f"Invalid hunk header: {header}")

    old_count = int(match.group("old_count")) if match.group("old_count") else 1
    new_count = int(match.group("new_count")) if match.group("new_count") else 1
    section = match.group("section").strip()

    return HunkHeader(
        old_start=int(match.group("old_start")),
        old_count=old_count,
        new_start=int(match.group("new_start")),
        new_count=new_count,
        section=section,
    )


def _inc(value: int | None) -> int | None:
    if value is None:
        return None
    return value + 1
