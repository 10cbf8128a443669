"""Secret detection and scrubbing for report text."""

from __future__ import annotations

import re

REDACTED = "<redacted>"

# key = "literal" assignments with a credential-like name; only the literal is the secret
_ASSIGNMENT = (
    r"""(?i:\b[\w.-]*(?:api[_-]?key|secret|token|passw(?:or)?d|access[_-]?key|private[_-]?key)"""
    r"""[\w.-]*["']?\s*[:=]\s*["'])(?P<value>[^"'\s]{8,})(?=["'])"""
)
_TOKENS = (
    r"\bAKIA[0-9A-Z]{16}\b",
    r"\bgh[pousr]_[A-Za-z0-9]{20,}\b",
    r"\bxox[abprs]-[A-Za-z0-9-]{10,}",
    r"\b[sr]k_live_[A-Za-z0-9]{16,}\b",
    r"Bearer\s+[A-Za-z0-9._~+/=-]{20,}",
)

SECRET_RE = re.compile(_ASSIGNMENT + "|(?P<token>" + "|".join(_TOKENS) + ")")
PLACEHOLDER_RE = re.compile(
    r"(?i)os\.environ|getenv|process\.env|\$\{|<[a-z_-]+>|example|changeme|placeholder"
    r"|dummy|redacted|\*{4,}"
)


def find_secrets(text: str) -> list[re.Match[str]]:
    """Return secret matches in ``text`` whose value is not an obvious placeholder."""
    return [found for found in SECRET_RE.finditer(text) if not _is_placeholder(found)]


def scrub(text: str) -> str:
    """Replace every secret value in ``text`` with ``REDACTED``."""
    if not text:
        return text
    return SECRET_RE.sub(_redact, text)


def _secret_group(found: re.Match[str]) -> str:
    return "value" if found.group("value") is not None else "token"


def _is_placeholder(found: re.Match[str]) -> bool:
    return PLACEHOLDER_RE.search(found.group(_secret_group(found))) is not None


def _redact(found: re.Match[str]) -> str:
    if _is_placeholder(found):
        return found.group(0)
    group = _secret_group(found)
    whole = found.group(0)
    start = found.start(group) - found.start()
    end = found.end(group) - found.start()
    return whole[:start] + REDACTED + whole[end:]
