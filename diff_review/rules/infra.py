"""Container and configuration-file checklist rules."""

from __future__ import annotations

import re

from diff_review.rules.base import Rule, added
from diff_review.severity import Severity

RULES: tuple[Rule, ...] = (
    Rule(
        rule_id="docker-latest-tag",
        description="Base image without a pinned tag.",
        severity=Severity.LOW,
        message="Base image is unpinned: `{snippet}`",
        detector=added(
            r"^\s*FROM\s+(?:--platform=\S+\s+)?(?!scratch\b)[^\s:@]+(?::latest)?"
            r"(?:\s+AS\s+\S+)?\s*$",
            flags=re.IGNORECASE,
        ),
        category="reproducibility",
        suggestion="Pin the image to a version tag or digest.",
        paths=("Dockerfile", "Dockerfile.*", "*.dockerfile", "Containerfile"),
    ),
    Rule(
        rule_id="docker-root-user",
        description="Container runs as root.",
        severity=Severity.MEDIUM,
        message="Container explicitly runs as root.",
        detector=added(r"^\s*USER\s+(?:root|0)\s*$", flags=re.IGNORECASE),
        category="security",
        suggestion="Create and switch to an unprivileged user.",
        paths=("Dockerfile", "Dockerfile.*", "*.dockerfile", "Containerfile"),
    ),
    Rule(
        rule_id="config-debug-enabled",
        description="Debug mode switched on in configuration.",
        severity=Severity.MEDIUM,
        message="Debug mode enabled: `{snippet}`",
        detector=added(
            r"^\s*[\"']?debug[\"']?\s*[:=]\s*[\"']?(?:true|1|yes|on)\b",
            flags=re.IGNORECASE,
        ),
        category="configuration",
        suggestion="Keep debug off in committed configuration.",
    ),
)
