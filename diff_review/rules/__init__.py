"""Rule registry: which checklist rules apply to which files."""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable
from dataclasses import dataclass, replace
from pathlib import PurePosixPath

from diff_review.rules import go, hygiene, infra, javascript, python, secrets, shell, sql
from diff_review.rules.base import Finding, Rule
from diff_review.severity import Severity

__all__ = [
    "BASE_RULE_SET",
    "DEFAULT_RULE_SETS",
    "Finding",
    "Rule",
    "RuleInfo",
    "RuleRegistry",
    "RuleSet",
    "build_registry",
    "default_registry",
    "list_rule_info",
]

_DOCKERFILES = ("Dockerfile", "Dockerfile.*", "*.dockerfile", "Containerfile")


@dataclass(frozen=True, slots=True)
class RuleSet:
    """A named checklist selected by file-name globs; no globs means every file."""

    name: str
    patterns: tuple[str, ...]
    rules: tuple[Rule, ...]

    def matches(self, path: str) -> bool:
        if not self.patterns:
            return True
        name = PurePosixPath(path).name.lower()
        return any(fnmatch.fnmatchcase(name, pattern.lower()) for pattern in self.patterns)


@dataclass(frozen=True, slots=True)
class RuleInfo:
    """Rule metadata for listing."""

    rule_id: str
    description: str
    severity: Severity
    category: str
    rule_set: str
    enabled: bool


BASE_RULE_SET = RuleSet(name="base", patterns=(), rules=(*secrets.RULES, *hygiene.RULES))
DEFAULT_RULE_SETS: tuple[RuleSet, ...] = (
    RuleSet(name="python", patterns=("*.py", "*.pyi"), rules=python.RULES),
    RuleSet(
        name="javascript",
        patterns=("*.js", "*.jsx", "*.mjs", "*.cjs", "*.ts", "*.tsx"),
        rules=javascript.RULES,
    ),
    RuleSet(name="go", patterns=("*.go",), rules=go.RULES),
    RuleSet(name="sql", patterns=("*.sql",), rules=sql.RULES),
    RuleSet(name="shell", patterns=("*.sh", "*.bash", "*.zsh", *_DOCKERFILES), rules=shell.RULES),
    RuleSet(
        name="infra",
        patterns=(
            *_DOCKERFILES,
            "*.yml",
            "*.yaml",
            "*.toml",
            "*.ini",
            "*.cfg",
            "*.json",
            "*.properties",
            ".env",
            ".env.*",
        ),
        rules=infra.RULES,
    ),
)


class RuleRegistry:
    """An immutable snapshot of the base rule set plus file-specific rule sets."""

    def __init__(self, base: RuleSet, rule_sets: tuple[RuleSet, ...] = ()) -> None:
        self._base = base
        self._rule_sets = rule_sets

    @property
    def base_rules(self) -> tuple[Rule, ...]:
        return self._base.rules

    @property
    def rule_sets(self) -> tuple[RuleSet, ...]:
        return (self._base, *self._rule_sets)

    @property
    def rules(self) -> tuple[Rule, ...]:
        """Every rule in the snapshot, in registration order."""
        return _dedupe(rule for rule_set in self.rule_sets for rule in rule_set.rules)

    def rules_for(self, path: str) -> tuple[Rule, ...]:
        """Return the ordered rules for a path: base set first, then matching sets."""
        selected: list[Rule] = list(self._base.rules)
        for rule_set in self._rule_sets:
            if rule_set.matches(path):
                selected.extend(rule_set.rules)
        return tuple(rule for rule in _dedupe(selected) if rule.applies_to(path))

    def get(self, rule_id: str) -> Rule | None:
        for rule in self.rules:
            if rule.rule_id == rule_id:
                return rule
        return None

    def rule_set_name(self, rule_id: str) -> str | None:
        for rule_set in self.rule_sets:
            if any(rule.rule_id == rule_id for rule in rule_set.rules):
                return rule_set.name
        return None


def default_registry() -> RuleRegistry:
    """Return the registry with every built-in rule enabled."""
    return RuleRegistry(BASE_RULE_SET, DEFAULT_RULE_SETS)


def build_registry(
    *,
    enabled_rule_ids: list[str] | None = None,
    disabled_rule_ids: list[str] | None = None,
    severity_overrides: dict[str, str] | None = None,
    base: RuleSet = BASE_RULE_SET,
    rule_sets: tuple[RuleSet, ...] = DEFAULT_RULE_SETS,
) -> RuleRegistry:
    """Build a registry snapshot applying enable/disable filters and severity overrides."""
    known = {rule.rule_id for rule_set in (base, *rule_sets) for rule in rule_set.rules}
    overrides = severity_overrides or {}
    requested_ids = set(enabled_rule_ids or []) | set(disabled_rule_ids or []) | set(overrides)

    unknown = [rule_id for rule_id in requested_ids if rule_id not in known]
    if unknown:
        joined = ", ".join(sorted(unknown))
        raise ValueError(f"Unknown rule ids: {joined}")

    tiers: dict[str, Severity] = {}
    for rule_id, raw in overrides.items():
        tier = Severity.parse(raw)
        if tier is Severity.TOOLING_ERROR:
            raise ValueError(f"Severity override for '{rule_id}' must be a review tier")
        tiers[rule_id] = tier

    enabled_set = set(enabled_rule_ids) if enabled_rule_ids is not None else None
    disabled_set = set(disabled_rule_ids or [])

    def select(rule_set: RuleSet) -> RuleSet:
        kept: list[Rule] = []
        for rule in rule_set.rules:
            if enabled_set is not None and rule.rule_id not in enabled_set:
                continue
            if rule.rule_id in disabled_set:
                continue
            tier = tiers.get(rule.rule_id)
            kept.append(rule if tier is None else replace(rule, severity=tier))
        return replace(rule_set, rules=tuple(kept))

    return RuleRegistry(select(base), tuple(select(rule_set) for rule_set in rule_sets))


def list_rule_info(active: RuleRegistry | None = None) -> list[RuleInfo]:
    """Return metadata for every built-in rule, marking those active in ``active``."""
    catalog = default_registry()
    current = active or catalog
    info: list[RuleInfo] = []
    for rule_set in catalog.rule_sets:
        for rule in rule_set.rules:
            live = current.get(rule.rule_id)
            info.append(
                RuleInfo(
                    rule_id=rule.rule_id,
                    description=rule.description,
                    severity=(live or rule).severity,
                    category=rule.category,
                    rule_set=rule_set.name,
                    enabled=live is not None,
                )
            )
    return info


def _dedupe(rules: Iterable[Rule]) -> tuple[Rule, ...]:
    seen: set[str] = set()
    output: list[Rule] = []
    for rule in rules:
        if rule.rule_id in seen:
            continue
        seen.add(rule.rule_id)
        output.append(rule)
    return tuple(output)
