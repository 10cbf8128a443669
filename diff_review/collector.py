"""Diff collection: baseline resolution and ChangeSet construction."""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path

from diff_review.diff_parser import ChangeSet, FileChange, parse_changeset
from diff_review.errors import BaselineNotFoundError, EmptyChangeSetError
from diff_review.git import (
    EMPTY_TREE_HASH,
    GitError,
    build_worktree_tree,
    ensure_repository,
    get_diff_between,
    get_diff_between_trees,
    get_head_revision,
    get_merge_base,
    get_staged_diff,
    get_tree_for_revision,
    resolve_revision,
)

logger = logging.getLogger(__name__)

WORKING_TREE = "working-tree"
STAGED = "staged"


def collect_changes(
    repo: Path,
    baseline: str = WORKING_TREE,
    *,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
) -> ChangeSet:
    """Collect the ChangeSet between ``baseline`` and the repository state.

    Raises ``BaselineNotFoundError`` when a revision in ``baseline`` does not
    resolve and ``EmptyChangeSetError`` when nothing is left to review.
    """
    root = ensure_repository(repo)
    label = baseline.strip() or WORKING_TREE
    diff_text = _diff_for_baseline(root, label)
    changeset = parse_changeset(diff_text, baseline=label)
    return require_changes(filter_changeset(changeset, include=include, exclude=exclude))


def changeset_from_text(
    diff_text: str,
    *,
    source: str = "diff",
    include: list[str] | None = None,
    exclude: list[str] | None = None,
) -> ChangeSet:
    """Build a ChangeSet from raw unified-diff text."""
    changeset = parse_changeset(diff_text, baseline=source)
    return require_changes(filter_changeset(changeset, include=include, exclude=exclude))


def require_changes(changeset: ChangeSet) -> ChangeSet:
    if not changeset.files:
        raise EmptyChangeSetError(changeset.baseline)
    return changeset


def filter_changeset(
    changeset: ChangeSet,
    *,
    include: list[str] | None = None,
    exclude: list[str] | None = None,
) -> ChangeSet:
    """Drop files that miss every include glob or hit any exclude glob."""
    includes = include or []
    excludes = exclude or []
    kept: list[FileChange] = []
    for change in changeset.files:
        path = change.path
        if includes and not any(fnmatch.fnmatch(path, pattern) for pattern in includes):
            logger.debug("skipping %s: no include pattern matched", path)
            continue
        if excludes and any(fnmatch.fnmatch(path, pattern) for pattern in excludes):
            logger.debug("skipping %s: excluded", path)
            continue
        kept.append(change)
    return ChangeSet(files=kept, baseline=changeset.baseline)


def _diff_for_baseline(repo: Path, baseline: str) -> str:
    if baseline == WORKING_TREE:
        return get_diff_between_trees(repo, _head_tree_or_empty(repo), build_worktree_tree(repo))

    if baseline == STAGED:
        return get_staged_diff(repo)

    if "..." in baseline:
        left, right = _split_range(baseline, "...")
        left_commit = _resolve_or_raise(repo, left, baseline)
        right_commit = _resolve_or_raise(repo, right, baseline)
        try:
            base = get_merge_base(repo, left_commit, right_commit)
        except GitError as exc:
            raise BaselineNotFoundError(baseline, "no merge base") from exc
        logger.debug("merge base for %s is %s", baseline, base)
        return get_diff_between(repo, base, right_commit)

    if ".." in baseline:
        left, right = _split_range(baseline, "..")
        left_commit = _resolve_or_raise(repo, left, baseline)
        right_commit = _resolve_or_raise(repo, right, baseline)
        return get_diff_between(repo, left_commit, right_commit)

    commit = _resolve_or_raise(repo, baseline, baseline)
    base_tree = get_tree_for_revision(repo, commit)
    return get_diff_between_trees(repo, base_tree, build_worktree_tree(repo))


def _split_range(baseline: str, separator: str) -> tuple[str, str]:
    left, _, right = baseline.partition(separator)
    return (left or "HEAD", right or "HEAD")


def _resolve_or_raise(repo: Path, revision: str, baseline: str) -> str:
    try:
        commit = resolve_revision(repo, revision)
    except GitError as exc:
        raise BaselineNotFoundError(baseline, f"unknown revision '{revision}'") from exc
    if not commit:
        raise BaselineNotFoundError(baseline, f"unknown revision '{revision}'")
    logger.debug("resolved %s to %s", revision, commit)
    return commit


def _head_tree_or_empty(repo: Path) -> str:
    head = get_head_revision(repo)
    if head is None:
        logger.debug("repository has no commits; diffing against the empty tree")
        return EMPTY_TREE_HASH
    return get_tree_for_revision(repo, head)
