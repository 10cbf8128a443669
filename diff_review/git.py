"""Git subprocess helpers."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from subprocess import CalledProcessError, run

logger = logging.getLogger(__name__)


class GitError(RuntimeError):
    """Raised when git command execution fails."""


EMPTY_TREE_HASH = "4b825dc642cb6eb9a060e54bf8d69288fbee4904"
DIFF_ARGS = ("-c", "core.quotePath=false", "diff", "--no-color", "--no-ext-diff", "-M")


def ensure_repository(repo: Path) -> Path:
    """Return the top-level directory of the repository containing ``repo``."""
    if not repo.exists():
        raise GitError(f"Repository path does not exist: {repo}")
    return Path(_run_git(repo, ["rev-parse", "--show-toplevel"]).strip())


def resolve_revision(repo: Path, revision: str) -> str:
    """Resolve a revision to a commit hash."""
    return _run_git(repo, ["rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}"]).strip()


def get_head_revision(repo: Path) -> str | None:
    """Return HEAD revision if present."""
    try:
        return resolve_revision(repo, "HEAD")
    except GitError:
        return None


def get_tree_for_revision(repo: Path, revision: str) -> str:
    """Return tree hash for a revision."""
    return _run_git(repo, ["rev-parse", "--verify", f"{revision}^{{tree}}"]).strip()


def get_merge_base(repo: Path, left: str, right: str) -> str:
    """Return the best common ancestor of two commits."""
    return _run_git(repo, ["merge-base", left, right]).strip()


def get_staged_diff(repo: Path) -> str:
    """Return the diff between HEAD (or the empty tree) and the index."""
    base = get_head_revision(repo) or EMPTY_TREE_HASH
    return _run_git(repo, [*DIFF_ARGS, "--cached", base])


def get_diff_between(repo: Path, base: str, head: str) -> str:
    """Return diff between two revisions."""
    return _run_git(repo, [*DIFF_ARGS, base, head])


def get_diff_between_trees(repo: Path, base_tree: str, head_tree: str) -> str:
    """Return diff between two tree-ish objects."""
    return _run_git(repo, [*DIFF_ARGS, base_tree, head_tree])


def build_worktree_tree(repo: Path) -> str:
    """Snapshot the working tree, untracked files included, as a tree object.

    A throwaway index is used so the user's staging area is left untouched.
    """
    with tempfile.TemporaryDirectory(prefix="diff-review-index-") as temp_dir:
        env = {"GIT_INDEX_FILE": str(Path(temp_dir) / "index")}
        _run_git(repo, ["read-tree", "--empty"], env=env)
        _run_git(repo, ["add", "-A"], env=env)
        tree_hash = _run_git(repo, ["write-tree"], env=env).strip()

    if not tree_hash:
        raise GitError("failed to build working-tree snapshot")
    return tree_hash


def _run_git(repo: Path, args: list[str], env: dict[str, str] | None = None) -> str:
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = os.environ.copy()
        merged_env.update(env)

    logger.debug("git %s (cwd=%s)", " ".join(args), repo)
    try:
        completed = run(
            ["git", *args],
            cwd=repo,
            check=True,
            capture_output=True,
            encoding="utf-8",
            errors="replace",
            env=merged_env,
        )
    except CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        raise GitError(stderr or f"git {' '.join(args)} failed") from exc
    except FileNotFoundError as exc:
        raise GitError(f"git executable not available: {exc}") from exc

    return completed.stdout
