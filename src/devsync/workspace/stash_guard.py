from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from devsync.config.settings import SyncConfig
from devsync.engine.errors import DirtyTreeFailure, GitCommandFailure, StashRestoreConflict
from devsync.workspace import git_ops

logger = logging.getLogger(__name__)

STASH_LABEL_PREFIX = "devsync"


@dataclass(frozen=True)
class StashHandle:
    """A stash this run created and still owes a restore for."""

    label: str
    sha: str
    branch: str


def stash_label(now: datetime | None = None) -> str:
    stamp = (now or datetime.now().astimezone()).isoformat(timespec="seconds")
    return f"{STASH_LABEL_PREFIX}: {stamp}"


def guard_working_tree(config: SyncConfig, cwd: Path) -> StashHandle | None:
    """Make sure no uncommitted change is at risk.

    Returns ``None`` for a clean tree. A dirty tree is either refused or, with
    auto-stash enabled, stashed (untracked files included) and returned as a
    :class:`StashHandle` for :func:`restore_stash` to pop at the end of the run.
    """
    try:
        dirty = git_ops.status(cwd=cwd)
    except git_ops.GitError as e:
        raise GitCommandFailure.from_git_error("Checking the working tree", e) from e
    if not dirty:
        return None

    if not config.auto_stash:
        raise DirtyTreeFailure(
            "Working tree not clean.",
            remedy="Commit/stash first, or re-run with AUTO_STASH=1",
        )

    branch = git_ops.current_branch(cwd=cwd)
    label = stash_label()
    try:
        sha = git_ops.stash_push(label, cwd=cwd)
    except git_ops.GitError as e:
        raise GitCommandFailure.from_git_error("Stashing local changes", e) from e
    logger.info("Stashed local changes as %s (%s)", label, sha[:8])
    return StashHandle(label=label, sha=sha, branch=branch)


def restore_stash(handle: StashHandle | None, *, cwd: Path) -> bool:
    """Pop the stash recorded in ``handle``. Returns False when nothing was owed."""
    if handle is None:
        return False

    entries = git_ops.stash_list(cwd=cwd)
    if not entries or entries[0] != handle.sha:
        if handle.sha in entries:
            remedy = f"git stash pop stash@{{{entries.index(handle.sha)}}}"
        else:
            remedy = "git stash list"
        raise StashRestoreConflict(
            f"Stash '{handle.label}' is no longer the most recent stash entry.",
            remedy=remedy,
            applied=False,
        )

    try:
        git_ops.stash_pop(cwd=cwd)
    except git_ops.GitError as e:
        logger.warning("git stash pop failed: %s", e.stderr)
        raise StashRestoreConflict(
            "Stash pop had conflicts. Resolve manually.",
            remedy="resolve the conflicts, then run: git stash drop",
        ) from e
    return True
