"""Read-only checks that must pass before the sync touches anything."""

from __future__ import annotations

import logging
from pathlib import Path

from devsync.config.settings import SyncConfig
from devsync.engine.errors import PreconditionFailure
from devsync.workspace import git_ops

logger = logging.getLogger(__name__)


def require_git_repo(cwd: Path) -> None:
    if not git_ops.is_git_repo(cwd):
        raise PreconditionFailure("Not inside a git repo.", remedy="cd into your clone and re-run")


def ensure_no_rebase_in_progress(cwd: Path) -> None:
    if git_ops.rebase_in_progress(cwd=cwd):
        raise PreconditionFailure(
            "A rebase is already in progress.",
            remedy="git rebase --continue (or git rebase --abort)",
        )


def ensure_remote_exists(name: str, *, cwd: Path) -> str:
    try:
        url = git_ops.remote_url(name, cwd=cwd)
    except git_ops.GitError:
        raise PreconditionFailure(f"Remote '{name}' not found.", remedy="git remote -v") from None
    logger.debug("Remote '%s' resolves to %s", name, url)
    return url


def ensure_branch_exists_local(name: str, *, cwd: Path) -> None:
    if not git_ops.branch_exists(name, cwd=cwd):
        raise PreconditionFailure(f"Local branch '{name}' not found.", remedy="git branch --list")


def check_preconditions(config: SyncConfig, cwd: Path) -> str:
    """Verify the repo is not mid-rebase and both remotes and branches exist.

    Returns the currently checked-out branch (``""`` when detached).
    """
    require_git_repo(cwd)
    ensure_no_rebase_in_progress(cwd)
    ensure_remote_exists(config.upstream_remote, cwd=cwd)
    ensure_remote_exists(config.origin_remote, cwd=cwd)
    ensure_branch_exists_local(config.main_branch, cwd=cwd)
    ensure_branch_exists_local(config.dev_branch, cwd=cwd)
    return git_ops.current_branch(cwd=cwd)
