from __future__ import annotations

import logging
from pathlib import Path

from devsync.config.settings import SyncConfig
from devsync.engine.errors import GitCommandFailure, PushRejection, RebaseConflict, first_line
from devsync.workspace import git_ops

logger = logging.getLogger(__name__)


def fetch_remotes(config: SyncConfig, cwd: Path) -> None:
    for remote in (config.upstream_remote, config.origin_remote):
        try:
            git_ops.fetch(remote, prune=True, cwd=cwd)
        except git_ops.GitError as e:
            raise GitCommandFailure.from_git_error(f"Fetching '{remote}'", e) from e


def sync_main(config: SyncConfig, cwd: Path) -> str:
    """Make the local main branch an exact mirror of upstream's main.

    Local-only commits on main are discarded. Returns the new main commit id.
    """
    try:
        git_ops.checkout(config.main_branch, cwd=cwd)
    except git_ops.GitError as e:
        raise GitCommandFailure.from_git_error(f"Checking out '{config.main_branch}'", e) from e

    try:
        git_ops.reset_hard(config.upstream_main, cwd=cwd)
    except git_ops.GitError as e:
        action = f"Resetting '{config.main_branch}' to '{config.upstream_main}'"
        raise GitCommandFailure.from_git_error(action, e) from e

    return git_ops.rev_parse(config.main_branch, cwd=cwd)


def rebase_dev(config: SyncConfig, cwd: Path) -> str:
    """Replay the dev branch on top of main. Returns the new dev commit id."""
    try:
        git_ops.checkout(config.dev_branch, cwd=cwd)
    except git_ops.GitError as e:
        raise GitCommandFailure.from_git_error(f"Checking out '{config.dev_branch}'", e) from e

    try:
        git_ops.rebase(config.main_branch, cwd=cwd)
    except git_ops.GitError as e:
        logger.warning("Rebase of '%s' onto '%s' stopped: %s", config.dev_branch, config.main_branch, e.stderr)
        raise RebaseConflict(
            "Rebase failed. Fix conflicts, then continue or abort.",
            remedy="git rebase --continue (or git rebase --abort)",
        ) from e

    return git_ops.rev_parse(config.dev_branch, cwd=cwd)


def push_branches(config: SyncConfig, cwd: Path) -> None:
    """Push main normally and dev with a lease-guarded force push.

    Main mirrors upstream so its push is expected to fast-forward. Dev was
    rewritten by the rebase; ``--force-with-lease`` refuses to overwrite it if
    origin's dev moved since the last fetch.
    """
    origin = config.origin_remote
    try:
        git_ops.push(origin, config.main_branch, cwd=cwd)
    except git_ops.GitError as e:
        raise PushRejection(
            f"Push of '{config.main_branch}' to '{origin}' was rejected: {first_line(e.stderr)}",
            branch=config.main_branch,
            remedy=f"git fetch {origin} && git log {origin}/{config.main_branch}",
        ) from e

    try:
        git_ops.push(origin, config.dev_branch, force_with_lease=True, cwd=cwd)
    except git_ops.GitError as e:
        raise PushRejection(
            f"Push of '{config.dev_branch}' to '{origin}' was rejected "
            f"(remote changed since last fetch): {first_line(e.stderr)}",
            branch=config.dev_branch,
            remedy=f"git fetch {origin} && git log {config.dev_branch}..{origin}/{config.dev_branch}",
        ) from e
