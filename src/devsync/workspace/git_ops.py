from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class GitError(Exception):
    def __init__(self, command: list[str], returncode: int, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(f"git command failed ({returncode}): {' '.join(command)}\n{stderr}")


def run_git(*args: str, cwd: Path) -> str:
    cmd = ["git", *args]
    logger.debug("Running %s in %s", " ".join(cmd), cwd)
    result = subprocess.run(
        cmd,
        cwd=cwd,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        raise GitError(cmd, result.returncode, result.stderr.strip())
    return result.stdout.strip()


def is_git_repo(path: Path) -> bool:
    try:
        return run_git("rev-parse", "--is-inside-work-tree", cwd=path) == "true"
    except (GitError, FileNotFoundError, NotADirectoryError):
        return False


def current_branch(*, cwd: Path) -> str:
    """Name of the checked-out branch, or ``""`` when HEAD is detached."""
    return run_git("branch", "--show-current", cwd=cwd)


def rev_parse(ref: str, *, cwd: Path) -> str:
    return run_git("rev-parse", "--verify", ref, cwd=cwd)


def short_sha(ref: str, *, cwd: Path) -> str:
    return run_git("rev-parse", "--short", ref, cwd=cwd)


def status(*, cwd: Path) -> str:
    return run_git("status", "--porcelain", cwd=cwd)


def log(n: int, *, ref: str = "HEAD", fmt: str = "%H %s", cwd: Path) -> str:
    return run_git("--no-pager", "log", f"-n{n}", f"--format={fmt}", ref, "--", cwd=cwd)


def remote_url(name: str, *, cwd: Path) -> str:
    return run_git("remote", "get-url", name, cwd=cwd)


def branch_exists(name: str, *, cwd: Path) -> bool:
    try:
        run_git("show-ref", "--verify", "--quiet", f"refs/heads/{name}", cwd=cwd)
        return True
    except GitError:
        return False


def fetch(remote: str, *, prune: bool = False, cwd: Path) -> None:
    args = ["fetch"]
    if prune:
        args.append("--prune")
    args.append(remote)
    run_git(*args, cwd=cwd)


def checkout(ref: str, *, cwd: Path) -> None:
    run_git("checkout", ref, cwd=cwd)


def reset_hard(ref: str, *, cwd: Path) -> None:
    run_git("reset", "--hard", ref, cwd=cwd)


def rebase(onto: str, *, cwd: Path) -> None:
    run_git("rebase", onto, cwd=cwd)


def rebase_in_progress(*, cwd: Path) -> bool:
    for marker in ("rebase-merge", "rebase-apply"):
        path = Path(run_git("rev-parse", "--git-path", marker, cwd=cwd))
        if not path.is_absolute():
            path = cwd / path
        if path.exists():
            return True
    return False


def push(
    remote: str,
    branch: str,
    *,
    force_with_lease: bool = False,
    cwd: Path,
) -> None:
    args = ["push"]
    if force_with_lease:
        args.append("--force-with-lease")
    args.extend([remote, branch])
    run_git(*args, cwd=cwd)


def stash_push(message: str, *, include_untracked: bool = True, cwd: Path) -> str:
    """Stash local changes and return the commit id of the new entry."""
    args = ["stash", "push"]
    if include_untracked:
        args.append("--include-untracked")
    args.extend(["-m", message])
    run_git(*args, cwd=cwd)
    return rev_parse("stash@{0}", cwd=cwd)


def stash_pop(*, cwd: Path) -> None:
    run_git("stash", "pop", cwd=cwd)


def stash_list(*, cwd: Path) -> list[str]:
    output = run_git("stash", "list", "--format=%H", cwd=cwd)
    return output.splitlines() if output else []
