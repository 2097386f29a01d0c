from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from devsync.engine.runner import RunState
    from devsync.workspace.git_ops import GitError


def first_line(text: str) -> str:
    for line in text.splitlines():
        stripped = line.strip()
        if stripped:
            return stripped
    return ""


class SyncError(Exception):
    """Terminal failure of a sync run.

    ``remedy`` is a command or instruction the operator can follow to repair
    the repository by hand. ``state`` is filled in by the runner with the last
    state the run reached before failing.
    """

    def __init__(self, message: str, *, remedy: str | None = None) -> None:
        self.message = message
        self.remedy = remedy
        self.state: RunState | None = None
        super().__init__(message)


class PreconditionFailure(SyncError):
    pass


class DirtyTreeFailure(SyncError):
    pass


class RebaseConflict(SyncError):
    pass


class PushRejection(SyncError):
    def __init__(self, message: str, *, branch: str, remedy: str | None = None) -> None:
        self.branch = branch
        super().__init__(message, remedy=remedy)


class StashRestoreConflict(SyncError):
    """The run's stash could not be popped cleanly.

    ``applied`` is False when the pop was never attempted, so the stash entry
    is still intact and can be popped by hand.
    """

    def __init__(self, message: str, *, remedy: str | None = None, applied: bool = True) -> None:
        self.applied = applied
        super().__init__(message, remedy=remedy)


class GitCommandFailure(SyncError):
    @classmethod
    def from_git_error(cls, action: str, error: GitError) -> GitCommandFailure:
        detail = first_line(error.stderr)
        message = f"{action} failed: {detail}" if detail else f"{action} failed."
        return cls(message, remedy=" ".join(error.command))
