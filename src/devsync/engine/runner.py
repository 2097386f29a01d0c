from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Protocol

from devsync.config.settings import SyncConfig
from devsync.engine import steps
from devsync.engine.errors import GitCommandFailure, StashRestoreConflict, SyncError
from devsync.engine.report import SyncSummary, build_summary
from devsync.workspace import git_ops, preflight, stash_guard
from devsync.workspace.stash_guard import StashHandle

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    START = "START"
    PRECONDITIONS_OK = "PRECONDITIONS_OK"
    GUARDED = "GUARDED"
    FETCHED = "FETCHED"
    MAIN_SYNCED = "MAIN_SYNCED"
    DEV_REBASED = "DEV_REBASED"
    PUSHED = "PUSHED"
    RESTORED = "RESTORED"
    DONE = "DONE"
    FAILED = "FAILED"


# What the run was doing when it failed, keyed by the last state reached
_NEXT_ACTION = {
    RunState.START: "Checking preconditions",
    RunState.PRECONDITIONS_OK: "Checking the working tree",
    RunState.GUARDED: "Fetching remotes",
    RunState.FETCHED: "Syncing main",
    RunState.MAIN_SYNCED: "Rebasing dev",
    RunState.DEV_REBASED: "Pushing",
    RunState.PUSHED: "Restoring stashed changes",
    RunState.RESTORED: "Building the summary",
}


class EventEmitter(Protocol):
    def emit(self, event_type: str, **data: Any) -> None: ...


@dataclass
class SyncResult:
    state: RunState
    summary: SyncSummary | None = None
    stash: StashHandle | None = None
    stash_restored: bool = False
    history: list[RunState] = field(default_factory=list)


class SyncRunner:
    """Runs the fixed sync pipeline against one repository.

    Steps run strictly in order and the first :class:`SyncError` ends the run;
    a stray git failure is reported as :class:`GitCommandFailure`.
    Nothing already done is rolled back. A stash taken by the guard step is
    carried as a :class:`StashHandle` to the restore step.
    """

    def __init__(self, config: SyncConfig, repo_path: Path, event_emitter: EventEmitter) -> None:
        self._config = config
        self._repo_path = repo_path
        self._emitter = event_emitter

    def run(self) -> SyncResult:
        result = SyncResult(state=RunState.START, history=[RunState.START])
        try:
            try:
                self._execute(result)
            except git_ops.GitError as e:
                raise GitCommandFailure.from_git_error(_NEXT_ACTION[result.state], e) from e
        except SyncError as e:
            e.state = result.state
            result.history.append(RunState.FAILED)
            logger.info("Sync failed after %s: %s", result.state.value, e.message)
            self._emitter.emit(
                "SyncFailed",
                error=e.message,
                error_type=type(e).__name__,
                remedy=e.remedy or "",
                state=result.state.value,
                stash_label=result.stash.label if self._stash_owed(result, e) else "",
            )
            raise
        return result

    @staticmethod
    def _stash_owed(result: SyncResult, error: SyncError) -> bool:
        # A stash whose pop was attempted has already been applied to the tree.
        if result.stash is None or result.stash_restored:
            return False
        return not (isinstance(error, StashRestoreConflict) and error.applied)

    def _advance(self, result: SyncResult, state: RunState, step: str, message: str = "") -> None:
        result.state = state
        result.history.append(state)
        self._emitter.emit("StepCompleted", step=step, message=message, state=state.value)

    def _execute(self, result: SyncResult) -> None:
        config = self._config
        cwd = self._repo_path

        current = preflight.check_preconditions(config, cwd)
        self._emitter.emit("SyncStarted", repo_path=str(cwd), current_branch=current)
        self._advance(result, RunState.PRECONDITIONS_OK, "preconditions")

        result.stash = stash_guard.guard_working_tree(config, cwd)
        if result.stash is not None:
            self._emitter.emit(
                "StashCreated",
                label=result.stash.label,
                sha=result.stash.sha,
                branch=result.stash.branch,
            )
        self._advance(result, RunState.GUARDED, "guard")

        self._emitter.emit("StepStarted", step="fetch", description="Fetching remotes...")
        steps.fetch_remotes(config, cwd)
        self._advance(result, RunState.FETCHED, "fetch", "Fetch complete.")

        self._emitter.emit(
            "StepStarted",
            step="sync_main",
            description=f"Resetting '{config.main_branch}' to '{config.upstream_main}'...",
        )
        main_sha = steps.sync_main(config, cwd)
        logger.info("'%s' is now %s", config.main_branch, main_sha[:8])
        self._advance(
            result,
            RunState.MAIN_SYNCED,
            "sync_main",
            f"'{config.main_branch}' now matches '{config.upstream_main}'.",
        )

        self._emitter.emit(
            "StepStarted",
            step="rebase_dev",
            description=f"Rebasing '{config.dev_branch}' onto '{config.main_branch}'...",
        )
        steps.rebase_dev(config, cwd)
        self._advance(result, RunState.DEV_REBASED, "rebase_dev", "Rebase successful.")

        self._emitter.emit(
            "StepStarted",
            step="push",
            description=(
                f"Pushing '{config.main_branch}' and '{config.dev_branch}' "
                f"(with --force-with-lease) to '{config.origin_remote}'..."
            ),
        )
        steps.push_branches(config, cwd)
        self._advance(result, RunState.PUSHED, "push", "Push complete.")

        if result.stash is not None:
            self._emitter.emit("StepStarted", step="restore", description="Restoring stashed changes...")
        if stash_guard.restore_stash(result.stash, cwd=cwd):
            result.stash_restored = True
            self._emitter.emit("StashRestored", label=result.stash.label)
        self._advance(result, RunState.RESTORED, "restore")

        result.summary = build_summary(config, cwd)
        result.state = RunState.DONE
        result.history.append(RunState.DONE)
        self._emitter.emit("SyncCompleted", **result.summary.model_dump())
