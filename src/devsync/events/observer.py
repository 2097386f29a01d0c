from __future__ import annotations

from typing import Protocol

import typer

from devsync.events.types import (
    Event,
    StashCreated,
    StashRestored,
    StepCompleted,
    StepStarted,
    SyncCompleted,
    SyncFailed,
    SyncStarted,
)


def info(message: str) -> None:
    typer.echo(f"ℹ️  {message}")


def ok(message: str) -> None:
    typer.echo(f"✅ {message}")


def fail(message: str) -> None:
    typer.echo(f"❌ {message}", err=True)


class EventObserver(Protocol):
    def on_event(self, event: Event) -> None: ...


class StdoutObserver:
    """Human-readable progress on stdout; failures on stderr."""

    def on_event(self, event: Event) -> None:
        if isinstance(event, SyncStarted):
            info(f"Current branch: {event.current_branch or '<detached>'}")
        elif isinstance(event, StepStarted):
            if event.description:
                info(event.description)
        elif isinstance(event, StepCompleted):
            if event.message:
                ok(event.message)
        elif isinstance(event, StashCreated):
            info(f"Working tree not clean, stashed changes as '{event.label}'.")
        elif isinstance(event, StashRestored):
            ok(f"Restored stashed changes ('{event.label}').")
        elif isinstance(event, SyncCompleted):
            self._print_summary(event)
        elif isinstance(event, SyncFailed):
            fail(event.error)
            if event.remedy:
                typer.echo(f"   Try: {event.remedy}", err=True)
            if event.stash_label:
                message = f"   Your local changes are still stashed as '{event.stash_label}'."
                # a restore conflict's remedy already names the entry to pop
                if event.error_type != "StashRestoreConflict":
                    message += " Restore them with: git stash pop"
                typer.echo(message, err=True)

    def _print_summary(self, event: SyncCompleted) -> None:
        typer.echo()
        info("Summary:")
        typer.echo(f"  main: {event.main_sha}  (tracking {event.tracking})")
        typer.echo(f"  dev : {event.dev_sha}")
        typer.echo()
        info(f"Recent commits on {event.dev_branch}:")
        for line in event.recent_commits:
            typer.echo(line)
        ok("Done.")
