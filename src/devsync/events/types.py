from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, Field


class Event(BaseModel):
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    event_type: str


class SyncStarted(Event):
    event_type: str = "SyncStarted"
    repo_path: str
    current_branch: str = ""


class StepStarted(Event):
    event_type: str = "StepStarted"
    step: str
    description: str = ""


class StepCompleted(Event):
    event_type: str = "StepCompleted"
    step: str
    message: str = ""
    state: str = ""


class StashCreated(Event):
    event_type: str = "StashCreated"
    label: str
    sha: str
    branch: str = ""


class StashRestored(Event):
    event_type: str = "StashRestored"
    label: str


class SyncCompleted(Event):
    event_type: str = "SyncCompleted"
    main_branch: str
    main_sha: str
    dev_branch: str
    dev_sha: str
    tracking: str
    recent_commits: list[str] = Field(default_factory=list)


class SyncFailed(Event):
    event_type: str = "SyncFailed"
    error: str
    error_type: str = ""
    remedy: str = ""
    state: str = ""
    stash_label: str = ""


EVENT_TYPE_MAP: dict[str, type[Event]] = {
    "SyncStarted": SyncStarted,
    "StepStarted": StepStarted,
    "StepCompleted": StepCompleted,
    "StashCreated": StashCreated,
    "StashRestored": StashRestored,
    "SyncCompleted": SyncCompleted,
    "SyncFailed": SyncFailed,
}
