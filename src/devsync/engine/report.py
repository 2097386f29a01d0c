from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from devsync.config.settings import SyncConfig
from devsync.workspace import git_ops

RECENT_COMMIT_COUNT = 10


class SyncSummary(BaseModel):
    main_branch: str
    main_sha: str
    dev_branch: str
    dev_sha: str
    tracking: str
    recent_commits: list[str] = Field(default_factory=list)


def build_summary(config: SyncConfig, cwd: Path) -> SyncSummary:
    """Collect short ids for main and dev plus the latest commits on dev."""
    output = git_ops.log(RECENT_COMMIT_COUNT, ref=config.dev_branch, fmt="%h %s", cwd=cwd)
    return SyncSummary(
        main_branch=config.main_branch,
        main_sha=git_ops.short_sha(config.main_branch, cwd=cwd),
        dev_branch=config.dev_branch,
        dev_sha=git_ops.short_sha(config.dev_branch, cwd=cwd),
        tracking=config.upstream_main,
        recent_commits=output.splitlines() if output else [],
    )
