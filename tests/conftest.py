from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pytest

from devsync.config.settings import ENV_OVERRIDES
from devsync.workspace.git_ops import rev_parse, run_git

DEV_BRANCH = "sky/dev"


@dataclass
class SyncEnv:
    """A fork setup: ``seed`` publishes to ``upstream``; ``work`` is the clone of ``origin``."""

    seed: Path
    upstream: Path
    origin: Path
    work: Path

    def advance_upstream(self, name: str = "upstream.txt", content: str = "from upstream\n") -> str:
        sha = _commit_file(self.seed, name, content, f"Upstream change to {name}")
        run_git("push", "upstream", "main", cwd=self.seed)
        return sha

    def commit(self, repo: Path, name: str, content: str, message: str) -> str:
        return _commit_file(repo, name, content, message)

    def remote_sha(self, remote: Path, branch: str) -> str:
        return rev_parse(f"refs/heads/{branch}", cwd=remote)


def configure_identity(repo: Path) -> None:
    run_git("config", "user.email", "test@test.com", cwd=repo)
    run_git("config", "user.name", "Test", cwd=repo)
    run_git("config", "commit.gpgsign", "false", cwd=repo)


def _commit_file(repo: Path, name: str, content: str, message: str) -> str:
    (repo / name).write_text(content)
    run_git("add", name, cwd=repo)
    run_git("commit", "-m", message, cwd=repo)
    return rev_parse("HEAD", cwd=repo)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_OVERRIDES:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def commit_file():
    """Write, stage and commit one file; returns the new commit id."""
    return _commit_file


@pytest.fixture()
def git_repo(tmp_path: Path) -> Path:
    """Create a temporary git repo with an initial commit on ``main``."""
    repo = tmp_path / "repo"
    repo.mkdir()
    run_git("init", cwd=repo)
    configure_identity(repo)
    _commit_file(repo, "README.md", "# Hello\n", "Initial commit")
    run_git("branch", "-M", "main", cwd=repo)
    return repo


@pytest.fixture()
def sync_env(tmp_path: Path) -> SyncEnv:
    seed = tmp_path / "seed"
    seed.mkdir()
    run_git("init", cwd=seed)
    configure_identity(seed)
    _commit_file(seed, "README.md", "# Hello\n", "Initial commit")
    run_git("branch", "-M", "main", cwd=seed)

    upstream = tmp_path / "upstream.git"
    origin = tmp_path / "origin.git"
    run_git("clone", "--bare", str(seed), str(upstream), cwd=tmp_path)
    run_git("clone", "--bare", str(seed), str(origin), cwd=tmp_path)
    run_git("remote", "add", "upstream", str(upstream), cwd=seed)

    work = tmp_path / "work"
    run_git("clone", str(origin), str(work), cwd=tmp_path)
    configure_identity(work)
    run_git("remote", "add", "upstream", str(upstream), cwd=work)
    run_git("fetch", "upstream", cwd=work)

    run_git("checkout", "-b", DEV_BRANCH, cwd=work)
    _commit_file(work, "dev.txt", "dev work\n", "Dev change")
    run_git("push", "origin", DEV_BRANCH, cwd=work)
    run_git("checkout", "main", cwd=work)

    return SyncEnv(seed=seed, upstream=upstream, origin=origin, work=work)
