from pathlib import Path

import pytest
from pydantic import ValidationError

from devsync.config.settings import ConfigError, SyncConfig, load_config, parse_flag


def test_defaults(tmp_path: Path) -> None:
    config = load_config(start=tmp_path)
    assert config.upstream_remote == "upstream"
    assert config.origin_remote == "origin"
    assert config.main_branch == "main"
    assert config.dev_branch == "sky/dev"
    assert config.auto_stash is False
    assert config.log_level == "WARNING"
    assert config.config_path is None


def test_upstream_main_ref() -> None:
    config = SyncConfig(upstream_remote="up", main_branch="trunk")
    assert config.upstream_main == "up/trunk"


def test_loads_from_cwd(tmp_path: Path) -> None:
    config_file = tmp_path / "devsync.yaml"
    config_file.write_text("dev_branch: me/dev\nauto_stash: true\n")
    config = load_config(start=tmp_path)
    assert config.dev_branch == "me/dev"
    assert config.auto_stash is True
    assert config.config_path == config_file


def test_walks_parent_directories(tmp_path: Path) -> None:
    (tmp_path / "devsync.yaml").write_text("origin_remote: fork\n")
    child = tmp_path / "a" / "b" / "c"
    child.mkdir(parents=True)
    config = load_config(start=child)
    assert config.origin_remote == "fork"


def test_empty_file_uses_defaults(tmp_path: Path) -> None:
    (tmp_path / "devsync.yaml").write_text("")
    config = load_config(start=tmp_path)
    assert config.main_branch == "main"


@pytest.mark.parametrize("content", ["- main_branch\n- dev_branch\n", "just a string\n", "42\n"])
def test_non_mapping_file_rejected(tmp_path: Path, content: str) -> None:
    (tmp_path / "devsync.yaml").write_text(content)
    with pytest.raises(ConfigError, match="must contain a mapping"):
        load_config(start=tmp_path)


def test_unparseable_file_rejected(tmp_path: Path) -> None:
    (tmp_path / "devsync.yaml").write_text("main_branch: [trunk\n")
    with pytest.raises(ConfigError, match="Could not parse"):
        load_config(start=tmp_path)


def test_env_var_overrides_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "devsync.yaml").write_text("main_branch: trunk\n")
    monkeypatch.setenv("MAIN_BRANCH", "master")
    config = load_config(start=tmp_path)
    assert config.main_branch == "master"


def test_env_vars_are_independent(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("UPSTREAM_REMOTE", "source")
    monkeypatch.setenv("DEV_BRANCH", "feature/x")
    config = load_config(start=tmp_path)
    assert config.upstream_remote == "source"
    assert config.dev_branch == "feature/x"
    assert config.origin_remote == "origin"
    assert config.main_branch == "main"


def test_empty_env_var_is_ignored(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ORIGIN_REMOTE", "")
    config = load_config(start=tmp_path)
    assert config.origin_remote == "origin"


@pytest.mark.parametrize("value", ["1", "true", "YES", "on"])
def test_auto_stash_enabled(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("AUTO_STASH", value)
    assert load_config(start=tmp_path).auto_stash is True


@pytest.mark.parametrize("value", ["0", "false", "no", "maybe"])
def test_auto_stash_disabled(tmp_path: Path, monkeypatch: pytest.MonkeyPatch, value: str) -> None:
    monkeypatch.setenv("AUTO_STASH", value)
    assert load_config(start=tmp_path).auto_stash is False


def test_env_turns_off_yaml_auto_stash(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / "devsync.yaml").write_text("auto_stash: true\n")
    monkeypatch.setenv("AUTO_STASH", "0")
    assert load_config(start=tmp_path).auto_stash is False


def test_parse_flag_strips_whitespace() -> None:
    assert parse_flag(" 1 \n") is True


def test_log_level_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DEVSYNC_LOG_LEVEL", "debug")
    assert load_config(start=tmp_path).log_level == "DEBUG"


def test_unknown_log_level_rejected() -> None:
    with pytest.raises(ValidationError):
        SyncConfig(log_level="chatty")


def test_blank_branch_rejected() -> None:
    with pytest.raises(ValidationError):
        SyncConfig(dev_branch="   ")


def test_names_are_stripped() -> None:
    assert SyncConfig(main_branch=" trunk ").main_branch == "trunk"
