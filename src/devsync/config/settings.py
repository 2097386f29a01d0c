from __future__ import annotations

import os
from pathlib import Path

import yaml
from pydantic import BaseModel, field_validator

CONFIG_FILENAME = "devsync.yaml"

_TRUTHY = {"1", "true", "yes", "on"}

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# Environment variable -> SyncConfig field
ENV_OVERRIDES = {
    "UPSTREAM_REMOTE": "upstream_remote",
    "ORIGIN_REMOTE": "origin_remote",
    "MAIN_BRANCH": "main_branch",
    "DEV_BRANCH": "dev_branch",
    "AUTO_STASH": "auto_stash",
    "DEVSYNC_LOG_LEVEL": "log_level",
}


class SyncConfig(BaseModel):
    upstream_remote: str = "upstream"
    origin_remote: str = "origin"
    main_branch: str = "main"
    dev_branch: str = "sky/dev"
    auto_stash: bool = False
    log_level: str = "WARNING"
    config_path: Path | None = None

    @field_validator("upstream_remote", "origin_remote", "main_branch", "dev_branch")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.strip().upper()
        if value not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return value

    @property
    def upstream_main(self) -> str:
        return f"{self.upstream_remote}/{self.main_branch}"


def parse_flag(value: str) -> bool:
    return value.strip().lower() in _TRUTHY


def _find_config_file(start: Path | None = None) -> Path | None:
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            break
        current = parent
    return None


class ConfigError(Exception):
    """The config file exists but cannot be used."""


def load_config(start: Path | None = None) -> SyncConfig:
    config_path = _find_config_file(start)

    raw: dict = {}
    if config_path is not None:
        with open(config_path) as f:
            try:
                loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Could not parse {config_path}: {e}") from e
        if loaded is not None and not isinstance(loaded, dict):
            raise ConfigError(f"{config_path} must contain a mapping of settings, not {type(loaded).__name__}")
        raw = loaded or {}

    for env_name, field_name in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if not value:
            continue
        raw[field_name] = parse_flag(value) if field_name == "auto_stash" else value

    config = SyncConfig.model_validate(raw)
    config.config_path = config_path
    return config
