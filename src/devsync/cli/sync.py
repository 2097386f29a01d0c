from __future__ import annotations

import logging
from pathlib import Path

import typer
from pydantic import ValidationError

from devsync.config.settings import ConfigError, load_config
from devsync.engine.errors import SyncError
from devsync.engine.runner import SyncRunner
from devsync.events.dispatcher import EventDispatcher
from devsync.events.observer import StdoutObserver, fail

logger = logging.getLogger(__name__)


def sync() -> None:
    """Reset main to upstream, rebase dev onto it and push both to origin.

    Configured through UPSTREAM_REMOTE, ORIGIN_REMOTE, MAIN_BRANCH, DEV_BRANCH
    and AUTO_STASH (or a devsync.yaml file).
    """
    repo_path = Path.cwd()

    try:
        config = load_config(start=repo_path)
    except ConfigError as e:
        fail(f"Invalid configuration: {e}")
        raise typer.Exit(code=1)
    except ValidationError as e:
        fail(f"Invalid configuration: {e.error_count()} error(s)")
        for err in e.errors():
            location = ".".join(str(part) for part in err["loc"])
            typer.echo(f"   {location}: {err['msg']}", err=True)
        raise typer.Exit(code=1)

    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")
    if config.config_path is not None:
        logger.info("Loaded configuration from %s", config.config_path)

    dispatcher = EventDispatcher(StdoutObserver())
    runner = SyncRunner(config, repo_path, dispatcher)
    try:
        runner.run()
    except SyncError:
        raise typer.Exit(code=1)
