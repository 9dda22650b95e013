"""Runtime bootstrap shared by the command-line tools.

Loads configuration from the project root, configures logging, and
resolves the progress log path before handing off to the services.
"""

import logging
import logging.config
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

import click

from .config import (
    get_log_path,
    get_reminder_config,
    get_session_counter_config,
    get_value,
    load_config,
)
from .services.git_log import GitLog
from .services.log_checker import CheckResult, check_log_need
from .services.path_constants import CONFIG_FILENAME
from .services.session_counter import IncrementResult, increment_session


@dataclass
class ToolContext:
    """Resolved configuration for one tool invocation."""

    config: dict
    project_root: Path
    log_path: Path


def setup_logging(config: dict, project_root: Path | None = None) -> None:
    """Configure logging to stderr and, optionally, a rotating file.

    Stdout is reserved for reminder and counter output.
    """
    log_level = str(get_value(config, "logging", "level", default="WARNING")).upper()
    log_file = get_value(config, "logging", "file", default=None)
    max_bytes = get_value(config, "logging", "max_bytes", default=1_000_000)
    backup_count = get_value(config, "logging", "backup_count", default=3)

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": log_level,
            "formatter": "standard",
            "stream": "ext://sys.stderr",
        },
    }

    if log_file:
        log_path = Path(log_file)
        if not log_path.is_absolute() and project_root is not None:
            log_path = project_root / log_path
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": log_level,
            "formatter": "standard",
            "filename": str(log_path),
            "maxBytes": max_bytes,
            "backupCount": backup_count,
        }

    logging_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
                "datefmt": "%Y-%m-%dT%H:%M:%S%z",
            },
        },
        "handlers": handlers,
        "root": {
            "level": log_level,
            "handlers": list(handlers),
        },
    }

    logging.config.dictConfig(logging_config)


def create_context(project_root: str | Path, configure_logging: bool = True) -> ToolContext:
    """
    Load config for a project and resolve the progress log path.

    Args:
        project_root: Directory holding config.yaml and the progress log
        configure_logging: Install the logging configuration

    Returns:
        ToolContext for the invocation
    """
    project_root = Path(project_root)
    config = load_config(project_root / CONFIG_FILENAME)
    if configure_logging:
        setup_logging(config, project_root)

    log_path = get_log_path(config, project_root)
    logging.getLogger(__name__).debug(f"Progress log: {log_path}")
    return ToolContext(config=config, project_root=project_root, log_path=log_path)


def run_log_check(
    context: ToolContext,
    echo: Callable[[str], None] = click.echo,
) -> CheckResult:
    """Run the elapsed-time check for a tool context."""
    reminder = get_reminder_config(context.config)
    return check_log_need(
        context.log_path,
        threshold_minutes=reminder["threshold_minutes"],
        echo=echo,
    )


def run_log_increment(
    context: ToolContext,
    echo: Callable[[str], None] = click.echo,
) -> IncrementResult:
    """Run the elapsed-time check, then bump the session counter."""
    run_log_check(context, echo=echo)

    counter = get_session_counter_config(context.config)
    return increment_session(
        context.log_path,
        project_root=context.project_root,
        reset_count=counter["reset_count"],
        commit_count=counter["commit_count"],
        git_log=GitLog(timeout=counter["git_timeout"]),
        use_lock=counter["use_lock"],
        lock_timeout=counter["lock_timeout"],
        echo=echo,
    )
