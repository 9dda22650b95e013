"""``log-check`` command: remind the operator when a progress log entry is due.

Exits 0 in every case; a missing or unreadable log just means no reminder.
"""

import logging
from pathlib import Path

import click

from ..app import create_context, run_log_check

logger = logging.getLogger(__name__)


def check(project_root: str | Path) -> None:
    """Run the check for a project root, swallowing setup failures."""
    try:
        context = create_context(project_root)
    except Exception as e:
        logger.debug(f"Progress log check skipped: {e}")
        return
    run_log_check(context)


@click.command("log-check")
def log_check_command() -> None:
    """Print a reminder when the last progress log entry is 15+ minutes old."""
    check(Path.cwd())


def main() -> None:
    log_check_command()


if __name__ == "__main__":
    main()
