"""``log-increment`` command: count sessions in the progress log header.

Run at the start of every session. Every fifth run appends an
auto-generated entry with the latest commits and resets the counter.
"""

import logging
from pathlib import Path

import click

from ..app import create_context, run_log_increment
from ..services.log_file import LogLockError

logger = logging.getLogger(__name__)


def increment(project_root: str | Path) -> None:
    """Run check + increment for a project root, exiting 1 on log errors."""
    context = create_context(project_root)
    try:
        run_log_increment(context)
    except (OSError, LogLockError) as e:
        logger.error(f"Session counter failed for {context.log_path}: {e}")
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)


@click.command("log-increment")
def log_increment_command() -> None:
    """Increment the session counter stored in the progress log."""
    increment(Path.cwd())


def main() -> None:
    log_increment_command()


if __name__ == "__main__":
    main()
