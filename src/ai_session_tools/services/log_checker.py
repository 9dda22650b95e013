"""Elapsed-time checker for the progress log.

Reads the progress log, finds the timestamp of the most recent entry,
and prints a reminder once enough time has passed without a new entry.

The check is best-effort: any failure (missing file, unreadable file,
bad date) means "no reminder". Scripts that run the check as a side
effect must never fail because of it.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import click

from .path_constants import ENTRY_MARKER, LOG_FILENAME
from .timestamp_parser import TimestampSource, extract_timestamp

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD_MINUTES = 15
NO_ENTRIES_REASON = "No previous log entries found"
RULE_WIDTH = 70

CHECKLIST = (
    "Current implementation plan step (reference specific step):",
    "Files created/modified since last log (list actual filenames):",
    "Commands executed with their results (copy/paste outputs):",
    "Specific errors encountered (exact error messages):",
    "Next concrete step in the plan:",
    "Git commits made (commit hashes and messages):",
)


@dataclass
class CheckResult:
    """Outcome of one elapsed-time check."""

    needed: bool
    reason: str | None = None
    minutes_elapsed: float | None = None
    last_entry_at: datetime | None = None
    source: TimestampSource | None = None
    error: str | None = None


def split_entries(content: str) -> list[str]:
    """Split log content into entry bodies, dropping the preamble."""
    return content.split(ENTRY_MARKER)[1:]


def round_minutes(minutes: float) -> int:
    """Round half away from zero, so 19.5 minutes reads as 20."""
    if minutes < 0:
        return -int(-minutes + 0.5)
    return int(minutes + 0.5)


def format_log_prompt(reason: str, log_filename: str = LOG_FILENAME) -> str:
    """
    Build the reminder block shown when a log entry is due.

    Args:
        reason: Why the reminder fired
        log_filename: Name of the log the operator should edit

    Returns:
        Multi-line reminder text
    """
    rule = "=" * RULE_WIDTH
    lines = [
        "",
        rule,
        "PROGRESS LOG ENTRY NEEDED",
        f"Reason: {reason}",
        "",
        "Please provide evidence-based progress update:",
    ]
    lines.extend(f"- {item}" for item in CHECKLIST)
    lines.append("")
    lines.append(f"Add entry manually to {log_filename} using evidence-based format")
    lines.append(rule)
    lines.append("")
    return "\n".join(lines)


def show_log_prompt(
    reason: str,
    log_filename: str = LOG_FILENAME,
    echo: Callable[[str], None] = click.echo,
) -> None:
    """Print the reminder block to stdout."""
    echo(format_log_prompt(reason, log_filename))


def _evaluate(
    log_path: Path,
    now: datetime,
    threshold_minutes: float,
) -> CheckResult:
    content = log_path.read_text(encoding="utf-8")
    entries = split_entries(content)

    if not entries:
        return CheckResult(needed=True, reason=NO_ENTRIES_REASON)

    # File order: the first entry is the most recent one
    match = extract_timestamp(entries[0])
    last_entry_at = match.value
    source = match.source

    if last_entry_at is None:
        mtime = log_path.stat().st_mtime
        last_entry_at = datetime.fromtimestamp(mtime, tz=timezone.utc)
        logger.debug(
            f"No usable timestamp in latest entry ({match.source.value}), "
            f"using file mtime"
        )
        source = TimestampSource.MTIME

    minutes = (now - last_entry_at).total_seconds() / 60
    needed = minutes >= threshold_minutes
    reason = f"{round_minutes(minutes)} minutes since last log entry" if needed else None

    return CheckResult(
        needed=needed,
        reason=reason,
        minutes_elapsed=minutes,
        last_entry_at=last_entry_at,
        source=source,
    )


def check_log_need(
    log_path: str | Path,
    now: datetime | None = None,
    threshold_minutes: float = DEFAULT_THRESHOLD_MINUTES,
    echo: Callable[[str], None] = click.echo,
) -> CheckResult:
    """
    Check whether a progress log entry is due and print a reminder if so.

    Never raises. Any failure is reported through CheckResult.error and
    produces no output.

    Args:
        log_path: Path to the progress log
        now: Current time (defaults to wall-clock time)
        threshold_minutes: Minutes without an entry before reminding
        echo: Output function for the reminder block

    Returns:
        CheckResult describing the decision
    """
    log_path = Path(log_path)
    if now is None:
        now = datetime.now(timezone.utc)
    elif now.tzinfo is None:
        now = now.astimezone()

    try:
        result = _evaluate(log_path, now, threshold_minutes)
    except Exception as e:
        logger.debug(f"Progress log check skipped for {log_path}: {e}")
        return CheckResult(needed=False, error=str(e))

    if result.needed:
        try:
            show_log_prompt(result.reason, log_path.name, echo=echo)
        except Exception as e:
            logger.debug(f"Could not show progress log reminder: {e}")
            result.error = str(e)

    return result
