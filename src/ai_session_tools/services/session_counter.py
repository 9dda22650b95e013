"""Session counter stored in the progress log header.

Each run bumps ``Session Counter: <n>`` at the top of the progress log.
When the counter reaches the reset count, a placeholder entry with the
most recent commits is appended and the counter goes back to 0.

The whole read-modify-write happens under log_lock and ends in a single
atomic write, so the reset header and the appended entry land together.
Unlike the elapsed-time check, a log that cannot be read is an error
here and propagates to the caller.
"""

import contextlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import click

from .git_log import GitLog
from .log_file import log_lock, read_log, write_log_atomic
from .path_constants import COUNTER_RE, COUNTER_TEMPLATE, DEFAULT_COUNTER_HEADER

logger = logging.getLogger(__name__)

DEFAULT_RESET_COUNT = 5
DEFAULT_COMMIT_COUNT = 3

AUTO_ENTRY_TEMPLATE = """

# Log Entry (#{entry_id})
- Date: {date}
- Goal: Automated session summary (review conversation for details)
- Actions: Incremented counter; Recent commits: {commits}
- Key Decisions: [Add if needed]
- Files Modified: [List if known]
- Status: In Progress
- Next Steps: Continue session tasks
"""


@dataclass
class IncrementResult:
    """Outcome of one counter run."""

    counter: int
    previous: int
    entry_added: bool
    header_inserted: bool
    entry: str | None = None


def read_counter(content: str) -> int | None:
    """Return the session counter value, or None when the header is absent."""
    match = COUNTER_RE.search(content)
    if not match:
        return None
    return int(match.group(1))


def ensure_counter_header(content: str) -> tuple[str, bool]:
    """
    Make sure the content carries a session counter header.

    Returns:
        Tuple of (content, inserted)
    """
    if COUNTER_RE.search(content):
        return content, False
    return DEFAULT_COUNTER_HEADER + content, True


def set_counter(content: str, value: int) -> str:
    """Rewrite the first session counter header in place."""
    return COUNTER_RE.sub(COUNTER_TEMPLATE.format(value=value), content, count=1)


def format_utc_timestamp(now: datetime) -> str:
    """ISO-8601 UTC with milliseconds and a Z suffix."""
    stamp = now.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return stamp.replace("+00:00", "Z")


def build_auto_entry(now: datetime, commits_summary: str) -> str:
    """
    Build the placeholder entry appended every reset_count sessions.

    Args:
        now: Entry time
        commits_summary: One-line summary of recent commits

    Returns:
        Entry text, starting with a blank-line separator
    """
    return AUTO_ENTRY_TEMPLATE.format(
        entry_id=int(now.timestamp() * 1000),
        date=format_utc_timestamp(now),
        commits=commits_summary,
    )


def increment_session(
    log_path: str | Path,
    project_root: str | Path | None = None,
    reset_count: int = DEFAULT_RESET_COUNT,
    commit_count: int = DEFAULT_COMMIT_COUNT,
    now: datetime | None = None,
    git_log: GitLog | None = None,
    use_lock: bool = True,
    lock_timeout: float = 10.0,
    echo: Callable[[str], None] = click.echo,
) -> IncrementResult:
    """
    Bump the session counter, appending an auto entry at the reset count.

    Args:
        log_path: Path to the progress log
        project_root: Directory to query git in (defaults to the log's directory)
        reset_count: Counter value that triggers an auto entry and reset
        commit_count: Number of commits listed in the auto entry
        now: Current time (defaults to wall-clock time)
        git_log: GitLog used for the commit summary
        use_lock: Hold log_lock around the read-modify-write
        lock_timeout: Seconds to wait for the lock
        echo: Output function for status messages

    Returns:
        IncrementResult with the persisted counter value

    Raises:
        OSError: If the log cannot be read or written
        LogLockError: If the lock cannot be acquired
    """
    log_path = Path(log_path)
    if project_root is None:
        project_root = log_path.parent
    if git_log is None:
        git_log = GitLog()
    if now is None:
        now = datetime.now(timezone.utc)

    guard = log_lock(log_path, timeout=lock_timeout) if use_lock else contextlib.nullcontext()

    with guard:
        content = read_log(log_path)
        content, header_inserted = ensure_counter_header(content)
        if header_inserted:
            logger.info(f"Added session counter header to {log_path}")

        previous = read_counter(content)
        counter = previous + 1
        content = set_counter(content, counter)

        if counter >= reset_count:
            summary = git_log.commit_summary(str(project_root), commit_count)
            entry = build_auto_entry(now, summary)
            content = set_counter(content, 0) + entry
            write_log_atomic(log_path, content)
            logger.info(f"Session {counter} reached reset count {reset_count}, entry appended")
            echo("Auto-generated log entry added! Resetting counter.")
            return IncrementResult(
                counter=0,
                previous=previous,
                entry_added=True,
                header_inserted=header_inserted,
                entry=entry,
            )

        write_log_atomic(log_path, content)

    echo(f"Counter incremented to {counter}")
    return IncrementResult(
        counter=counter,
        previous=previous,
        entry_added=False,
        header_inserted=header_inserted,
    )
