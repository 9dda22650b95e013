"""Progress log file access: reads, atomic writes, and a scoped file lock.

The session counter does a read-modify-write on the shared log. Two
helpers keep that sequence safe:

- write_log_atomic(path, content) -- temp file then rename, so readers
  never see a half-written log
- log_lock(path, timeout) -- exclusive flock on a sidecar ``.lock`` file,
  held for the whole read-modify-write, raises on timeout
"""

import fcntl
import logging
import os
import tempfile
import threading
import time
from contextlib import contextmanager
from pathlib import Path

from .path_constants import LOCK_SUFFIX

logger = logging.getLogger(__name__)

# Thread-local storage for reentrancy detection
_thread_local = threading.local()

# Seconds between non-blocking lock attempts
LOCK_POLL_INTERVAL = 0.05


class LogLockError(Exception):
    """Raised when the progress log lock cannot be acquired."""
    pass


def _get_held_locks() -> set:
    """Get the set of lock paths currently held by this thread."""
    if not hasattr(_thread_local, "held_locks"):
        _thread_local.held_locks = set()
    return _thread_local.held_locks


def get_lock_path(log_path: str | Path) -> Path:
    """Sidecar lock file that sits next to the log."""
    log_path = Path(log_path)
    return log_path.with_name(log_path.name + LOCK_SUFFIX)


def read_log(log_path: str | Path) -> str:
    """
    Read the progress log.

    Args:
        log_path: Path to the log file

    Returns:
        File content

    Raises:
        OSError: If the file is missing or unreadable
    """
    return Path(log_path).read_text(encoding="utf-8")


def write_log_atomic(log_path: str | Path, content: str) -> None:
    """
    Replace the progress log content atomically.

    Args:
        log_path: Path to the log file
        content: New file content
    """
    # Follow symlinks so the real log is replaced, not the link
    path = Path(log_path).resolve()
    fd, temp_path = tempfile.mkstemp(
        suffix=".md",
        prefix=".progress_log_",
        dir=path.parent,
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        # mkstemp creates 0600 files; keep the log's existing mode
        if path.exists():
            os.chmod(temp_path, path.stat().st_mode & 0o777)
        os.replace(temp_path, path)
        logger.debug(f"Wrote progress log {path}")
    except Exception:
        if os.path.exists(temp_path):
            os.unlink(temp_path)
        raise


@contextmanager
def log_lock(log_path: str | Path, timeout: float = 10.0):
    """Hold an exclusive lock on the progress log for the duration of the block.

    Uses flock on ``<log>.lock`` so the log itself can be replaced by
    write_log_atomic while the lock is held. The lock file stays in
    place after release so waiters keep locking the same inode.

    Args:
        log_path: Path to the log file being protected
        timeout: Maximum seconds to wait for the lock

    Raises:
        LogLockError: If the lock cannot be acquired within timeout,
            or if a reentrant acquisition is attempted.
    """
    lock_path = get_lock_path(Path(log_path).resolve())

    held = _get_held_locks()
    if lock_path in held:
        raise LogLockError(
            f"Reentrant progress log lock detected: {lock_path}. This would deadlock."
        )

    try:
        fd = os.open(lock_path, os.O_RDWR | os.O_CREAT, 0o644)
    except OSError as e:
        raise LogLockError(f"Cannot open lock file {lock_path}: {e}") from e

    try:
        deadline = time.monotonic() + timeout
        while True:
            try:
                fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
                break
            except BlockingIOError:
                if time.monotonic() >= deadline:
                    raise LogLockError(
                        f"Failed to acquire progress log lock {lock_path} "
                        f"within {timeout}s"
                    )
                time.sleep(LOCK_POLL_INTERVAL)

        held.add(lock_path)
        try:
            yield
        finally:
            held.discard(lock_path)
            try:
                fcntl.flock(fd, fcntl.LOCK_UN)
            except OSError as e:
                logger.warning(f"Progress log unlock failed (non-fatal): {e}")
    finally:
        os.close(fd)
