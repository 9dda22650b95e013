"""Services package for AI Session Tools."""

from .git_log import GitLog, summarize_commits
from .log_checker import CheckResult, check_log_need, format_log_prompt, show_log_prompt
from .log_file import LogLockError, log_lock, read_log, write_log_atomic
from .session_counter import IncrementResult, build_auto_entry, increment_session
from .timestamp_parser import TimestampMatch, TimestampSource, extract_timestamp, parse_datetime
