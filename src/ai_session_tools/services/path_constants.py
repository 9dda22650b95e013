"""Centralized constants for the progress log file format.

Single source of truth for the file name and the markers used by
log_checker, session_counter, and the timestamp parser.
"""

import re

# Progress log and config filenames (relative to the project root)
LOG_FILENAME = "PROJECT-PROGRESS-LOG.md"
CONFIG_FILENAME = "config.yaml"
LOCK_SUFFIX = ".lock"

# Hand-written entries start with this marker
ENTRY_MARKER = "## Entry #"

# Session counter header
COUNTER_RE = re.compile(r"Session Counter: (\d+)")
COUNTER_TEMPLATE = "Session Counter: {value}"
DEFAULT_COUNTER_HEADER = "Session Counter: 0\n\n"

# Timestamp patterns in priority order
DATE_FIELD_RE = re.compile(r"Date: (.+)")
ISO_TIMESTAMP_RE = re.compile(r"(\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2})")
SIMPLE_DATETIME_RE = re.compile(r"(\d{4}-\d{2}-\d{2} \d{2}:\d{2})")

# Date-only ISO values are read as UTC midnight
ISO_DATE_ONLY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

NO_COMMITS_PLACEHOLDER = "[No recent commits]"
