"""Timestamp extraction from free-form progress log entries.

Entries are hand-written Markdown, so there is no single date format.
The parser runs a fallback chain of patterns and reports which one
matched as a tagged result:

1. An explicit ``Date: <value>`` field
2. An ISO-8601 timestamp (``2024-01-01T09:30:00``)
3. A simple datetime (``2024-01-01 09:30``)

The first pattern that matches wins. If its value cannot be parsed the
result carries ``value=None`` and callers fall back to the file's
modification time; later patterns are not consulted.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from .path_constants import (
    DATE_FIELD_RE,
    ISO_DATE_ONLY_RE,
    ISO_TIMESTAMP_RE,
    SIMPLE_DATETIME_RE,
)

logger = logging.getLogger(__name__)


class TimestampSource(str, Enum):
    """Where an entry timestamp came from."""

    DATE_FIELD = "date_field"
    ISO = "iso"
    SIMPLE = "simple"
    MTIME = "mtime"
    NOT_FOUND = "not_found"


# Human-written formats accepted after ISO parsing fails
HUMAN_FORMATS = (
    "%B %d, %Y",
    "%B %d, %Y %H:%M",
    "%B %d, %Y %I:%M %p",
    "%b %d, %Y",
    "%b %d, %Y %H:%M",
    "%d %B %Y",
    "%d %b %Y",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%Y/%m/%d",
    "%Y/%m/%d %H:%M",
    "%a %b %d %Y %H:%M:%S",
)

_PATTERNS = (
    (TimestampSource.DATE_FIELD, DATE_FIELD_RE),
    (TimestampSource.ISO, ISO_TIMESTAMP_RE),
    (TimestampSource.SIMPLE, SIMPLE_DATETIME_RE),
)


@dataclass
class TimestampMatch:
    """Result of searching an entry for a timestamp."""

    source: TimestampSource
    raw: str | None = None
    value: datetime | None = None

    @property
    def found(self) -> bool:
        return self.source != TimestampSource.NOT_FOUND


def _clean(value: str) -> str:
    """Strip whitespace and Markdown emphasis around a field value."""
    return value.strip().strip("*_`").strip()


def parse_datetime(value: str) -> datetime | None:
    """
    Parse a date/time string into a timezone-aware datetime.

    ISO date-only values are UTC midnight; other naive values are taken
    to be local time.

    Args:
        value: Raw date text from a log entry

    Returns:
        Aware datetime, or None if the text is not a recognised date
    """
    text = _clean(value)
    if not text:
        return None

    parsed = None
    iso_text = text[:-1] + "+00:00" if text.endswith("Z") else text
    try:
        parsed = datetime.fromisoformat(iso_text)
    except ValueError:
        for fmt in HUMAN_FORMATS:
            try:
                parsed = datetime.strptime(text, fmt)
                break
            except ValueError:
                continue

    if parsed is None:
        logger.debug(f"Unrecognised date value: {text!r}")
        return None

    if parsed.tzinfo is None:
        if ISO_DATE_ONLY_RE.match(text):
            parsed = parsed.replace(tzinfo=timezone.utc)
        else:
            parsed = parsed.astimezone()
    return parsed


def extract_timestamp(entry_text: str) -> TimestampMatch:
    """
    Find the timestamp of a single log entry.

    Args:
        entry_text: Body of one entry (text after the entry marker)

    Returns:
        TimestampMatch tagged with the pattern that matched
    """
    for source, pattern in _PATTERNS:
        match = pattern.search(entry_text)
        if match:
            raw = _clean(match.group(1))
            return TimestampMatch(source=source, raw=raw, value=parse_datetime(raw))

    return TimestampMatch(source=TimestampSource.NOT_FOUND)
