"""Utility methods used by multiple components."""

from __future__ import annotations

import datetime

__all__ = [
    "now_factory",
    "from_timestamp",
    "format_offset",
]

EPOCH = datetime.datetime(1970, 1, 1, tzinfo=datetime.UTC)

EARLIEST_INSTANT = datetime.datetime.min.replace(tzinfo=datetime.UTC)
"""Instant used for records that apply before any recorded transition."""

_MIN_TIMESTAMP = int((EARLIEST_INSTANT - EPOCH).total_seconds())
_MAX_TIMESTAMP = int(
    (datetime.datetime.max.replace(tzinfo=datetime.UTC) - EPOCH).total_seconds()
)


def now_factory() -> datetime.datetime:
    """Factory method for the current time to facilitate mocking."""
    return datetime.datetime.now(tz=datetime.UTC)


def from_timestamp(timestamp: int) -> datetime.datetime | None:
    """Convert seconds since the epoch to a UTC datetime.

    Returns None for timestamps that datetime can't represent, such as the
    -2**59 sentinel some zic versions write as the first transition.
    """
    if not _MIN_TIMESTAMP <= timestamp <= _MAX_TIMESTAMP:
        return None
    return EPOCH + datetime.timedelta(seconds=timestamp)


def format_offset(seconds: int) -> str:
    """Format a UTC offset in seconds as +HH:MM, or +HH:MM:SS when needed."""
    sign = "-" if seconds < 0 else "+"
    hours, remainder = divmod(abs(seconds), 3600)
    minutes, seconds = divmod(remainder, 60)
    if seconds:
        return f"{sign}{hours:02}:{minutes:02}:{seconds:02}"
    return f"{sign}{hours:02}:{minutes:02}"
