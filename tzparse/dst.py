"""Library for resolving the daylight saving time window of a zone.

The window reported depends on where the active transition sits:

- Inside DST the window looks forward: it starts at the active transition
  and ends at the next transition back to standard time, if the table has one.
- Outside DST the window looks backward: it reports the most recent DST
  period that already ended.

A zone that has not observed DST up to the active transition has no window.
A sequence narrowed to a year may start inside DST; its window then runs from
when that period began to the first return to standard time in the year.
"""

from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass

from .transitions import TransitionRecord, ZoneTransitionSequence
from .util import EARLIEST_INSTANT

__all__ = [
    "DEFAULT_DST_DELTA",
    "DstWindow",
    "dst_window",
    "standard_offset",
]

_LOGGER = logging.getLogger(__name__)

DEFAULT_DST_DELTA = 3600
"""Assumed DST adjustment in seconds when a zone gives no way to measure it."""


@dataclass(frozen=True)
class DstWindow:
    """The most relevant daylight saving time period for an instant."""

    dst_from: datetime.datetime | None = None
    """Start of the DST period."""

    dst_until: datetime.datetime | None = None
    """End of the DST period, absent if the table ends while still in DST."""


def _next_standard(
    records: tuple[TransitionRecord, ...], index: int
) -> TransitionRecord | None:
    """Return the first non-DST transition after the index."""
    for record in records[index + 1 :]:
        if not record.is_dst:
            return record
    return None


def _previous_dst(records: tuple[TransitionRecord, ...], index: int) -> int | None:
    """Return the index of the latest DST transition at or before the index."""
    for i in range(index, -1, -1):
        if records[i].is_dst:
            return i
    return None


def _default_window(sequence: ZoneTransitionSequence) -> DstWindow:
    """Return the window of a default state that is already in DST.

    Only a narrowed sequence starts in DST, and its first standard time
    transition ends that period.
    """
    if not sequence.default_is_dst:
        return DstWindow()
    start = sequence.default_instant
    end = _next_standard(sequence.transitions, -1)
    return DstWindow(
        dst_from=start if start != EARLIEST_INSTANT else None,
        dst_until=end.instant if end else None,
    )


def dst_window(sequence: ZoneTransitionSequence, active_index: int | None) -> DstWindow:
    """Return the DST window around the transition at active_index.

    An active_index of None means the instant precedes every transition.
    """
    if active_index is None:
        return _default_window(sequence)
    records = sequence.transitions
    if records[active_index].is_dst:
        start_index: int | None = active_index
    else:
        start_index = _previous_dst(records, active_index)
    if start_index is None:
        _LOGGER.debug("No DST observed in %s before index %d", sequence.name, active_index)
        return _default_window(sequence)
    end = _next_standard(records, start_index)
    return DstWindow(
        dst_from=records[start_index].instant,
        dst_until=end.instant if end else None,
    )


def standard_offset(sequence: ZoneTransitionSequence, active_index: int | None) -> int:
    """Return the raw (standard time) UTC offset in seconds at active_index.

    This is the most recent standard time offset. When DST has been in effect
    since the start of the sequence, the offset of the next return to
    standard time is used, and only without one is the DST offset reduced by
    DEFAULT_DST_DELTA.
    """
    records = sequence.transitions
    if active_index is not None:
        for record in reversed(records[: active_index + 1]):
            if not record.is_dst:
                return record.utc_offset
    if not sequence.default_is_dst:
        return sequence.default_offset
    start = -1 if active_index is None else active_index
    if (end := _next_standard(records, start)) is not None:
        return end.utc_offset
    active = sequence.default_record if active_index is None else records[active_index]
    return active.utc_offset - DEFAULT_DST_DELTA
