"""Transition records for a zone and the queries over them.

A `ZoneTransitionSequence` holds the transitions decoded from a zone file in
ascending order of their instant. Every lookup here relies on that order and
uses a binary search over it, so nothing ever re-sorts the records.

The offset in effect before the first transition is kept on the sequence as
its default state. A sequence narrowed to a year with `for_year` carries the
state that was active when the year started, so a year with no transitions
still answers with the last good offset.
"""

from __future__ import annotations

import bisect
import datetime
import logging
from dataclasses import dataclass

from .util import EARLIEST_INSTANT

__all__ = [
    "TransitionRecord",
    "ZoneTransitionSequence",
    "year_window",
    "filter_by_year",
    "locate",
    "active_at",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransitionRecord:
    """A single change to the local time rules of a zone."""

    instant: datetime.datetime
    """The UTC instant at which the new parameters apply."""

    utc_offset: int
    """The offset from UTC in seconds in effect from the instant onward."""

    is_dst: bool
    """True when the local time from the instant onward is daylight saving time."""

    abbreviation: str
    """The zone abbreviation in effect from the instant onward, e.g. CEST."""


@dataclass(frozen=True)
class ZoneTransitionSequence:
    """The ordered transitions of a single named zone."""

    name: str
    """The zone key, e.g. Europe/Paris."""

    transitions: tuple[TransitionRecord, ...]
    """Transitions sorted ascending by instant."""

    default_offset: int
    """The UTC offset in seconds in effect before the first transition."""

    default_abbreviation: str
    """The abbreviation in effect before the first transition."""

    default_is_dst: bool = False
    """The DST state before the first transition, only set for a narrowed sequence."""

    default_instant: datetime.datetime = EARLIEST_INSTANT
    """When the default state began, only set for a narrowed sequence."""

    @property
    def default_record(self) -> TransitionRecord:
        """Return a record describing the state before the first transition."""
        return TransitionRecord(
            instant=self.default_instant,
            utc_offset=self.default_offset,
            is_dst=self.default_is_dst,
            abbreviation=self.default_abbreviation,
        )

    def for_year(self, year: int) -> ZoneTransitionSequence:
        """Return a sequence narrowed to the transitions within a year.

        The default state of the result is the record active at the start of
        the year, so lookups in a year without transitions still find the
        offset that was in effect.
        """
        (start, _) = year_window(year)
        active = active_at(self, start)
        return ZoneTransitionSequence(
            name=self.name,
            transitions=tuple(filter_by_year(self, year)),
            default_offset=active.utc_offset,
            default_abbreviation=active.abbreviation,
            default_is_dst=active.is_dst,
            default_instant=active.instant,
        )


def year_window(year: int) -> tuple[datetime.datetime, datetime.datetime | None]:
    """Return the half open UTC interval [start, end) covering a year.

    The end is None for the last year datetime can represent.
    """
    if not datetime.MINYEAR <= year <= datetime.MAXYEAR:
        raise ValueError(f"Year out of range: {year}")
    start = datetime.datetime(year, 1, 1, tzinfo=datetime.UTC)
    if year == datetime.MAXYEAR:
        return (start, None)
    return (start, datetime.datetime(year + 1, 1, 1, tzinfo=datetime.UTC))


def _instants(sequence: ZoneTransitionSequence) -> list[datetime.datetime]:
    return [record.instant for record in sequence.transitions]


def filter_by_year(
    sequence: ZoneTransitionSequence, year: int | None
) -> list[TransitionRecord]:
    """Return the transitions whose instant falls within a year.

    All transitions are returned when no year is specified. An empty list
    means the zone had no changes that year.
    """
    if year is None:
        return list(sequence.transitions)
    (start, end) = year_window(year)
    instants = _instants(sequence)
    lo = bisect.bisect_left(instants, start)
    hi = len(instants) if end is None else bisect.bisect_left(instants, end)
    _LOGGER.debug(
        "Found %d transitions for %s in %d", hi - lo, sequence.name, year
    )
    return list(sequence.transitions[lo:hi])


def _check_aware(instant: datetime.datetime) -> None:
    if instant.tzinfo is None or instant.utcoffset() is None:
        raise ValueError(f"Expected a timezone aware datetime: {instant}")


def locate(sequence: ZoneTransitionSequence, instant: datetime.datetime) -> int | None:
    """Return the index of the transition active at an instant.

    A transition taking effect exactly at the instant is already active. None
    is returned when the instant precedes every transition.
    """
    _check_aware(instant)
    index = bisect.bisect_right(_instants(sequence), instant)
    if index == 0:
        return None
    return index - 1


def active_at(
    sequence: ZoneTransitionSequence, instant: datetime.datetime
) -> TransitionRecord:
    """Return the transition active at an instant, or the zone default."""
    if (index := locate(sequence, instant)) is None:
        return sequence.default_record
    return sequence.transitions[index]
