"""Public queries for the transitions and current state of a zone.

An unknown zone is a routine outcome for these queries so it is reported by
returning None rather than raising. An empty list of transitions means the
zone was found but had no changes in the requested year.

The transitions of Europe/Paris in 2019 are:

    2019-03-31T01:00:00Z  utc_offset=7200  is_dst=True   CEST
    2019-10-27T01:00:00Z  utc_offset=3600  is_dst=False  CET
"""

from __future__ import annotations

import datetime
import logging
from functools import cache

from .exceptions import TzParseError
from .snapshot import ZoneSnapshot, zone_snapshot
from .transitions import TransitionRecord, ZoneTransitionSequence, filter_by_year
from .tzif.source import ZoneDataSource
from .util import now_factory

__all__ = [
    "default_source",
    "get_time_changes",
    "get_zone_transitions",
    "get_zone_info",
]

_LOGGER = logging.getLogger(__name__)

CURRENT_YEAR = 0
"""Requests the transitions of the current UTC year."""


@cache
def default_source() -> ZoneDataSource:
    """Return the source used when none is given, configured from the environment."""
    return ZoneDataSource.from_env()


def _resolve_year(year: int | None) -> int | None:
    if year == CURRENT_YEAR:
        return now_factory().astimezone(datetime.UTC).year
    return year


def _read(zone: str, source: ZoneDataSource | None) -> ZoneTransitionSequence | None:
    """Read a zone, returning None when it can't be found or decoded."""
    if source is None:
        source = default_source()
    try:
        return source.read(zone)
    except TzParseError as err:
        _LOGGER.debug("Unable to load timezone %s: %s", zone, err)
        return None


def get_zone_transitions(
    zone: str, year: int | None = None, *, source: ZoneDataSource | None = None
) -> ZoneTransitionSequence | None:
    """Return the transition sequence for a zone, narrowed to a year if given.

    A year of 0 means the current year.
    """
    year = _resolve_year(year)
    if (sequence := _read(zone, source)) is None:
        return None
    if year is None:
        return sequence
    return sequence.for_year(year)


def get_time_changes(
    zone: str, year: int | None = None, *, source: ZoneDataSource | None = None
) -> list[TransitionRecord] | None:
    """Return the transitions of a zone in a year, or all of them.

    A year of 0 means the current year. Returns None when the zone is not
    found and an empty list when it has no transitions that year.
    """
    year = _resolve_year(year)
    if (sequence := _read(zone, source)) is None:
        return None
    return filter_by_year(sequence, year)


def get_zone_info(
    zone: str | ZoneTransitionSequence,
    *,
    source: ZoneDataSource | None = None,
    now: datetime.datetime | None = None,
) -> ZoneSnapshot | None:
    """Return a snapshot of the state of a zone, by default at the current time.

    The zone may be a key or a sequence from a previous get_zone_transitions
    call. Returns None when the zone is not found.
    """
    if isinstance(zone, ZoneTransitionSequence):
        sequence: ZoneTransitionSequence | None = zone
    else:
        sequence = _read(zone, source)
    if sequence is None:
        return None
    if now is None:
        now = now_factory()
    return zone_snapshot(sequence, now)
