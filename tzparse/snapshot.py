"""Human readable snapshot of the state of a zone at an instant.

A snapshot is derived from the active transition and the DST window and is
recomputed on every query. It serializes to a flat JSON record, e.g.

    {"timezone":"Europe/Paris","utc_datetime":"2020-01-22T14:12:36.792898Z",
     "datetime":"2020-01-22T15:12:36.792898+01:00","dst_from":"2019-03-31T01:00:00Z",
     "dst_until":"2019-10-27T01:00:00Z","dst_period":false,"raw_offset":3600,
     "dst_offset":3600,"utc_offset":"+01:00","abbreviation":"CET","week_number":4}
"""

from __future__ import annotations

import datetime
import logging

from pydantic import BaseModel, ConfigDict, Field

from .dst import DEFAULT_DST_DELTA, DstWindow, dst_window, standard_offset
from .transitions import TransitionRecord, ZoneTransitionSequence, locate
from .util import format_offset

__all__ = [
    "ZoneSnapshot",
    "build_snapshot",
    "zone_snapshot",
]

_LOGGER = logging.getLogger(__name__)


class ZoneSnapshot(BaseModel):
    """Convenient and human readable information about a zone."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    zone: str = Field(alias="timezone")
    """Zone name, e.g. Europe/Paris."""

    utc_instant: datetime.datetime = Field(alias="utc_datetime")
    """UTC time."""

    local_instant: datetime.datetime = Field(alias="datetime")
    """Local time."""

    dst_from: datetime.datetime | None = None
    """Start of DST period."""

    dst_until: datetime.datetime | None = None
    """End of DST period."""

    dst_period: bool
    """Are we in a DST period?"""

    raw_offset: int
    """Normal offset to UTC, in seconds."""

    dst_offset: int
    """DST offset to UTC, in seconds."""

    utc_offset: str
    """Current offset to UTC, in +/-HH:MM."""

    abbreviation: str
    """Zone abbreviation."""

    week_number: int
    """ISO 8601 week number of the local time."""

    @property
    def dst_window(self) -> DstWindow:
        """Return the DST window reported in the snapshot."""
        return DstWindow(dst_from=self.dst_from, dst_until=self.dst_until)

    def to_json(self) -> str:
        """Serialize the snapshot as a flat JSON record."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, value: str | bytes) -> ZoneSnapshot:
        """Parse a snapshot from its flat JSON record."""
        return cls.model_validate_json(value)


def build_snapshot(
    zone: str,
    active: TransitionRecord,
    window: DstWindow,
    now: datetime.datetime,
    *,
    raw_offset: int | None = None,
) -> ZoneSnapshot:
    """Build the snapshot of a zone from its active transition.

    The raw_offset is the standard time offset in seconds. When not known it
    is the active offset outside DST and one hour less inside DST.
    """
    if now.tzinfo is None:
        raise ValueError(f"Expected a timezone aware datetime: {now}")
    if raw_offset is None:
        raw_offset = active.utc_offset
        if active.is_dst:
            raw_offset -= DEFAULT_DST_DELTA
    utc_instant = now.astimezone(datetime.UTC)
    local_instant = utc_instant.astimezone(
        datetime.timezone(datetime.timedelta(seconds=active.utc_offset))
    )
    return ZoneSnapshot(
        zone=zone,
        utc_instant=utc_instant,
        local_instant=local_instant,
        dst_from=window.dst_from,
        dst_until=window.dst_until,
        dst_period=active.is_dst,
        raw_offset=raw_offset,
        dst_offset=active.utc_offset if active.is_dst else raw_offset,
        utc_offset=format_offset(active.utc_offset),
        abbreviation=active.abbreviation,
        week_number=local_instant.isocalendar().week,
    )


def zone_snapshot(
    sequence: ZoneTransitionSequence, now: datetime.datetime
) -> ZoneSnapshot:
    """Return the snapshot of a zone at an instant."""
    index = locate(sequence, now)
    active = sequence.default_record if index is None else sequence.transitions[index]
    _LOGGER.debug("Active transition for %s at %s: %s", sequence.name, now, active)
    return build_snapshot(
        sequence.name,
        active,
        dst_window(sequence, index),
        now,
        raw_offset=standard_offset(sequence, index),
    )
