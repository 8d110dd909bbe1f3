"""Data model for the tzif library."""

from dataclasses import dataclass
from typing import Optional

from .tz_rule import Rule


@dataclass(frozen=True)
class LocalTimeType:
    """A local time type record referenced by transitions."""

    utoff: int
    """Number of seconds added to UTC to determine local time."""

    dst: bool
    """Determines if local time is Daylight Savings Time (else Standard time)."""

    designation: str
    """The time zone abbreviation, e.g. CEST."""


@dataclass(frozen=True)
class Transition:
    """An individual transition time in the Datablock."""

    transition_time: int
    """Seconds since the epoch at which the rules for computing local time change."""

    local_time_type: LocalTimeType
    """The local time type in effect from the transition time onward."""


@dataclass
class TimezoneInfo:
    """The results of parsing the TZif file."""

    transitions: list[Transition]
    """Local time changes."""

    default: LocalTimeType
    """Local time type for timestamps before the first transition (type 0)."""

    rule: Optional[Rule] = None
    """A rule for computing local time changes after the last transition."""
