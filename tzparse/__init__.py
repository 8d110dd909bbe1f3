"""Library for reading IANA timezone transitions and DST details of a zone.

Transitions for a zone are decoded from the system TZif files or the tzdata
package and returned for a year, or used to describe the current offset,
abbreviation and daylight saving time period of the zone.
"""

from .config import ZoneDataConfig
from .dst import DstWindow
from .exceptions import MalformedZoneDataError, TzParseError, ZoneNotFoundError
from .snapshot import ZoneSnapshot
from .transitions import TransitionRecord, ZoneTransitionSequence
from .tzif.source import ZoneDataSource
from .zones import get_time_changes, get_zone_info, get_zone_transitions

__all__ = [
    "DstWindow",
    "MalformedZoneDataError",
    "TransitionRecord",
    "TzParseError",
    "ZoneDataConfig",
    "ZoneDataSource",
    "ZoneNotFoundError",
    "ZoneSnapshot",
    "ZoneTransitionSequence",
    "get_time_changes",
    "get_zone_info",
    "get_zone_transitions",
]
