"""Library for reading TZif files.

The TZif format is described in rfc8536. A file contains a v1 header and
data block with 32-bit times, and for version 2 and later files a second
header and data block with 64-bit times followed by a footer holding a
POSIX TZ string used for times after the last transition.

Leap second records and the standard/wall and UT/local indicators are
skipped: only the transition times, their local time types, and the
footer rule are returned.
"""

import enum
import io
import logging
import struct
from collections import namedtuple
from dataclasses import dataclass
from functools import cache
from typing import Sequence

from .model import LocalTimeType, TimezoneInfo, Transition
from .tz_rule import parse_tz_rule

_LOGGER = logging.getLogger(__name__)

# Records specifying the local time type
_LOCAL_TIME_TYPE_STRUCT_FORMAT = "".join(
    [
        ">",  # Use standard size of packed value bytes
        "l",  # utoff (4 bytes): Number of seconds to add to UTC to determine local time
        "?",  # dst (1 byte): Indicates the time is DST (1) or standard (0)
        "B",  # idx (1 byte): Offset index into the time zone designiation octets (0-charcnt-1)
    ]
)
_LOCAL_TIME_RECORD_SIZE = 6

_LEAP_CORRECTION_SIZE = 4


class _TZifVersion(enum.Enum):
    """Defines information related to _TZifVersions."""

    V1 = (b"\x00", 4, "l")  # 32-bit in v1
    V2 = (b"2", 8, "q")  # 64-bit in v2+
    V3 = (b"3", 8, "q")

    def __init__(self, version: bytes, time_size: int, time_format: str):
        self._version = version
        self._time_size = time_size
        self._time_format = time_format

    @property
    def version(self) -> bytes:
        """Return the version byte string."""
        return self._version

    @property
    def time_size(self) -> int:
        """Return the TIME_SIZE used in the data block parsing."""
        return self._time_size

    @property
    def time_format(self) -> str:
        """Return the struct unpack format string for TIME_SIZE objects."""
        return self._time_format


@dataclass
class _Header:
    """TZif _Header information."""

    SIZE = 44  # Total size of the header to read
    STRUCT_FORMAT = "".join(
        [
            ">",  # Use standard size of packed value bytes
            "4s",  # magic (4 bytes)
            "c",  # version (1 byte)
            "15x",  # unused
            "6l",  # isutccnt, isstdcnt, leapcnt, timecnt, typecnt, charcnt
        ]
    )
    MAGIC = "TZif".encode()

    version: bytes
    """The version of the files format."""

    isutccnt: int
    """The number of UTC/local indicators in the data block."""

    isstdcnt: int
    """The number of standard/wall indicators in the data block."""

    leapcnt: int
    """The number of leap second records in the data block."""

    timecnt: int
    """The number of time transitions in the data block."""

    typecnt: int
    """The number of local time type records in the data block."""

    charcnt: int
    """The number of characters for time zone designations in the data block."""

    @classmethod
    def from_bytes(cls, header_bytes: bytes) -> "_Header":
        """Parse the header bytes into a file."""
        if len(header_bytes) != _Header.SIZE:
            raise ValueError("zoneinfo file is too short to contain a header")
        (
            magic,
            version,
            isutccnt,
            isstdcnt,
            leapcnt,
            timecnt,
            typecnt,
            charcnt,
        ) = struct.unpack(_Header.STRUCT_FORMAT, header_bytes)
        if magic != _Header.MAGIC:
            raise ValueError("zoneinfo file did not contain magic header")
        if isutccnt not in (0, typecnt):
            raise ValueError(
                f"UTC/local indicators in datablock mismatched ({isutccnt}, {typecnt})"
            )
        if isstdcnt not in (0, typecnt):
            raise ValueError(
                f"standard/wall indicators in datablock mismatched ({isstdcnt}, {typecnt})"
            )
        return _Header(version, isutccnt, isstdcnt, leapcnt, timecnt, typecnt, charcnt)

    def datablock_size(self, version: _TZifVersion) -> int:
        """Return the number of bytes in the data block following this header."""
        return (
            self.timecnt * version.time_size
            + self.timecnt
            + self.typecnt * _LOCAL_TIME_RECORD_SIZE
            + self.charcnt
            + self.leapcnt * (version.time_size + _LEAP_CORRECTION_SIZE)
            + self.isstdcnt
            + self.isutccnt
        )


# A series of records specifying the local time type:
#  - utoff (4 bytes): Number of seconds to add to UTC to determine local time
#  - dst (1 byte): Indicates the time is DST (1) or standard (0)
#  - idx (1 byte):  Offset index into the time zone designiation octets (0-charcnt-1)
_LocalTimeTypeBlock = namedtuple("_LocalTimeTypeBlock", ["utoff", "dst", "idx"])


def _read_exact(buf: io.BytesIO, size: int) -> bytes:
    """Read exactly size bytes from the buffer or fail on truncated data."""
    data = buf.read(size)
    if len(data) != size:
        raise ValueError(f"zoneinfo data block truncated ({len(data)} < {size})")
    return data


def _read_datablock(
    header: _Header, version: _TZifVersion, buf: io.BytesIO
) -> tuple[list[Transition], list[LocalTimeType]]:
    """Read records from the buffer."""
    # A series of transition times in sorted order
    transition_times = struct.unpack(
        f">{header.timecnt}{version.time_format}",
        _read_exact(buf, header.timecnt * version.time_size),
    )

    # A series of integers specifying the type of local time of the corresponding
    # transition time. These are zero-based indices into the array of local
    # time type records. (from 0 to typecnt-1)
    transition_types: Sequence[int] = []
    if header.timecnt > 0:
        transition_types = struct.unpack(
            f">{header.timecnt}B", _read_exact(buf, header.timecnt)
        )

    local_time_type_blocks: list[_LocalTimeTypeBlock] = [
        _LocalTimeTypeBlock._make(
            struct.unpack(
                _LOCAL_TIME_TYPE_STRUCT_FORMAT,
                _read_exact(buf, _LOCAL_TIME_RECORD_SIZE),
            )
        )
        for _ in range(header.typecnt)
    ]

    # An array of NUL-terminated time zone designation strings
    tz_designations = _read_exact(buf, header.charcnt)

    @cache
    def get_tz_designations(idx: int) -> str:
        """Find the null terminated string starting at the specified index."""
        if idx >= len(tz_designations):
            raise ValueError(f"designation index out of bounds {idx}")
        end = tz_designations.find(b"\x00", idx)
        if end < 0:
            end = len(tz_designations)
        return tz_designations[idx:end].decode("UTF-8")

    local_time_types = [
        LocalTimeType(utoff, dst, get_tz_designations(idx))
        for (utoff, dst, idx) in local_time_type_blocks
    ]

    # Leap second records, standard/wall indicators and UT/local indicators
    # are not used.
    _read_exact(
        buf,
        header.leapcnt * (version.time_size + _LEAP_CORRECTION_SIZE)
        + header.isstdcnt
        + header.isutccnt,
    )

    transitions: list[Transition] = []
    for transition_time, time_type in zip(transition_times, transition_types):
        if time_type >= len(local_time_types):
            raise ValueError(
                f"transition_type out of bounds {time_type} >= {len(local_time_types)}"
            )
        if transitions and transition_time <= transitions[-1].transition_time:
            raise ValueError(
                f"transition times are not in ascending order at {transition_time}"
            )
        transitions.append(Transition(transition_time, local_time_types[time_type]))

    return (transitions, local_time_types)


def _check_counts(header: _Header) -> None:
    if header.typecnt == 0:
        raise ValueError("Local time records in block is zero")
    if header.charcnt == 0:
        raise ValueError("Total number of octets is zero")


def read_tzif(content: bytes) -> TimezoneInfo:
    """Read the TZif file and parse and return the timezone records."""
    buf = io.BytesIO(content)

    # V1 header and block
    header = _Header.from_bytes(buf.read(_Header.SIZE))
    if header.version == _TZifVersion.V1.version:
        _check_counts(header)
        (transitions, local_time_types) = _read_datablock(
            header, _TZifVersion.V1, buf
        )
        return TimezoneInfo(transitions, local_time_types[0])

    # The v1 block is superseded by the v2+ block
    _read_exact(buf, header.datablock_size(_TZifVersion.V1))

    # V2+ header and block
    header = _Header.from_bytes(buf.read(_Header.SIZE))
    _check_counts(header)
    (transitions, local_time_types) = _read_datablock(header, _TZifVersion.V2, buf)

    # V2+ footer
    footer = buf.read()
    parts = footer.decode("UTF-8").split("\n")
    if len(parts) != 3:
        raise ValueError("Failed to read TZ footer")
    rule = None
    if parts[1]:
        rule = parse_tz_rule(parts[1])
    _LOGGER.debug(
        "Read TZif v%s with %d transitions, rule=%s",
        header.version.decode(),
        len(transitions),
        parts[1],
    )
    return TimezoneInfo(transitions, local_time_types[0], rule=rule)
