"""Test fixtures."""

from collections.abc import Callable, Generator
import datetime
import struct
from typing import Any

import pytest

from tzparse import zones
from tzparse.config import ZoneDataConfig
from tzparse.transitions import TransitionRecord, ZoneTransitionSequence
from tzparse.tzif.source import ZoneDataSource

UTC = datetime.UTC

# Local time types as (utoff, dst, designation)
LMT = (561, False, "LMT")
CET = (3600, False, "CET")
CEST = (7200, True, "CEST")


def utc(*args: Any) -> datetime.datetime:
    """Return a UTC datetime."""
    return datetime.datetime(*args, tzinfo=UTC)


def timestamp(*args: Any) -> int:
    """Return the seconds since the epoch for a UTC datetime."""
    return int(utc(*args).timestamp())


def _datablock(
    transitions: list[tuple[int, int]],
    types: list[tuple[int, bool, str]],
    version: bytes,
    time_format: str,
) -> bytes:
    """Build a TZif header and data block with no leap seconds or indicators."""
    designations = b""
    indices = []
    for _, _, designation in types:
        indices.append(len(designations))
        designations += designation.encode() + b"\x00"
    header = struct.pack(
        ">4sc15x6l",
        b"TZif",
        version,
        0,  # isutccnt
        0,  # isstdcnt
        0,  # leapcnt
        len(transitions),
        len(types),
        len(designations),
    )
    return b"".join(
        [
            header,
            struct.pack(f">{len(transitions)}{time_format}", *(t for t, _ in transitions)),
            struct.pack(f">{len(transitions)}B", *(i for _, i in transitions)),
            b"".join(
                struct.pack(">l?B", utoff, dst, idx)
                for (utoff, dst, _), idx in zip(types, indices)
            ),
            designations,
        ]
    )


def build_tzif(
    transitions: list[tuple[int, int]],
    types: list[tuple[int, bool, str]],
    footer: str = "",
    version: bytes = b"2",
) -> bytes:
    """Build TZif content from (time, type index) transitions and local time types.

    Version 2+ content gets a minimal v1 block like zic writes for slim files.
    """
    if version == b"\x00":
        return _datablock(transitions, types, version, "l")
    return b"".join(
        [
            _datablock([], [(0, False, "")], version, "l"),
            _datablock(transitions, types, version, "q"),
            b"\n",
            footer.encode(),
            b"\n",
        ]
    )


@pytest.fixture(name="make_tzif")
def mock_make_tzif() -> Callable[..., bytes]:
    """Fixture that builds TZif content."""
    return build_tzif


@pytest.fixture(name="paris")
def mock_paris() -> ZoneTransitionSequence:
    """Fixture with Europe/Paris transitions for 2018 through 2020."""
    return ZoneTransitionSequence(
        name="Europe/Paris",
        transitions=(
            TransitionRecord(utc(2018, 3, 25, 1), 7200, True, "CEST"),
            TransitionRecord(utc(2018, 10, 28, 1), 3600, False, "CET"),
            TransitionRecord(utc(2019, 3, 31, 1), 7200, True, "CEST"),
            TransitionRecord(utc(2019, 10, 27, 1), 3600, False, "CET"),
            TransitionRecord(utc(2020, 3, 29, 1), 7200, True, "CEST"),
            TransitionRecord(utc(2020, 10, 25, 1), 3600, False, "CET"),
        ),
        default_offset=561,
        default_abbreviation="LMT",
    )


@pytest.fixture(name="fixed")
def mock_fixed() -> ZoneTransitionSequence:
    """Fixture with a fixed offset zone that has never observed DST."""
    return ZoneTransitionSequence(
        name="Etc/Fixed",
        transitions=(TransitionRecord(utc(1920, 1, 1), -18000, False, "EST"),),
        default_offset=-17762,
        default_abbreviation="LMT",
    )


@pytest.fixture(name="tzdata_source")
def mock_tzdata_source() -> ZoneDataSource:
    """Fixture for a source that only reads the tzdata package."""
    return ZoneDataSource(ZoneDataConfig(search_path=[], use_tzdata=True))


@pytest.fixture(autouse=True)
def clear_default_source() -> Generator[None, None, None]:
    """Reset the cached default source so environment changes are honored."""
    zones.default_source.cache_clear()
    yield
    zones.default_source.cache_clear()
