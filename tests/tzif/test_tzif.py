"""Tests for the tzif library."""

from collections.abc import Callable
import datetime

import pytest

from tzparse.tzif import tzif

V1_HEADER = b"".join(
    [
        b"\x54\x5a\x69\x66",  # magic
        b"\x00",  # version
        b"\x00\x00\x00\x00",  # pad
        b"\x00\x00\x00\x00",
        b"\x00\x00\x00\x00",
        b"\x00\x00\x00",
        b"\x00\x00\x00\x01"  # isutccnt
        b"\x00\x00\x00\x01"  # isstdcnt
        b"\x00\x00\x00\x1b"  # isleapcnt
        b"\x00\x00\x00\x00"  # timecnt
        b"\x00\x00\x00\x01"  # typecnt
        b"\x00\x00\x00\x04",  # charcnt
    ]
)


@pytest.mark.parametrize(
    "header,match",
    [
        (
            b"\x00" + V1_HEADER[1:],
            "did not contain magic",
        ),
        (
            V1_HEADER[0:23] + b"\x07" + V1_HEADER[24:],
            "UTC/local indicators in datablock mismatched",
        ),
        (
            V1_HEADER[0:27] + b"\x07" + V1_HEADER[28:],
            "standard/wall indicators in datablock mismatched",
        ),
        (
            V1_HEADER[0:23]
            + b"\x00"
            + V1_HEADER[24:27]
            + b"\x00"
            + V1_HEADER[28:39]
            + b"\x00"
            + V1_HEADER[40:],
            "Local time records in block is zero",
        ),
        (
            V1_HEADER[0:43] + b"\x00",
            "octets is zero",
        ),
        (
            V1_HEADER,
            "truncated",
        ),
        (
            V1_HEADER[0:20],
            "too short",
        ),
    ],
)
def test_invalid_header(header: bytes, match: str) -> None:
    """Tests a TZif header with invalid contents."""
    with pytest.raises(ValueError, match=match):
        tzif.read_tzif(header)


def test_v1(make_tzif: Callable[..., bytes]) -> None:
    """Test reading a version 1 file with 32-bit transition times."""
    content = make_tzif(
        [(-1855958901, 1), (1553994000, 2)],
        [(561, False, "LMT"), (3600, False, "CET"), (7200, True, "CEST")],
        version=b"\x00",
    )
    result = tzif.read_tzif(content)
    assert result.rule is None
    assert result.default.designation == "LMT"
    assert result.default.utoff == 561
    assert [t.transition_time for t in result.transitions] == [
        -1855958901,
        1553994000,
    ]
    assert result.transitions[1].local_time_type.designation == "CEST"
    assert result.transitions[1].local_time_type.dst
    assert result.transitions[1].local_time_type.utoff == 7200


def test_v2_footer(make_tzif: Callable[..., bytes]) -> None:
    """Test that the 64-bit block and footer rule are used for version 2 files."""
    content = make_tzif(
        [(-(2**59), 0), (-1855958901, 1)],
        [(561, False, "LMT"), (3600, False, "CET"), (7200, True, "CEST")],
        footer="CET-1CEST,M3.5.0,M10.5.0/3",
    )
    result = tzif.read_tzif(content)
    assert [t.transition_time for t in result.transitions] == [
        -(2**59),
        -1855958901,
    ]
    assert result.default.designation == "LMT"
    assert result.rule
    assert result.rule.std.name == "CET"
    assert result.rule.std.offset == datetime.timedelta(hours=1)
    assert result.rule.dst
    assert result.rule.dst.name == "CEST"


def test_v3_empty_footer(make_tzif: Callable[..., bytes]) -> None:
    """Test a version 3 file without a footer rule."""
    content = make_tzif([], [(0, False, "UTC")], version=b"3")
    result = tzif.read_tzif(content)
    assert not result.transitions
    assert result.default.designation == "UTC"
    assert result.rule is None


def test_invalid_footer(make_tzif: Callable[..., bytes]) -> None:
    """Test a version 2 file with a missing footer."""
    content = make_tzif([], [(0, False, "UTC")])
    with pytest.raises(ValueError, match="Failed to read TZ footer"):
        tzif.read_tzif(content[:-2])


def test_transition_type_out_of_bounds(make_tzif: Callable[..., bytes]) -> None:
    """Test a transition referencing a missing local time type."""
    content = make_tzif([(0, 3)], [(0, False, "UTC")])
    with pytest.raises(ValueError, match="transition_type out of bounds"):
        tzif.read_tzif(content)


def test_unordered_transitions(make_tzif: Callable[..., bytes]) -> None:
    """Test transitions that are not in ascending order."""
    content = make_tzif(
        [(100, 0), (50, 1)], [(0, False, "UTC"), (3600, False, "CET")]
    )
    with pytest.raises(ValueError, match="not in ascending order"):
        tzif.read_tzif(content)
