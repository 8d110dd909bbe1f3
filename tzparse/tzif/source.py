"""Library for loading the transitions of a zone from TZif data.

This package follows the same approach as zoneinfo for loading timezone
data. It first checks each directory of the configured search path, then
falls back to the tzdata python package.

Files built by zic in "slim" mode stop recording transitions once the
footer TZ rule can describe them, so the transitions implied by the rule are
appended up to `ZoneDataConfig.extend_until_year`. This gives the same
answers as "fat" files for the years they cover.
"""

from __future__ import annotations

import logging
import os
import pathlib
from collections.abc import Iterable
from functools import cache
from importlib import resources

from ..config import ZoneDataConfig
from ..exceptions import MalformedZoneDataError, ZoneNotFoundError
from ..transitions import TransitionRecord, ZoneTransitionSequence
from ..util import from_timestamp
from .model import LocalTimeType, TimezoneInfo
from .tz_rule import Rule
from .tzif import read_tzif

__all__ = [
    "ZoneDataSource",
    "build_sequence",
]

_LOGGER = logging.getLogger(__name__)

_MAGIC = b"TZif"
_EXTEND_FROM_YEAR = 1970
_ZONEINFO_DIR = "zoneinfo"
_EXCLUDED_DIRS = {"posix", "right"}
_EXCLUDED_FILES = {"localtime", "posixrules"}


@cache
def _read_tzdata_timezones() -> frozenset[str]:
    """Returns the set of valid timezones from tzdata only."""
    try:
        with resources.files("tzdata").joinpath("zones").open(
            "r", encoding="utf-8"
        ) as zones_file:
            return frozenset(line.strip() for line in zones_file.readlines())
    except ModuleNotFoundError:
        return frozenset()


def _iana_key_to_resource(key: str) -> tuple[str, str]:
    """Returns the package and resource file for the specified timezone."""
    if "/" not in key:
        return "tzdata.zoneinfo", key
    package_loc, resource = key.rsplit("/", 1)
    package = "tzdata.zoneinfo." + package_loc.replace("/", ".")
    return package, resource


def _read_tzdata(key: str) -> bytes | None:
    """Read the TZif file for a key from the tzdata package, if present."""
    (package, resource) = _iana_key_to_resource(key)
    try:
        with resources.files(package).joinpath(resource).open("rb") as tzdata_file:
            return tzdata_file.read()
    except ModuleNotFoundError:
        return None
    except OSError as err:
        _LOGGER.debug("Unable to read tzdata resource for %s: %s", key, err)
        return None


def _is_valid_key(key: str) -> bool:
    """Return True if the key is a relative zone name that stays in its root."""
    if not key or "\\" in key or "\x00" in key or key.startswith("/"):
        return False
    return all(part not in ("", ".", "..") for part in key.split("/"))


def _zone_name_from_path(path: pathlib.Path, roots: Iterable[pathlib.Path]) -> str:
    """Derive a zone name such as Europe/Paris from the path of a TZif file."""
    for root in roots:
        if path.is_relative_to(root):
            return path.relative_to(root).as_posix()
    parts = path.parts
    if _ZONEINFO_DIR in parts[:-1]:
        index = len(parts) - 1 - parts[::-1].index(_ZONEINFO_DIR)
        return "/".join(parts[index + 1 :])
    return "/".join(parts[-2:]) if len(parts) > 2 else path.name


def _rule_records(
    rule: Rule,
    previous: TransitionRecord | None,
    default: LocalTimeType,
    until_year: int,
) -> list[TransitionRecord]:
    """Return the transitions implied by the footer rule after previous."""
    if previous is not None:
        start_year = previous.instant.year
        state = (previous.utc_offset, previous.is_dst, previous.abbreviation)
    else:
        start_year = _EXTEND_FROM_YEAR
        state = (default.utoff, default.dst, default.designation)
    records: list[TransitionRecord] = []
    for year in range(start_year, until_year + 1):
        for transition in rule.transitions(year):
            if previous is not None and transition.instant <= previous.instant:
                continue
            record = TransitionRecord(
                instant=transition.instant,
                utc_offset=transition.occurrence.utoff,
                is_dst=transition.dst,
                abbreviation=transition.occurrence.designation,
            )
            if (record.utc_offset, record.is_dst, record.abbreviation) == state:
                continue
            records.append(record)
            state = (record.utc_offset, record.is_dst, record.abbreviation)
    return records


def build_sequence(
    name: str, timezoneinfo: TimezoneInfo, extend_until_year: int
) -> ZoneTransitionSequence:
    """Create the transition sequence for a zone from decoded TZif data."""
    records: list[TransitionRecord] = []
    for transition in timezoneinfo.transitions:
        if (instant := from_timestamp(transition.transition_time)) is None:
            _LOGGER.debug(
                "Skipping out of range transition time %d in %s",
                transition.transition_time,
                name,
            )
            continue
        local_time_type = transition.local_time_type
        records.append(
            TransitionRecord(
                instant=instant,
                utc_offset=local_time_type.utoff,
                is_dst=local_time_type.dst,
                abbreviation=local_time_type.designation,
            )
        )
    if timezoneinfo.rule is not None:
        extended = _rule_records(
            timezoneinfo.rule,
            records[-1] if records else None,
            timezoneinfo.default,
            extend_until_year,
        )
        _LOGGER.debug("Extended %s with %d rule transitions", name, len(extended))
        records.extend(extended)
    return ZoneTransitionSequence(
        name=name,
        transitions=tuple(records),
        default_offset=timezoneinfo.default.utoff,
        default_abbreviation=timezoneinfo.default.designation,
    )


class ZoneDataSource:
    """Resolves zone keys to their transition sequences.

    The search path and other settings are fixed when the source is created,
    so reads never consult the environment.
    """

    def __init__(self, config: ZoneDataConfig | None = None) -> None:
        """Initialize ZoneDataSource."""
        self._config = config if config is not None else ZoneDataConfig()

    @classmethod
    def from_env(cls) -> ZoneDataSource:
        """Create a source honoring the TZFILES_DIR data root override."""
        return cls(ZoneDataConfig.from_env())

    @property
    def config(self) -> ZoneDataConfig:
        """Return the configuration used by this source."""
        return self._config

    def read(self, key: str) -> ZoneTransitionSequence:
        """Read the transitions for a zone key or absolute TZif file path.

        Raises ZoneNotFoundError when there is no TZif data for the key and
        MalformedZoneDataError when the data could not be decoded.
        """
        _LOGGER.debug("Reading timezone: %s", key)
        (name, content) = self._read_bytes(key)
        try:
            timezoneinfo = read_tzif(content)
            return build_sequence(name, timezoneinfo, self._config.extend_until_year)
        except ValueError as err:
            raise MalformedZoneDataError(
                f"Unable to decode timezone data: {key}", detailed_error=str(err)
            ) from err

    def _read_bytes(self, key: str) -> tuple[str, bytes]:
        """Return the zone name and TZif content for a key."""
        if os.path.isabs(key):
            path = pathlib.Path(key)
            if not path.is_file():
                raise ZoneNotFoundError(f"Unable to find timezone file: {key}")
            name = _zone_name_from_path(path, self._config.search_path)
            return (name, self._check_magic(key, path.read_bytes()))

        if not _is_valid_key(key):
            raise ZoneNotFoundError(f"Invalid timezone key: {key!r}")

        for search_path in self._config.search_path:
            filepath = search_path / key
            if filepath.is_file():
                _LOGGER.debug("Found %s in %s", key, search_path)
                return (key, self._check_magic(key, filepath.read_bytes()))

        if self._config.use_tzdata and (content := _read_tzdata(key)) is not None:
            _LOGGER.debug("Found %s in tzdata package", key)
            return (key, self._check_magic(key, content))

        raise ZoneNotFoundError(f"Unable to find timezone data for {key}")

    @staticmethod
    def _check_magic(key: str, content: bytes) -> bytes:
        if not content.startswith(_MAGIC):
            raise ZoneNotFoundError(f"Not a TZif file: {key}")
        return content

    def available_zones(self) -> set[str]:
        """Return the set of zone keys this source can resolve."""
        zones: set[str] = set()
        for search_path in self._config.search_path:
            if not search_path.is_dir():
                continue
            for root, dirs, files in os.walk(search_path):
                dirs[:] = [
                    d for d in dirs if not (root == str(search_path) and d in _EXCLUDED_DIRS)
                ]
                for filename in files:
                    if filename in _EXCLUDED_FILES:
                        continue
                    filepath = pathlib.Path(root) / filename
                    with filepath.open("rb") as tzfile:
                        if tzfile.read(len(_MAGIC)) != _MAGIC:
                            continue
                    zones.add(filepath.relative_to(search_path).as_posix())
        if self._config.use_tzdata:
            zones.update(_read_tzdata_timezones())
        return zones
