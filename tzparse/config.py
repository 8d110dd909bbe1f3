"""Configuration for locating and extending TZif zone data.

The data root used to be read from the environment on every lookup. It is
now an explicit value passed to a `ZoneDataSource` when it is created, and
the environment is only consulted by `ZoneDataConfig.from_env`.
"""

from __future__ import annotations

import logging
import os
import pathlib
import zoneinfo
from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

__all__ = [
    "TZFILES_DIR_ENV",
    "ZoneDataConfig",
]

_LOGGER = logging.getLogger(__name__)

TZFILES_DIR_ENV = "TZFILES_DIR"
"""Environment variable that overrides the zone data search path."""

_DEFAULT_EXTEND_UNTIL_YEAR = 2037


def _default_search_path() -> list[pathlib.Path]:
    return [pathlib.Path(path) for path in zoneinfo.TZPATH]


class ZoneDataConfig(BaseModel):
    """Settings used by a ZoneDataSource to find and decode zone files."""

    model_config = ConfigDict(frozen=True)

    search_path: list[pathlib.Path] = Field(default_factory=_default_search_path)
    """Directories searched in order for a zone key, e.g. /usr/share/zoneinfo."""

    use_tzdata: bool = True
    """Fall back to the tzdata python package when the search path has no match."""

    extend_until_year: int = _DEFAULT_EXTEND_UNTIL_YEAR
    """Last year for which transitions are generated from the footer TZ rule."""

    @field_validator("search_path")
    @classmethod
    def _absolute_search_path(cls, value: list[pathlib.Path]) -> list[pathlib.Path]:
        """Require absolute directories, matching zoneinfo.TZPATH semantics."""
        for path in value:
            if not path.is_absolute():
                raise ValueError(f"Search path entries must be absolute: {path}")
        return value

    @field_validator("extend_until_year")
    @classmethod
    def _valid_year(cls, value: int) -> int:
        if not 1970 <= value <= 9998:
            raise ValueError(f"extend_until_year must be between 1970 and 9998: {value}")
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ZoneDataConfig:
        """Create a config honoring the TZFILES_DIR data root override."""
        if environ is None:
            environ = os.environ
        if not (value := environ.get(TZFILES_DIR_ENV)):
            return cls()
        search_path: list[pathlib.Path] = []
        for entry in value.split(os.pathsep):
            if not entry:
                continue
            if not (path := pathlib.Path(entry)).is_absolute():
                _LOGGER.warning(
                    "Ignoring relative path in %s: %s", TZFILES_DIR_ENV, entry
                )
                continue
            search_path.append(path)
        _LOGGER.debug("Using %s search path: %s", TZFILES_DIR_ENV, search_path)
        return cls(search_path=search_path)
