"""Exceptions for tzparse library."""


class TzParseError(Exception):
    """Base exception for all tzparse errors."""


class ZoneNotFoundError(TzParseError):
    """Exception raised when a zone key has no corresponding TZif data."""


class MalformedZoneDataError(TzParseError):
    """Exception raised when TZif data for a zone could not be decoded.

    The 'detailed_error' attribute can provide additional information about
    the decoding failure, useful for debugging purposes.
    """

    def __init__(self, message: str, *, detailed_error: str | None = None) -> None:
        """Initialize the MalformedZoneDataError with a message."""
        super().__init__(message)
        self.message = message
        self.detailed_error = detailed_error
