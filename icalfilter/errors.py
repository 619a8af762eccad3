"""
Error types for ical-filter.

Request-level errors carry the HTTP status they map to. Entry-level
errors (EntryNormalizationError and subclasses) never leave the pipeline:
the offending event is dropped and processing continues.
"""


class ICalFilterError(Exception):
    """Base class for all ical-filter errors."""
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        """Error body returned to HTTP clients."""
        return {"error": type(self).__name__, "message": self.message}


# ==================== Filter expression ====================

class InvalidFilter(ICalFilterError):
    """The filter query parameter could not be parsed."""
    status_code = 400

    def __init__(self, segment: str, message: str):
        super().__init__(f"{message}: {segment!r}")
        self.segment = segment


class InvalidFilterSyntax(InvalidFilter):
    """A segment does not have the form [!]condition:pattern."""


class InvalidFilterCondition(InvalidFilter):
    """A segment names a condition that does not exist."""


class InvalidFilterPattern(InvalidFilter):
    """A regex segment carries a pattern that does not compile."""


# ==================== Upstream ====================

class FetchError(ICalFilterError):
    """The feed URL was unreachable, timed out or returned an error status."""
    status_code = 502


class SourceParseError(ICalFilterError):
    """The fetched body is not a well-formed calendar document."""
    status_code = 502


# ==================== Per-entry ====================

class EntryNormalizationError(ICalFilterError):
    """A single source event could not be normalized."""

    def __init__(self, field: str, message: str):
        super().__init__(f"{message}: {field}")
        self.field = field


class MissingRequiredField(EntryNormalizationError):
    """A required property (UID, SUMMARY, DTSTART, DTEND) is absent."""

    def __init__(self, field: str):
        super().__init__(field, "missing required field")


class MalformedField(EntryNormalizationError):
    """A date/time property holds a value that is not a date or datetime."""

    def __init__(self, field: str):
        super().__init__(field, "malformed field")


class ConfigError(ICalFilterError):
    """Invalid process configuration."""
