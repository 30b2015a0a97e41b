"""Error taxonomy for pull count ingestion."""

from pathlib import Path


class PullHistoryError(Exception):
    """Base class for all pullhistory errors."""


class FetchError(PullHistoryError):
    """The sample source could not produce a count for an entity."""

    def __init__(self, name: str, reason: str) -> None:
        super().__init__(f"Cannot fetch count for '{name}': {reason}")
        self.name = name
        self.reason = reason


class HistoryIOError(PullHistoryError, OSError):
    """A series could not be opened, created, read or appended."""


class ParseError(PullHistoryError, ValueError):
    """A stored series record cannot be interpreted as (date, count[, delta]).

    Attributes:
        path: Location of the series (file path or entity name).
        line_number: 1-based line number of the malformed record.
        line: Raw content of the malformed record.
    """

    def __init__(
        self,
        path: Path | str,
        line_number: int,
        line: str,
        reason: str,
    ) -> None:
        super().__init__(f"{path}:{line_number}: {reason}: {line!r}")
        self.path = path
        self.line_number = line_number
        self.line = line
        self.reason = reason


class NotFoundError(PullHistoryError, LookupError):
    """No series exists yet for the requested entity."""

    def __init__(self, name: str) -> None:
        super().__init__(f"No history for '{name}'")
        self.name = name


class ConfigError(PullHistoryError):
    """The watch list configuration is missing or invalid."""
