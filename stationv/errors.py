"""Exception hierarchy for stationv."""

from __future__ import annotations


class StationError(Exception):
    """Base class for recoverable editor errors."""


class ImportValidationError(StationError):
    """Raised when an import file is malformed or misses required fields."""

    def __init__(self, message: str, *, problems: list[str] | None = None) -> None:
        self.problems = problems or []
        if self.problems:
            message = f"{message} ({'; '.join(self.problems)})"
        super().__init__(message)


class UnsupportedFormatError(StationError):
    """Raised for an unknown file kind or an unrecognised JSON shape."""


class GenerationError(StationError):
    """Raised when the generation provider keeps failing after all retries."""

    def __init__(self, message: str, *, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"{message} (after {attempts} attempts)")
