"""Exception taxonomy and process exit codes."""

from __future__ import annotations

from typing import Optional

EXIT_USAGE = 1
EXIT_FILTER = 2
EXIT_MATERIALIZE = 3
EXIT_ITERATE = 4


class TimelineError(Exception):
    """Base class for all body-timeline errors."""


class EntryAccessError(TimelineError):
    """Metadata for a single filesystem entry could not be collected.

    ``reason`` is one of :data:`REASONS` so callers can tell a vanished entry
    from a permission problem without inspecting the message.
    """

    NOT_FOUND = "not-found"
    ACCESS_DENIED = "access-denied"
    OTHER = "other"
    REASONS = (NOT_FOUND, ACCESS_DENIED, OTHER)

    def __init__(self, path: str, reason: str = OTHER, detail: str = ""):
        if reason not in self.REASONS:
            raise ValueError(f"Unknown entry failure reason: {reason}")
        self.path = path
        self.reason = reason
        self.detail = detail
        super().__init__(f"{reason}: {detail}" if detail else reason)

    @classmethod
    def from_os_error(cls, path: str, exc: OSError) -> "EntryAccessError":
        if isinstance(exc, FileNotFoundError):
            reason = cls.NOT_FOUND
        elif isinstance(exc, PermissionError):
            reason = cls.ACCESS_DENIED
        else:
            reason = cls.OTHER
        detail = exc.strerror or str(exc)
        return cls(path, reason, detail)


class OutputOpenError(TimelineError):
    """The body file output could not be created or opened for appending."""

    def __init__(self, path: str, detail: str):
        self.path = path
        super().__init__(f"Cannot open output {path}: {detail}")


class FilterCompilationError(TimelineError):
    """A filter expression was rejected by the evaluator."""


class InvalidDateFormat(FilterCompilationError):
    """A ``date`` clause contains a literal that is not a recognised date."""

    def __init__(self, literal: str):
        self.literal = literal
        super().__init__(
            f"unable to parse date: {literal} (use YYYY-MM-DD or YYYY-MM-DD HH:MM:SS)"
        )


class StreamReadError(TimelineError):
    """A body file record is malformed or the stream was misused."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


__all__ = [
    "EXIT_FILTER",
    "EXIT_ITERATE",
    "EXIT_MATERIALIZE",
    "EXIT_USAGE",
    "EntryAccessError",
    "FilterCompilationError",
    "InvalidDateFormat",
    "OutputOpenError",
    "StreamReadError",
    "TimelineError",
]
