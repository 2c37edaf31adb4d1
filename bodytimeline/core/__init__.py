"""Core model, configuration, logging and error types."""

from .errors import (
    EntryAccessError,
    FilterCompilationError,
    InvalidDateFormat,
    OutputOpenError,
    StreamReadError,
    TimelineError,
)
from .record import TimelineRecord, TimestampClass, TimestampedEntry

__all__ = [
    "EntryAccessError",
    "FilterCompilationError",
    "InvalidDateFormat",
    "OutputOpenError",
    "StreamReadError",
    "TimelineError",
    "TimelineRecord",
    "TimestampClass",
    "TimestampedEntry",
]
