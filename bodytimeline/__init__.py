"""body-timeline package initialization and public exports."""

from importlib.metadata import PackageNotFoundError, version

from .bodyfile import BodyFileStream, open_stream, parse_line, serialize
from .collector import CollectionSummary, collect, write_body_file
from .core.errors import (
    EntryAccessError,
    FilterCompilationError,
    InvalidDateFormat,
    OutputOpenError,
    StreamReadError,
    TimelineError,
)
from .core.record import TimelineRecord, TimestampClass, TimestampedEntry
from .filters import compile_filter, parse_expression
from .timeline import emit_timeline, format_line, macb

__all__ = [
    "__version__",
    "BodyFileStream",
    "CollectionSummary",
    "EntryAccessError",
    "FilterCompilationError",
    "InvalidDateFormat",
    "OutputOpenError",
    "StreamReadError",
    "TimelineError",
    "TimelineRecord",
    "TimestampClass",
    "TimestampedEntry",
    "collect",
    "compile_filter",
    "emit_timeline",
    "format_line",
    "macb",
    "open_stream",
    "parse_expression",
    "parse_line",
    "serialize",
    "write_body_file",
]

try:  # pragma: no cover - depends on package metadata
    __version__ = version("body-timeline")
except PackageNotFoundError:  # pragma: no cover - local development fallback
    __version__ = "0.1.0-dev"
