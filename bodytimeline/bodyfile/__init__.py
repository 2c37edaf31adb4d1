"""Body file format codec and record stream."""

from .format import (
    COMMENT_PREFIX,
    FIELD_COUNT,
    FIELD_SEPARATOR,
    parse_line,
    serialize,
    write_record,
)
from .stream import BodyFileStream, open_stream

__all__ = [
    "BodyFileStream",
    "COMMENT_PREFIX",
    "FIELD_COUNT",
    "FIELD_SEPARATOR",
    "open_stream",
    "parse_line",
    "serialize",
    "write_record",
]
