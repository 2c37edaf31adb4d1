"""
Body file line codec.

The Sleuth Kit 3.x body format has 11 pipe-delimited fields::

    MD5|name|inode|mode_as_string|UID|GID|size|atime|mtime|ctime|crtime

Times are Unix seconds, lines starting with ``#`` are comments. Paths are
written exactly as collected: a ``|`` inside a path is not escaped. When
reading, the checksum is split off the left and the nine trailing fields off
the right, so such a path still parses. A newline inside a path cannot be
recovered.
"""

from __future__ import annotations

import re
from typing import Optional, TextIO

from bodytimeline.core.errors import StreamReadError
from bodytimeline.core.record import TimelineRecord, number_or_text

FIELD_SEPARATOR = "|"
FIELD_COUNT = 11
COMMENT_PREFIX = "#"

_INTEGER = re.compile(r"^-?[0-9]+$")
_MAX_IDENTITY = 2**64 - 1


def serialize(record: TimelineRecord) -> str:
    """Render ``record`` as one body file line including the newline."""

    fields = (
        record.checksum,
        record.path,
        record.identity_number,
        record.mode,
        record.owner_id,
        record.group_id,
        record.size_bytes,
        record.access_time,
        record.modify_time,
        record.change_time,
        record.birth_time,
    )
    return FIELD_SEPARATOR.join(str(value) for value in fields) + "\n"


def write_record(handle: TextIO, record: TimelineRecord) -> None:
    """Append ``record`` to an open text stream."""

    handle.write(serialize(record))


def is_comment(line: str) -> bool:
    return line.startswith(COMMENT_PREFIX)


def parse_line(line: str, line_number: Optional[int] = None) -> TimelineRecord:
    """Parse one body file line back into a :class:`TimelineRecord`.

    Raises:
        StreamReadError: the line does not hold 11 fields or a numeric
            field is not an integer.
    """

    text = line.rstrip("\r\n")

    checksum, separator, rest = text.partition(FIELD_SEPARATOR)
    right_parts = rest.rsplit(FIELD_SEPARATOR, FIELD_COUNT - 2)
    if not separator or len(right_parts) < FIELD_COUNT - 1:
        found = len(right_parts) + 1 if separator else 1
        raise StreamReadError(
            f"expected {FIELD_COUNT} fields, found {found}", line_number
        )

    (
        path,
        identity_number,
        mode,
        owner_id,
        group_id,
        size_bytes,
        access_time,
        modify_time,
        change_time,
        birth_time,
    ) = right_parts

    return TimelineRecord(
        checksum=checksum,
        path=path,
        identity_number=_unsigned(identity_number, "inode", line_number),
        mode=number_or_text(mode),
        owner_id=number_or_text(owner_id),
        group_id=number_or_text(group_id),
        size_bytes=_integer(size_bytes, "size", line_number),
        access_time=_integer(access_time, "atime", line_number),
        modify_time=_integer(modify_time, "mtime", line_number),
        change_time=_integer(change_time, "ctime", line_number),
        birth_time=_integer(birth_time, "crtime", line_number),
    )


def _integer(value: str, field_name: str, line_number: Optional[int]) -> int:
    value = value.strip()
    if not _INTEGER.match(value):
        raise StreamReadError(
            f"field {field_name} is not an integer: {value!r}", line_number
        )
    return int(value)


def _unsigned(value: str, field_name: str, line_number: Optional[int]) -> int:
    number = _integer(value, field_name, line_number)
    if not 0 <= number <= _MAX_IDENTITY:
        raise StreamReadError(
            f"field {field_name} is not an unsigned 64-bit integer: {value.strip()!r}",
            line_number,
        )
    return number


__all__ = [
    "COMMENT_PREFIX",
    "FIELD_COUNT",
    "FIELD_SEPARATOR",
    "is_comment",
    "parse_line",
    "serialize",
    "write_record",
]
