"""Timeline record model shared by the producer and consumer paths."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Union

if TYPE_CHECKING:  # pragma: no cover - import for annotations only
    from bodytimeline.platform.base import StatBundle

CHECKSUM_PLACEHOLDER = "0"

# POSIX providers report numbers. Windows providers report octal permission
# strings and full SIDs as text, short SIDs (bare RIDs) as numbers. Any
# value goes through number_or_text so a body file reads back unchanged.
ModeValue = Union[int, str]
OwnerValue = Union[int, str]

# A leading zero marks an octal mode string such as "0644"; keep it textual.
_PLAIN_NUMBER = re.compile(r"^(0|[1-9][0-9]*)$")


def number_or_text(value: str) -> Union[int, str]:
    """Return ``value`` as an int when it is a plain decimal number."""

    if _PLAIN_NUMBER.match(value):
        return int(value)
    return value


class TimestampClass(Enum):
    """The four timestamp kinds of a record, in MACB order."""

    MODIFIED = ("m", "modify_time")
    ACCESSED = ("a", "access_time")
    CHANGED = ("c", "change_time")
    BORN = ("b", "birth_time")

    def __init__(self, letter: str, attribute: str):
        self.letter = letter
        self.attribute = attribute


@dataclass(frozen=True)
class TimelineRecord:
    """Metadata of one filesystem entry as stored in a body file."""

    path: str
    identity_number: int
    mode: ModeValue
    owner_id: OwnerValue
    group_id: OwnerValue
    size_bytes: int
    access_time: int
    modify_time: int
    change_time: int
    birth_time: int
    checksum: str = CHECKSUM_PLACEHOLDER

    @classmethod
    def from_stat(cls, path: str, bundle: "StatBundle") -> "TimelineRecord":
        """Build a record from a single stat provider result."""

        return cls(
            path=path,
            identity_number=bundle.identity_number,
            mode=bundle.mode,
            owner_id=bundle.owner_id,
            group_id=bundle.group_id,
            size_bytes=bundle.size_bytes,
            access_time=bundle.access_time,
            modify_time=bundle.modify_time,
            change_time=bundle.change_time,
            birth_time=bundle.birth_time,
        )

    def time_of(self, timestamp_class: TimestampClass) -> int:
        return getattr(self, timestamp_class.attribute)

    def timestamps(self) -> List[int]:
        """Return the distinct instants of the record in ascending order."""

        return sorted({self.time_of(cls) for cls in TimestampClass})


@dataclass(frozen=True)
class TimestampedEntry:
    """A record paired with one of its instants; rendered as one timeline line."""

    record: TimelineRecord
    instant: int

    def matches(self, timestamp_class: TimestampClass) -> bool:
        return self.record.time_of(timestamp_class) == self.instant


__all__ = [
    "CHECKSUM_PLACEHOLDER",
    "ModeValue",
    "OwnerValue",
    "TimelineRecord",
    "TimestampClass",
    "TimestampedEntry",
    "number_or_text",
]
