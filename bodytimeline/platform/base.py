"""Normalized stat bundle and the provider interface."""

from __future__ import annotations

import stat as stat_module
from abc import ABC, abstractmethod
from dataclasses import dataclass

from bodytimeline.core.record import ModeValue, OwnerValue, number_or_text

KIND_FILE = "file"
KIND_DIRECTORY = "directory"
KIND_SYMLINK = "symlink"
KIND_OTHER = "other"

_NS_PER_SECOND = 1_000_000_000


@dataclass(frozen=True)
class StatBundle:
    """Attributes of one filesystem entry, identical in shape on every OS."""

    kind: str
    identity_number: int
    mode: ModeValue
    owner_id: OwnerValue
    group_id: OwnerValue
    size_bytes: int
    access_time: int
    modify_time: int
    change_time: int
    birth_time: int


class StatProvider(ABC):
    """Supplies a :class:`StatBundle` for a path without following symlinks.

    Implementations raise :class:`~bodytimeline.core.errors.EntryAccessError`
    for any failure so the collector can skip the entry.
    """

    name = "abstract"

    @abstractmethod
    def stat(self, path: str) -> StatBundle:
        """Return the normalized attributes of ``path``."""


def kind_of(st_mode: int) -> str:
    if stat_module.S_ISLNK(st_mode):
        return KIND_SYMLINK
    if stat_module.S_ISDIR(st_mode):
        return KIND_DIRECTORY
    if stat_module.S_ISREG(st_mode):
        return KIND_FILE
    return KIND_OTHER


def ns_to_seconds(value_ns: int) -> int:
    """Truncate a nanosecond timestamp to whole seconds (floor)."""

    return value_ns // _NS_PER_SECOND


def shorten_sid(sid: str) -> str:
    """Return the last hyphen-delimited component of a SID string.

    ``S-1-5-21-3623811015-3361044348-30300820-1013`` becomes ``1013``.
    """

    return sid.rsplit("-", 1)[-1]


def short_sid_value(sid: str) -> OwnerValue:
    """Return the short form of ``sid`` as stored in a record.

    The relative identifier is numeric, so it is kept as an int, the same
    way a body file parser reads it back.
    """

    return number_or_text(shorten_sid(sid))


__all__ = [
    "KIND_DIRECTORY",
    "KIND_FILE",
    "KIND_OTHER",
    "KIND_SYMLINK",
    "StatBundle",
    "StatProvider",
    "kind_of",
    "ns_to_seconds",
    "short_sid_value",
    "shorten_sid",
]
