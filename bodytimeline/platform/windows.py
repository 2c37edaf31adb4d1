"""Windows stat provider backed by pywin32 security descriptors."""

from __future__ import annotations

import os
import stat as stat_module

import pywintypes
import win32security

from bodytimeline.core.errors import EntryAccessError
from bodytimeline.core.record import OwnerValue

from .base import StatBundle, StatProvider, kind_of, ns_to_seconds, short_sid_value

_ERROR_FILE_NOT_FOUND = 2
_ERROR_PATH_NOT_FOUND = 3
_ERROR_ACCESS_DENIED = 5

_SECURITY_INFORMATION = (
    win32security.OWNER_SECURITY_INFORMATION
    | win32security.GROUP_SECURITY_INFORMATION
)


def mode_octal(st_mode: int) -> str:
    """Return the permission bits as a four digit octal string (``0666``)."""

    return f"{stat_module.S_IMODE(st_mode) & 0o7777:04o}"


class WindowsStatProvider(StatProvider):
    """Reads file index, times and owner/group SIDs.

    NTFS has no inode change time, so ``change_time`` is the last write time.
    ``birth_time`` is the creation time.
    """

    name = "windows"

    def __init__(self, short_sid: bool = False):
        self.short_sid = short_sid

    def stat(self, path: str) -> StatBundle:
        try:
            st = os.lstat(path)
        except OSError as exc:
            raise EntryAccessError.from_os_error(path, exc) from exc

        owner_sid, group_sid = self._sids(path)

        birth_ns = getattr(st, "st_birthtime_ns", None)
        if birth_ns is None:
            # Before Python 3.12 st_ctime is the creation time on Windows.
            birth_ns = st.st_ctime_ns
        modify_time = ns_to_seconds(st.st_mtime_ns)

        return StatBundle(
            kind=kind_of(st.st_mode),
            identity_number=st.st_ino,
            mode=mode_octal(st.st_mode),
            owner_id=owner_sid,
            group_id=group_sid,
            size_bytes=st.st_size,
            access_time=ns_to_seconds(st.st_atime_ns),
            modify_time=modify_time,
            change_time=modify_time,
            birth_time=ns_to_seconds(birth_ns),
        )

    def _sids(self, path: str) -> tuple[OwnerValue, OwnerValue]:
        try:
            descriptor = win32security.GetNamedSecurityInfo(
                path, win32security.SE_FILE_OBJECT, _SECURITY_INFORMATION
            )
            owner = win32security.ConvertSidToStringSid(
                descriptor.GetSecurityDescriptorOwner()
            )
            group = win32security.ConvertSidToStringSid(
                descriptor.GetSecurityDescriptorGroup()
            )
        except pywintypes.error as exc:
            if exc.winerror in (_ERROR_FILE_NOT_FOUND, _ERROR_PATH_NOT_FOUND):
                reason = EntryAccessError.NOT_FOUND
            elif exc.winerror == _ERROR_ACCESS_DENIED:
                reason = EntryAccessError.ACCESS_DENIED
            else:
                reason = EntryAccessError.OTHER
            raise EntryAccessError(
                path, reason, f"failed to get SIDs: {exc.strerror}"
            ) from exc

        if self.short_sid:
            return short_sid_value(owner), short_sid_value(group)
        return owner, group
