"""POSIX stat provider (Linux, macOS, BSD)."""

from __future__ import annotations

import os

from bodytimeline.core.errors import EntryAccessError

from .base import StatBundle, StatProvider, kind_of, ns_to_seconds


class PosixStatProvider(StatProvider):
    """Reads inode metadata with :func:`os.lstat`.

    ``mode`` is the numeric ``st_mode`` (type and permission bits), owner and
    group are the numeric uid/gid. The birth time is reported where the
    platform exposes one (``st_birthtime`` on macOS/BSD); elsewhere it falls
    back to the inode change time.
    """

    name = "posix"

    def stat(self, path: str) -> StatBundle:
        try:
            st = os.lstat(path)
        except OSError as exc:
            raise EntryAccessError.from_os_error(path, exc) from exc

        change_time = ns_to_seconds(st.st_ctime_ns)
        birth = getattr(st, "st_birthtime", None)
        birth_time = int(birth // 1) if birth is not None else change_time

        return StatBundle(
            kind=kind_of(st.st_mode),
            identity_number=st.st_ino,
            mode=st.st_mode,
            owner_id=st.st_uid,
            group_id=st.st_gid,
            size_bytes=st.st_size,
            access_time=ns_to_seconds(st.st_atime_ns),
            modify_time=ns_to_seconds(st.st_mtime_ns),
            change_time=change_time,
            birth_time=birth_time,
        )
