"""Platform stat providers.

The rest of the package only sees :class:`StatBundle`; which provider fills
it is decided once per run by :func:`get_stat_provider`.
"""

from __future__ import annotations

import sys

from .base import StatBundle, StatProvider, short_sid_value, shorten_sid
from .posix import PosixStatProvider


def get_stat_provider(short_sid: bool = False) -> StatProvider:
    """Return the provider for the running platform.

    ``short_sid`` only affects Windows, where owner and group are SIDs.
    """

    if sys.platform == "win32":
        from .windows import WindowsStatProvider  # pywin32 is Windows-only

        return WindowsStatProvider(short_sid=short_sid)
    return PosixStatProvider()


__all__ = [
    "PosixStatProvider",
    "StatBundle",
    "StatProvider",
    "get_stat_provider",
    "short_sid_value",
    "shorten_sid",
]
