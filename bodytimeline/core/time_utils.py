"""UTC and timezone helper utilities for timeline rendering."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone, tzinfo
from typing import Optional

from bodytimeline.core.errors import StreamReadError

try:  # Python 3.9+ provides :mod:`zoneinfo` in the standard library.
    from zoneinfo import ZoneInfo  # type: ignore[import-not-found]
except Exception:  # pragma: no cover - optional dependency at runtime
    ZoneInfo = None  # type: ignore[assignment]

ISO_Z_SUFFIX = "Z"
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
TIMELINE_FORMAT = "%Y-%m-%d %H:%M:%S"
WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def coerce_timezone(name: Optional[str]) -> tzinfo:
    """Return a timezone object for ``name`` falling back to UTC."""

    if not name or str(name).upper() in {"UTC", "Z"}:
        return timezone.utc

    if ZoneInfo is None:  # pragma: no cover - environment dependent
        return timezone.utc

    try:
        return ZoneInfo(str(name))  # type: ignore[return-value]
    except Exception:  # pragma: no cover - invalid tz database name
        return timezone.utc


def from_unix(seconds: int, timezone_name: Optional[str] = None) -> datetime:
    """Convert Unix ``seconds`` to an aware datetime in ``timezone_name``.

    Raises:
        StreamReadError: the instant lies outside years 1-9999.
    """

    try:
        return (EPOCH + timedelta(seconds=seconds)).astimezone(
            coerce_timezone(timezone_name)
        )
    except (OverflowError, ValueError) as exc:
        raise StreamReadError(f"time value out of range: {seconds}") from exc


def format_timestamp(seconds: int, timezone_name: Optional[str] = None) -> str:
    """Render Unix ``seconds`` as ``YYYY-MM-DD HH:MM:SS``.

    Instants a calendar date cannot hold are rendered as the raw seconds.
    """

    try:
        moment = from_unix(seconds, timezone_name)
    except StreamReadError:
        return str(seconds)
    return moment.strftime(TIMELINE_FORMAT)


def utc_now() -> datetime:
    """Return the current timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def utc_isoformat() -> str:
    """Return an ISO-8601 timestamp with an explicit trailing Z suffix."""
    return utc_now().isoformat().replace("+00:00", ISO_Z_SUFFIX)


__all__ = [
    "TIMELINE_FORMAT",
    "WEEKDAY_NAMES",
    "coerce_timezone",
    "format_timestamp",
    "from_unix",
    "utc_isoformat",
    "utc_now",
]
