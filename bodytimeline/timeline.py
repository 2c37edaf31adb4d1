#!/usr/bin/env python3
"""
Timeline Emitter
Renders timestamp entries as MACB annotated timeline lines

Line format::

    2025-06-19 13:47:35 m.c. /path/to/file

The MACB column holds one position per timestamp class (modified,
accessed, changed, born); a letter marks the classes whose time equals the
rendered instant.
"""

from typing import Iterable, Optional, TextIO

from .core.logger import get_module_logger
from .core.record import TimestampClass, TimestampedEntry
from .core.time_utils import format_timestamp, utc_now

logger = get_module_logger("timeline")

SCOPE_NAMES = {
    "modified": TimestampClass.MODIFIED,
    "access": TimestampClass.ACCESSED,
    "ctime": TimestampClass.CHANGED,
}


def macb(entry: TimestampedEntry) -> str:
    """Return the four character MACB annotation of ``entry``"""
    return "".join(
        timestamp_class.letter if entry.matches(timestamp_class) else "."
        for timestamp_class in TimestampClass
    )


def format_line(entry: TimestampedEntry, timezone: Optional[str] = None) -> str:
    """Return the timeline line for ``entry`` without a newline"""
    return f"{format_timestamp(entry.instant, timezone)} {macb(entry)} {entry.record.path}"


def in_scope(entry: TimestampedEntry, scope: Optional[TimestampClass]) -> bool:
    """Whether ``entry`` is shown when only ``scope`` timestamps are wanted"""
    if scope is None:
        return True
    return entry.matches(scope)


def emit_timeline(
    entries: Iterable[TimestampedEntry],
    output: TextIO,
    scope: Optional[TimestampClass] = None,
    timezone: Optional[str] = None,
) -> int:
    """
    Write one line per entry to ``output``

    Entries are written in the order given; the record stream already
    sorts them by time.

    Args:
        entries: Timestamped entries, usually a materialized stream
        output: Text stream receiving the lines
        scope: Only emit entries whose instant is this class's time
        timezone: Display timezone (defaults to UTC)

    Returns:
        Number of lines written
    """
    written = 0
    for entry in entries:
        if not in_scope(entry, scope):
            continue
        output.write(format_line(entry, timezone) + "\n")
        written += 1

    logger.debug(f"Emitted {written} timeline lines")
    return written


def filter_help(filter_text: str) -> str:
    """Help text shown when a filter matched nothing"""
    hour_ago = format_timestamp(int(utc_now().timestamp()) - 3600)
    return f"""
No results found for filter: {filter_text}

Filter examples:
  hour > 12     (files modified after noon)
  hour < 6      (files modified before 6 AM)
  hour == 13    (files modified at 1 PM)
  day == 19     (files modified on the 19th)
  weekday == "Monday" (files modified on Monday)
  date > "2025-06-19 13:47:35" (files modified after specific date/time)
  date > "2025-06-19" (files modified after specific date)
  date > "2025/06/19 13:47:35" (slash format also supported)

Time ranges:
  hour < 1      = midnight to 1 AM (NOT 'less than 1 hour ago')
  hour > 12     = 1 PM to midnight
  hour >= 9 && hour <= 17 = 9 AM to 5 PM

Combine clauses with && (and), || (or), ! (not) and parentheses.
Dates are UTC; hour, day and weekday use the display timezone (--tz).

IMPORTANT: 'hour < 1' means 'between midnight and 1 AM', not 'less than 1 hour ago'
For relative time (hours ago), use: date > "{hour_ago}" (files modified in last hour)

Use --strict to show only matching timestamps instead of all timestamps for matching files.
"""


__all__ = [
    "SCOPE_NAMES",
    "emit_timeline",
    "filter_help",
    "format_line",
    "in_scope",
    "macb",
]
