"""Rewrite human readable dates in filter expressions to Unix timestamps.

``date > "2025/06/19 13:47"`` becomes ``date > 1750340820``. Only the
literal is replaced; the operator and the whitespace around it are kept so
the rest of the expression reaches the evaluator untouched.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone

from bodytimeline.core.errors import InvalidDateFormat
from bodytimeline.core.logger import get_module_logger

DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
)

_DATE_CLAUSE = re.compile(
    r"""
    \bdate(?P<before>\s*)(?P<op>[<>=!]+)(?P<after>\s*)
    (?P<literal>
        (?P<quote>["']?)
        (?P<value>[0-9]{4}-[0-9]{1,2}-[0-9]{1,2}
            (?:\s+[0-9]{1,2}:[0-9]{1,2}(?::[0-9]{1,2})?)?)
        (?P=quote)
    )
    """,
    re.VERBOSE,
)

# Any quoted operand of a date comparison left over after rewriting.
_QUOTED_DATE_CLAUSE = re.compile(
    r"""\bdate\s*[<>=!]+\s*(?P<literal>"[^"]*"|'[^']*')"""
)

logger = get_module_logger("filters")


def parse_date_literal(text: str) -> int:
    """Convert ``YYYY-MM-DD[ HH:MM[:SS]]`` (UTC) to Unix seconds.

    Surrounding quotes are ignored. Slash separated dates are not accepted
    here; :func:`compile_filter` rewrites them beforehand.
    """

    value = text.strip("\"'")
    for date_format in DATE_FORMATS:
        try:
            parsed = datetime.strptime(value, date_format)
        except ValueError:
            continue
        return int(parsed.replace(tzinfo=timezone.utc).timestamp())
    raise InvalidDateFormat(value)


def compile_filter(raw_filter: str) -> str:
    """Return ``raw_filter`` with every date literal replaced by a timestamp.

    Raises:
        InvalidDateFormat: a ``date`` comparison holds a literal that is not
            a valid date.
    """

    result = raw_filter.replace("/", "-")
    matches = list(_DATE_CLAUSE.finditer(result))

    # Last to first keeps the offsets of earlier matches valid.
    for match in reversed(matches):
        timestamp = parse_date_literal(match.group("value"))
        start, end = match.span("literal")
        result = f"{result[:start]}{timestamp}{result[end:]}"

    leftover = _QUOTED_DATE_CLAUSE.search(result)
    if leftover:
        raise InvalidDateFormat(leftover.group("literal").strip("\"'"))

    if matches:
        logger.debug("Compiled filter %r to %r", raw_filter, result)
    return result


__all__ = ["DATE_FORMATS", "compile_filter", "parse_date_literal"]
