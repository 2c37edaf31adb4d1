from __future__ import annotations

import pytest

from bodytimeline.core.errors import FilterCompilationError, InvalidDateFormat
from bodytimeline.filters.compiler import compile_filter, parse_date_literal


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('date > "2025-06-19"', "date > 1750291200"),
        ('date > "2025-06-19 13:47:35"', "date > 1750340855"),
        ('date > "2025-06-19 13:47"', "date > 1750340820"),
        ("date >= '2025-06-19'", "date >= 1750291200"),
        ("date == 2025-06-19", "date == 1750291200"),
    ],
)
def test_date_literals_become_utc_timestamps(raw: str, expected: str) -> None:
    assert compile_filter(raw) == expected


def test_slash_dates_equal_dash_dates() -> None:
    assert compile_filter('date > "2025/06/19 13:47:35"') == compile_filter(
        'date > "2025-06-19 13:47:35"'
    )


def test_whitespace_and_other_clauses_are_preserved() -> None:
    compiled = compile_filter('hour > 12 &&  date<"2025-06-19"  || day == 3')

    assert compiled == "hour > 12 &&  date<1750291200  || day == 3"


def test_every_date_clause_is_rewritten() -> None:
    compiled = compile_filter('date >= "2025-06-01" && date < "2025-07-01"')

    assert compiled == "date >= 1748736000 && date < 1751328000"


def test_filter_without_dates_passes_through() -> None:
    assert compile_filter('weekday == "Monday"') == 'weekday == "Monday"'


def test_compiling_is_idempotent() -> None:
    once = compile_filter('date > "2025-06-19" && hour < 6')

    assert compile_filter(once) == once


@pytest.mark.parametrize(
    "raw",
    [
        'date > "2025-13-01"',
        'date > "2025-02-30"',
        'date > "yesterday"',
        'date > "19-06-2025"',
        'date > "2025-06-32"',
        'date > "notadate"',
    ],
)
def test_invalid_dates_raise(raw: str) -> None:
    with pytest.raises(InvalidDateFormat) as excinfo:
        compile_filter(raw)

    assert isinstance(excinfo.value, FilterCompilationError)
    assert "YYYY-MM-DD" in str(excinfo.value)


def test_parse_date_literal_strips_quotes() -> None:
    assert parse_date_literal('"1970-01-01"') == 0
    assert parse_date_literal("1969-12-31 23:59:59") == -1
