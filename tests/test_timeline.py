from __future__ import annotations

import io

import pytest

from bodytimeline.core.record import TimestampClass, TimestampedEntry
from bodytimeline.timeline import emit_timeline, filter_help, format_line, in_scope, macb

T = 1750340855
EARLIER = T - 3600


def test_macb_all_classes(make_record) -> None:
    entry = TimestampedEntry(make_record(), T)

    assert macb(entry) == "macb"
    assert format_line(entry) == "2025-06-19 13:47:35 macb /evidence/file.txt"


def test_macb_partial(make_record) -> None:
    record = make_record(modify_time=T, access_time=T, change_time=EARLIER, birth_time=EARLIER)

    assert macb(TimestampedEntry(record, T)) == "ma.."
    assert macb(TimestampedEntry(record, EARLIER)) == "..cb"


def test_format_line_in_display_timezone(make_record) -> None:
    pytest.importorskip("zoneinfo")
    entry = TimestampedEntry(make_record(), T)

    assert format_line(entry, "Europe/Berlin").startswith("2025-06-19 15:47:35 ")


def test_scope_keeps_only_entries_of_that_class(make_record) -> None:
    record = make_record(modify_time=EARLIER)

    assert in_scope(TimestampedEntry(record, EARLIER), TimestampClass.MODIFIED)
    assert not in_scope(TimestampedEntry(record, T), TimestampClass.MODIFIED)
    assert in_scope(TimestampedEntry(record, T), None)


def test_emit_timeline_counts_written_lines(make_record) -> None:
    record = make_record(modify_time=EARLIER)
    entries = [TimestampedEntry(record, EARLIER), TimestampedEntry(record, T)]
    output = io.StringIO()

    written = emit_timeline(entries, output, scope=TimestampClass.ACCESSED)

    assert written == 1
    assert output.getvalue() == "2025-06-19 13:47:35 .acb /evidence/file.txt\n"


def test_filter_help_mentions_filter_and_relative_example() -> None:
    text = filter_help("hour > 25")

    assert "No results found for filter: hour > 25" in text
    assert "date > \"" in text
    assert "--strict" in text


@pytest.mark.parametrize("instant", [253402300800, -62135596801])
def test_format_line_renders_out_of_range_instant_as_seconds(make_record, instant: int) -> None:
    record = make_record(access_time=instant)

    assert format_line(TimestampedEntry(record, instant)) == f"{instant} .a.. /evidence/file.txt"
