from __future__ import annotations

import io

import pytest

from bodytimeline.bodyfile.format import serialize
from bodytimeline.bodyfile.stream import BodyFileStream, open_stream
from bodytimeline.core.errors import FilterCompilationError, StreamReadError

NOON = 1750334400  # 2025-06-19 12:00:00 UTC
MORNING = 1750323600  # 2025-06-19 09:00:00 UTC
NIGHT = 1750287600  # 2025-06-18 23:00:00 UTC


def _source(*records) -> io.BytesIO:
    return io.BytesIO("".join(serialize(record) for record in records).encode("utf-8"))


def test_skips_comments_and_blank_lines(make_record) -> None:
    payload = b"# generated\n\n" + serialize(make_record()).encode("utf-8")
    stream = BodyFileStream(io.BytesIO(payload))

    assert stream.materialize() == 1
    assert [entry.record.path for entry in stream] == ["/evidence/file.txt"]


def test_records_are_lazy_and_admit_matching(make_record) -> None:
    stream = BodyFileStream(
        _source(
            make_record("/early", access_time=MORNING, modify_time=MORNING,
                        change_time=MORNING, birth_time=MORNING),
            make_record("/late", access_time=NOON, modify_time=NOON,
                        change_time=NOON, birth_time=NOON),
        )
    )
    stream.add_filter("hour >= 12")

    assert [record.path for record in stream.records()] == ["/late"]


def test_entries_sorted_by_instant_with_stable_ties(make_record) -> None:
    stream = BodyFileStream(
        _source(
            make_record("/b", access_time=NOON, modify_time=NOON, change_time=NOON, birth_time=NOON),
            make_record("/a", access_time=NIGHT, modify_time=NOON, change_time=NOON, birth_time=NOON),
            make_record("/c", access_time=NOON, modify_time=NOON, change_time=NOON, birth_time=NOON),
        )
    )

    entries = list(stream)

    assert [(entry.instant, entry.record.path) for entry in entries] == [
        (NIGHT, "/a"),
        (NOON, "/b"),
        (NOON, "/a"),
        (NOON, "/c"),
    ]


def test_non_strict_keeps_every_instant_of_admitted_record(make_record) -> None:
    record = make_record(access_time=NOON, modify_time=MORNING, change_time=MORNING, birth_time=NIGHT)
    stream = BodyFileStream(_source(record))
    stream.add_filter("hour == 12")

    assert stream.materialize() == 1
    assert sorted(entry.instant for entry in stream) == [NIGHT, MORNING, NOON]


def test_strict_keeps_only_matching_instants(make_record) -> None:
    record = make_record(access_time=NOON, modify_time=MORNING, change_time=MORNING, birth_time=NIGHT)
    stream = BodyFileStream(_source(record), strict=True)
    stream.add_filter("hour == 12")

    stream.materialize()

    assert [entry.instant for entry in stream] == [NOON]


def test_multiple_filters_must_all_pass(make_record) -> None:
    record = make_record(access_time=NOON, modify_time=NOON, change_time=NOON, birth_time=NOON)
    stream = BodyFileStream(_source(record))
    stream.add_filter("hour == 12")
    stream.add_filter('weekday == "friday"')

    assert stream.materialize() == 0
    assert list(stream) == []


def test_filters_use_display_timezone(make_record) -> None:
    pytest.importorskip("zoneinfo")
    record = make_record(access_time=NOON, modify_time=NOON, change_time=NOON, birth_time=NOON)
    stream = BodyFileStream(_source(record), timezone="Europe/Berlin")
    stream.add_filter("hour == 14")

    assert stream.materialize() == 1


def test_invalid_filter_is_rejected_before_reading(make_record) -> None:
    stream = BodyFileStream(_source(make_record()))

    with pytest.raises(FilterCompilationError):
        stream.add_filter("hour >")
    assert stream.filters == ()


def test_malformed_line_reports_line_number(make_record) -> None:
    payload = serialize(make_record()).encode("utf-8") + b"0|/broken|1\n"
    stream = BodyFileStream(io.BytesIO(payload))

    with pytest.raises(StreamReadError, match="line 2"):
        stream.materialize()


def test_materialize_twice_raises(make_record) -> None:
    stream = BodyFileStream(_source(make_record()))
    stream.materialize()

    with pytest.raises(StreamReadError, match="already materialized"):
        stream.materialize()
    assert stream.materialized
    assert stream.record_count == 1


def test_undecodable_bytes_survive(tmp_path) -> None:
    line = b"0|/evidence/\xff.bin|1|33188|0|0|0|1|1|1|1\n"
    target = tmp_path / "raw.body"
    target.write_bytes(line)

    with open_stream(target) as stream:
        (entry,) = list(stream)

    assert entry.record.path.encode("utf-8", errors="surrogateescape") == b"/evidence/\xff.bin"


def test_open_stream_wraps_existing_source(make_record) -> None:
    source = _source(make_record())

    with open_stream(source) as stream:
        assert stream.materialize() == 1
    assert not source.closed


def test_filter_on_instant_without_calendar_date_names_line(make_record) -> None:
    stream = BodyFileStream(_source(make_record(), make_record("/far", access_time=253402300800)))
    stream.add_filter("hour > 1")

    with pytest.raises(StreamReadError, match="line 2: time value out of range"):
        stream.materialize()


def test_unfiltered_out_of_range_instant_is_kept(make_record) -> None:
    stream = BodyFileStream(_source(make_record("/far", access_time=-62135596801)))

    assert stream.materialize() == 1
    assert [entry.instant for entry in stream][0] == -62135596801
