"""Lazy body file reader with temporal filtering.

A :class:`BodyFileStream` is forward-only: :meth:`BodyFileStream.records`
and :meth:`BodyFileStream.materialize` both consume the underlying source,
so re-reading requires opening a new stream.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import IO, Iterator, List, Optional, Tuple, Union

from bodytimeline.core.errors import StreamReadError
from bodytimeline.core.record import TimelineRecord, TimestampedEntry
from bodytimeline.filters.expression import FilterExpression, all_match, parse_expression

from .format import is_comment, parse_line

LineSource = IO  # binary or text stream yielding one line per iteration


class BodyFileStream:
    """
    Iterate the records of a body file, optionally filtered

    Filters are evaluated per timestamp instant. A record is admitted when at
    least one of its instants passes every filter. Without ``strict`` all
    distinct instants of an admitted record become timeline entries; with
    ``strict`` only the instants that passed do.
    """

    def __init__(
        self,
        source: LineSource,
        *,
        strict: bool = False,
        timezone: str = "UTC",
        encoding: str = "utf-8",
        owns_source: bool = False,
    ):
        self.strict = strict
        self.timezone = timezone
        self.encoding = encoding
        self._source = source
        self._owns_source = owns_source
        self._filters: List[FilterExpression] = []
        self._entries: Optional[List[TimestampedEntry]] = None
        self._record_count = 0
        self.logger = logging.getLogger(f"bodytimeline.{self.__class__.__name__}")

    @classmethod
    def open(cls, path: Union[str, Path], **kwargs) -> "BodyFileStream":
        """Open ``path`` in binary mode; the stream closes it on :meth:`close`."""

        handle = Path(path).open("rb")
        return cls(handle, owns_source=True, **kwargs)

    def __enter__(self) -> "BodyFileStream":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        if self._owns_source:
            self._source.close()

    # ------------------------------------------------------------------
    # Filtering
    # ------------------------------------------------------------------
    @property
    def filters(self) -> Tuple[FilterExpression, ...]:
        return tuple(self._filters)

    def add_filter(self, expression: Union[str, FilterExpression]) -> FilterExpression:
        """Attach a compiled filter; multiple filters must all pass.

        Raises:
            FilterCompilationError: ``expression`` is not a valid filter.
        """

        if isinstance(expression, str):
            expression = parse_expression(expression)
        self._filters.append(expression)
        self.logger.debug("Added filter: %s", expression.source)
        return expression

    def selected_instants(self, record: TimelineRecord) -> List[int]:
        """Return the instants of ``record`` that become timeline entries."""

        instants = record.timestamps()
        if not self._filters:
            return instants

        passing = [
            instant
            for instant in instants
            if all_match(self._filters, instant, self.timezone)
        ]
        if not passing:
            return []
        return passing if self.strict else instants

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------
    def _parsed_records(self) -> Iterator[Tuple[int, TimelineRecord]]:
        for line_number, raw in enumerate(self._source, start=1):
            if isinstance(raw, bytes):
                line = raw.decode(self.encoding, errors="surrogateescape")
            else:
                line = raw
            if not line.strip() or is_comment(line):
                continue
            yield line_number, parse_line(line, line_number)

    def _admitted_instants(self, record: TimelineRecord, line_number: int) -> List[int]:
        try:
            return self.selected_instants(record)
        except StreamReadError as exc:
            raise StreamReadError(str(exc), line_number) from exc

    def records(self) -> Iterator[TimelineRecord]:
        """Lazily yield the records admitted by the attached filters.

        Raises:
            StreamReadError: a line is malformed.
        """

        for line_number, record in self._parsed_records():
            if self._admitted_instants(record, line_number):
                yield record

    def materialize(self) -> int:
        """Read the whole stream and index its timestamp entries by time.

        Returns:
            Number of admitted records.

        Raises:
            StreamReadError: a line is malformed, a filtered instant has no
                calendar date, or the stream was already materialized.
        """

        if self._entries is not None:
            raise StreamReadError("stream already materialized")

        entries: List[TimestampedEntry] = []
        count = 0
        for line_number, record in self._parsed_records():
            instants = self._admitted_instants(record, line_number)
            if not instants:
                continue
            count += 1
            entries.extend(TimestampedEntry(record, instant) for instant in instants)

        # Stable: entries sharing an instant keep their input order.
        entries.sort(key=lambda entry: entry.instant)

        self._entries = entries
        self._record_count = count
        self.logger.debug(
            "Materialized %d records into %d timeline entries", count, len(entries)
        )
        return count

    @property
    def materialized(self) -> bool:
        return self._entries is not None

    @property
    def record_count(self) -> int:
        return self._record_count

    def __iter__(self) -> Iterator[TimestampedEntry]:
        if self._entries is None:
            self.materialize()
        return iter(self._entries or [])


def open_stream(source: Union[str, Path, LineSource], **kwargs) -> BodyFileStream:
    """Return a stream over a path or an already open byte source."""

    if isinstance(source, (str, Path)):
        return BodyFileStream.open(source, **kwargs)
    return BodyFileStream(source, **kwargs)


__all__ = ["BodyFileStream", "open_stream"]
