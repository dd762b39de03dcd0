"""Read access to an NDE table (an index file plus a data file)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, BinaryIO, Iterator

from ndextract.errors import FieldChainError, MissingRecordsError, TableIOError
from ndextract.fields import follow_redirects, read_field
from ndextract.index import NdeIndex, primary_index, read_indices
from ndextract.schema import AttributeMap, build_attribute_map
from ndextract.stream import check_signature, seek
from ndextract.track import Track, materialize
from ndextract.types import Field

logger = logging.getLogger(__name__)

DATA_SIGNATURE = b"NDETABLE"

# Record 0 declares the columns, record 1 the indices
COLUMNS_RECORD = 0
INDICES_RECORD = 1
FIRST_TRACK_RECORD = 2


def walk_record(stream: BinaryIO, at: int) -> Iterator[Field]:
    """Yield the fields of the record starting at offset ``at``.

    Fields are yielded in chain order, which need not be column order. The
    walk stops at the first field whose next offset is 0; a record offset of
    0 has no fields.
    """
    visited: set[int] = set()
    offset = at
    while offset != 0:
        if offset in visited:
            raise FieldChainError(at, offset)
        visited.add(offset)

        seek(stream, offset)
        field_id, kind = follow_redirects(stream)
        field = read_field(stream, field_id, kind, offset=offset)
        yield field
        offset = field.next_offset


class Table:
    """An open NDE table, traversed in primary index order."""

    def __init__(self, index_path: Path | str, data_path: Path | str) -> None:
        self.index_path = Path(index_path)
        self.data_path = Path(data_path)
        self.indices: list[NdeIndex] = []
        self._data: BinaryIO | None = None

        self._open()

    def _open(self) -> None:
        """Read the index file and open the data file."""
        try:
            with open(self.index_path, "rb") as f:
                self.indices = read_indices(f)
        except OSError as e:
            raise TableIOError(self.index_path, e) from e
        logger.info("There are %d indices.", len(self.indices))

        self.primary = primary_index(self.indices)
        logger.info("Each index has %d records.", self.primary.length())

        try:
            self._data = open(self.data_path, "rb")
        except OSError as e:
            raise TableIOError(self.data_path, e) from e
        try:
            check_signature(self._data, DATA_SIGNATURE)
        except Exception:
            self.close()
            raise

    @property
    def count(self) -> int:
        """Return the number of records in the table."""
        return self.primary.length()

    def _stream(self) -> BinaryIO:
        if self._data is None:
            raise ValueError("Table is closed")
        return self._data

    def record(self, index: int) -> list[Field]:
        """Return the fields of record ``index`` (in primary index order)."""
        if index < 0 or index >= self.count:
            raise IndexError(f"Record {index} out of range [0, {self.count})")
        at = self.primary.offset_at(index)
        logger.debug("Parsing record %d at %#06x.", index, at)
        return list(walk_record(self._stream(), at))

    def records(self, start: int = 0) -> Iterator[tuple[int, list[Field]]]:
        """Yield ``(record index, fields)`` for every record from ``start`` on."""
        for i in range(start, self.count):
            yield i, self.record(i)

    def attribute_map(self) -> AttributeMap:
        """Build the column id -> attribute map from the table's first record."""
        if self.count < 1:
            raise MissingRecordsError(self.count)
        return build_attribute_map(self.record(COLUMNS_RECORD))

    def tracks(self) -> Iterator[Track]:
        """Yield one Track per record after the column and index records.

        The attribute map is built once, before the first track.
        """
        if self.count < FIRST_TRACK_RECORD:
            raise MissingRecordsError(self.count)
        attribute_map = self.attribute_map()
        for i, fields in self.records(FIRST_TRACK_RECORD):
            yield materialize(fields, attribute_map, record=i)

    def close(self) -> None:
        """Close the data file."""
        if self._data is not None:
            self._data.close()
            self._data = None

    def __enter__(self) -> Table:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
