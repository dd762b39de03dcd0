"""Reader for NDE index files.

An index file looks like::

    +------------+-------------+-------+-------+-----+
    | "NDEINDEX" | no. records | index | index | ... |
    +------------+-------------+-------+-------+-----+

The record count is a 32-bit little-endian unsigned integer. Each index is a
32-bit id followed by one (offset, key) pair of 32-bit integers per record.
Nothing says how many indices follow; blocks are read until the file ends on
an index boundary. The primary index carries id 255.
"""

from __future__ import annotations

import logging
import struct
from typing import BinaryIO, Iterator

from ndextract.errors import NoIndicesError, TableIOError, TruncatedFileError
from ndextract.stream import check_signature, unpack

logger = logging.getLogger(__name__)

INDEX_SIGNATURE = b"NDEINDEX"
PRIMARY_INDEX = 255

_ENTRY = struct.Struct("<Ii")


class NdeIndex:
    """One traversal order over a table's records."""

    def __init__(self, index_id: int, entries: list[tuple[int, int]]) -> None:
        self.id = index_id
        self._entries = entries

    @classmethod
    def from_stream(cls, stream: BinaryIO, count: int) -> NdeIndex | None:
        """Read one index block of ``count`` entries.

        Returns None if the stream is exhausted before the block's id.
        """
        try:
            head = stream.read(4)
        except OSError as e:
            raise TableIOError(getattr(stream, "name", None), e) from e
        if not head:
            return None
        if len(head) != 4:
            raise TruncatedFileError("index id", 4, len(head))
        (index_id,) = struct.unpack("<I", head)

        size = count * _ENTRY.size
        try:
            data = stream.read(size)
        except OSError as e:
            raise TableIOError(getattr(stream, "name", None), e) from e
        if len(data) != size:
            raise TruncatedFileError(f"index {index_id}", size, len(data))

        return cls(index_id, list(_ENTRY.iter_unpack(data)))

    @property
    def is_primary(self) -> bool:
        return self.id == PRIMARY_INDEX

    def length(self) -> int:
        """Return the number of records in this index."""
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def offset_at(self, i: int) -> int:
        """Return the data file offset of record ``i`` in this order."""
        return self._entries[i][0]

    def key_at(self, i: int) -> int:
        """Return the auxiliary key stored alongside record ``i``."""
        return self._entries[i][1]

    def __iter__(self) -> Iterator[tuple[int, int]]:
        return iter(self._entries)

    def __repr__(self) -> str:
        return f"NdeIndex(id={self.id}, length={len(self._entries)})"


def read_indices(stream: BinaryIO) -> list[NdeIndex]:
    """Read every index from an index file positioned at its signature."""
    check_signature(stream, INDEX_SIGNATURE)
    (count,) = unpack(stream, "<I", "record count")

    indices: list[NdeIndex] = []
    while True:
        index = NdeIndex.from_stream(stream, count)
        if index is None:
            break
        indices.append(index)

    logger.debug("read %d indices of %d records each", len(indices), count)
    return indices


def primary_index(indices: list[NdeIndex]) -> NdeIndex:
    """Pick the primary index (id 255) from a list of indices.

    Falls back to the first index, with a warning, when no index carries the
    primary id.
    """
    if not indices:
        raise NoIndicesError()
    for index in indices:
        if index.is_primary:
            return index
    logger.warning(
        "no index has id %d; using the first index (id %d)", PRIMARY_INDEX, indices[0].id
    )
    return indices[0]
