"""Decoding of individual NDE fields.

Every field in the data file starts with the same header::

    +----+------+----------+------+------+---------+
    | id | type | max_size | next | prev | payload |
    +----+------+----------+------+------+---------+

``id`` and ``type`` are single bytes; ``max_size`` (the size of the payload
region), ``next`` and ``prev`` are 32-bit little-endian unsigned integers.
Older documentation of the format lists ``prev`` before ``next``; the engine
itself writes ``next`` first, and that is the order read here.

A field of type REDIRECTOR has no header beyond ``id`` and ``type``: it holds
a 32-bit absolute offset at which the real field (starting again with ``id``
and ``type``) is found.

Payload layouts after the header:

- COLUMN: type (u8), unique flag (u8), name length (u8), name
- INDEX: position (i32), referenced type (i32), name length (u8), name
- STRING, FILENAME: byte count (u16), then text. UTF-16 text starts with a
  byte order mark; anything else is taken as UTF-8.
- INTEGER, DATETIME, LENGTH: i32
- INT64: i64

All other kinds are kept as ``max_size`` raw bytes.
"""

from __future__ import annotations

import logging
from typing import BinaryIO, Callable

from ndextract.errors import RedirectLoopError, StringDecodeError
from ndextract.stream import read_exact, seek, tell, unpack
from ndextract.types import (
    ColumnValue,
    DatetimeValue,
    Field,
    FieldHeader,
    FieldKind,
    FieldValue,
    FilenameValue,
    Int64Value,
    IndexValue,
    IntegerValue,
    LengthValue,
    StringValue,
    UnknownValue,
)

logger = logging.getLogger(__name__)

# Upper bound on redirects followed before a field is reached
MAX_REDIRECTS = 32

HEADER_FORMAT = "<III"

UTF16_LE_BOM = b"\xff\xfe"
UTF16_BE_BOM = b"\xfe\xff"


def follow_redirects(stream: BinaryIO, max_hops: int = MAX_REDIRECTS) -> tuple[int, FieldKind]:
    """Read a field's id and type, following any redirects.

    On return the stream is positioned at the common header of the real
    field. Raises RedirectLoopError if a redirect target repeats or more than
    ``max_hops`` redirects are followed.
    """
    visited: set[int] = set()
    while True:
        at = tell(stream)
        if at in visited or len(visited) > max_hops:
            raise RedirectLoopError(at, len(visited))
        visited.add(at)

        field_id, code = unpack(stream, "<BB", "field id and type")
        kind = FieldKind.from_code(code)
        if kind is not FieldKind.REDIRECTOR:
            return field_id, kind

        (target,) = unpack(stream, "<I", "redirect offset")
        logger.debug("found redirect, jumping to %#06x", target)
        seek(stream, target)


def read_header(stream: BinaryIO, field_id: int) -> FieldHeader:
    """Read the 12-byte header that follows a field's id and type."""
    max_size, next_offset, prev_offset = unpack(stream, HEADER_FORMAT, "field header")
    return FieldHeader(
        id=field_id,
        max_size_on_disk=max_size,
        next_offset=next_offset,
        prev_offset=prev_offset,
    )


def decode_text(data: bytes) -> str:
    """Decode string bytes, honouring a UTF-16 byte order mark if present."""
    if len(data) >= 2 and len(data) % 2 == 0 and data[:2] == UTF16_LE_BOM:
        encoding, body = "utf-16-le", data[2:]
    elif len(data) >= 2 and len(data) % 2 == 0 and data[:2] == UTF16_BE_BOM:
        encoding, body = "utf-16-be", data[2:]
    else:
        encoding, body = "utf-8", data
    try:
        return body.decode(encoding)
    except UnicodeDecodeError as e:
        raise StringDecodeError(encoding.upper(), data) from e


def _read_name(stream: BinaryIO, size: int) -> str:
    data = read_exact(stream, size, "name")
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise StringDecodeError("UTF-8", data) from e


def _read_text(stream: BinaryIO) -> str:
    (cb,) = unpack(stream, "<H", "string length")
    if cb == 0:
        return ""
    return decode_text(read_exact(stream, cb, "string"))


def _decode_column(stream: BinaryIO, header: FieldHeader) -> FieldValue:
    code, unique, name_len = unpack(stream, "<BBB", "column")
    return ColumnValue(
        id=header.id,
        name=_read_name(stream, name_len),
        column_kind=FieldKind.from_code(code),
        unique=unique != 0,
    )


def _decode_index(stream: BinaryIO, header: FieldHeader) -> FieldValue:
    # The name length is a single byte, whatever older notes on the format say
    position, kind_ref, name_len = unpack(stream, "<iiB", "index")
    return IndexValue(
        id=header.id,
        kind_ref=kind_ref,
        position=position,
        name=_read_name(stream, name_len),
    )


def _decode_string(stream: BinaryIO, header: FieldHeader) -> FieldValue:
    return StringValue(_read_text(stream))


def _decode_filename(stream: BinaryIO, header: FieldHeader) -> FieldValue:
    return FilenameValue(_read_text(stream))


def _decode_integer(stream: BinaryIO, header: FieldHeader) -> FieldValue:
    return IntegerValue(unpack(stream, "<i", "integer")[0])


def _decode_datetime(stream: BinaryIO, header: FieldHeader) -> FieldValue:
    return DatetimeValue(unpack(stream, "<i", "datetime")[0])


def _decode_length(stream: BinaryIO, header: FieldHeader) -> FieldValue:
    return LengthValue(unpack(stream, "<i", "length")[0])


def _decode_int64(stream: BinaryIO, header: FieldHeader) -> FieldValue:
    return Int64Value(unpack(stream, "<q", "int64")[0])


PAYLOAD_DECODERS: dict[FieldKind, Callable[[BinaryIO, FieldHeader], FieldValue]] = {
    FieldKind.COLUMN: _decode_column,
    FieldKind.INDEX: _decode_index,
    FieldKind.STRING: _decode_string,
    FieldKind.INTEGER: _decode_integer,
    FieldKind.DATETIME: _decode_datetime,
    FieldKind.LENGTH: _decode_length,
    FieldKind.FILENAME: _decode_filename,
    FieldKind.INT64: _decode_int64,
}


def read_field(stream: BinaryIO, field_id: int, kind: FieldKind, offset: int = 0) -> Field:
    """Decode the header and payload of a field whose id and type were already read.

    Args:
        stream: Binary stream positioned just after the field's id and type.
        field_id: The field's id, as returned by follow_redirects.
        kind: The field's (non-redirect) kind.
        offset: Where the field's chain entry lives; only used for reporting.

    Returns:
        The decoded field.
    """
    header = read_header(stream, field_id)
    decoder = PAYLOAD_DECODERS.get(kind)
    if decoder is None:
        data = read_exact(stream, header.max_size_on_disk, f"{kind} payload")
        value: FieldValue = UnknownValue(kind=kind, data=data)
    else:
        value = decoder(stream, header)
    return Field(offset=offset, kind=kind, header=header, value=value)
