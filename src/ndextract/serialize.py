"""Rendering of fields and tracks as text, JSON and S-expressions."""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, TextIO

from ndextract import sexp
from ndextract.errors import FormatError, SExpressionError
from ndextract.sexp import Symbol
from ndextract.track import Track
from ndextract.types import (
    BooleanValue,
    ColumnValue,
    DatetimeValue,
    Field,
    FieldValue,
    FilenameValue,
    FloatValue,
    Int64Value,
    IndexValue,
    IntegerValue,
    LengthValue,
    StringValue,
    UnknownValue,
)


class _Format(Enum):
    @classmethod
    def parse(cls, name: str) -> Any:
        """Look a format up by name, raising FormatError if unknown."""
        try:
            return cls(name)
        except ValueError:
            raise FormatError(name, [f.value for f in cls]) from None


class DumpFormat(_Format):
    """Formats for dumping individual fields."""

    DISPLAY = "display"
    JSON = "json"
    SEXP = "sexp"


class ExportFormat(_Format):
    """Formats for exporting a whole library."""

    JSON = "json"
    SEXP = "sexp"


def value_to_data(value: FieldValue) -> Any:
    """Convert a decoded field value to JSON-compatible data."""
    if isinstance(value, ColumnValue):
        return {"name": value.name, "column_kind": value.column_kind.name, "unique": value.unique}
    if isinstance(value, IndexValue):
        return {"name": value.name, "position": value.position, "kind_ref": value.kind_ref}
    if isinstance(value, StringValue):
        return value.text
    if isinstance(value, FilenameValue):
        return value.text
    if isinstance(value, UnknownValue):
        return value.data.hex()
    if isinstance(
        value,
        (IntegerValue, BooleanValue, FloatValue, DatetimeValue, LengthValue, Int64Value),
    ):
        return value.value
    raise TypeError(f"Unknown field value: {value!r}")


def field_to_data(field: Field) -> dict[str, Any]:
    """Convert a field and its header to a JSON-compatible dict."""
    return {
        "kind": field.kind.name,
        "id": field.id,
        "offset": field.offset,
        "max_size": field.header.max_size_on_disk,
        "next": field.next_offset,
        "prev": field.prev_offset,
        "value": value_to_data(field.value),
    }


def to_alist(data: Any) -> Any:
    """Convert dicts (recursively) into association lists of symbol pairs."""
    if isinstance(data, dict):
        return [(Symbol(key), to_alist(value)) for key, value in data.items()]
    if isinstance(data, list):
        return [to_alist(item) for item in data]
    return data


def from_alist(datum: Any) -> dict[str, Any]:
    """Convert an association list of (symbol . value) pairs into a dict."""
    if not isinstance(datum, list):
        raise SExpressionError(f"Expected an association list, got {datum!r}")
    result: dict[str, Any] = {}
    for entry in datum:
        if not isinstance(entry, tuple) or not isinstance(entry[0], Symbol):
            raise SExpressionError(f"Expected a (key . value) pair, got {entry!r}")
        result[str(entry[0])] = entry[1]
    return result


def format_field(field: Field, fmt: DumpFormat) -> str:
    """Render one field as a single line."""
    if fmt is DumpFormat.DISPLAY:
        return str(field)
    data = field_to_data(field)
    if fmt is DumpFormat.JSON:
        return json.dumps(data)
    return sexp.dumps(to_alist(data))


def write_tracks(tracks: Iterable[Track], fp: TextIO, fmt: ExportFormat) -> None:
    """Write a collection of tracks as one JSON or S-expression document."""
    data = [track.to_dict() for track in tracks]
    if fmt is ExportFormat.JSON:
        json.dump(data, fp)
    else:
        fp.write(sexp.dumps(to_alist(data)))
    fp.write("\n")


def read_document(fp: TextIO, fmt: ExportFormat) -> list[Track]:
    """Read a document written by write_tracks back into tracks."""
    text = fp.read()
    if fmt is ExportFormat.JSON:
        data = json.loads(text)
    else:
        datum = sexp.loads(text)
        if not isinstance(datum, list):
            raise SExpressionError(f"Expected a list of tracks, got {datum!r}")
        data = [from_alist(entry) for entry in datum]
    return [Track.from_dict(entry) for entry in data]


def load_export(path: Path | str, fmt: ExportFormat | str) -> list[Track]:
    """Load the tracks of a file written by export()."""
    if isinstance(fmt, str):
        fmt = ExportFormat.parse(fmt)
    with open(path, encoding="utf-8") as f:
        return read_document(f, fmt)
