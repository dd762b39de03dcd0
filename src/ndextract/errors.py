"""Exceptions raised while reading NDE tables."""

from __future__ import annotations

from pathlib import Path
from typing import Any


class NDEError(Exception):
    """Base class for every error raised by ndextract."""


class TableIOError(NDEError):
    """An index or data file could not be opened, read or seeked."""

    def __init__(self, path: Path | str | None, error: OSError) -> None:
        self.path = path
        self.error = error
        where = f" ({path})" if path is not None else ""
        super().__init__(f"I/O error{where}: {error}")


class TruncatedFileError(NDEError):
    """The stream ended in the middle of a structure."""

    def __init__(self, what: str, expected: int, got: int) -> None:
        self.what = what
        self.expected = expected
        self.got = got
        super().__init__(f"Truncated {what}: expected {expected} bytes, got {got}")


class SignatureError(NDEError):
    """A file does not begin with the expected signature."""

    def __init__(self, expected: bytes, got: bytes) -> None:
        self.expected = expected
        self.got = got
        super().__init__(f"Bad signature: expected {expected!r}, got {got!r}")


class NoIndicesError(NDEError):
    """The index file holds no index blocks."""

    def __init__(self) -> None:
        super().__init__("No indices found in the index file")


class UnknownFieldTypeError(NDEError):
    """A field carries a type code outside the known set."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"Unknown field type {code}")


class StringDecodeError(NDEError):
    """A string payload is not valid UTF-8 or UTF-16."""

    def __init__(self, encoding: str, data: bytes) -> None:
        self.encoding = encoding
        self.data = data
        super().__init__(f"Failed to read a {encoding} string from {len(data)} bytes")


class RedirectLoopError(NDEError):
    """Following redirects did not reach a real field."""

    def __init__(self, offset: int, hops: int) -> None:
        self.offset = offset
        self.hops = hops
        super().__init__(f"Redirect chain did not terminate after {hops} hops (at {offset:#06x})")


class FieldChainError(NDEError):
    """A record's field chain points back at a field already visited."""

    def __init__(self, record_offset: int, offset: int) -> None:
        self.record_offset = record_offset
        self.offset = offset
        super().__init__(
            f"Field chain of record at {record_offset:#06x} revisits offset {offset:#06x}"
        )


class SchemaError(NDEError):
    """The first record of a table is not made of column fields."""

    def __init__(self, kind: Any) -> None:
        self.kind = kind
        super().__init__(f"While parsing first record, got field of type {kind}")


class MissingFilenameError(NDEError):
    """A record has no value for the mandatory filename attribute."""

    def __init__(self, record: int | None = None) -> None:
        self.record = record
        where = f" in record {record}" if record is not None else ""
        super().__init__(f"No filename field found{where}")


class MissingRecordsError(NDEError):
    """A table lacks the schema/index records every export needs."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(
            f"Table has {count} records; at least 2 (columns and indices) are required"
        )


class FormatError(NDEError):
    """An output format name is not recognised."""

    def __init__(self, name: str, choices: list[str]) -> None:
        self.name = name
        self.choices = choices
        super().__init__(f"Couldn't interpret '{name}' as a format (choose from {', '.join(choices)})")


class SExpressionError(NDEError):
    """S-expression text could not be tokenized or parsed."""
