"""Field kinds and decoded field values for NDE tables."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from pathlib import PureWindowsPath
from typing import Union

from ndextract.errors import UnknownFieldTypeError


class FieldKind(IntEnum):
    """Field type codes, numbered as the engine numbers them on disk."""

    COLUMN = 0
    INDEX = 1
    REDIRECTOR = 2
    STRING = 3
    INTEGER = 4
    BOOLEAN = 5
    BINARY = 6  # also BITMAP
    GUID = 7
    PRIVATE = 8
    FLOAT = 9
    DATETIME = 10
    LENGTH = 11
    FILENAME = 12
    INT64 = 13
    BINARY32 = 14  # binary field with 32-bit sizes
    INT128 = 15  # mostly MD5 hashes

    @classmethod
    def from_code(cls, code: int) -> FieldKind:
        """Return the kind for a type code, raising for unknown codes."""
        try:
            return cls(code)
        except ValueError:
            raise UnknownFieldTypeError(code) from None

    def __str__(self) -> str:
        return self.name


# Kinds whose payload is kept as raw bytes
OPAQUE_KINDS = frozenset(
    {
        FieldKind.BOOLEAN,
        FieldKind.BINARY,
        FieldKind.GUID,
        FieldKind.PRIVATE,
        FieldKind.FLOAT,
        FieldKind.BINARY32,
        FieldKind.INT128,
    }
)


@dataclass(frozen=True)
class FieldHeader:
    """Header common to every field.

    ``next_offset`` and ``prev_offset`` are absolute offsets into the data
    file of the neighbouring fields of the same record; 0 ends the chain.
    """

    id: int
    max_size_on_disk: int
    next_offset: int
    prev_offset: int

    def __str__(self) -> str:
        return (
            f"ID {self.id}, size: {self.max_size_on_disk}, "
            f"prev: {self.prev_offset:#06x}, next: {self.next_offset:#06x}"
        )


@dataclass(frozen=True)
class ColumnValue:
    """A column declaration; only found in the first record of a table."""

    id: int
    name: str
    column_kind: FieldKind
    unique: bool = False

    def __str__(self) -> str:
        return f"Column {self.name} ({self.column_kind})"


@dataclass(frozen=True)
class IndexValue:
    """An index declaration; found in the second record of a table."""

    id: int
    kind_ref: int
    position: int = 0
    name: str = ""

    def __str__(self) -> str:
        return f"Index {self.name}, pos: {self.position}, type: {self.kind_ref}"


@dataclass(frozen=True)
class StringValue:
    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class IntegerValue:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class BooleanValue:
    value: bool

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class FloatValue:
    value: float

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class DatetimeValue:
    """Raw signed 32-bit timestamp; its epoch is not known."""

    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class LengthValue:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class FilenameValue:
    """A file path exactly as the library stored it."""

    text: str

    @property
    def path(self) -> PureWindowsPath:
        """The text as a Windows path; normalizes separators and case."""
        return PureWindowsPath(self.text)

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Int64Value:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class UnknownValue:
    """Payload of a recognised kind this package does not decode."""

    kind: FieldKind
    data: bytes

    def __str__(self) -> str:
        return f"<{self.kind}: {self.data.hex()}>"


FieldValue = Union[
    ColumnValue,
    IndexValue,
    StringValue,
    IntegerValue,
    BooleanValue,
    FloatValue,
    DatetimeValue,
    LengthValue,
    FilenameValue,
    Int64Value,
    UnknownValue,
]


@dataclass(frozen=True)
class Field:
    """A decoded field together with where it was found."""

    offset: int
    kind: FieldKind
    header: FieldHeader
    value: FieldValue

    @property
    def id(self) -> int:
        return self.header.id

    @property
    def next_offset(self) -> int:
        return self.header.next_offset

    @property
    def prev_offset(self) -> int:
        return self.header.prev_offset

    def __str__(self) -> str:
        return f"{self.kind} @ {self.offset:#06x}: {self.header}: {self.value}"
