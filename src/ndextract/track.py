"""Tracks: the records of a music library table, keyed by attribute."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Iterator, Mapping

from ndextract.errors import MissingFilenameError
from ndextract.schema import AttributeMap, AttributeTag
from ndextract.types import (
    DatetimeValue,
    Field,
    FieldKind,
    FieldValue,
    FilenameValue,
    Int64Value,
    IntegerValue,
    LengthValue,
    StringValue,
)

logger = logging.getLogger(__name__)

# Value class accepted for each attribute kind
VALUE_TYPES: dict[FieldKind, type] = {
    FieldKind.STRING: StringValue,
    FieldKind.INTEGER: IntegerValue,
    FieldKind.DATETIME: DatetimeValue,
    FieldKind.LENGTH: LengthValue,
    FieldKind.FILENAME: FilenameValue,
    FieldKind.INT64: Int64Value,
}


def _plain(value: FieldValue) -> Any:
    """Unwrap a decoded value into the Python value a track stores."""
    if isinstance(value, (StringValue, FilenameValue)):
        return value.text
    return value.value  # type: ignore[union-attr]


class Track:
    """A single track of the music library.

    Every attribute but the filename is optional; absent attributes read as
    None.
    """

    def __init__(self, attributes: Mapping[AttributeTag, Any]) -> None:
        if attributes.get(AttributeTag.FILENAME) is None:
            raise MissingFilenameError()
        self._attributes = {tag: v for tag, v in attributes.items() if v is not None}

    @property
    def filename(self) -> str:
        return self._attributes[AttributeTag.FILENAME]

    def get(self, tag: AttributeTag) -> Any:
        """Return an attribute's value, or None if the track lacks it."""
        return self._attributes.get(tag)

    def __getitem__(self, key: AttributeTag | str) -> Any:
        tag = key if isinstance(key, AttributeTag) else AttributeTag(key)
        return self._attributes.get(tag)

    def __contains__(self, key: object) -> bool:
        if isinstance(key, str):
            try:
                key = AttributeTag(key)
            except ValueError:
                return False
        return key in self._attributes

    def __iter__(self) -> Iterator[AttributeTag]:
        return iter(self._attributes)

    def items(self) -> Iterator[tuple[AttributeTag, Any]]:
        """Yield every attribute in declaration order, None when absent."""
        for tag in AttributeTag:
            yield tag, self._attributes.get(tag)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible dict holding every attribute key."""
        return {tag.value: value for tag, value in self.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Track:
        """Build a track from a dict produced by to_dict."""
        attributes: dict[AttributeTag, Any] = {}
        for key, value in data.items():
            attributes[AttributeTag(key)] = value
        return cls(attributes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Track):
            return NotImplemented
        return self._attributes == other._attributes

    def __repr__(self) -> str:
        return f"Track({self.filename!r}, {len(self._attributes)} attributes)"


def materialize(
    fields: Iterable[Field], attribute_map: AttributeMap, record: int | None = None
) -> Track:
    """Turn the fields of one record into a Track.

    Fields whose column has no attribute, and fields whose value does not
    suit their attribute, are dropped. When an attribute appears more than
    once the last field wins.

    Raises:
        MissingFilenameError: If no field supplied the filename.
    """
    attributes: dict[AttributeTag, Any] = {}
    for field in fields:
        tag = attribute_map.get(field.id)
        if tag is None:
            logger.debug("record %s: no attribute for field id %d", record, field.id)
            continue
        expected = VALUE_TYPES[tag.expected_kind]
        if not isinstance(field.value, expected):
            logger.warning(
                "record %s: dropping %s field for %s (expected %s)",
                record,
                field.kind,
                tag.value,
                tag.expected_kind,
            )
            continue
        attributes[tag] = _plain(field.value)

    if AttributeTag.FILENAME not in attributes:
        raise MissingFilenameError(record)
    return Track(attributes)
