"""Mapping of a table's columns onto track attributes.

A table's columns are only known once its first record has been read, while
the attributes a track can carry are fixed. The first record is made of
COLUMN fields; each column's name is looked up in COLUMN_ATTRIBUTES to find
the attribute its fields populate in every later record.
"""

from __future__ import annotations

import logging
from enum import Enum
from types import MappingProxyType
from typing import Iterable, Mapping

from ndextract.errors import SchemaError
from ndextract.types import ColumnValue, Field, FieldKind

logger = logging.getLogger(__name__)


class AttributeTag(Enum):
    """Attributes a track may carry; values are the serialized keys."""

    FILENAME = "filename"
    ARTIST = "artist"
    TITLE = "title"
    ALBUM = "album"
    YEAR = "year"
    GENRE = "genre"
    COMMENT = "comment"
    TRACK_NO = "trackno"
    LENGTH = "length"
    TYPE = "type"
    LAST_UPD = "lastupd"
    LAST_PLAY = "lastplay"
    RATING = "rating"
    TUID2 = "tuid2"
    PLAY_COUNT = "playcount"
    FILETIME = "filetime"
    FILESIZE = "filesize"
    BITRATE = "bitrate"
    DISC = "disc"
    ALBUM_ARTIST = "albumartist"
    REPLAYGAIN_ALBUM_GAIN = "replaygain_album_gain"
    REPLAYGAIN_TRACK_GAIN = "replaygain_track_gain"
    PUBLISHER = "publisher"
    COMPOSER = "composer"
    BPM = "bpm"
    DISCS = "discs"
    TRACKS = "tracks"
    IS_PODCAST = "ispodcast"
    PODCAST_CHANNEL = "podcastchannel"
    PODCAST_PUBDATE = "podcastpubdate"
    GRACENOTE_FILE_ID = "gracenote_file_id"
    GRACENOTE_EXT_DATA = "gracenote_ext_data"
    LOSSLESS = "lossless"
    CATEGORY = "category"
    CODEC = "codec"
    DIRECTOR = "director"
    PRODUCER = "producer"
    WIDTH = "width"
    HEIGHT = "height"
    MIME_TYPE = "mimetype"
    DATE_ADDED = "dateadded"

    @property
    def expected_kind(self) -> FieldKind:
        """Return the field kind whose values this attribute accepts."""
        return ATTRIBUTE_KINDS.get(self, FieldKind.STRING)


# Column names as the media player writes them (case-sensitive)
COLUMN_ATTRIBUTES: dict[str, AttributeTag] = {
    "filename": AttributeTag.FILENAME,
    "artist": AttributeTag.ARTIST,
    "title": AttributeTag.TITLE,
    "album": AttributeTag.ALBUM,
    "year": AttributeTag.YEAR,
    "genre": AttributeTag.GENRE,
    "comment": AttributeTag.COMMENT,
    "trackno": AttributeTag.TRACK_NO,
    "length": AttributeTag.LENGTH,
    "type": AttributeTag.TYPE,
    "lastupd": AttributeTag.LAST_UPD,
    "lastplay": AttributeTag.LAST_PLAY,
    "rating": AttributeTag.RATING,
    "tuid2": AttributeTag.TUID2,
    "playcount": AttributeTag.PLAY_COUNT,
    "filetime": AttributeTag.FILETIME,
    "filesize": AttributeTag.FILESIZE,
    "bitrate": AttributeTag.BITRATE,
    "disc": AttributeTag.DISC,
    "albumartist": AttributeTag.ALBUM_ARTIST,
    "replaygain_album_gain": AttributeTag.REPLAYGAIN_ALBUM_GAIN,
    "replaygain_track_gain": AttributeTag.REPLAYGAIN_TRACK_GAIN,
    "publisher": AttributeTag.PUBLISHER,
    "composer": AttributeTag.COMPOSER,
    "bpm": AttributeTag.BPM,
    "discs": AttributeTag.DISCS,
    "tracks": AttributeTag.TRACKS,
    "ispodcast": AttributeTag.IS_PODCAST,
    "podcastchannel": AttributeTag.PODCAST_CHANNEL,
    "podcastpubdate": AttributeTag.PODCAST_PUBDATE,
    "GracenoteFileID": AttributeTag.GRACENOTE_FILE_ID,
    "GracenoteExtData": AttributeTag.GRACENOTE_EXT_DATA,
    "lossless": AttributeTag.LOSSLESS,
    "category": AttributeTag.CATEGORY,
    "codec": AttributeTag.CODEC,
    "director": AttributeTag.DIRECTOR,
    "producer": AttributeTag.PRODUCER,
    "width": AttributeTag.WIDTH,
    "height": AttributeTag.HEIGHT,
    "mimetype": AttributeTag.MIME_TYPE,
    "dateadded": AttributeTag.DATE_ADDED,
}

# Attributes not listed here hold strings
ATTRIBUTE_KINDS: dict[AttributeTag, FieldKind] = {
    AttributeTag.FILENAME: FieldKind.FILENAME,
    AttributeTag.LENGTH: FieldKind.LENGTH,
    AttributeTag.FILESIZE: FieldKind.INT64,
    AttributeTag.LAST_UPD: FieldKind.DATETIME,
    AttributeTag.LAST_PLAY: FieldKind.DATETIME,
    AttributeTag.FILETIME: FieldKind.DATETIME,
    AttributeTag.PODCAST_PUBDATE: FieldKind.DATETIME,
    AttributeTag.DATE_ADDED: FieldKind.DATETIME,
    AttributeTag.YEAR: FieldKind.INTEGER,
    AttributeTag.TRACK_NO: FieldKind.INTEGER,
    AttributeTag.TYPE: FieldKind.INTEGER,
    AttributeTag.RATING: FieldKind.INTEGER,
    AttributeTag.PLAY_COUNT: FieldKind.INTEGER,
    AttributeTag.BITRATE: FieldKind.INTEGER,
    AttributeTag.DISC: FieldKind.INTEGER,
    AttributeTag.BPM: FieldKind.INTEGER,
    AttributeTag.DISCS: FieldKind.INTEGER,
    AttributeTag.TRACKS: FieldKind.INTEGER,
    AttributeTag.IS_PODCAST: FieldKind.INTEGER,
    AttributeTag.LOSSLESS: FieldKind.INTEGER,
    AttributeTag.WIDTH: FieldKind.INTEGER,
    AttributeTag.HEIGHT: FieldKind.INTEGER,
}

AttributeMap = Mapping[int, AttributeTag]


def column_definitions(fields: Iterable[Field]) -> list[ColumnValue]:
    """Return the column declarations of a table's first record.

    Raises SchemaError on the first field that is not a column.
    """
    columns = []
    for field in fields:
        if field.kind is not FieldKind.COLUMN or not isinstance(field.value, ColumnValue):
            raise SchemaError(field.kind)
        columns.append(field.value)
    return columns


def build_attribute_map(fields: Iterable[Field]) -> AttributeMap:
    """Build the read-only column id -> attribute map from a table's first record.

    Columns with names not in COLUMN_ATTRIBUTES are skipped.
    """
    mapping: dict[int, AttributeTag] = {}
    columns = column_definitions(fields)
    for column in columns:
        tag = COLUMN_ATTRIBUTES.get(column.name)
        if tag is None:
            logger.debug("ignoring unknown column %r (id %d)", column.name, column.id)
            continue
        mapping[column.id] = tag
    logger.debug("mapped %d of %d columns", len(mapping), len(columns))
    return MappingProxyType(mapping)
