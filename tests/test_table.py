"""Tests for walking records and opening tables."""

import io
import struct

import pytest

from builders import (
    FILENAME,
    DataFileBuilder,
    field_bytes,
    index_file_bytes,
    redirect_bytes,
    string_payload,
    track_fields,
    write_library,
    write_table,
)
from ndextract.errors import (
    FieldChainError,
    MissingRecordsError,
    SignatureError,
    TableIOError,
)
from ndextract.schema import AttributeTag
from ndextract.table import Table, walk_record
from ndextract.types import FieldKind, IntegerValue, StringValue


class SeekSpy(io.BytesIO):
    """A BytesIO that remembers every offset it was asked to seek to."""

    def __init__(self, data):
        super().__init__(data)
        self.seeks = []

    def seek(self, offset, whence=0):
        self.seeks.append(offset)
        return super().seek(offset, whence)


class TestWalkRecord:
    """Tests for following a record's field chain."""

    def test_chain_order(self):
        """Fields come back in chain order and the walk never seeks to 0."""
        builder = DataFileBuilder()
        a = builder.add_raw(b"")
        b = a + 14 + 4
        builder.add_raw(field_bytes(1, FieldKind.INTEGER, struct.pack("<i", 10), next_offset=b))
        builder.add_raw(field_bytes(2, FieldKind.INTEGER, struct.pack("<i", 20), prev_offset=a))
        stream = SeekSpy(builder.to_bytes())

        fields = list(walk_record(stream, a))

        assert [f.id for f in fields] == [1, 2]
        assert [f.value for f in fields] == [IntegerValue(10), IntegerValue(20)]
        assert [f.offset for f in fields] == [a, b]
        assert 0 not in stream.seeks
        assert stream.seeks == [a, b]

    def test_chain_not_in_id_order(self):
        """Chain order wins over field id order."""
        builder = DataFileBuilder()
        start = builder.add_record([
            (5, FieldKind.STRING, string_payload("five")),
            (1, FieldKind.STRING, string_payload("one")),
        ])
        fields = list(walk_record(io.BytesIO(builder.to_bytes()), start))
        assert [f.id for f in fields] == [5, 1]

    def test_zero_offset(self):
        """A record offset of 0 has no fields."""
        stream = SeekSpy(b"NDETABLE")
        assert list(walk_record(stream, 0)) == []
        assert stream.seeks == []

    def test_cycle(self):
        """A chain that points back at an earlier field is an error."""
        builder = DataFileBuilder()
        a = 8
        b = a + 14 + 4
        builder.add_raw(field_bytes(1, FieldKind.INTEGER, b"\x00" * 4, next_offset=b))
        builder.add_raw(field_bytes(2, FieldKind.INTEGER, b"\x00" * 4, next_offset=a))
        with pytest.raises(FieldChainError) as exc_info:
            list(walk_record(io.BytesIO(builder.to_bytes()), a))
        assert exc_info.value.offset == a

    def test_redirected_field(self):
        """A chain entry that redirects is reported at its chain offset."""
        builder = DataFileBuilder()
        start = builder.add_raw(b"")
        real = start + 6
        builder.add_raw(redirect_bytes(3, real))
        builder.add_raw(field_bytes(3, FieldKind.STRING, string_payload("moved")))
        fields = list(walk_record(io.BytesIO(builder.to_bytes()), start))
        assert len(fields) == 1
        assert fields[0].offset == start
        assert fields[0].value == StringValue("moved")


class TestTable:
    """Tests for opening a table from disk."""

    def test_records(self, tmp_path):
        index_path, data_path = write_table(tmp_path, [
            [(1, FieldKind.STRING, string_payload("first"))],
            [(1, FieldKind.STRING, string_payload("second"))],
        ])
        with Table(index_path, data_path) as table:
            assert table.count == 2
            assert [i.id for i in table.indices] == [255, 0]
            assert table.primary.id == 255
            values = [fields[0].value for _, fields in table.records()]
        assert values == [StringValue("first"), StringValue("second")]

    def test_record_out_of_range(self, tmp_path):
        index_path, data_path = write_table(tmp_path, [[(1, FieldKind.INTEGER, b"\x00" * 4)]])
        with Table(index_path, data_path) as table:
            with pytest.raises(IndexError):
                table.record(1)

    def test_missing_index_file(self, tmp_path):
        _, data_path = write_table(tmp_path, [[(1, FieldKind.INTEGER, b"\x00" * 4)]])
        with pytest.raises(TableIOError):
            Table(tmp_path / "missing.idx", data_path)

    def test_missing_data_file(self, tmp_path):
        index_path, _ = write_table(tmp_path, [[(1, FieldKind.INTEGER, b"\x00" * 4)]])
        with pytest.raises(TableIOError):
            Table(index_path, tmp_path / "missing.dat")

    def test_bad_data_signature(self, tmp_path):
        index_path, data_path = write_table(tmp_path, [[(1, FieldKind.INTEGER, b"\x00" * 4)]])
        data_path.write_bytes(b"NDEINDEX" + data_path.read_bytes()[8:])
        with pytest.raises(SignatureError):
            Table(index_path, data_path)

    def test_bad_index_signature(self, tmp_path):
        index_path, data_path = write_table(tmp_path, [[(1, FieldKind.INTEGER, b"\x00" * 4)]])
        index_path.write_bytes(b"NDETABLE" + index_path.read_bytes()[8:])
        with pytest.raises(SignatureError):
            Table(index_path, data_path)

    def test_primary_index_order(self, tmp_path):
        """Records are read in the order of index 255, not of other indices."""
        builder = DataFileBuilder()
        first = builder.add_record([(1, FieldKind.STRING, string_payload("a"))])
        second = builder.add_record([(1, FieldKind.STRING, string_payload("b"))])
        index_path = tmp_path / "t.idx"
        data_path = tmp_path / "t.dat"
        index_path.write_bytes(index_file_bytes([
            (0, [(first, 0), (second, 1)]),
            (255, [(second, 0), (first, 1)]),
        ]))
        data_path.write_bytes(builder.to_bytes())

        with Table(index_path, data_path) as table:
            assert table.record(0)[0].value == StringValue("b")
            assert table.record(1)[0].value == StringValue("a")


class TestTableTracks:
    """Tests for materializing tracks from a table."""

    def test_tracks(self, tmp_path):
        index_path, data_path = write_library(tmp_path, [
            track_fields("C:\\Music\\a.mp3", artist="Alpha", title="One", year=1999),
            track_fields("C:\\Music\\b.mp3", artist="Beta"),
        ])
        with Table(index_path, data_path) as table:
            tracks = list(table.tracks())

        assert len(tracks) == 2
        assert str(tracks[0].filename) == "C:\\Music\\a.mp3"
        assert tracks[0][AttributeTag.ARTIST] == "Alpha"
        assert tracks[0][AttributeTag.TITLE] == "One"
        assert tracks[0][AttributeTag.YEAR] == 1999
        assert tracks[1][AttributeTag.TITLE] is None

    def test_attribute_map_built_once(self, tmp_path, monkeypatch):
        """The column record is read once, however many tracks follow."""
        index_path, data_path = write_library(tmp_path, [
            track_fields(f"C:\\{i}.mp3") for i in range(5)
        ])
        calls = []
        build = Table.attribute_map

        def counting(self):
            calls.append(1)
            return build(self)

        monkeypatch.setattr(Table, "attribute_map", counting)
        with Table(index_path, data_path) as table:
            assert len(list(table.tracks())) == 5
        assert len(calls) == 1

    def test_too_few_records(self, tmp_path):
        index_path, data_path = write_table(tmp_path, [
            [(FILENAME, FieldKind.COLUMN, b"\x0c\x00\x08filename")],
        ])
        with Table(index_path, data_path) as table:
            with pytest.raises(MissingRecordsError):
                list(table.tracks())

    def test_empty_table(self, tmp_path):
        index_path = tmp_path / "e.idx"
        data_path = tmp_path / "e.dat"
        index_path.write_bytes(index_file_bytes([(255, [])], count=0))
        data_path.write_bytes(b"NDETABLE")
        with Table(index_path, data_path) as table:
            assert table.count == 0
            with pytest.raises(MissingRecordsError):
                table.attribute_map()

    def test_unmapped_field_ignored(self, tmp_path):
        """Fields whose column name is unknown do not reach the track."""
        index_path, data_path = write_library(tmp_path, [
            track_fields("C:\\x.mp3", extra=[(7, FieldKind.STRING, string_payload("hidden"))]),
        ])
        with Table(index_path, data_path) as table:
            (track,) = list(table.tracks())
        assert "hidden" not in track.to_dict().values()
        assert track[AttributeTag.ARTIST] is None
        assert AttributeTag.ARTIST not in track
