"""Tests for dumping the raw fields of a table."""

import io
import json

import pytest

from builders import string_payload, track_fields, write_library, write_table
from ndextract.dump import dump
from ndextract.errors import FormatError, SignatureError
from ndextract.sexp import loads
from ndextract.types import FieldKind


@pytest.fixture
def library(tmp_path):
    return write_library(tmp_path, [
        track_fields("C:\\Music\\a.mp3", artist="Alpha", year=2004),
    ])


class TestDump:
    """Tests for dump()."""

    def test_display(self, library):
        out = io.StringIO()
        written = dump(*library, out=out)
        lines = out.getvalue().splitlines()

        # 8 columns, 1 index, 3 track fields
        assert written == 12
        assert len(lines) == 12
        assert lines[0].startswith("COLUMN @ 0x0008: ID 0")
        assert "Column filename (FILENAME)" in lines[0]
        assert lines[8].startswith("INDEX")
        assert lines[9].endswith(": C:\\Music\\a.mp3")
        assert lines[11].endswith(": 2004")

    def test_json(self, library):
        out = io.StringIO()
        dump(*library, fmt="json", out=out)
        records = [json.loads(line) for line in out.getvalue().splitlines()]

        assert records[0]["kind"] == "COLUMN"
        assert records[0]["value"] == {"name": "filename", "column_kind": "FILENAME", "unique": True}
        assert records[9]["value"] == "C:\\Music\\a.mp3"
        assert records[9]["next"] == records[10]["offset"]
        assert records[10]["prev"] == records[9]["offset"]
        assert records[11]["value"] == 2004

    def test_sexp(self, library):
        out = io.StringIO()
        dump(*library, fmt="sexp", out=out)
        first = loads(out.getvalue().splitlines()[9])
        assert dict(first)["kind"] == "FILENAME"
        assert dict(first)["value"] == "C:\\Music\\a.mp3"

    def test_any_table(self, tmp_path):
        """Dumping needs no column record."""
        paths = write_table(tmp_path, [[(3, FieldKind.STRING, string_payload("loose"))]])
        out = io.StringIO()
        assert dump(*paths, out=out) == 1
        assert out.getvalue() == "STRING @ 0x0008: ID 3, size: 7, prev: 0x0000, next: 0x0000: loose\n"

    def test_opaque_field(self, tmp_path):
        paths = write_table(tmp_path, [[(1, FieldKind.GUID, b"\xab\xcd")]])
        out = io.StringIO()
        dump(*paths, fmt="json", out=out)
        assert json.loads(out.getvalue())["value"] == "abcd"

    def test_bad_format(self, library):
        with pytest.raises(FormatError):
            dump(*library, fmt="xml", out=io.StringIO())

    def test_bad_signature(self, tmp_path):
        index_path, data_path = write_table(tmp_path, [[(1, FieldKind.INTEGER, b"\x00" * 4)]])
        data_path.write_bytes(b"XXXXXXXX" + data_path.read_bytes()[8:])
        with pytest.raises(SignatureError):
            dump(index_path, data_path, out=io.StringIO())
