"""Tests for field kinds and decoded values."""

import pytest

from ndextract.errors import UnknownFieldTypeError
from ndextract.types import (
    OPAQUE_KINDS,
    ColumnValue,
    Field,
    FieldHeader,
    FieldKind,
    FilenameValue,
    StringValue,
    UnknownValue,
)


class TestFieldKind:
    """Tests for the FieldKind type table."""

    def test_all_codes(self):
        """Codes 0 through 15 each map to a distinct kind."""
        kinds = [FieldKind.from_code(code) for code in range(16)]
        assert len(set(kinds)) == 16
        assert kinds[0] is FieldKind.COLUMN
        assert kinds[2] is FieldKind.REDIRECTOR
        assert kinds[12] is FieldKind.FILENAME
        assert kinds[15] is FieldKind.INT128

    @pytest.mark.parametrize("code", [16, 99, 255])
    def test_unknown_code(self, code):
        """Codes outside the table are rejected."""
        with pytest.raises(UnknownFieldTypeError) as exc_info:
            FieldKind.from_code(code)
        assert exc_info.value.code == code

    def test_opaque_kinds(self):
        """Kinds without a decoder are exactly the seven opaque ones."""
        assert FieldKind.BOOLEAN in OPAQUE_KINDS
        assert FieldKind.FLOAT in OPAQUE_KINDS
        assert FieldKind.STRING not in OPAQUE_KINDS
        assert len(OPAQUE_KINDS) == 7

    def test_str(self):
        assert str(FieldKind.DATETIME) == "DATETIME"


class TestField:
    """Tests for the Field container."""

    def test_delegates_to_header(self):
        header = FieldHeader(id=4, max_size_on_disk=10, next_offset=0x40, prev_offset=0x10)
        field = Field(offset=0x20, kind=FieldKind.STRING, header=header, value=StringValue("x"))
        assert field.id == 4
        assert field.next_offset == 0x40
        assert field.prev_offset == 0x10

    def test_display(self):
        header = FieldHeader(id=1, max_size_on_disk=3, next_offset=0, prev_offset=0)
        field = Field(offset=8, kind=FieldKind.STRING, header=header, value=StringValue("abc"))
        assert str(field) == "STRING @ 0x0008: ID 1, size: 3, prev: 0x0000, next: 0x0000: abc"

    def test_value_display(self):
        assert str(FilenameValue("C:\\a.mp3")) == "C:\\a.mp3"
        assert str(FilenameValue("")) == ""
        assert str(UnknownValue(FieldKind.GUID, b"\x01\xff")) == "<GUID: 01ff>"
        assert str(ColumnValue(1, "artist", FieldKind.STRING)) == "Column artist (STRING)"

    def test_filename_text_is_verbatim(self):
        """Filename equality follows the stored text, not Windows path rules."""
        assert FilenameValue("C:\\A.mp3") != FilenameValue("c:\\a.mp3")
        assert FilenameValue("C:/Music/a.mp3").text == "C:/Music/a.mp3"
        assert FilenameValue("C:/Music/a.mp3").path.name == "a.mp3"
