"""ndextract - read Winamp Music Library (Nullsoft Database Engine) tables."""

__version__ = "0.1.0"

from ndextract.dump import dump
from ndextract.errors import NDEError
from ndextract.export import export, read_tracks
from ndextract.index import NdeIndex, primary_index, read_indices
from ndextract.schema import AttributeTag, build_attribute_map
from ndextract.serialize import DumpFormat, ExportFormat, load_export
from ndextract.table import Table, walk_record
from ndextract.track import Track, materialize
from ndextract.types import Field, FieldHeader, FieldKind

__all__ = [
    # Main API
    "dump",
    "export",
    "read_tracks",
    "load_export",
    "DumpFormat",
    "ExportFormat",
    # Tables
    "Table",
    "NdeIndex",
    "read_indices",
    "primary_index",
    "walk_record",
    # Fields and tracks
    "Field",
    "FieldHeader",
    "FieldKind",
    "AttributeTag",
    "build_attribute_map",
    "Track",
    "materialize",
    # Errors
    "NDEError",
]
