"""Dumping the raw fields of an NDE table."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

from ndextract.serialize import DumpFormat, format_field
from ndextract.table import Table

logger = logging.getLogger(__name__)


def dump(
    index_path: Path | str,
    data_path: Path | str,
    fmt: DumpFormat | str = DumpFormat.DISPLAY,
    out: TextIO | None = None,
) -> int:
    """Write every field of every record to ``out``, one line per field.

    Records are walked in primary index order. No schema is needed, so this
    works on any table, including ones ``export`` rejects.

    Args:
        index_path: The table's index (``.idx``) file.
        data_path: The table's data (``.dat``) file.
        fmt: Line format: display, json or sexp.
        out: Text stream to write to (default: stdout).

    Returns:
        The number of fields written.
    """
    if isinstance(fmt, str):
        fmt = DumpFormat.parse(fmt)
    if out is None:
        out = sys.stdout

    written = 0
    with Table(index_path, data_path) as table:
        for i, fields in table.records():
            logger.debug("record %d has %d fields", i, len(fields))
            for field in fields:
                out.write(format_field(field, fmt))
                out.write("\n")
                written += 1

    logger.info("Dumped %d fields.", written)
    return written
