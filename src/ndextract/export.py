"""Exporting an NDE music library table as a list of tracks."""

from __future__ import annotations

import logging
from pathlib import Path

from ndextract.errors import TableIOError
from ndextract.serialize import ExportFormat, write_tracks
from ndextract.table import Table
from ndextract.track import Track

logger = logging.getLogger(__name__)


def read_tracks(index_path: Path | str, data_path: Path | str) -> list[Track]:
    """Materialize every track of a table.

    The first record must declare the table's columns and the second (its
    indices) must exist; it is skipped. Any error aborts the whole read.
    """
    with Table(index_path, data_path) as table:
        logger.info("Creating %d Tracks...", max(table.count - 2, 0))
        tracks = list(table.tracks())
        logger.info("Creating %d Tracks...done.", len(tracks))
    return tracks


def export(
    index_path: Path | str,
    data_path: Path | str,
    fmt: ExportFormat | str,
    output_path: Path | str,
) -> int:
    """Write every track of a table to ``output_path`` as one document.

    All tracks are materialized before anything is written, and the document
    is written to a temporary file that replaces ``output_path`` only once
    complete, so a failed export leaves no partial output.

    Returns:
        The number of tracks written.
    """
    if isinstance(fmt, str):
        fmt = ExportFormat.parse(fmt)
    output_path = Path(output_path)

    tracks = read_tracks(index_path, data_path)

    logger.info("Writing %s...", output_path)
    temp_path = output_path.parent / (output_path.name + ".tmp")
    try:
        with open(temp_path, "w", encoding="utf-8") as f:
            write_tracks(tracks, f, fmt)
        temp_path.replace(output_path)
    except OSError as e:
        temp_path.unlink(missing_ok=True)
        raise TableIOError(output_path, e) from e
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise
    logger.info("Writing %s...done.", output_path)

    return len(tracks)
