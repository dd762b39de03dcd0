"""Command-line interface: dump or export a Winamp Music Library table."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

from ndextract import __version__
from ndextract.dump import dump
from ndextract.errors import NDEError
from ndextract.export import export
from ndextract.serialize import DumpFormat, ExportFormat

logger = logging.getLogger(__name__)

VERBOSE_ENV = "NDEXTRACT_VERBOSE"


def configure_logging(verbose: bool) -> None:
    """Log INFO and above to stderr, or DEBUG and above when verbose."""
    if not verbose:
        verbose = os.environ.get(VERBOSE_ENV, "").lower() in ("1", "true", "yes")
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ndextract",
        description="Extract your music library from the Nullsoft Database Engine",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help=f"Produce more copious output (also enabled by {VERBOSE_ENV}=1)",
    )
    subparsers = parser.add_subparsers(dest="command")

    dump_parser = subparsers.add_parser(
        "dump",
        help="Dump every field of an NDE table to stdout",
        description="Walk the records of a single NDE table and print each field. "
        "Useful for exploring and trouble-shooting.",
    )
    dump_parser.add_argument(
        "-f", "--format",
        default=DumpFormat.DISPLAY.value,
        choices=[f.value for f in DumpFormat],
        help="Format in which fields are printed (default: %(default)s)",
    )

    export_parser = subparsers.add_parser(
        "export",
        help="Export the tracks of an NDE table",
        description="Turn each record of the 'main' table into a track and write "
        "the whole collection to a file.",
    )
    export_parser.add_argument(
        "-o", "--output",
        type=Path,
        default=Path("main.out"),
        help="File to which the library is written (default: %(default)s)",
    )
    export_parser.add_argument(
        "-f", "--format",
        default=ExportFormat.SEXP.value,
        choices=[f.value for f in ExportFormat],
        help="Format to which the library is serialized (default: %(default)s)",
    )

    for sub in (dump_parser, export_parser):
        sub.add_argument("index", type=Path, help="NDE index file (main.idx, e.g.)")
        sub.add_argument("data", type=Path, help="Corresponding NDE data file (main.dat, e.g.)")

    return parser


def _silence_stdout() -> None:
    """Point stdout at devnull so the interpreter's final flush cannot fail."""
    try:
        fd = sys.stdout.fileno()
    except (AttributeError, OSError, ValueError):
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, fd)
    os.close(devnull)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_usage(sys.stderr)
        return 2

    configure_logging(args.verbose)

    try:
        if args.command == "dump":
            dump(args.index, args.data, DumpFormat.parse(args.format))
        else:
            count = export(args.index, args.data, ExportFormat.parse(args.format), args.output)
            logger.info("Exported %d tracks to %s", count, args.output)
    except NDEError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except BrokenPipeError:
        # The reader went away (e.g. piped into head)
        _silence_stdout()
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
