"""Low-level helpers for reading little-endian structures from binary streams."""

from __future__ import annotations

import struct
from typing import Any, BinaryIO

from ndextract.errors import SignatureError, TableIOError, TruncatedFileError


def _name(stream: BinaryIO) -> str | None:
    return getattr(stream, "name", None)


def read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    """Read exactly ``size`` bytes or raise TruncatedFileError."""
    try:
        data = stream.read(size)
    except OSError as e:
        raise TableIOError(_name(stream), e) from e
    if len(data) != size:
        raise TruncatedFileError(what, size, len(data))
    return data


def unpack(stream: BinaryIO, fmt: str, what: str) -> tuple[Any, ...]:
    """Read and unpack one struct of format ``fmt``."""
    return struct.unpack(fmt, read_exact(stream, struct.calcsize(fmt), what))


def seek(stream: BinaryIO, offset: int) -> None:
    """Seek to an absolute offset."""
    try:
        stream.seek(offset)
    except OSError as e:
        raise TableIOError(_name(stream), e) from e


def tell(stream: BinaryIO) -> int:
    try:
        return stream.tell()
    except OSError as e:
        raise TableIOError(_name(stream), e) from e


def check_signature(stream: BinaryIO, signature: bytes) -> None:
    """Consume and verify a file signature.

    A file too short to hold the signature is reported as a bad signature,
    not as a truncation.
    """
    try:
        got = stream.read(len(signature))
    except OSError as e:
        raise TableIOError(_name(stream), e) from e
    if got != signature:
        raise SignatureError(signature, got)
