"""S-expression reading and writing."""

from __future__ import annotations

from typing import Any

from ndextract.sexp.parser import SExpressionParser, Symbol
from ndextract.sexp.writer import dumps, quote

_parser: SExpressionParser | None = None


def loads(text: str) -> Any:
    """Parse a single S-expression datum."""
    global _parser
    if _parser is None:
        _parser = SExpressionParser()
        _parser.build()
    return _parser.parse(text)


__all__ = [
    "SExpressionParser",
    "Symbol",
    "dumps",
    "loads",
    "quote",
]
