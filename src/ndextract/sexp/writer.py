"""Writer for S-expression text."""

from __future__ import annotations

from typing import Any

from ndextract.sexp.parser import Symbol


def quote(text: str) -> str:
    """Return ``text`` as a double-quoted string literal."""
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def dumps(datum: Any) -> str:
    """Render a datum as S-expression text.

    2-tuples render as dotted pairs and lists as proper lists; None renders
    as ``nil``.
    """
    if datum is None:
        return "nil"
    if isinstance(datum, Symbol):
        return str(datum)
    if isinstance(datum, bool):
        return "#t" if datum else "#f"
    if isinstance(datum, (int, float)):
        return repr(datum)
    if isinstance(datum, str):
        return quote(datum)
    if isinstance(datum, tuple):
        if len(datum) != 2:
            raise TypeError(f"Only pairs can be written as tuples, got {len(datum)} elements")
        return f"({dumps(datum[0])} . {dumps(datum[1])})"
    if isinstance(datum, list):
        return "(" + " ".join(dumps(item) for item in datum) + ")"
    raise TypeError(f"Cannot write {type(datum).__name__} as an S-expression")
