"""Parser for S-expression text.

Lists read as Python lists, ``(a . b)`` pairs as 2-tuples, symbols as
Symbol, ``nil`` as None and ``#t``/``#f`` as booleans.
"""

from __future__ import annotations

from typing import Any

import ply.yacc as yacc

from ndextract.errors import SExpressionError
from ndextract.sexp.lexer import SExpressionLexer


class Symbol(str):
    """A bare symbol, as opposed to a quoted string."""

    def __repr__(self) -> str:
        return f"Symbol({str(self)!r})"


class SExpressionParser:
    """LALR parser for a single S-expression datum."""

    tokens = SExpressionLexer.tokens

    start = "datum"

    def __init__(self) -> None:
        self._lexer = SExpressionLexer()
        self._parser: yacc.LRParser | None = None

    def build(self, **kwargs) -> None:  # type: ignore
        self._lexer.build(debug=False, errorlog=yacc.NullLogger())
        kwargs.setdefault("debug", False)
        kwargs.setdefault("write_tables", False)
        kwargs.setdefault("errorlog", yacc.NullLogger())
        self._parser = yacc.yacc(module=self, **kwargs)

    def parse(self, text: str) -> Any:
        """Parse one datum from ``text``."""
        if self._parser is None:
            self.build()
        if not text.strip():
            raise SExpressionError("Empty input")
        self._lexer.lexer.lineno = 1
        return self._parser.parse(text, lexer=self._lexer.lexer)  # type: ignore[union-attr]

    # ---- Grammar rules ----

    def p_datum(self, p: yacc.YaccProduction) -> None:
        """datum : atom
                 | list"""
        p[0] = p[1]

    def p_atom(self, p: yacc.YaccProduction) -> None:
        """atom : STRING
                | FLOAT
                | INTEGER
                | BOOLEAN"""
        p[0] = p[1]

    def p_atom_symbol(self, p: yacc.YaccProduction) -> None:
        """atom : SYMBOL"""
        p[0] = Symbol(p[1])

    def p_atom_nil(self, p: yacc.YaccProduction) -> None:
        """atom : NIL"""
        p[0] = None

    def p_list(self, p: yacc.YaccProduction) -> None:
        """list : LPAREN items RPAREN"""
        p[0] = p[2]

    def p_list_pair(self, p: yacc.YaccProduction) -> None:
        """list : LPAREN items datum DOT datum RPAREN"""
        if p[2]:
            raise SExpressionError(f"Improper lists are not supported (line {p.lineno(4)})")
        p[0] = (p[3], p[5])

    def p_items_empty(self, p: yacc.YaccProduction) -> None:
        """items : """
        p[0] = []

    def p_items_multi(self, p: yacc.YaccProduction) -> None:
        """items : items datum"""
        p[1].append(p[2])
        p[0] = p[1]

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p is None:
            raise SExpressionError("Unexpected end of input")
        raise SExpressionError(f"Unexpected {p.type} {p.value!r} at line {p.lineno}")
