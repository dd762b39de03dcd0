"""Lexer for S-expression text."""

from __future__ import annotations

import re

import ply.lex as lex

from ndextract.errors import SExpressionError

_ESCAPE = re.compile(r"\\(.)", re.DOTALL)


class SExpressionLexer:
    """Lexer for tokenizing S-expressions written by ndextract."""

    reserved = {
        "nil": "NIL",
    }

    tokens = [
        "LPAREN",
        "RPAREN",
        "DOT",
        "STRING",
        "FLOAT",
        "INTEGER",
        "BOOLEAN",
        "SYMBOL",
    ] + list(reserved.values())

    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_DOT = r"\."

    t_ignore = " \t\r"

    # Comments
    t_ignore_COMMENT = r";[^\n]*"

    def __init__(self) -> None:
        self.lexer: lex.LexToken = None  # type: ignore

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r'"([^"\\]|\\.)*"'
        t.lexer.lineno += t.value.count("\n")
        t.value = _ESCAPE.sub(r"\1", t.value[1:-1])
        return t

    def t_FLOAT(self, t: lex.LexToken) -> lex.LexToken:
        r"-?\d+(\.\d+([eE][-+]?\d+)?|[eE][-+]?\d+)"
        t.value = float(t.value)
        return t

    def t_INTEGER(self, t: lex.LexToken) -> lex.LexToken:
        r"-?\d+"
        t.value = int(t.value)
        return t

    def t_BOOLEAN(self, t: lex.LexToken) -> lex.LexToken:
        r"\#[tf]"
        t.value = t.value == "#t"
        return t

    def t_SYMBOL(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_\-]*"
        t.type = self.reserved.get(t.value, "SYMBOL")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n+"
        t.lexer.lineno += len(t.value)

    def t_error(self, t: lex.LexToken) -> None:
        raise SExpressionError(f"Illegal character '{t.value[0]}' at line {t.lexer.lineno}")

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens
