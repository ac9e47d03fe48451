"""
solver/lexer.py — tokenizer for the Datalog surface syntax.

Tokens:
  IDENT     parent, is_vulnerable          (predicate names)
  VARIABLE  X, Svc, _                      (uppercase or '_' first)
  NAME      /log4j, /svc/order              (name constants)
  STRING    "Simba", 'x'                   (backslash escapes)
  NUMBER    42, -7
  FLOAT     2.5, -1e3
  BUILTIN   :lt, :ge                       (comparison builtins)
  punctuation  ( ) , . :- ⟸ ! = != < <= > >=

Comments run from '#' or '//' to the end of the line.
"""

from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import StrEnum

from .errors import LexError


class TokenKind(StrEnum):
    IDENT    = "identifier"
    VARIABLE = "variable"
    NAME     = "name"
    STRING   = "string"
    NUMBER   = "number"
    FLOAT    = "float"
    BUILTIN  = "builtin"
    LPAREN   = "'('"
    RPAREN   = "')'"
    COMMA    = "','"
    DOT      = "'.'"
    ARROW    = "':-'"
    BANG     = "'!'"
    OP       = "operator"
    EOF      = "end of input"


@dataclass(frozen=True, slots=True)
class Token:
    kind:  TokenKind
    text:  str
    line:  int
    col:   int
    value: str | int | float | None = None

    def describe(self) -> str:
        if self.kind is TokenKind.EOF:
            return "end of input"
        return f"{self.kind} {self.text!r}"


_IDENT_RE    = re.compile(r"[a-z][A-Za-z0-9_]*")
_VARIABLE_RE = re.compile(r"[A-Z_][A-Za-z0-9_]*")
_NAME_RE     = re.compile(r"(?:/[A-Za-z0-9_\-]+)+")
_BUILTIN_RE  = re.compile(r":[a-z][a-z_]*")
_DIGITS      = frozenset("0123456789")
_NUMBER_RE   = re.compile(r"-?[0-9]+(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?")

# longest first
_OPERATORS: tuple[tuple[str, TokenKind], ...] = (
    (":-", TokenKind.ARROW),
    ("⟸",  TokenKind.ARROW),
    ("!=", TokenKind.OP),
    ("<=", TokenKind.OP),
    (">=", TokenKind.OP),
    ("=",  TokenKind.OP),
    ("<",  TokenKind.OP),
    (">",  TokenKind.OP),
    ("!",  TokenKind.BANG),
    ("(",  TokenKind.LPAREN),
    (")",  TokenKind.RPAREN),
    (",",  TokenKind.COMMA),
    (".",  TokenKind.DOT),
)

_STRING_ESCAPES: dict[str, str] = {
    "n":  "\n",
    "t":  "\t",
    "r":  "\r",
    "\\": "\\",
    '"':  '"',
    "'":  "'",
}


class Lexer:
    """Produces tokens one at a time; position is tracked as 1-based line:col."""

    def __init__(self, text: str, source_name: str) -> None:
        self._text   = text
        self._source = source_name
        self._pos    = 0
        self._line   = 1
        self._col    = 1

    # ------------------------------------------------------------------

    def _error(self, detail: str, line: int | None = None, col: int | None = None) -> LexError:
        return LexError(
            detail,
            self._source,
            self._line if line is None else line,
            self._col if col is None else col,
        )

    def _advance(self, n: int) -> str:
        chunk = self._text[self._pos:self._pos + n]
        for ch in chunk:
            if ch == "\n":
                self._line += 1
                self._col   = 1
            else:
                self._col  += 1
        self._pos += n
        return chunk

    def _skip_trivia(self) -> None:
        text = self._text
        while self._pos < len(text):
            ch = text[self._pos]
            if ch.isspace():
                self._advance(1)
            elif ch == "#" or text.startswith("//", self._pos):
                end = text.find("\n", self._pos)
                self._advance((len(text) if end < 0 else end) - self._pos)
            else:
                break

    def _read_string(self, line: int, col: int) -> Token:
        text  = self._text
        quote = text[self._pos]
        start = self._pos
        self._advance(1)
        chars: list[str] = []
        while True:
            if self._pos >= len(text) or text[self._pos] == "\n":
                raise self._error("unterminated string literal", line, col)
            ch = text[self._pos]
            if ch == quote:
                self._advance(1)
                break
            if ch == "\\":
                if self._pos + 1 >= len(text):
                    raise self._error("unterminated string literal", line, col)
                esc = text[self._pos + 1]
                if esc not in _STRING_ESCAPES:
                    raise self._error(f"unknown escape sequence '\\{esc}'")
                chars.append(_STRING_ESCAPES[esc])
                self._advance(2)
                continue
            chars.append(ch)
            self._advance(1)
        return Token(TokenKind.STRING, text[start:self._pos], line, col, "".join(chars))

    # ------------------------------------------------------------------

    def next(self) -> Token:
        """Returns the next token; EOF is returned repeatedly at the end."""
        self._skip_trivia()
        line, col = self._line, self._col
        text = self._text
        if self._pos >= len(text):
            return Token(TokenKind.EOF, "", line, col)

        ch = text[self._pos]

        if ch in "\"'":
            return self._read_string(line, col)

        if ch in _DIGITS or (ch == "-" and text[self._pos + 1:self._pos + 2] in _DIGITS):
            m = _NUMBER_RE.match(text, self._pos)
            lexeme = self._advance(m.end() - m.start())
            if any(c in lexeme for c in ".eE"):
                value = float(lexeme)
                if not math.isfinite(value):
                    raise self._error(f"float literal {lexeme} out of range", line, col)
                return Token(TokenKind.FLOAT, lexeme, line, col, value)
            return Token(TokenKind.NUMBER, lexeme, line, col, int(lexeme))

        if ch == "/":
            m = _NAME_RE.match(text, self._pos)
            if m is None:
                raise self._error("expected name constant after '/'")
            lexeme = self._advance(m.end() - m.start())
            return Token(TokenKind.NAME, lexeme, line, col, lexeme)

        if ch == ":" and not text.startswith(":-", self._pos):
            m = _BUILTIN_RE.match(text, self._pos)
            if m is None:
                raise self._error("expected builtin name after ':'")
            lexeme = self._advance(m.end() - m.start())
            return Token(TokenKind.BUILTIN, lexeme, line, col, lexeme)

        for regex, kind in ((_IDENT_RE, TokenKind.IDENT), (_VARIABLE_RE, TokenKind.VARIABLE)):
            m = regex.match(text, self._pos)
            if m is not None:
                lexeme = self._advance(m.end() - m.start())
                return Token(kind, lexeme, line, col, lexeme)

        for lexeme, kind in _OPERATORS:
            if text.startswith(lexeme, self._pos):
                self._advance(len(lexeme))
                return Token(kind, lexeme, line, col, lexeme)

        raise self._error(f"unexpected character {ch!r}")
