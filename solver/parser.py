"""
solver/parser.py — recursive-descent parser for compilation units.

Protocol::

    parser = Parser(arena, source.encode("utf-8"), "wasm_input")
    parser.next_token()          # primes the lexer; raises LexError
    unit   = parser.parse_unit() # raises ParseError

Grammar::

    unit     := clause*
    clause   := atom ( (":-" | "⟸") premise ("," premise)* )? "."
    premise  := atom | "!" atom | BUILTIN "(" term "," term ")" | term OP term
    atom     := IDENT ( "(" ( term ("," term)* )? ")" )?
    term     := VARIABLE | NAME | STRING | NUMBER | FLOAT
"""

from __future__ import annotations

import logging

from .arena import Arena
from .errors import LexError, ParseError
from .lexer import Lexer, Token, TokenKind
from .types import (
    BUILTIN_COMPARISONS,
    Atom,
    BaseTerm,
    Clause,
    CmpOp,
    Comparison,
    ConstKind,
    Constant,
    NegAtom,
    Premise,
    Unit,
    Variable,
)

logger = logging.getLogger(__name__)

_CONST_KINDS: dict[TokenKind, ConstKind] = {
    TokenKind.NAME:   ConstKind.NAME,
    TokenKind.STRING: ConstKind.STRING,
    TokenKind.NUMBER: ConstKind.NUMBER,
    TokenKind.FLOAT:  ConstKind.FLOAT,
}

_TERM_STARTS = frozenset(_CONST_KINDS) | {TokenKind.VARIABLE}


class Parser:
    """Parses one source text into clauses whose predicates are interned in `arena`."""

    def __init__(self, arena: Arena, data: bytes, source_name: str) -> None:
        self._arena  = arena
        self._data   = data
        self._source = source_name
        self._lexer: Lexer | None = None
        self._tok:   Token | None = None

    # ------------------------------------------------------------------
    # Token handling
    # ------------------------------------------------------------------

    def next_token(self) -> Token:
        """Advances to the next token. The first call decodes the input."""
        if self._lexer is None:
            try:
                text = self._data.decode("utf-8")
            except UnicodeDecodeError as e:
                raise LexError(f"invalid UTF-8 at byte {e.start}", self._source, 1, 1) from e
            self._lexer = Lexer(text, self._source)
        self._tok = self._lexer.next()
        return self._tok

    @property
    def token(self) -> Token:
        if self._tok is None:
            raise ParseError("parser used before next_token()", self._source, 1, 1)
        return self._tok

    def _error(self, detail: str, tok: Token | None = None) -> ParseError:
        tok = tok or self.token
        return ParseError(detail, self._source, tok.line, tok.col)

    def _expect(self, kind: TokenKind) -> Token:
        tok = self.token
        if tok.kind is not kind:
            raise self._error(f"expected {kind} but found {tok.describe()}")
        self.next_token()
        return tok

    # ------------------------------------------------------------------
    # Public interface
    # ------------------------------------------------------------------

    def parse_unit(self) -> Unit:
        """Parses clauses until end of input."""
        unit = Unit()
        while self.token.kind is not TokenKind.EOF:
            unit.clauses.append(self.parse_clause())
        logger.debug("Parsed %d clauses from %s", len(unit.clauses), self._source)
        return unit

    def parse_clause(self) -> Clause:
        head = self._parse_atom()
        premises: list[Premise] = []
        if self.token.kind is TokenKind.ARROW:
            self.next_token()
            premises.append(self._parse_premise())
            while self.token.kind is TokenKind.COMMA:
                self.next_token()
                premises.append(self._parse_premise())
        self._expect(TokenKind.DOT)
        return Clause(head, tuple(premises))

    def parse_query_atom(self) -> Atom:
        """Single atom, optionally terminated by '.', followed by end of input."""
        atom = self._parse_atom()
        if self.token.kind is TokenKind.DOT:
            self.next_token()
        if self.token.kind is not TokenKind.EOF:
            raise self._error(f"unexpected {self.token.describe()} after query")
        return atom

    # ------------------------------------------------------------------
    # Productions
    # ------------------------------------------------------------------

    def _parse_atom(self) -> Atom:
        tok = self.token
        if tok.kind is not TokenKind.IDENT:
            raise self._error(f"expected predicate name but found {tok.describe()}")
        self.next_token()
        args: list[BaseTerm] = []
        if self.token.kind is TokenKind.LPAREN:
            self.next_token()
            if self.token.kind is not TokenKind.RPAREN:
                args.append(self._parse_term())
                while self.token.kind is TokenKind.COMMA:
                    self.next_token()
                    args.append(self._parse_term())
            self._expect(TokenKind.RPAREN)
        sym = self._arena.predicate_sym(tok.text, len(args))
        return Atom(sym, tuple(args))

    def _parse_term(self) -> BaseTerm:
        tok = self.token
        if tok.kind is TokenKind.VARIABLE:
            self.next_token()
            return Variable(tok.text)
        kind = _CONST_KINDS.get(tok.kind)
        if kind is None:
            raise self._error(f"expected variable or constant but found {tok.describe()}")
        self.next_token()
        return Constant(kind, tok.value)

    def _parse_premise(self) -> Premise:
        tok = self.token
        if tok.kind is TokenKind.BANG:
            self.next_token()
            return NegAtom(self._parse_atom())
        if tok.kind is TokenKind.IDENT:
            return self._parse_atom()
        if tok.kind is TokenKind.BUILTIN:
            return self._parse_builtin()
        if tok.kind in _TERM_STARTS:
            left = self._parse_term()
            op_tok = self.token
            if op_tok.kind is not TokenKind.OP:
                raise self._error(f"expected comparison operator but found {op_tok.describe()}")
            self.next_token()
            right = self._parse_term()
            return Comparison(CmpOp(op_tok.text), left, right)
        raise self._error(f"expected premise but found {tok.describe()}")

    def _parse_builtin(self) -> Comparison:
        tok = self.token
        op  = BUILTIN_COMPARISONS.get(tok.text)
        if op is None:
            raise self._error(f"unknown builtin {tok.text!r}")
        self.next_token()
        self._expect(TokenKind.LPAREN)
        left = self._parse_term()
        self._expect(TokenKind.COMMA)
        right = self._parse_term()
        self._expect(TokenKind.RPAREN)
        return Comparison(op, left, right)


def parse_text(arena: Arena, text: str, source_name: str = "input") -> Unit:
    """Convenience wrapper running both parser phases on a string."""
    parser = Parser(arena, text.encode("utf-8"), source_name)
    parser.next_token()
    return parser.parse_unit()
