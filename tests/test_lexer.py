"""Tests for the tokenizer."""

import pytest

from solver.errors import LexError
from solver.lexer import Lexer, TokenKind


def tokens(text):
    lexer = Lexer(text, "test")
    out = []
    while True:
        tok = lexer.next()
        out.append(tok)
        if tok.kind is TokenKind.EOF:
            return out


def kinds(text):
    return [t.kind for t in tokens(text)]


class TestTokens:
    def test_rule(self):
        assert kinds("p(X) :- q(X).") == [
            TokenKind.IDENT, TokenKind.LPAREN, TokenKind.VARIABLE, TokenKind.RPAREN,
            TokenKind.ARROW,
            TokenKind.IDENT, TokenKind.LPAREN, TokenKind.VARIABLE, TokenKind.RPAREN,
            TokenKind.DOT, TokenKind.EOF,
        ]

    def test_constants(self):
        toks = tokens('foo("a\\"b", /n/m, -3, 2.5)')
        values = [(t.kind, t.value) for t in toks if t.kind not in (
            TokenKind.IDENT, TokenKind.LPAREN, TokenKind.RPAREN, TokenKind.COMMA, TokenKind.EOF,
        )]
        assert values == [
            (TokenKind.STRING, 'a"b'),
            (TokenKind.NAME, "/n/m"),
            (TokenKind.NUMBER, -3),
            (TokenKind.FLOAT, 2.5),
        ]

    def test_number_before_clause_end(self):
        toks = tokens("X < 3.")
        assert [t.kind for t in toks] == [
            TokenKind.VARIABLE, TokenKind.OP, TokenKind.NUMBER, TokenKind.DOT, TokenKind.EOF,
        ]
        assert toks[2].value == 3

    def test_operators(self):
        ops = [t.text for t in tokens("= != < <= > >=") if t.kind is TokenKind.OP]
        assert ops == ["=", "!=", "<", "<=", ">", ">="]

    def test_negation_and_builtin(self):
        assert kinds("!q(X), :lt(X, 1)")[:2] == [TokenKind.BANG, TokenKind.IDENT]
        builtin = [t for t in tokens(":lt(X, 1)") if t.kind is TokenKind.BUILTIN]
        assert builtin[0].text == ":lt"

    def test_unicode_arrow(self):
        assert TokenKind.ARROW in kinds("p(X) ⟸ q(X).")

    def test_wildcard_is_variable(self):
        assert kinds("_")[0] is TokenKind.VARIABLE

    def test_single_quoted_string(self):
        toks = tokens("'it\\'s'")
        assert toks[0].kind is TokenKind.STRING
        assert toks[0].value == "it's"


class TestTrivia:
    def test_comments_skipped(self):
        toks = tokens("# hash comment\n// slash comment\nfoo.")
        assert toks[0].kind is TokenKind.IDENT
        assert (toks[0].line, toks[0].col) == (3, 1)

    def test_only_comment_is_eof(self):
        assert kinds("// just a comment\n") == [TokenKind.EOF]

    def test_positions(self):
        toks = tokens("a.\n  b.")
        b = toks[2]
        assert b.text == "b"
        assert (b.line, b.col) == (2, 3)


class TestErrors:
    def test_unexpected_character(self):
        with pytest.raises(LexError, match="unexpected character '@'"):
            tokens("@foo.")

    def test_unterminated_string(self):
        with pytest.raises(LexError, match="unterminated string literal"):
            tokens('foo("abc).')

    def test_unknown_escape(self):
        with pytest.raises(LexError, match="unknown escape sequence"):
            tokens('"a\\qb"')

    def test_error_carries_location(self):
        with pytest.raises(LexError) as exc_info:
            tokens("foo.\n  @")
        assert exc_info.value.line == 2
        assert exc_info.value.col == 3
        assert str(exc_info.value).startswith("test:2:3: ")

    def test_float_out_of_range(self):
        with pytest.raises(LexError, match="float literal 1e999 out of range"):
            tokens("n(1e999).")

    def test_large_float_within_range(self):
        assert tokens("1.5e300")[0].value == 1.5e300
