"""Tests for the interactive define/query session."""

import pytest

from adapter import Session, SessionError, Settings


@pytest.fixture
def session(settings):
    return Session(settings)


class TestQuery:
    def test_bindings(self, session):
        session.define("foo(1, 2).")
        assert session.query("foo(X, Y)") == [{"X": "1", "Y": "2"}]

    def test_ground_query_true(self, session):
        session.define('bar("baz").')
        assert session.query('bar("baz")') == [{}]

    def test_ground_query_false(self, session):
        session.define('bar("baz").')
        assert session.query('bar("qux")') == []

    def test_unknown_predicate_is_false(self, session):
        assert session.query("nothing(X)") == []

    def test_query_terminated_by_dot(self, session):
        session.define('bar("baz").')
        assert session.query('bar(B).') == [{"B": '"baz"'}]

    def test_wildcard_not_bound(self, session):
        session.define("foo(1, 2). foo(3, 4).")
        assert session.query("foo(X, _)") == [{"X": "1"}, {"X": "3"}]

    def test_rules_evaluated(self, session, lion_king_program):
        facts_and_rules = lion_king_program.rsplit("father(Father", 1)[0]
        session.define(facts_and_rules)
        assert session.query('father(F, "Simba")') == [{"F": '"Mufasa"'}]

    def test_definitions_accumulate(self, session):
        session.define('edge("a", "b").')
        session.define("path(X, Y) :- edge(X, Y).")
        session.define('edge("b", "c").')
        assert session.query('path("b", Y)') == [{"Y": '"c"'}]

    def test_query_parse_error(self, session):
        with pytest.raises(SessionError) as exc_info:
            session.query("foo(")
        assert str(exc_info.value).startswith("Error: ")

    def test_trailing_tokens_rejected(self, session):
        with pytest.raises(SessionError, match="after query"):
            session.query("foo(X). bar(Y).")


class TestDefine:
    def test_returns_clause_count(self, session):
        assert session.define("a(1). a(2). b(X) :- a(X).") == 3
        assert len(session.clauses) == 3

    def test_parse_error_leaves_session_unchanged(self, session):
        session.define("a(1).")
        with pytest.raises(SessionError, match="^Error: "):
            session.define("a(2). a(")
        assert [str(c) for c in session.clauses] == ["a(1)."]

    def test_unstratifiable_definition_rejected(self, session):
        session.define("q(1).")
        with pytest.raises(SessionError, match="cannot be stratified"):
            session.define("p(X) :- q(X), !p(X).")
        assert [str(c) for c in session.clauses] == ["q(1)."]
        assert session.query("q(X)") == [{"X": "1"}]

    def test_unsafe_rule_rejected(self, session):
        with pytest.raises(SessionError, match="not bound"):
            session.define("p(X) :- q(Y).")
        assert session.clauses == []

    def test_wildcard_head_rejected(self, session):
        session.define("q(1).")
        with pytest.raises(SessionError, match="wildcard '_' in rule head"):
            session.define("p(_) :- q(X).")
        assert [str(c) for c in session.clauses] == ["q(1)."]
        assert session.query("q(X)") == [{"X": "1"}]

    def test_non_ground_fact_rejected(self, session):
        with pytest.raises(SessionError, match="non-ground"):
            session.define("bad(X).")
        assert session.clauses == []

    def test_reset(self, session):
        session.define("a(1).")
        session.reset()
        assert session.clauses == []
        assert session.query("a(X)") == []


def test_default_settings_from_environment(monkeypatch):
    monkeypatch.setenv("DLQ_SOURCE_NAME", "repl")
    session = Session()
    with pytest.raises(SessionError) as exc_info:
        session.define("@")
    assert str(exc_info.value).startswith("Error: repl:1:1:")


def test_explicit_settings():
    session = Session(Settings(engine="seminaive"))
    session.define("e(1, 2). e(2, 3). r(X, Y) :- e(X, Y). r(X, Z) :- r(X, Y), e(Y, Z).")
    assert session.query("r(1, Z)") == [{"Z": "2"}, {"Z": "3"}]


def test_unknown_engine_is_session_error():
    session = Session(Settings(engine="bogus"))
    session.define("a(1).")
    with pytest.raises(SessionError, match="^Error: unknown engine 'bogus'"):
        session.query("a(X)")


def test_query_predicates_not_kept(session):
    session.define("a(1).")
    interned = len(session._arena.interner)
    assert session.query("ghost(X, Y)") == []
    assert session.query("a(X)") == [{"X": "1"}]
    assert len(session._arena.interner) == interned
