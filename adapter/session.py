"""
adapter/session.py — interactive define/query session.

Unlike run_query(), a Session keeps the clauses it was given and answers
any number of queries against them. Each query evaluates the accumulated
program from scratch and reports variable bindings::

    session = Session()
    session.define('foo(1, 2).')
    session.define('bar("baz").')
    session.query("foo(X, Y)")   # [{"X": "1", "Y": "2"}]
    session.query('bar("baz")')  # [{}]   (true, nothing to bind)
    session.query('bar("qux")')  # []     (false)
"""

from __future__ import annotations

import logging

from solver import (
    Arena,
    Atom,
    Clause,
    ParseError,
    Parser,
    SolverError,
    Variable,
)
from solver.engine import get_engine

from ._config import Settings, get_settings
from .errors import AdapterError
from .query import build_program, build_schema, evaluate, stratify

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """Failure of a session operation; message starts with 'Error: '."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Error: {detail}")
        self.detail = detail


class Session:
    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._arena    = Arena()
        self._clauses: list[Clause] = []

    @property
    def clauses(self) -> list[Clause]:
        return list(self._clauses)

    def reset(self) -> None:
        self._arena   = Arena()
        self._clauses = []

    # ------------------------------------------------------------------

    def _parser(self, text: str, arena: Arena | None = None) -> Parser:
        parser = Parser(arena or self._arena, text.encode("utf-8", errors="surrogatepass"), self._settings.source_name)
        try:
            parser.next_token()
        except ParseError as e:
            raise SessionError(str(e)) from e
        return parser

    def _load(self, clauses: list[Clause], extra: list[Atom] | None = None):
        heads  = [Clause(a) for a in extra or []]
        schema = build_schema(clauses + heads)
        store, program = build_program(self._arena, schema, clauses)
        return store, stratify(program)

    def define(self, text: str) -> int:
        """
        Adds the facts and rules of `text`. The definition is rejected as a
        whole when it does not parse or makes the program unsafe or
        unstratifiable. Returns the number of clauses added.
        """
        parser = self._parser(text)
        try:
            unit = parser.parse_unit()
        except ParseError as e:
            raise SessionError(str(e)) from e

        candidate = self._clauses + unit.clauses
        try:
            self._load(candidate)
        except AdapterError as e:
            raise SessionError(e.message) from e

        self._clauses = candidate
        logger.debug("Defined %d clauses (%d total)", len(unit.clauses), len(candidate))
        return len(unit.clauses)

    def query(self, text: str) -> list[dict[str, str]]:
        """
        Bindings of the query's variables for every matching fact.

        A query without variables that holds yields a single empty mapping.
        The goal is parsed in a scope of the session arena, so predicates
        that only appear in queries are not kept.
        """
        try:
            engine = get_engine(self._settings.engine)
        except ValueError as e:
            raise SessionError(str(e)) from e

        parser = self._parser(text, self._arena.scope())
        try:
            goal = parser.parse_query_atom()
        except ParseError as e:
            raise SessionError(str(e)) from e

        try:
            store, stratified = self._load(self._clauses, [goal])
            evaluate(store, stratified, engine)
            matches: list[Atom] = []
            store.get(goal.sym, goal.args, matches.append)
        except AdapterError as e:
            raise SessionError(e.message) from e
        except SolverError as e:
            raise SessionError(str(e)) from e

        results: list[dict[str, str]] = []
        for atom in matches:
            bindings: dict[str, str] = {}
            for term, value in zip(goal.args, atom.args):
                if isinstance(term, Variable) and not term.is_wildcard():
                    bindings[term.name] = str(value)
            results.append(bindings)
        if matches and not any(results):
            return [{}]
        return results

