"""
adapter/query.py — the single host entry point: text program in, JSON out.

Pipeline of one invocation::

    text ─▶ validate ─▶ parse_clauses ─▶ split_program ─▶ build_schema
         ─▶ build_program (store + rules + ext preds) ─▶ stratify
         ─▶ evaluate ─▶ query_store ─▶ success / error envelope

The last clause of the input is the query; it must be an atom without
premises. Every failure, including unexpected exceptions raised anywhere
in the engine, is turned into an error envelope: run_query() never raises
an Exception to its caller.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from solver import (
    Arena,
    Atom,
    Clause,
    NegAtom,
    ParseError,
    Parser,
    PredicateSym,
    SimpleProgram,
    SolverError,
    StoreError,
    StratifiedProgram,
    TableConfig,
    TableStore,
    get_engine,
)
from solver.engine import Evaluator

from . import response
from ._config import Settings, get_settings
from .errors import (
    EMPTY_INPUT_MESSAGE,
    NO_CLAUSES_MESSAGE,
    QUERY_IS_RULE_MESSAGE,
    AdapterError,
    ErrorKind,
    panic_message,
)

logger = logging.getLogger(__name__)

Schema = dict[PredicateSym, TableConfig]


# ---------------------------------------------------------------------------
# Pipeline stages
# ---------------------------------------------------------------------------

def validate(text: str) -> None:
    if not text.strip():
        raise AdapterError(ErrorKind.EMPTY_INPUT, EMPTY_INPUT_MESSAGE)


def parse_clauses(arena: Arena, text: str, source_name: str) -> list[Clause]:
    """Runs the parser's two phases, each with its own error prefix."""
    parser = Parser(arena, text.encode("utf-8", errors="surrogatepass"), source_name)
    try:
        parser.next_token()
    except ParseError as e:
        raise AdapterError(ErrorKind.PARSER_ERROR, f"Parser error: {e}") from e
    try:
        unit = parser.parse_unit()
    except ParseError as e:
        raise AdapterError(ErrorKind.PARSE_ERROR, f"Parse error: {e}") from e
    return unit.clauses


def split_program(clauses: Sequence[Clause]) -> tuple[Atom, list[Clause]]:
    """Separates the query atom (last clause) from the program clauses."""
    if not clauses:
        raise AdapterError(ErrorKind.NO_CLAUSES, NO_CLAUSES_MESSAGE)
    *program_clauses, query_clause = clauses
    if not query_clause.is_fact():
        raise AdapterError(ErrorKind.QUERY_IS_RULE, QUERY_IS_RULE_MESSAGE)
    return query_clause.head, program_clauses


def build_schema(clauses: Sequence[Clause]) -> Schema:
    """
    Registers every predicate mentioned by the clauses: heads, atom premises
    and negated atom premises. Comparisons contribute nothing.
    """
    schema: Schema = {}
    for clause in clauses:
        schema.setdefault(clause.head.sym, TableConfig.IN_MEMORY)
        for premise in clause.premises:
            if isinstance(premise, Atom):
                schema.setdefault(premise.sym, TableConfig.IN_MEMORY)
            elif isinstance(premise, NegAtom):
                schema.setdefault(premise.atom.sym, TableConfig.IN_MEMORY)
    return schema


def build_program(
    arena:           Arena,
    schema:          Schema,
    program_clauses: Sequence[Clause],
) -> tuple[TableStore, SimpleProgram]:
    """
    Loads facts into a new store and rules into a new program.

    A fact predicate is extensional only when no rule derives it; a
    predicate with both facts and rules is intensional and its facts seed
    the evaluation.
    """
    store   = TableStore(arena, schema)
    program = SimpleProgram(arena)

    rule_heads: set[PredicateSym] = {
        c.head.sym for c in program_clauses if not c.is_fact()
    }
    ext_preds: set[PredicateSym] = set()

    for clause in program_clauses:
        if clause.is_fact():
            try:
                store.add(arena, clause.head)
            except StoreError as e:
                raise AdapterError(ErrorKind.STORE_ADD_ERROR, str(e)) from e
            if clause.head.sym not in rule_heads:
                ext_preds.add(clause.head.sym)
        else:
            program.add_clause(arena, clause)

    program.ext_preds = sorted(ext_preds, key=PredicateSym.sort_key)
    logger.debug(
        "Loaded %d facts, %d rules, %d ext preds",
        store.estimate_fact_count(), len(program.rules), len(program.ext_preds),
    )
    return store, program


def stratify(program: SimpleProgram) -> StratifiedProgram:
    try:
        return program.stratify()
    except SolverError as e:
        raise AdapterError(ErrorKind.STRATIFY_ERROR, str(e)) from e


def evaluate(store: TableStore, program: StratifiedProgram, engine: Evaluator) -> None:
    try:
        engine.eval(store, program)
    except SolverError as e:
        raise AdapterError(ErrorKind.EVAL_ERROR, f"Evaluation error: {e}") from e


def query_store(store: TableStore, query_atom: Atom) -> list[str]:
    """Canonical text of every stored atom matching the query, in store order."""
    results: list[str] = []

    def collect(atom: Atom) -> None:
        results.append(atom.as_fact())

    try:
        store.get(query_atom.sym, query_atom.args, collect)
    except StoreError as e:
        raise AdapterError(ErrorKind.QUERY_ERROR, f"Query error: {e}") from e
    return results


# ---------------------------------------------------------------------------
# Invocation
# ---------------------------------------------------------------------------

@dataclass(slots=True)
class PreparedQuery:
    """Everything built for one invocation up to (not including) evaluation."""
    arena:      Arena
    clauses:    list[Clause]
    query_atom: Atom
    schema:     Schema
    store:      TableStore
    program:    SimpleProgram
    stratified: StratifiedProgram


def prepare(text: str, settings: Settings) -> PreparedQuery:
    validate(text)
    arena   = Arena()
    clauses = parse_clauses(arena, text, settings.source_name)
    query_atom, program_clauses = split_program(clauses)
    schema  = build_schema(clauses)
    store, program = build_program(arena, schema, program_clauses)
    stratified = stratify(program)
    return PreparedQuery(
        arena=arena,
        clauses=clauses,
        query_atom=query_atom,
        schema=schema,
        store=store,
        program=program,
        stratified=stratified,
    )


def run_query_internal(text: str, settings: Settings | None = None) -> list[str]:
    """Runs the whole pipeline; raises AdapterError on any expected failure."""
    settings = settings or get_settings()
    prepared = prepare(text, settings)
    evaluate(prepared.store, prepared.stratified, get_engine(settings.engine))
    return query_store(prepared.store, prepared.query_atom)


def run_query(text: str, settings: Settings | None = None) -> str:
    """
    Evaluates a program whose last clause is the query.

    Returns {"status":"success","data":[...]} or
    {"status":"error","message":"..."}; never raises Exception.
    """
    try:
        data = run_query_internal(text, settings)
    except AdapterError as e:
        logger.debug("Query failed (%s): %s", e.kind, e.message)
        return response.error(e.message)
    except Exception as e:
        logger.debug("Unexpected failure while running query", exc_info=True)
        return response.error(panic_message(e))
    logger.debug("Query succeeded with %d results", len(data))
    return response.success(data)
