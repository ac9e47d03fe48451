"""
solver/factstore.py — in-memory fact store.

One table per predicate of the schema. A table keeps its facts in insertion
order, so lookups are deterministic for a given input.

Public API:
  TableConfig                       table kind (only IN_MEMORY)
  TableStore(arena, schema)         store with a table per schema entry
  store.add(arena, atom)      -> bool
  store.get(sym, args, callback)    callback(atom) for every match
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping
from enum import StrEnum

from .arena import Arena
from .errors import StoreError
from .types import Atom, BaseTerm, Constant, PredicateSym, Variable

logger = logging.getLogger(__name__)


class TableConfig(StrEnum):
    IN_MEMORY = "in_memory"


Schema = Mapping[PredicateSym, TableConfig]
Row = tuple[Constant, ...]


def match_row(
    pattern: tuple[BaseTerm, ...],
    row:     Row,
    subst:   dict[Variable, Constant],
) -> dict[Variable, Constant] | None:
    """
    Matches a pattern of terms against a ground row.

    Returns the extended substitution or None. `subst` is never modified.
    """
    if len(pattern) != len(row):
        return None
    s = subst
    copied = False
    for p, g in zip(pattern, row):
        if isinstance(p, Constant):
            if p != g:
                return None
            continue
        if p.is_wildcard():
            continue
        bound = s.get(p)
        if bound is None:
            if not copied:
                s = dict(s)
                copied = True
            s[p] = g
        elif bound != g:
            return None
    return s


class TableStore:
    """
    Usage::

        store = TableStore(arena, {sym: TableConfig.IN_MEMORY})
        store.add(arena, atom)
        store.get(sym, (Variable("X"),), lambda atom: print(atom))
    """

    def __init__(self, arena: Arena, schema: Schema) -> None:
        self._arena = arena
        self._tables: dict[PredicateSym, dict[Row, Atom]] = {}
        for sym, config in schema.items():
            if config is not TableConfig.IN_MEMORY:
                raise StoreError(f"unsupported table config {config!r} for {sym}")
            self._tables[sym] = {}
        logger.debug("TableStore created with %d tables", len(self._tables))

    @property
    def arena(self) -> Arena:
        return self._arena

    # ------------------------------------------------------------------

    def _table(self, sym: PredicateSym) -> dict[Row, Atom]:
        table = self._tables.get(sym)
        if table is None:
            raise StoreError(f"no table for predicate {sym}")
        return table

    def add(self, arena: Arena, atom: Atom) -> bool:
        """Inserts a ground atom. Returns True when the fact was not yet stored."""
        if arena is not self._arena:
            raise StoreError(f"atom {atom} belongs to a different arena")
        if not atom.is_ground():
            raise StoreError(f"cannot add non-ground atom {atom}")
        table = self._table(atom.sym)
        row: Row = atom.args  # type: ignore[assignment]
        if row in table:
            return False
        table[row] = atom
        return True

    def get(
        self,
        sym:      PredicateSym,
        args:     tuple[BaseTerm, ...],
        callback: Callable[[Atom], None],
    ) -> None:
        """Calls `callback` for every stored atom of `sym` matching `args`."""
        if len(args) != sym.arity:
            raise StoreError(f"pattern has {len(args)} arguments, {sym} expects {sym.arity}")
        table = self._table(sym)
        for row, atom in list(table.items()):
            if match_row(args, row, {}) is not None:
                callback(atom)

    def contains(self, atom: Atom) -> bool:
        table = self._tables.get(atom.sym)
        return table is not None and atom.args in table

    def tuples(self, sym: PredicateSym) -> Iterable[Row]:
        """Rows of one predicate (snapshot, safe to iterate while adding)."""
        return tuple(self._table(sym))

    def atoms(self, sym: PredicateSym) -> list[Atom]:
        return list(self._table(sym).values())

    def predicates(self) -> list[PredicateSym]:
        return list(self._tables)

    def estimate_fact_count(self) -> int:
        return sum(len(t) for t in self._tables.values())
