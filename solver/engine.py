"""
solver/engine.py — bottom-up Datalog evaluation over a TableStore.

Supports:
  - positive atoms (joins by backtracking over stored rows)
  - stratified negation-as-failure (!atom)
  - comparisons: = != < <= > >= (ordering needs numbers)
  - naive and semi-naive fixed-point evaluation, stratum by stratum

Both evaluators leave the least fixpoint in the store: seed facts plus
everything derivable from them.
"""

from __future__ import annotations

import logging
import operator
from collections.abc import Callable, Iterable, Mapping
from typing import Protocol

from .analysis import PlannedRule, StratifiedProgram
from .errors import EvaluationError, StoreError
from .factstore import Row, TableStore, match_row
from .types import (
    Atom,
    BaseTerm,
    CmpOp,
    Comparison,
    Constant,
    NegAtom,
    Premise,
    PredicateSym,
    Variable,
)

logger = logging.getLogger(__name__)

Substitution = dict[Variable, Constant]

# Rows visible to a premise at a given position of a rule body.
RowSource = Callable[[int, PredicateSym], Iterable[Row]]

# ---------------------------------------------------------------------------
# Comparisons
# ---------------------------------------------------------------------------

_ORDERING: dict[CmpOp, Callable[[object, object], bool]] = {
    CmpOp.LT: operator.lt,
    CmpOp.LE: operator.le,
    CmpOp.GT: operator.gt,
    CmpOp.GE: operator.ge,
}


def _resolve(term: BaseTerm, subst: Substitution) -> Constant | None:
    if isinstance(term, Constant):
        return term
    return subst.get(term)


def _eval_comparison(cmp: Comparison, subst: Substitution) -> Substitution | None:
    """Returns the (possibly extended) substitution when the comparison holds."""
    left  = _resolve(cmp.left, subst)
    right = _resolve(cmp.right, subst)

    if cmp.op is CmpOp.EQ:
        if left is not None and right is not None:
            return subst if left == right else None
        # one side unbound: equality binds it
        var, value = (cmp.left, right) if left is None else (cmp.right, left)
        if value is None or not isinstance(var, Variable):
            raise EvaluationError(f"cannot evaluate {cmp}: both sides unbound")
        if var.is_wildcard():
            return subst
        return {**subst, var: value}

    if left is None or right is None:
        raise EvaluationError(f"cannot evaluate {cmp}: unbound variable")

    if cmp.op is CmpOp.NE:
        return subst if left != right else None

    if not (left.is_numeric() and right.is_numeric()):
        raise EvaluationError(f"cannot compare {left} {cmp.op} {right}: operands must be numbers")
    return subst if _ORDERING[cmp.op](left.value, right.value) else None


# ---------------------------------------------------------------------------
# Rule body matching (backtracking)
# ---------------------------------------------------------------------------

def _ground_args(atom: Atom, subst: Substitution) -> tuple[BaseTerm, ...]:
    return tuple(
        subst.get(a, a) if isinstance(a, Variable) else a
        for a in atom.args
    )


def _match_body(
    body:   tuple[Premise, ...],
    index:  int,
    rows:   RowSource,
    store:  TableStore,
    subst:  Substitution,
    out:    list[Substitution],
) -> None:
    """
    Appends to `out` every substitution extending `subst` under which the
    premises body[index:] hold. Negated atoms always look at the full store.
    """
    if index == len(body):
        out.append(subst)
        return

    premise = body[index]

    if isinstance(premise, Atom):
        for row in rows(index, premise.sym):
            s = match_row(premise.args, row, subst)
            if s is not None:
                _match_body(body, index + 1, rows, store, s, out)
        return

    if isinstance(premise, NegAtom):
        pattern = _ground_args(premise.atom, subst)
        if all(isinstance(a, Constant) for a in pattern):
            found = store.contains(Atom(premise.atom.sym, pattern))
        else:
            found = any(
                match_row(pattern, row, {}) is not None
                for row in store.tuples(premise.atom.sym)
            )
        if not found:
            _match_body(body, index + 1, rows, store, subst, out)
        return

    s = _eval_comparison(premise, subst)
    if s is not None:
        _match_body(body, index + 1, rows, store, s, out)


def _derive(
    rule:  PlannedRule,
    rows:  RowSource,
    store: TableStore,
) -> list[Atom]:
    """Head atoms produced by one application of a rule."""
    substs: list[Substitution] = []
    _match_body(rule.premises, 0, rows, store, {}, substs)
    head = rule.head
    derived: list[Atom] = []
    for subst in substs:
        args = _ground_args(head, subst)
        if not all(isinstance(a, Constant) for a in args):
            raise EvaluationError(f"derived non-ground atom {Atom(head.sym, args)} from rule {rule}")
        derived.append(Atom(head.sym, args))
    return derived


# ---------------------------------------------------------------------------
# Evaluators
# ---------------------------------------------------------------------------

class Evaluator(Protocol):
    def eval(self, store: TableStore, program: StratifiedProgram) -> None: ...


def _store_rows(store: TableStore) -> RowSource:
    return lambda _index, sym: store.tuples(sym)


def _insert(store: TableStore, atoms: Iterable[Atom]) -> list[Atom]:
    """Adds atoms to the store, returning those that were new."""
    new: list[Atom] = []
    for atom in atoms:
        try:
            if store.add(store.arena, atom):
                new.append(atom)
        except StoreError as e:
            raise EvaluationError(str(e)) from e
    return new


class Naive:
    """
    Naive evaluation: every round re-applies all rules of the stratum to the
    whole store, until a round adds nothing.
    """

    def eval(self, store: TableStore, program: StratifiedProgram) -> None:
        rows = _store_rows(store)
        total_rounds = 0
        total_new    = 0
        for s, rules in enumerate(program.strata):
            rounds = 0
            while True:
                rounds += 1
                derived: list[Atom] = []
                for rule in rules:
                    derived.extend(_derive(rule, rows, store))
                new = _insert(store, derived)
                total_new += len(new)
                if not new:
                    break
            logger.debug("Stratum %d: %d rules, %d rounds", s, len(rules), rounds)
            total_rounds += rounds
        logger.debug("Naive evaluation finished: %d rounds, %d new facts", total_rounds, total_new)


class SemiNaive:
    """
    Semi-naive evaluation: after the first round, a rule is only re-applied
    with one of its same-stratum premises restricted to the facts derived in
    the previous round.
    """

    def eval(self, store: TableStore, program: StratifiedProgram) -> None:
        total_rounds = 0
        total_new    = 0
        for s, rules in enumerate(program.strata):
            stratum_preds = {r.head.sym for r in rules}

            # round 1: plain application against the store
            derived: list[Atom] = []
            for rule in rules:
                derived.extend(_derive(rule, _store_rows(store), store))
            delta = _group(_insert(store, derived))
            total_new += sum(len(v) for v in delta.values())
            rounds = 1

            while delta:
                rounds += 1
                derived = []
                for rule in rules:
                    for i, premise in enumerate(rule.premises):
                        if not (isinstance(premise, Atom) and premise.sym in stratum_preds):
                            continue
                        if premise.sym not in delta:
                            continue
                        derived.extend(_derive(rule, _delta_rows(store, delta, i), store))
                delta = _group(_insert(store, derived))
                total_new += sum(len(v) for v in delta.values())

            logger.debug("Stratum %d: %d rules, %d rounds", s, len(rules), rounds)
            total_rounds += rounds
        logger.debug("Semi-naive evaluation finished: %d rounds, %d new facts", total_rounds, total_new)


def _group(atoms: list[Atom]) -> dict[PredicateSym, list[Row]]:
    grouped: dict[PredicateSym, list[Row]] = {}
    for atom in atoms:
        grouped.setdefault(atom.sym, []).append(atom.args)  # type: ignore[arg-type]
    return grouped


def _delta_rows(
    store:     TableStore,
    delta:     Mapping[PredicateSym, list[Row]],
    delta_pos: int,
) -> RowSource:
    def rows(index: int, sym: PredicateSym) -> Iterable[Row]:
        if index == delta_pos:
            return delta.get(sym, ())
        return store.tuples(sym)
    return rows


ENGINES: dict[str, type[Naive] | type[SemiNaive]] = {
    "naive":     Naive,
    "seminaive": SemiNaive,
}


def get_engine(name: str) -> Evaluator:
    """Evaluator by name ('naive' or 'seminaive')."""
    try:
        return ENGINES[name.lower()]()
    except KeyError:
        raise ValueError(
            f"unknown engine {name!r}, expected one of: {', '.join(sorted(ENGINES))}"
        ) from None
