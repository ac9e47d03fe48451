"""
solver/analysis.py — program container, safety checks and stratification.

SimpleProgram collects rules and the list of extensional predicates;
stratify() turns it into a StratifiedProgram ready for evaluation.

Restrictions (safe Datalog):
  - every head variable is bound by a positive atom or an equality
  - variables of negated atoms and ordering comparisons are bound
    by earlier (scheduled) premises
  - no recursion through negation
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .arena import Arena
from .errors import AnalysisError, StratificationError
from .types import (
    Atom,
    BaseTerm,
    Clause,
    CmpOp,
    Comparison,
    Constant,
    NegAtom,
    Premise,
    PredicateSym,
    Variable,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Premise planning
# ---------------------------------------------------------------------------

def _is_known(term: BaseTerm, bound: set[Variable]) -> bool:
    return isinstance(term, Constant) or term in bound


def _is_ready(premise: Premise, bound: set[Variable]) -> bool:
    if isinstance(premise, Atom):
        return True
    if isinstance(premise, Comparison) and premise.op is CmpOp.EQ:
        # X = Y binds one side from the other
        return _is_known(premise.left, bound) or _is_known(premise.right, bound)
    return premise.variables() <= bound


def plan_premises(clause: Clause) -> tuple[Premise, ...]:
    """
    Orders the premises of a rule so every premise only needs variables bound
    by the premises before it. The input order is kept wherever possible.

    Raises AnalysisError when the rule is unsafe.
    """
    if any(isinstance(a, Variable) and a.is_wildcard() for a in clause.head.args):
        raise AnalysisError(f"wildcard '_' in rule head: {clause}")

    pending = list(clause.premises)
    planned: list[Premise] = []
    bound: set[Variable] = set()

    while pending:
        for i, premise in enumerate(pending):
            if _is_ready(premise, bound):
                break
        else:
            names = sorted(v.name for p in pending for v in p.variables() - bound)
            raise AnalysisError(
                f"unsafe rule, variable(s) {', '.join(names)} not bound "
                f"by a positive atom: {clause}"
            )
        premise = pending.pop(i)
        planned.append(premise)
        if isinstance(premise, Atom):
            bound |= premise.variables()
        elif isinstance(premise, Comparison) and premise.op is CmpOp.EQ:
            bound |= premise.variables()

    unbound_head = clause.head.variables() - bound
    if unbound_head:
        names = ", ".join(sorted(v.name for v in unbound_head))
        raise AnalysisError(f"variable(s) {names} in rule head not bound: {clause}")
    return tuple(planned)


# ---------------------------------------------------------------------------
# Programs
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PlannedRule:
    clause:   Clause
    premises: tuple[Premise, ...]

    @property
    def head(self) -> Atom:
        return self.clause.head

    def __str__(self) -> str:
        return str(self.clause)


@dataclass(slots=True)
class StratifiedProgram:
    """Rules grouped by stratum, lowest first."""
    ext_preds:       list[PredicateSym]
    strata:          list[list[PlannedRule]]
    pred_to_stratum: dict[PredicateSym, int]

    def intensional_preds(self) -> set[PredicateSym]:
        return set(self.pred_to_stratum)


@dataclass(slots=True)
class SimpleProgram:
    """
    Mutable program: extensional predicates plus rules.

    Usage::

        program = SimpleProgram(arena)
        program.add_clause(arena, rule)
        program.ext_preds = [sym, ...]
        stratified = program.stratify()
    """
    arena:     Arena
    ext_preds: list[PredicateSym] = field(default_factory=list)
    rules:     list[Clause]       = field(default_factory=list)

    def add_clause(self, arena: Arena, clause: Clause) -> None:
        if arena is not self.arena:
            raise AnalysisError(f"clause from a different arena: {clause}")
        if clause.is_fact():
            raise AnalysisError(f"facts belong in the fact store, not the program: {clause}")
        self.rules.append(clause)

    def rule_heads(self) -> set[PredicateSym]:
        return {c.head.sym for c in self.rules}

    def stratify(self) -> StratifiedProgram:
        """
        Checks every rule and assigns rule-head predicates to strata.

        Raises AnalysisError for unsafe rules or ext-preds defined by rules,
        StratificationError for recursion through negation.
        """
        heads   = self.rule_heads()
        overlap = heads.intersection(self.ext_preds)
        if overlap:
            names = ", ".join(sorted(str(s) for s in overlap))
            raise AnalysisError(f"extensional predicate(s) {names} also defined by rules")

        planned = [PlannedRule(c, plan_premises(c)) for c in self.rules]
        stratum = compute_strata(planned)

        max_stratum = max(stratum.values(), default=-1)
        strata: list[list[PlannedRule]] = [[] for _ in range(max_stratum + 1)]
        for rule in planned:
            strata[stratum[rule.head.sym]].append(rule)

        logger.debug(
            "Stratified %d rules into %d strata (ext preds: %s)",
            len(planned), len(strata), ", ".join(str(s) for s in self.ext_preds) or "-",
        )
        return StratifiedProgram(
            ext_preds=list(self.ext_preds),
            strata=strata,
            pred_to_stratum=stratum,
        )


# ---------------------------------------------------------------------------
# Stratification
# ---------------------------------------------------------------------------

def compute_strata(rules: list[PlannedRule]) -> dict[PredicateSym, int]:
    """
    Computes the stratum of every rule-head predicate.

      - stratum[p] >= stratum[q]   when p depends positively on q
      - stratum[p] >  stratum[q]   when p depends on q through negation

    Predicates without rules do not take part: they are fully known before
    evaluation starts. A stratum above the number of predicates can only
    come from a cycle through negation.
    """
    heads: set[PredicateSym] = {r.head.sym for r in rules}
    pos_deps: dict[PredicateSym, set[PredicateSym]] = {p: set() for p in heads}
    neg_deps: dict[PredicateSym, set[PredicateSym]] = {p: set() for p in heads}

    for rule in rules:
        p = rule.head.sym
        for premise in rule.premises:
            if isinstance(premise, Atom) and premise.sym in heads:
                pos_deps[p].add(premise.sym)
            elif isinstance(premise, NegAtom) and premise.atom.sym in heads:
                neg_deps[p].add(premise.atom.sym)

    stratum: dict[PredicateSym, int] = {p: 0 for p in heads}
    limit   = len(heads)
    changed = True

    while changed:
        changed = False
        for p in heads:
            for dep in pos_deps[p]:
                if stratum[p] < stratum[dep]:
                    stratum[p] = stratum[dep]
                    changed = True
            for dep in neg_deps[p]:
                if stratum[p] <= stratum[dep]:
                    stratum[p] = stratum[dep] + 1
                    changed = True
            if stratum[p] > limit:
                cycle = sorted(str(q) for q in heads if stratum[q] >= limit)
                raise StratificationError(
                    f"program cannot be stratified: recursion through negation "
                    f"involving {', '.join(cycle)}"
                )

    return stratum
