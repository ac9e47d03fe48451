"""
solver/types.py — basic data types of the Datalog solver.

Terms:
  Constant     /name, "string", 42, 3.14
  Variable     X, Svc, _ (wildcard)
  Atom         pred(arg1, arg2, ...)
  NegAtom      !pred(...)
  Comparison   X < Y, X != "a", :lt(X, 3)

Clause is `head.` (fact) or `head :- premise, ... .` (rule).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

# ---------------------------------------------------------------------------
# Constants and variables
# ---------------------------------------------------------------------------

class ConstKind(StrEnum):
    NAME   = "name"
    STRING = "string"
    NUMBER = "number"
    FLOAT  = "float"


_ESCAPES: dict[str, str] = {
    "\\": "\\\\",
    '"':  '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}


def quote_string(value: str) -> str:
    """Double-quoted form of a string constant."""
    return '"' + "".join(_ESCAPES.get(ch, ch) for ch in value) + '"'


@dataclass(frozen=True, slots=True)
class Constant:
    """Ground value. Two constants are equal only if kind and value match."""
    kind:  ConstKind
    value: str | int | float

    def __str__(self) -> str:
        if self.kind is ConstKind.STRING:
            return quote_string(str(self.value))
        if self.kind is ConstKind.FLOAT:
            return repr(float(self.value))
        return str(self.value)

    def is_numeric(self) -> bool:
        return self.kind in (ConstKind.NUMBER, ConstKind.FLOAT)

    @classmethod
    def string(cls, value: str) -> Constant:
        return cls(ConstKind.STRING, value)

    @classmethod
    def number(cls, value: int) -> Constant:
        return cls(ConstKind.NUMBER, value)

    @classmethod
    def name(cls, value: str) -> Constant:
        return cls(ConstKind.NAME, value)


WILDCARD = "_"


@dataclass(frozen=True, slots=True)
class Variable:
    name: str

    def __str__(self) -> str:
        return self.name

    def is_wildcard(self) -> bool:
        return self.name == WILDCARD


BaseTerm = Constant | Variable


# ---------------------------------------------------------------------------
# Predicate symbols
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False, slots=True)
class PredicateSym:
    """
    Predicate symbol name/arity.

    Instances are created only by solver.arena.Interner; equality and hashing
    are identity-based, so foo/1 and foo/2 are unrelated symbols.
    """
    name:  str
    arity: int

    def __str__(self) -> str:
        return f"{self.name}/{self.arity}"

    def sort_key(self) -> tuple[str, int]:
        return (self.name, self.arity)


# ---------------------------------------------------------------------------
# Atoms and premises
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Atom:
    """Logical atom: pred(arg1, arg2, ...)."""
    sym:  PredicateSym
    args: tuple[BaseTerm, ...]

    def __str__(self) -> str:
        return f"{self.sym.name}({', '.join(str(a) for a in self.args)})"

    def as_fact(self) -> str:
        """Canonical textual form of a stored atom, terminated with '.'."""
        return f"{self}."

    def is_ground(self) -> bool:
        return all(isinstance(a, Constant) for a in self.args)

    def variables(self) -> set[Variable]:
        return {a for a in self.args if isinstance(a, Variable) and not a.is_wildcard()}


@dataclass(frozen=True, slots=True)
class NegAtom:
    """Negated premise (stratified negation as failure)."""
    atom: Atom

    def __str__(self) -> str:
        return f"!{self.atom}"

    def variables(self) -> set[Variable]:
        return self.atom.variables()


class CmpOp(StrEnum):
    EQ = "="
    NE = "!="
    LT = "<"
    LE = "<="
    GT = ">"
    GE = ">="


# :lt(X, Y) etc.
BUILTIN_COMPARISONS: dict[str, CmpOp] = {
    ":eq": CmpOp.EQ,
    ":ne": CmpOp.NE,
    ":lt": CmpOp.LT,
    ":le": CmpOp.LE,
    ":gt": CmpOp.GT,
    ":ge": CmpOp.GE,
}


@dataclass(frozen=True, slots=True)
class Comparison:
    op:    CmpOp
    left:  BaseTerm
    right: BaseTerm

    def __str__(self) -> str:
        return f"{self.left} {self.op} {self.right}"

    def variables(self) -> set[Variable]:
        return {
            t for t in (self.left, self.right)
            if isinstance(t, Variable) and not t.is_wildcard()
        }


Premise = Atom | NegAtom | Comparison
Term = Constant | Variable | Atom | NegAtom | Comparison


# ---------------------------------------------------------------------------
# Clauses
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class Clause:
    """Horn clause: head :- premises. Empty premises make it a fact."""
    head:     Atom
    premises: tuple[Premise, ...] = ()

    def __str__(self) -> str:
        if not self.premises:
            return self.head.as_fact()
        body = ", ".join(str(p) for p in self.premises)
        return f"{self.head} :- {body}."

    def is_fact(self) -> bool:
        return not self.premises


@dataclass(slots=True)
class Unit:
    """Parsed compilation unit."""
    clauses: list[Clause] = field(default_factory=list)
