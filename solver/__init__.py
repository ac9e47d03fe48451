"""
solver — in-process Datalog engine.

Public API:
  Arena, Interner                       predicate-symbol interning
  Parser(arena, data, source_name)      next_token() / parse_unit()
  TableStore(arena, schema), TableConfig
  SimpleProgram(arena, ...)             add_clause() / stratify()
  Naive, SemiNaive, get_engine(name)    evaluators: eval(store, program)
  Atom, Clause, Constant, Variable, ... data types
  SolverError and subclasses            errors
"""

from .arena      import Arena, Interner, ScopedInterner
from .analysis   import PlannedRule, SimpleProgram, StratifiedProgram, plan_premises
from .engine     import ENGINES, Evaluator, Naive, SemiNaive, get_engine
from .errors     import (
    AnalysisError,
    EvaluationError,
    LexError,
    ParseError,
    SolverError,
    StoreError,
    StratificationError,
)
from .factstore  import TableConfig, TableStore
from .parser     import Parser, parse_text
from .types      import (
    Atom,
    Clause,
    CmpOp,
    Comparison,
    ConstKind,
    Constant,
    NegAtom,
    PredicateSym,
    Unit,
    Variable,
)

__all__ = [
    "Arena",
    "Interner",
    "ScopedInterner",
    "PlannedRule",
    "SimpleProgram",
    "StratifiedProgram",
    "plan_premises",
    "ENGINES",
    "Evaluator",
    "Naive",
    "SemiNaive",
    "get_engine",
    "AnalysisError",
    "EvaluationError",
    "LexError",
    "ParseError",
    "SolverError",
    "StoreError",
    "StratificationError",
    "TableConfig",
    "TableStore",
    "Parser",
    "parse_text",
    "Atom",
    "Clause",
    "CmpOp",
    "Comparison",
    "ConstKind",
    "Constant",
    "NegAtom",
    "PredicateSym",
    "Unit",
    "Variable",
]
