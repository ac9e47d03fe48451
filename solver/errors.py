"""
solver/errors.py — exceptions raised by the Datalog engine.

Every engine failure is a ValueError subclass, so callers that only care
about "the program is wrong" can catch ValueError.

    SolverError
      ├── ParseError
      │     └── LexError
      ├── StoreError
      ├── AnalysisError
      │     └── StratificationError
      └── EvaluationError
"""

from __future__ import annotations


class SolverError(ValueError):
    """Base class of all engine errors."""


class ParseError(SolverError):
    """Syntax error in a compilation unit, prefixed with source:line:col."""

    def __init__(self, detail: str, source: str = "", line: int = 0, col: int = 0) -> None:
        self.detail = detail
        self.source = source
        self.line   = line
        self.col    = col
        if source:
            super().__init__(f"{source}:{line}:{col}: {detail}")
        else:
            super().__init__(detail)


class LexError(ParseError):
    """Input could not be tokenized (bad bytes, unknown character, open string)."""


class StoreError(SolverError):
    """Fact store rejected an operation."""


class AnalysisError(SolverError):
    """Program is malformed: unsafe variables, misplaced clauses."""


class StratificationError(AnalysisError):
    """Program has a dependency cycle through negation."""


class EvaluationError(SolverError):
    """Fixpoint evaluation failed."""
