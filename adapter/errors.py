"""
adapter/errors.py — error kinds reported to the host.

Every failure of an invocation ends up as an AdapterError whose str() is the
exact message placed in the error envelope.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Stable identifiers of the failure classes."""

    EMPTY_INPUT     = "E_EMPTY_INPUT"
    PARSER_ERROR    = "E_PARSER_ERROR"    # lexer could not be primed
    PARSE_ERROR     = "E_PARSE_ERROR"     # compilation unit did not parse
    NO_CLAUSES      = "E_NO_CLAUSES"
    QUERY_IS_RULE   = "E_QUERY_IS_RULE"
    STORE_ADD_ERROR = "E_STORE_ADD"
    STRATIFY_ERROR  = "E_STRATIFY"
    EVAL_ERROR      = "E_EVAL"
    QUERY_ERROR     = "E_QUERY"
    PANIC           = "E_PANIC"


EMPTY_INPUT_MESSAGE   = "Input string cannot be empty."
NO_CLAUSES_MESSAGE    = "No clauses found in input."
QUERY_IS_RULE_MESSAGE = "The last statement must be a query atom, not a rule."
UNKNOWN_PANIC_MESSAGE = "An unknown panic occurred."


class AdapterError(Exception):
    """Failure with a host-facing message."""

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind    = kind
        self.message = message


def panic_message(exc: BaseException) -> str:
    """
    Text of an unexpected exception, in three tiers:
      1. the exception's single string argument
      2. str(exc) when it is not empty
      3. a fixed fallback message
    """
    if len(exc.args) == 1 and isinstance(exc.args[0], str):
        return exc.args[0]
    text = str(exc)
    if text:
        return text
    return UNKNOWN_PANIC_MESSAGE
