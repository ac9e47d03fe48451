"""
adapter — host-facing query adapter over the solver.

Public interface:
    run_query(text)      — program + final query atom in, JSON envelope out
    Session              — define/query session with variable bindings
    AdapterError, ErrorKind, SessionError
    Settings, get_settings

Typical use:
    from adapter import run_query

    result = json.loads(run_query(program_text))
    if result["status"] == "success":
        for fact in result["data"]:
            print(fact)
"""

from ._config import Settings, get_settings
from .errors import AdapterError, ErrorKind
from .query import PreparedQuery, prepare, run_query, run_query_internal
from .session import Session, SessionError

__all__ = [
    "Settings",
    "get_settings",
    "AdapterError",
    "ErrorKind",
    "PreparedQuery",
    "prepare",
    "run_query",
    "run_query_internal",
    "Session",
    "SessionError",
]
