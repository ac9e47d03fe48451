"""
solver/arena.py — allocation scope of one evaluation.

An Arena owns the interner that turns (name, arity) pairs into unique
PredicateSym instances. Everything parsed, stored and derived during one
invocation refers to symbols of the same arena; symbols of different
interners never compare equal.
"""

from __future__ import annotations

import threading

from .types import PredicateSym


class Interner:
    """Symbol table name/arity -> PredicateSym. Safe to share between threads."""

    def __init__(self) -> None:
        self._syms: dict[tuple[str, int], PredicateSym] = {}
        self._lock = threading.Lock()

    def intern(self, name: str, arity: int) -> PredicateSym:
        key = (name, arity)
        sym = self._syms.get(key)
        if sym is not None:
            return sym
        with self._lock:
            return self._syms.setdefault(key, PredicateSym(name, arity))

    def lookup(self, name: str, arity: int) -> PredicateSym | None:
        return self._syms.get((name, arity))

    def __len__(self) -> int:
        return len(self._syms)


class ScopedInterner(Interner):
    """
    Interner layered over a parent. Symbols the parent already knows are
    reused; new ones stay in the scope and never reach the parent.
    """

    def __init__(self, parent: Interner) -> None:
        super().__init__()
        self._parent = parent

    def intern(self, name: str, arity: int) -> PredicateSym:
        sym = self._parent.lookup(name, arity)
        if sym is not None:
            return sym
        return super().intern(name, arity)

    def lookup(self, name: str, arity: int) -> PredicateSym | None:
        sym = self._parent.lookup(name, arity)
        return sym if sym is not None else super().lookup(name, arity)


_GLOBAL_INTERNER = Interner()


class Arena:
    """
    Usage::

        arena = Arena()
        sym   = arena.predicate_sym("parent", 2)
        assert sym is arena.predicate_sym("parent", 2)
    """

    def __init__(self, interner: Interner | None = None) -> None:
        self._interner = interner if interner is not None else Interner()

    @classmethod
    def with_global_interner(cls) -> Arena:
        """Arena sharing the process-wide interner."""
        return cls(_GLOBAL_INTERNER)

    @property
    def interner(self) -> Interner:
        return self._interner

    def scope(self) -> Arena:
        """Short-lived arena whose new symbols are not kept by this one."""
        return Arena(ScopedInterner(self._interner))

    def predicate_sym(self, name: str, arity: int) -> PredicateSym:
        return self._interner.intern(name, arity)
