"""Shared fixtures for the dlq test suite."""

import pytest

from adapter import Settings
from solver import Arena

VULNERABLE_PROGRAM = """
// --- Facts: the ground truth ---
service("order-service").
uses_library("order-service", "log4j", "2.14").
vulnerable_version("log4j", "2.14").

// --- Rule: how to reason ---
is_vulnerable(Svc) :-
  uses_library(Svc, Lib, Ver),
  vulnerable_version(Lib, Ver).

// --- Query ---
is_vulnerable(Svc).
"""

LION_KING_PROGRAM = """
is_a("Mufasa", "lion").
parent("Mufasa", "Simba").
is_male("Mufasa").

father(P, C) :- parent(P, C), is_male(P).
paternal_grandfather(G, C) :- father(G, P), father(P, C).

father(Father, "Simba").
"""


@pytest.fixture
def arena():
    """A fresh arena with its own interner."""
    return Arena()


@pytest.fixture(params=["naive", "seminaive"])
def settings(request):
    """Adapter settings, once per evaluator."""
    return Settings(engine=request.param)


@pytest.fixture
def vulnerable_program():
    return VULNERABLE_PROGRAM


@pytest.fixture
def lion_king_program():
    return LION_KING_PROGRAM
