# cnf_gates.py
# Small clause patterns. `cnf` is anything with add_clause(list[int]):
# a CNFBuilder or a SatSession.
from __future__ import annotations
from itertools import combinations
from typing import Iterable


def imply(cnf, lhs: int, rhs: int) -> None:
    # lhs -> rhs
    cnf.add_clause([-lhs, rhs])


def at_least_one(cnf, lits: Iterable[int]) -> None:
    cnf.add_clause(list(lits))


def at_most_one(cnf, lits: Iterable[int]) -> None:
    # pairwise; fine for short lists, use a Cardinality for long ones
    for a, b in combinations(list(lits), 2):
        cnf.add_clause([-a, -b])


def exactly_one(cnf, lits: Iterable[int]) -> None:
    lits = list(lits)
    at_least_one(cnf, lits)
    at_most_one(cnf, lits)
