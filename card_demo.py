#!/usr/bin/env python3
# card_demo.py
from __future__ import annotations
import argparse
import logging
from math import comb
from typing import List, Optional

from all_sat import all_solutions
from cardinality import declare_cardinality
from cnf_gates import imply
from sat_session import DEFAULT_SOLVER, SatSession


def to_bits(model: List[int]) -> str:
    return "".join("1" if lit > 0 else "0" for lit in model)


def expected_count(n: int, lb: Optional[int], ub: Optional[int]) -> int:
    lo = 0 if lb is None else lb
    hi = n if ub is None else ub
    return sum(comb(n, k) for k in range(lo, hi + 1))


def run(n: int, ub: Optional[int], lb: Optional[int], declare: bool = False, chain: bool = False,
        solver: str = DEFAULT_SOLVER, dimacs: Optional[str] = None) -> int:
    with SatSession(name=solver) as s:
        lits = [s.new_var(f"x{i}") for i in range(1, n + 1)]
        if chain:
            for a, b in zip(lits, lits[1:]):
                imply(s, a, b)

        card = declare_cardinality(s, lits)
        print(f"[INFO] totalizer = {list(card.totalizer)}")
        print(f"[INFO] vars={s.num_vars} clauses={s.num_clauses}")

        if declare:
            card.declare_upper_bound_less_than_or_equal(ub)
            card.declare_lower_bound_greater_than_or_equal(lb)
        else:
            card.assume_upper_bound_less_than_or_equal(ub)
            card.assume_lower_bound_greater_than_or_equal(lb)
        print(f"[INFO] mode={'declare' if declare else 'assume'} lb={lb} ub={ub} assumptions={card.assumptions()}")

        if dimacs:
            s.write_dimacs(dimacs)
            print(f"[INFO] wrote {dimacs}")

        found = 0
        for i, model in enumerate(all_solutions(s, essential=lits), start=1):
            found = i
            print(f"Solution #{i}: lits = {to_bits(model)} (count = {sum(1 for x in model if x > 0)})")

    print(f"[RESULT] {found} solutions")
    if not chain:
        exp = expected_count(n, lb, ub)
        if found == exp:
            print(f"[OK] matches sum of binomials = {exp}")
        else:
            print(f"[FAIL] expected {exp} solutions")
    return found


def main():
    ap = argparse.ArgumentParser(description="Enumerate all assignments of n literals with lb <= count <= ub.")
    ap.add_argument("--n", type=int, default=5, help="Number of literals (default 5)")
    ap.add_argument("--ub", type=int, default=None, help="Upper bound: count <= ub")
    ap.add_argument("--lb", type=int, default=None, help="Lower bound: count >= lb")
    ap.add_argument("--declare", action="store_true", help="Add bounds as permanent clauses instead of assumptions")
    ap.add_argument("--chain", action="store_true", help="Add x_i -> x_{i+1} for consecutive literals")
    ap.add_argument("--solver", default=DEFAULT_SOLVER, help=f"PySAT backend (default {DEFAULT_SOLVER})")
    ap.add_argument("--dimacs", default=None, help="Write the CNF (without assumptions) to this path")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = ap.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    if args.n < 1:
        raise ValueError(f"[FATAL] --n must be >= 1, got {args.n}")

    print("========================================")
    print(f"[INFO] n={args.n} lb={args.lb} ub={args.ub} solver={args.solver}")
    print("----------------------------------------")
    run(
        args.n,
        args.ub,
        args.lb,
        declare=args.declare,
        chain=args.chain,
        solver=args.solver,
        dimacs=args.dimacs,
    )
    print("========================================")


if __name__ == "__main__":
    main()
