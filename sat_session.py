# sat_session.py
from __future__ import annotations
import logging
import threading
from typing import Dict, Iterable, List, Optional, Sequence

from pysat.solvers import Solver

from assumptions import AssumptionsRegistry
from cnf_builder import CNFBuilder

log = logging.getLogger(__name__)

DEFAULT_SOLVER = "glucose4"
# Common PySAT names, tried in order by pick_solver_name()
SOLVER_CANDIDATES = ("glucose4", "glucose3", "minisat22", "cadical153", "minicard")


def pick_solver_name(candidates: Sequence[str] = SOLVER_CANDIDATES) -> str:
    for name in candidates:
        try:
            s = Solver(name=name)
        except NotImplementedError as e:
            log.debug("Solver backend %s unavailable: %s", name, e)
            continue
        s.delete()
        return name
    raise RuntimeError(
        "No SAT solver backend found in PySAT. Install e.g. python-sat with solvers."
    )


class SatSession:
    """
    Incremental SAT solving session over a PySAT backend.

    Every clause is recorded in a CNFBuilder as well as pushed to the
    backend, so the session can be dumped as DIMACS at any point.
    solve() without explicit assumptions asks `assumptions` (the registry
    shared by all cardinality constraints of this session) for the
    current assumption literals.

    reset() starts a new generation: constraints built before it are
    detached and refuse further declare/assume calls.
    """

    def __init__(self, name: str = DEFAULT_SOLVER):
        self.name = name
        self.cnf = CNFBuilder()
        self.assumptions = AssumptionsRegistry()
        self.generation = 0
        self._solver = Solver(name=name)
        self._model: Optional[Dict[int, bool]] = None
        log.debug("Created %s", self)

    def __enter__(self) -> "SatSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SatSession(name={self.name!r}, vars={self.num_vars}, clauses={self.num_clauses})"

    # --------- clauses ----------
    @property
    def num_vars(self) -> int:
        return self.cnf.var_count

    @property
    def num_clauses(self) -> int:
        return self.cnf.num_clauses

    def new_var(self, name: Optional[str] = None) -> int:
        return self.cnf.new_var(name)

    def var(self, name: str) -> int:
        return self.cnf.var(name)

    def add_clause(self, lits: Iterable[int]) -> None:
        lits = list(lits)
        self.cnf.add_clause(lits)
        self._solver.add_clause(lits)

    def add_unit(self, var: int, value: bool) -> None:
        self.add_clause([var if value else -var])

    def comment(self, text: str) -> None:
        log.debug("// %s", text)
        self.cnf.comment(text)

    # --------- solving ----------
    def solve(self, assumptions: Optional[Iterable[int]] = None) -> bool:
        """
        Solve under the permanent clauses and the given assumptions.

        With assumptions=None the registry is collected, otherwise *only*
        the passed literals are used.
        """
        lits = self._assumptions_for(assumptions)
        log.debug("solve(assumptions=%s)", lits)
        self._model = None
        res = self._solver.solve(assumptions=lits)
        if res:
            self._store_model()
        return res

    def solve_with_timeout(self, seconds: float, assumptions: Optional[Iterable[int]] = None) -> Optional[bool]:
        """
        Like solve(), but interrupts the backend after `seconds`.

        Returns None when the time ran out. The interrupt state of the
        backend is cleared afterwards, so the session stays usable.
        """
        lits = self._assumptions_for(assumptions)
        log.debug("solve_with_timeout(seconds=%s, assumptions=%s)", seconds, lits)
        self._model = None
        timer = threading.Timer(seconds, self.interrupt)
        timer.start()
        try:
            res = self._solver.solve_limited(assumptions=lits, expect_interrupt=True)
        finally:
            timer.cancel()
            # a callback already running must finish before the flag is cleared
            timer.join()
            self._solver.clear_interrupt()
        if res is None:
            log.debug("Timeout after %s s", seconds)
        elif res:
            self._store_model()
        return res

    def interrupt(self) -> None:
        log.debug("Interrupting %s", self.name)
        self._solver.interrupt()

    def _assumptions_for(self, assumptions: Optional[Iterable[int]]) -> List[int]:
        if assumptions is None:
            return self.assumptions.collect()
        return list(assumptions)

    def _store_model(self) -> None:
        model = self._solver.get_model() or []
        self._model = {abs(lit): lit > 0 for lit in model}

    # --------- model ----------
    def get_value(self, lit: int) -> bool:
        if self._model is None:
            raise RuntimeError("No model available: the last solve() was not satisfiable.")
        # variables the backend never saw are unconstrained, read them as False
        value = self._model.get(abs(lit), False)
        return value if lit > 0 else not value

    def get_model(self) -> List[int]:
        """Model as signed literals for variables 1..num_vars."""
        if self._model is None:
            raise RuntimeError("No model available: the last solve() was not satisfiable.")
        return [v if self.get_value(v) else -v for v in range(1, self.num_vars + 1)]

    # --------- lifecycle ----------
    def reset(self) -> None:
        log.debug("Resetting %s", self)
        self._solver.delete()
        self._solver = Solver(name=self.name)
        self.cnf = CNFBuilder()
        self.assumptions.clear()
        self.generation += 1
        self._model = None

    def close(self) -> None:
        if self._solver is not None:
            self._solver.delete()
            self._solver = None

    # --------- dimacs ----------
    def to_dimacs(self) -> str:
        return self.cnf.to_dimacs()

    def write_dimacs(self, path: str) -> None:
        log.debug("write_dimacs(path=%s)", path)
        self.cnf.write_dimacs(path)
