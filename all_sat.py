# all_sat.py
from __future__ import annotations
import logging
from typing import Iterator, List, Optional, Sequence

log = logging.getLogger(__name__)


def all_solutions(session, essential: Optional[Sequence[int]] = None) -> Iterator[List[int]]:
    """
    Enumerate models by solving and blocking each one in turn.

    solve() is called without arguments, so assumption literals of every
    registered cardinality constraint apply to each call. Each yielded
    model is the list of signed `essential` literals (default: every
    variable of the session). The blocking clauses are permanent.
    """
    count = 0
    while session.solve():
        lits = list(essential) if essential is not None else list(range(1, session.num_vars + 1))
        model = [v if session.get_value(v) else -v for v in lits]
        count += 1
        yield model
        block = [-lit for lit in model]
        log.debug("refutation = %s", block)
        if not block:
            # nothing left to refute: the only model over zero variables
            break
        session.add_clause(block)
    log.debug("No more solutions (%d found)", count)


def count_solutions(session, essential: Optional[Sequence[int]] = None) -> int:
    return sum(1 for _ in all_solutions(session, essential))
