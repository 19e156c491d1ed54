# comparator.py
from __future__ import annotations
import logging
from typing import Callable, List, Optional, Sequence

from card_errors import InvalidBoundError

log = logging.getLogger(__name__)


def declare_less_than(
    totalizer: Sequence[int],
    upper_bound: int,
    add_clause: Callable[[List[int]], None],
    declared: Optional[int] = None,
    comment: Optional[Callable[[str], None]] = None,
) -> int:
    """
    Enforce count < upper_bound with unit clauses -T[i].

    If `declared` is given, -T[declared..N] are already in the clause
    store and only -T[upper_bound..declared-1] are added.
    upper_bound == N+1 is the trivial bound (count <= N) and adds nothing.
    Returns the number of clauses emitted.
    """
    n = len(totalizer)
    if not 1 <= upper_bound <= n + 1:
        raise InvalidBoundError(f"Upper bound (< {upper_bound}) is out of range 1..{n + 1} (size = {n})")
    if declared is not None and upper_bound > declared:
        raise InvalidBoundError(f"Cannot soften upper bound from < {declared} to < {upper_bound}")

    edge = n if declared is None else declared - 1
    if comment is not None:
        comment(f"Comparator(<{upper_bound} up to {edge})")

    emitted = 0
    for i in range(edge, upper_bound - 1, -1):
        # totalizer is 0-based, bounds are 1-based
        add_clause([-totalizer[i - 1]])
        emitted += 1
    log.debug("Comparator(<%d): %d clauses", upper_bound, emitted)
    return emitted


def declare_greater_than_or_equal(
    totalizer: Sequence[int],
    lower_bound: int,
    add_clause: Callable[[List[int]], None],
    declared: Optional[int] = None,
    comment: Optional[Callable[[str], None]] = None,
) -> int:
    """Enforce count >= lower_bound with unit clauses T[i]. Returns the number of clauses emitted."""
    n = len(totalizer)
    if not 1 <= lower_bound <= n:
        raise InvalidBoundError(f"Lower bound (>= {lower_bound}) is out of range 1..{n}")
    if declared is not None and lower_bound < declared:
        raise InvalidBoundError(f"Cannot soften lower bound from >= {declared} to >= {lower_bound}")

    start = 1 if declared is None else declared + 1
    if comment is not None:
        comment(f"Comparator(>={lower_bound} from {start})")

    emitted = 0
    for i in range(start, lower_bound + 1):
        add_clause([totalizer[i - 1]])
        emitted += 1
    log.debug("Comparator(>=%d): %d clauses", lower_bound, emitted)
    return emitted
