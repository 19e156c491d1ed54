# cardinality.py
from __future__ import annotations
import logging
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Protocol, Tuple

from assumptions import AssumptionsRegistry
from card_errors import DetachedConstraintError, EmptyInputError, InvalidBoundError
from comparator import declare_greater_than_or_equal, declare_less_than
from totalizer import Totalizer, build_totalizer

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundState:
    """
    Bounds of one cardinality constraint.

    declared_upper is stored in "count < k" form and declared_lower in
    "count >= k" form, i.e. the arguments of the comparator calls that
    produced the permanent clauses.
    """
    size: int
    declared_upper: Optional[int] = None
    declared_lower: Optional[int] = None
    assumed_upper_lits: Tuple[int, ...] = ()
    assumed_lower_lits: Tuple[int, ...] = ()

    @property
    def assumption_lits(self) -> Tuple[int, ...]:
        return self.assumed_upper_lits + self.assumed_lower_lits

    def tighten_upper(self, k: int) -> "BoundState":
        """State after declaring count < k."""
        if not 1 <= k <= self.size + 1:
            raise InvalidBoundError(f"Upper bound (< {k}) is out of range 1..{self.size + 1} (size = {self.size})")
        if self.declared_upper is not None and k > self.declared_upper:
            raise InvalidBoundError(f"Cannot soften upper bound from < {self.declared_upper} to < {k}")
        return replace(self, declared_upper=k)

    def tighten_lower(self, k: int) -> "BoundState":
        """State after declaring count >= k."""
        if not 1 <= k <= self.size:
            raise InvalidBoundError(f"Lower bound (>= {k}) is out of range 1..{self.size}")
        if self.declared_lower is not None and k < self.declared_lower:
            raise InvalidBoundError(f"Cannot soften lower bound from >= {self.declared_lower} to >= {k}")
        return replace(self, declared_lower=k)

    def assume_upper(self, totalizer: Totalizer, k: Optional[int]) -> "BoundState":
        """State after assuming count <= k, or dropping the assumption if k is None."""
        if k is None:
            return replace(self, assumed_upper_lits=())
        if not 0 <= k <= self.size:
            raise InvalidBoundError(f"Upper bound (<= {k}) is out of range 0..{self.size}")
        lits = tuple(-totalizer.at_least(i) for i in range(k + 1, self.size + 1))
        return replace(self, assumed_upper_lits=lits)

    def assume_lower(self, totalizer: Totalizer, k: Optional[int]) -> "BoundState":
        """State after assuming count >= k, or dropping the assumption if k is None."""
        if k is None:
            return replace(self, assumed_lower_lits=())
        if not 1 <= k <= self.size:
            raise InvalidBoundError(f"Lower bound (>= {k}) is out of range 1..{self.size}")
        lits = tuple(totalizer.at_least(i) for i in range(1, k + 1))
        return replace(self, assumed_lower_lits=lits)


class CardinalitySession(Protocol):
    """What a Cardinality needs from its session (SatSession provides it)."""

    assumptions: AssumptionsRegistry
    generation: int

    def new_var(self, name: Optional[str] = None) -> int: ...

    def add_clause(self, lits: Iterable[int]) -> None: ...

    def comment(self, text: str) -> None: ...

    def get_value(self, lit: int) -> bool: ...


def _shift(k: Optional[int], delta: int) -> Optional[int]:
    return None if k is None else k + delta


class Cardinality:
    """
    "At most / at least k of these literals" over a totalizer.

    declare_* calls add permanent clauses and may only tighten the bound.
    assume_* calls replace the assumption literals that the session
    collects before every solve(); they can move freely and are dropped
    by passing None.

    A constraint belongs to the session generation it was built in; after
    session.reset() its literals mean nothing and every call that would
    touch the session raises DetachedConstraintError.
    """

    def __init__(self, session: CardinalitySession, totalizer: Totalizer):
        if len(totalizer) == 0:
            raise EmptyInputError("cardinality constraint")
        self._session = session
        self._generation = session.generation
        self._totalizer = totalizer
        self._state = BoundState(size=len(totalizer))
        self._provider = self.assumptions
        session.assumptions.register(self._provider)

    @classmethod
    def declare(cls, session: CardinalitySession, literals: Iterable[int]) -> "Cardinality":
        totalizer = build_totalizer(
            literals,
            new_var=session.new_var,
            add_clause=session.add_clause,
            comment=session.comment,
        )
        return cls(session, totalizer)

    def __repr__(self) -> str:
        return (
            f"Cardinality(size={self.size}, declared_upper={self._state.declared_upper}, "
            f"declared_lower={self._state.declared_lower})"
        )

    # --------- read-only views ----------
    @property
    def totalizer(self) -> Totalizer:
        return self._totalizer

    @property
    def size(self) -> int:
        return len(self._totalizer)

    @property
    def state(self) -> BoundState:
        return self._state

    @property
    def declared_upper_bound(self) -> Optional[int]:
        return self._state.declared_upper

    @property
    def declared_lower_bound(self) -> Optional[int]:
        return self._state.declared_lower

    @property
    def detached(self) -> bool:
        return self._session.generation != self._generation

    @property
    def registered(self) -> bool:
        return not self.detached and self._provider in self._session.assumptions

    def assumptions(self) -> List[int]:
        return list(self._state.assumption_lits)

    def count(self) -> int:
        """Number of true inputs in the session's current model."""
        self._check_attached()
        return sum(1 for lit in self._totalizer.inputs if self._session.get_value(lit))

    def unregister(self) -> None:
        self._session.assumptions.unregister(self._provider)

    def _check_attached(self) -> None:
        if self.detached:
            raise DetachedConstraintError(
                f"{self!r} was built before the session was reset "
                f"(generation {self._generation}, session is at {self._session.generation})"
            )

    # --------- permanent bounds ----------
    def declare_upper_bound_less_than(self, k: Optional[int]) -> None:
        self._check_attached()
        if k is None:
            return
        new_state = self._state.tighten_upper(k)
        declare_less_than(
            self._totalizer,
            k,
            self._session.add_clause,
            declared=self._state.declared_upper,
            comment=self._session.comment,
        )
        self._state = new_state

    def declare_upper_bound_less_than_or_equal(self, k: Optional[int]) -> None:
        self.declare_upper_bound_less_than(_shift(k, +1))

    def declare_lower_bound_greater_than_or_equal(self, k: Optional[int]) -> None:
        self._check_attached()
        if k is None:
            return
        new_state = self._state.tighten_lower(k)
        declare_greater_than_or_equal(
            self._totalizer,
            k,
            self._session.add_clause,
            declared=self._state.declared_lower,
            comment=self._session.comment,
        )
        self._state = new_state

    def declare_lower_bound_greater_than(self, k: Optional[int]) -> None:
        self.declare_lower_bound_greater_than_or_equal(_shift(k, +1))

    # --------- per-solve bounds ----------
    def assume_upper_bound_less_than_or_equal(self, k: Optional[int]) -> None:
        self._check_attached()
        if k is None:
            log.info("De-assuming the upper bound")
        self._state = self._state.assume_upper(self._totalizer, k)

    def assume_upper_bound_less_than(self, k: Optional[int]) -> None:
        self.assume_upper_bound_less_than_or_equal(_shift(k, -1))

    def assume_lower_bound_greater_than_or_equal(self, k: Optional[int]) -> None:
        self._check_attached()
        if k is None:
            log.info("De-assuming the lower bound")
        self._state = self._state.assume_lower(self._totalizer, k)

    def assume_lower_bound_greater_than(self, k: Optional[int]) -> None:
        self.assume_lower_bound_greater_than_or_equal(_shift(k, +1))


def declare_cardinality(session: CardinalitySession, literals: Iterable[int]) -> Cardinality:
    return Cardinality.declare(session, literals)
