# totalizer.py
from __future__ import annotations
import logging
from collections import deque
from typing import Callable, Iterable, Iterator, List, Optional, Sequence, Tuple

from card_errors import EmptyInputError

log = logging.getLogger(__name__)

NewVar = Callable[[], int]
AddClause = Callable[[List[int]], None]
Comment = Callable[[str], None]


class Totalizer(Sequence[int]):
    """
    Unary count of the true inputs: T[i] holds iff at least i inputs hold.

    Indexing with [] is 0-based like a tuple, at_least(i) is 1-based.
    """

    __slots__ = ("_outputs", "_inputs")

    def __init__(self, outputs: Iterable[int], inputs: Iterable[int]):
        self._outputs: Tuple[int, ...] = tuple(outputs)
        self._inputs: Tuple[int, ...] = tuple(inputs)
        if len(self._outputs) != len(self._inputs):
            raise ValueError(
                f"Totalizer has {len(self._outputs)} outputs for {len(self._inputs)} inputs."
            )

    @property
    def inputs(self) -> Tuple[int, ...]:
        return self._inputs

    @property
    def outputs(self) -> Tuple[int, ...]:
        return self._outputs

    def at_least(self, i: int) -> int:
        if not 1 <= i <= len(self._outputs):
            raise IndexError(f"Totalizer index {i} out of range 1..{len(self._outputs)}")
        return self._outputs[i - 1]

    def __getitem__(self, idx):
        return self._outputs[idx]

    def __len__(self) -> int:
        return len(self._outputs)

    def __iter__(self) -> Iterator[int]:
        return iter(self._outputs)

    def __eq__(self, other) -> bool:
        if isinstance(other, Totalizer):
            return self._outputs == other._outputs and self._inputs == other._inputs
        return NotImplemented

    def __hash__(self) -> int:
        return hash((self._outputs, self._inputs))

    def __repr__(self) -> str:
        return f"Totalizer({list(self._outputs)})"


def merge_groups(a: Sequence[int], b: Sequence[int], new_var: NewVar, add_clause: AddClause) -> List[int]:
    """
    Merge two unary counters a and b into a fresh counter r of size |a|+|b|.

    For alpha in 0..|a| and beta in 0..|b| with sigma = alpha+beta:
      sigma > 0:  a[alpha] & b[beta] -> r[sigma]
      sigma < m:  r[sigma+1] -> a[alpha+1] | b[beta+1]
    Index 0 of an operand is "true" and index |x|+1 is "false", so those
    terms are left out of the clause. All indices here are 1-based.
    Returns r.
    """
    m1 = len(a)
    m2 = len(b)
    m = m1 + m2
    r = [new_var() for _ in range(m)]

    for alpha in range(m1 + 1):
        for beta in range(m2 + 1):
            sigma = alpha + beta

            if sigma > 0:
                c1 = []
                if alpha > 0:
                    c1.append(-a[alpha - 1])
                if beta > 0:
                    c1.append(-b[beta - 1])
                c1.append(r[sigma - 1])
                add_clause(c1)

            if sigma < m:
                c2 = []
                if alpha < m1:
                    c2.append(a[alpha])
                if beta < m2:
                    c2.append(b[beta])
                c2.append(-r[sigma])
                add_clause(c2)

    return r


def build_totalizer(
    literals: Iterable[int],
    new_var: NewVar,
    add_clause: AddClause,
    comment: Optional[Comment] = None,
) -> Totalizer:
    """
    Build a totalizer over `literals`.

    Groups start as singletons and the two groups at the front of a FIFO
    queue are merged until one group of size N is left. Starting from
    singletons the queue stays sorted by size (each merged group is at
    least as large as any group behind it), so the front pair is always
    the two smallest groups.
    """
    inputs = list(literals)
    if not inputs:
        raise EmptyInputError("totalizer")
    for lit in inputs:
        if lit == 0:
            raise ValueError("Literal 0 is not allowed in DIMACS.")

    if comment is not None:
        comment(f"Totalizer({len(inputs)})")

    clause_count = 0

    def counting_add_clause(lits: List[int]) -> None:
        nonlocal clause_count
        clause_count += 1
        add_clause(lits)

    merges = 0
    queue = deque([lit] for lit in inputs)
    while len(queue) > 1:
        a = queue.popleft()
        b = queue.popleft()
        queue.append(merge_groups(a, b, new_var, counting_add_clause))
        merges += 1
    outputs = queue.popleft()

    log.debug("Totalizer(%d): %d merges, %d clauses", len(inputs), merges, clause_count)
    return Totalizer(outputs, inputs)
