# cnf_builder.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple


@dataclass
class CNFBuilder:
    """
    In-memory clause store.

    Allocates variables in increasing order (1, 2, 3, ...) and keeps every
    clause in insertion order, so two builds that start from the same
    counter produce the same numbering and the same clause list.
    Comments are kept next to the clause index at which they were issued.
    """
    var_count: int = 0
    clauses: List[List[int]] = field(default_factory=list)
    name2var: Dict[str, int] = field(default_factory=dict)
    comments: List[Tuple[int, str]] = field(default_factory=list)

    def new_var(self, name: Optional[str] = None) -> int:
        if name is not None and name in self.name2var:
            raise ValueError(f"Variable name already exists: {name}")
        self.var_count += 1
        if name is not None:
            self.name2var[name] = self.var_count
        return self.var_count

    def var(self, name: str) -> int:
        if name not in self.name2var:
            raise KeyError(f"Unknown variable name: {name}")
        return self.name2var[name]

    def add_clause(self, lits: Iterable[int]) -> None:
        lits = list(lits)
        if not lits:
            raise ValueError("Empty clause is not allowed (would make CNF UNSAT).")
        for lit in lits:
            if lit == 0:
                raise ValueError("Literal 0 is not allowed in DIMACS.")
            if abs(lit) > self.var_count:
                raise ValueError(f"Literal {lit} refers to an unallocated variable (var_count={self.var_count}).")
        self.clauses.append(lits)

    def add_unit(self, var: int, value: bool) -> None:
        self.add_clause([var if value else -var])

    def comment(self, text: str) -> None:
        self.comments.append((len(self.clauses), text))

    @property
    def num_clauses(self) -> int:
        return len(self.clauses)

    def to_dimacs(self) -> str:
        lines = [f"p cnf {self.var_count} {len(self.clauses)}"]
        pending = list(self.comments)
        for idx, cl in enumerate(self.clauses):
            while pending and pending[0][0] <= idx:
                lines.append(f"c {pending.pop(0)[1]}")
            lines.append(" ".join(str(lit) for lit in cl) + " 0")
        for _, text in pending:
            lines.append(f"c {text}")
        return "\n".join(lines) + "\n"

    def write_dimacs(self, path: str) -> None:
        with open(path, "w") as f:
            f.write(self.to_dimacs())
