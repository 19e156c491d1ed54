# test_sat_session.py
from __future__ import annotations

import pytest
from pysat.examples.genhard import PHP

from card_errors import DetachedConstraintError, UnregisteredProviderError
from cardinality import declare_cardinality
from cnf_gates import exactly_one
from sat_session import SOLVER_CANDIDATES, SatSession, pick_solver_name


@pytest.fixture
def session():
    with SatSession(name=pick_solver_name()) as s:
        yield s


def test_pick_solver_name():
    assert pick_solver_name() in SOLVER_CANDIDATES


def test_pick_solver_name_without_backends():
    with pytest.raises(RuntimeError):
        pick_solver_name(["no-such-solver"])


def test_counters_and_names(session):
    a = session.new_var("a")
    b = session.new_var("b")
    session.add_clause([a, b])
    session.add_unit(a, False)
    assert session.num_vars == 2
    assert session.num_clauses == 2
    assert session.var("b") == b
    with pytest.raises(ValueError):
        session.add_clause([])


def test_solve_and_values(session):
    a = session.new_var()
    b = session.new_var()
    session.add_clause([a, b])
    session.add_clause([-a])
    assert session.solve()
    assert session.get_value(b)
    assert not session.get_value(a)
    assert session.get_value(-a)
    assert session.get_model() == [-a, b]


def test_explicit_assumptions_bypass_registry(session):
    xs = [session.new_var() for _ in range(3)]
    card = declare_cardinality(session, xs)
    card.assume_upper_bound_less_than_or_equal(0)
    # registry forbids any true input
    assert not session.solve(assumptions=session.assumptions.collect() + [xs[0]])
    # explicit list only: registry is ignored
    assert session.solve(assumptions=[xs[0]])
    assert session.get_value(xs[0])


def test_model_unavailable_after_unsat(session):
    a = session.new_var()
    session.add_unit(a, True)
    assert not session.solve(assumptions=[-a])
    with pytest.raises(RuntimeError):
        session.get_value(a)
    with pytest.raises(RuntimeError):
        session.get_model()


def test_variable_outside_clauses_reads_false(session):
    a = session.new_var()
    b = session.new_var()
    session.add_unit(a, True)
    assert session.solve()
    assert session.get_value(a)
    assert not session.get_value(b)


def test_solve_with_timeout_returns_result(session):
    xs = [session.new_var() for _ in range(4)]
    exactly_one(session, xs)
    assert session.solve_with_timeout(10.0) is True
    assert sum(1 for x in xs if session.get_value(x)) == 1
    assert session.solve_with_timeout(10.0, assumptions=[xs[0], xs[1]]) is False
    # still usable afterwards
    assert session.solve()


def test_solve_with_timeout_runs_out(session):
    # 12 pigeons in 11 holes: far beyond 0.2 s for a CDCL solver
    php = PHP(11)
    for _ in range(php.nv):
        session.new_var()
    for cl in php.clauses:
        session.add_clause(cl)
    a = session.new_var()
    session.add_unit(a, True)

    assert session.solve_with_timeout(0.2) is None
    with pytest.raises(RuntimeError):
        session.get_value(a)
    # interrupt flag was cleared: the next call answers instead of stopping at once
    assert session.solve_with_timeout(5.0, assumptions=[-a]) is False


def test_timer_firing_immediately_does_not_leak(session):
    xs = [session.new_var() for _ in range(4)]
    exactly_one(session, xs)
    for _ in range(20):
        assert session.solve_with_timeout(0.0) in (True, None)
        assert session.solve_with_timeout(10.0) is True


def test_reset(session):
    xs = [session.new_var() for _ in range(3)]
    declare_cardinality(session, xs)
    session.add_clause([-xs[0]])
    session.reset()
    assert session.num_vars == 0
    assert session.num_clauses == 0
    assert len(session.assumptions) == 0
    a = session.new_var()
    assert a == 1
    session.add_unit(a, True)
    assert session.solve()


def test_reset_detaches_constraints(session):
    xs = [session.new_var() for _ in range(3)]
    card = declare_cardinality(session, xs)
    assert card.registered
    session.reset()

    assert card.detached
    assert not card.registered
    with pytest.raises(UnregisteredProviderError):
        card.unregister()

    ys = [session.new_var() for _ in range(10)]
    with pytest.raises(DetachedConstraintError):
        card.declare_upper_bound_less_than_or_equal(0)
    with pytest.raises(DetachedConstraintError):
        card.declare_lower_bound_greater_than_or_equal(None)
    with pytest.raises(DetachedConstraintError):
        card.assume_upper_bound_less_than_or_equal(1)
    with pytest.raises(DetachedConstraintError):
        card.assume_lower_bound_greater_than_or_equal(None)
    # nothing leaked onto the fresh variables
    assert session.num_clauses == 0
    assert session.solve(assumptions=ys)

    fresh_card = declare_cardinality(session, ys)
    assert fresh_card.registered
    assert not fresh_card.detached


def test_dimacs(session, tmp_path):
    xs = [session.new_var() for _ in range(2)]
    declare_cardinality(session, xs)
    text = session.to_dimacs()
    lines = text.splitlines()
    assert lines[0] == f"p cnf {session.num_vars} {session.num_clauses}"
    assert lines[1] == "c Totalizer(2)"
    assert all(line.endswith(" 0") for line in lines[2:])

    path = tmp_path / "card.cnf"
    session.write_dimacs(str(path))
    assert path.read_text() == text


def test_context_manager_closes():
    with SatSession(name=pick_solver_name()) as s:
        s.add_unit(s.new_var(), True)
        assert s.solve()
    s.close()
