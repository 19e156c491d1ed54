# test_assumptions.py
from __future__ import annotations

import pytest

from assumptions import AssumptionsRegistry
from card_errors import UnregisteredProviderError


def test_collect_in_registration_order():
    reg = AssumptionsRegistry()
    reg.register(lambda: [3, -4])
    reg.register(lambda: [])
    reg.register(lambda: [1])
    assert reg.collect() == [3, -4, 1]
    assert len(reg) == 3


def test_collect_reads_providers_on_demand():
    current = [5]
    reg = AssumptionsRegistry()
    reg.register(lambda: list(current))
    assert reg.collect() == [5]
    current[:] = [-5, 6]
    assert reg.collect() == [-5, 6]


def test_unregister_removes_exactly_one():
    reg = AssumptionsRegistry()

    def p():
        return [1]

    reg.register(p)
    reg.register(p)
    reg.unregister(p)
    assert reg.collect() == [1]
    assert p in reg
    reg.unregister(p)
    assert p not in reg
    with pytest.raises(UnregisteredProviderError):
        reg.unregister(p)


def test_unregister_unknown_provider():
    reg = AssumptionsRegistry()
    with pytest.raises(UnregisteredProviderError):
        reg.unregister(lambda: [])


def test_clear():
    reg = AssumptionsRegistry()
    reg.register(lambda: [1])
    reg.clear()
    assert reg.collect() == []
    assert len(reg) == 0
