"""Tests for curvepad/state/balances.py."""

import pytest

from curvepad.core.curve.math import U64_MAX
from curvepad.state.balances import NATIVE_ASSET, BalanceTable, curve_custody, is_custody, token_asset


def test_custody_identity():
    assert curve_custody("PEPE") == "curve:PEPE"
    assert is_custody(curve_custody("PEPE"))
    assert not is_custody("bob")


def test_token_asset_never_collides_with_native():
    assert token_asset(NATIVE_ASSET) != NATIVE_ASSET
    assert token_asset("PEPE") == "token:PEPE"


class TestBalanceTable:
    def test_missing_is_zero(self):
        assert BalanceTable().get("alice", NATIVE_ASSET) == 0

    def test_zero_entries_removed(self):
        t = BalanceTable()
        t.set("alice", NATIVE_ASSET, 5)
        t.set("alice", NATIVE_ASSET, 0)
        assert t.sorted_items() == []

    def test_bounds(self):
        t = BalanceTable()
        with pytest.raises(ValueError):
            t.set("alice", NATIVE_ASSET, -1)
        with pytest.raises(ValueError):
            t.set("alice", NATIVE_ASSET, U64_MAX + 1)

    def test_add_and_subtract(self):
        t = BalanceTable()
        t.add("alice", NATIVE_ASSET, 10)
        t.subtract("alice", NATIVE_ASSET, 4)
        assert t.get("alice", NATIVE_ASSET) == 6
        with pytest.raises(ValueError):
            t.subtract("alice", NATIVE_ASSET, 7)
        with pytest.raises(ValueError):
            t.subtract("alice", NATIVE_ASSET, -1)

    def test_move_conserves_total(self):
        t = BalanceTable()
        t.set("alice", "PEPE", 100)
        t.move("PEPE", "alice", "bob", 30)
        assert (t.get("alice", "PEPE"), t.get("bob", "PEPE")) == (70, 30)
        assert t.total("PEPE") == 100

    def test_failed_move_leaves_source(self):
        t = BalanceTable()
        t.set("alice", "PEPE", 10)
        with pytest.raises(ValueError):
            t.move("PEPE", "alice", "bob", 11)
        assert t.get("alice", "PEPE") == 10
        assert t.get("bob", "PEPE") == 0

    def test_copy_is_independent(self):
        t = BalanceTable()
        t.set("alice", NATIVE_ASSET, 1)
        c = t.copy()
        c.add("alice", NATIVE_ASSET, 1)
        assert t.get("alice", NATIVE_ASSET) == 1
        assert c.get("alice", NATIVE_ASSET) == 2

    def test_sorted_items_deterministic(self):
        t = BalanceTable()
        t.set("bob", NATIVE_ASSET, 2)
        t.set("alice", "PEPE", 3)
        t.set("alice", NATIVE_ASSET, 1)
        assert t.sorted_items() == [
            ("alice", "PEPE", 3),
            ("alice", NATIVE_ASSET, 1),
            ("bob", NATIVE_ASSET, 2),
        ]
