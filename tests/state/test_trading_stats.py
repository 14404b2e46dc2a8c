"""Tests for curvepad/state/stats.py."""

import pytest

from curvepad.core.curve.errors import MathOverflow
from curvepad.core.curve.math import U64_MAX
from curvepad.core.curve.types import CompletionState, Direction, ReserveSnapshot, TradeRecord
from curvepad.state.stats import (
    PlatformStats,
    TraderStats,
    apply_trade_to_platform,
    apply_trade_to_trader,
    count_curve_created,
    count_graduation,
    count_token_created,
)

_RESERVES = ReserveSnapshot(1, 1, 0, 0, 1, CompletionState.ACTIVE)


def _record(direction: Direction, amount_in: int, amount_out: int, fee: int, gross: int, ts: int) -> TradeRecord:
    return TradeRecord(
        trader="bob",
        curve_id="PEPE",
        direction=direction,
        amount_in=amount_in,
        amount_out=amount_out,
        fee_amount=fee,
        gross_sol=gross,
        net_sol=gross - fee,
        reserves=_RESERVES,
        timestamp=ts,
    )


class TestTraderStats:
    def test_buy_then_sell(self):
        s = TraderStats(trader="bob")
        s = apply_trade_to_trader(s, _record(Direction.BUY, 1_000, 50, 10, 1_000, ts=100))
        s = apply_trade_to_trader(s, _record(Direction.SELL, 50, 900, 9, 909, ts=200))
        assert s.total_sol_spent == 1_000
        assert s.total_tokens_bought == 50
        assert s.total_tokens_sold == 50
        assert s.total_sol_received == 900
        assert s.total_volume_traded == 1_909
        assert s.total_fees_paid == 19
        assert s.trade_count == 2
        assert (s.first_trade_timestamp, s.last_trade_timestamp) == (100, 200)

    def test_overflow_fails(self):
        s = TraderStats(trader="bob", total_sol_spent=U64_MAX)
        with pytest.raises(MathOverflow):
            apply_trade_to_trader(s, _record(Direction.BUY, 1, 1, 0, 1, ts=1))


def test_platform_counters():
    p = PlatformStats()
    p = count_curve_created(p)
    p = apply_trade_to_platform(p, _record(Direction.BUY, 1_000, 50, 10, 1_000, ts=1))
    p = count_graduation(p)
    assert p == PlatformStats(
        curves_created=1, curves_graduated=1, trades_executed=1, total_volume=1_000, fees_collected=10,
    )


def test_tokens_created_per_creator():
    s = count_token_created(count_token_created(TraderStats(trader="alice")))
    assert s.tokens_created == 2
    assert s.trade_count == 0
