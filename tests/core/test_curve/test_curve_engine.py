"""Tests for curvepad/core/curve/engine.py: dispatch table + step function.

Known buy/sell/graduate/migrate sequences end-to-end through the engine.
"""

from dataclasses import replace

import pytest

from curvepad.core.curve import (
    Action,
    CapacityError,
    CompletionState,
    CurveState,
    Direction,
    FeeConfig,
    InvariantViolation,
    MathOverflow,
    StateError,
    TradeParams,
    ValidationError,
    buy,
    new_curve,
    sell,
    step,
    step_or_raise,
)
from curvepad.core.curve.math import U64_MAX

LAUNCH_TOKENS_FOR_ONE_SOL = 1_073_000_000_000_000 * 990_000_000 // 30_990_000_000


def _curve(**kwargs) -> CurveState:
    return replace(new_curve("PEPE", "alice", now=100), **kwargs)


def _buy(amount: int, min_out: int = 0, now: int = 200) -> TradeParams:
    return TradeParams(action=Action.BUY, trader="bob", amount=amount, min_out=min_out, now=now)


def _sell(amount: int, balance: int, min_out: int = 0, now: int = 300) -> TradeParams:
    return TradeParams(
        action=Action.SELL, trader="bob", amount=amount, min_out=min_out,
        trader_token_balance=balance, now=now,
    )


# ---------------------------------------------------------------------------
# buy
# ---------------------------------------------------------------------------

class TestBuy:
    def test_one_sol_on_launch_curve(self):
        r = buy(_curve(), FeeConfig(), trader="bob", sol_in=1_000_000_000, now=200)
        assert r.accepted
        s = r.state
        assert s.virtual_sol_reserves == 30_990_000_000
        assert s.virtual_token_reserves == 1_073_000_000_000_000 - LAUNCH_TOKENS_FOR_ONE_SOL
        assert s.real_sol_reserves == 990_000_000
        assert s.real_token_reserves == 793_100_000_000_000 - LAUNCH_TOKENS_FOR_ONE_SOL
        assert s.last_trade_timestamp == 200
        assert s.completion_state is CompletionState.ACTIVE

        rec = r.record
        assert rec.direction is Direction.BUY
        assert rec.amount_in == 1_000_000_000
        assert rec.amount_out == LAUNCH_TOKENS_FOR_ONE_SOL
        assert rec.fee_amount == 10_000_000
        assert rec.fee_amount + rec.net_sol == rec.gross_sol
        assert rec.reserves.real_sol_reserves == 990_000_000
        assert rec.timestamp == 200
        assert r.events == ()

    def test_input_state_untouched(self):
        s = _curve()
        buy(s, FeeConfig(), trader="bob", sol_in=1_000_000_000)
        assert s == _curve()

    def test_zero_rejected(self):
        r = step(_curve(), FeeConfig(), _buy(0))
        assert not r.accepted
        assert r.rejection == "InvalidAmount"
        assert r.state is None

    def test_negative_rejected(self):
        r = step(_curve(), FeeConfig(), _buy(-5))
        assert r.rejection == "InvalidAmount"

    def test_above_u64_rejected(self):
        r = step(_curve(), FeeConfig(), _buy(U64_MAX + 1))
        assert r.rejection == "MathOverflow"
        assert isinstance(r.error, MathOverflow)

    def test_paused(self):
        r = step(_curve(), FeeConfig(paused=True), _buy(1_000_000_000))
        assert r.rejection == "TradingPaused"
        assert isinstance(r.error, StateError)

    def test_below_minimum(self):
        r = step(_curve(min_buy_amount=100), FeeConfig(), _buy(50))
        assert r.rejection == "BelowMinimumBuy"

    def test_above_maximum(self):
        r = step(_curve(max_buy_amount=1_000), FeeConfig(), _buy(1_001))
        assert r.rejection == "AboveMaximumBuy"

    def test_slippage(self):
        r = step(_curve(), FeeConfig(), _buy(1_000_000_000, min_out=LAUNCH_TOKENS_FOR_ONE_SOL + 1))
        assert r.rejection == "SlippageExceeded"
        with pytest.raises(ValidationError):
            step_or_raise(_curve(), FeeConfig(), _buy(1_000_000_000, min_out=LAUNCH_TOKENS_FOR_ONE_SOL + 1))

    def test_slippage_bound_met_exactly(self):
        r = step(_curve(), FeeConfig(), _buy(1_000_000_000, min_out=LAUNCH_TOKENS_FOR_ONE_SOL))
        assert r.accepted

    def test_dust_buy_releasing_nothing(self):
        r = step(_curve(virtual_sol_reserves=10**16), FeeConfig(), _buy(1))
        assert r.rejection == "InvalidAmount"

    def test_more_than_real_reserves(self):
        r = step(_curve(real_token_reserves=1_000), FeeConfig(), _buy(1_000_000_000))
        assert r.rejection == "InsufficientReserves"
        assert isinstance(r.error, CapacityError)

    def test_overflow_scenario_fails(self):
        s = _curve(virtual_token_reserves=U64_MAX)
        r = step(s, FeeConfig(fee_basis_points=0), _buy(U64_MAX))
        assert not r.accepted
        assert r.rejection == "MathOverflow"
        with pytest.raises(MathOverflow):
            step_or_raise(s, FeeConfig(fee_basis_points=0), _buy(U64_MAX))

    def test_last_trade_timestamp_never_moves_back(self):
        r = step(_curve(last_trade_timestamp=500), FeeConfig(), _buy(1_000_000_000, now=400))
        assert r.state.last_trade_timestamp == 500
        assert r.record.timestamp == 500

    def test_zero_fee(self):
        r = buy(_curve(), FeeConfig(fee_basis_points=0), trader="bob", sol_in=1_000_000_000)
        assert r.record.fee_amount == 0
        assert r.state.real_sol_reserves == 1_000_000_000


# ---------------------------------------------------------------------------
# sell
# ---------------------------------------------------------------------------

class TestSell:
    def _after_buy(self) -> CurveState:
        return buy(_curve(), FeeConfig(), trader="bob", sol_in=1_000_000_000, now=200).state

    def test_round_trip_returns_less(self):
        s = self._after_buy()
        r = sell(
            s, FeeConfig(), trader="bob", tokens_in=LAUNCH_TOKENS_FOR_ONE_SOL,
            trader_token_balance=LAUNCH_TOKENS_FOR_ONE_SOL, now=300,
        )
        rec = r.record
        assert rec.direction is Direction.SELL
        assert rec.net_sol == rec.amount_out
        assert rec.amount_out < 1_000_000_000
        assert rec.gross_sol <= 990_000_000
        assert rec.fee_amount + rec.net_sol == rec.gross_sol
        assert r.state.real_sol_reserves == 990_000_000 - rec.gross_sol
        assert r.state.virtual_token_reserves == 1_073_000_000_000_000
        assert r.state.real_token_reserves == 793_100_000_000_000
        assert r.state.last_trade_timestamp == 300

    def test_zero_rejected(self):
        r = step(self._after_buy(), FeeConfig(), _sell(0, balance=10))
        assert r.rejection == "InvalidAmount"

    def test_insufficient_token_balance(self):
        r = step(self._after_buy(), FeeConfig(), _sell(1_000, balance=999))
        assert r.rejection == "InsufficientTokenBalance"

    def test_curve_cannot_pay(self):
        r = step(_curve(), FeeConfig(), _sell(1_000_000, balance=1_000_000))
        assert r.rejection == "InsufficientCurveBalance"

    def test_slippage(self):
        s = self._after_buy()
        r = step(s, FeeConfig(), _sell(10**12, balance=10**12, min_out=10**12))
        assert r.rejection == "SlippageExceeded"

    def test_paused(self):
        r = step(self._after_buy(), FeeConfig(paused=True), _sell(10**12, balance=10**12))
        assert r.rejection == "TradingPaused"


# ---------------------------------------------------------------------------
# graduation through the engine
# ---------------------------------------------------------------------------

class TestAutoGraduation:
    def test_threshold_crossed_by_buy(self):
        s = _curve(graduation_threshold=1_000_000_000)
        r = step(s, FeeConfig(), _buy(2_000_000_000, now=250))
        assert r.accepted
        assert r.state.completion_state is CompletionState.GRADUATING
        assert r.state.graduated_at == 250
        assert len(r.events) == 1
        ev = r.events[0]
        assert ev.previous is CompletionState.ACTIVE
        assert ev.current is CompletionState.GRADUATING
        assert ev.reserves.real_sol_reserves == r.state.real_sol_reserves

    def test_below_threshold_stays_active(self):
        r = step(_curve(graduation_threshold=10_000_000_000), FeeConfig(), _buy(1_000_000_000))
        assert r.state.completion_state is CompletionState.ACTIVE
        assert r.events == ()

    def test_real_tokens_exhausted(self):
        s = _curve()
        out = buy(s, FeeConfig(), trader="bob", sol_in=1_000_000_000).record.amount_out
        r = step(replace(s, real_token_reserves=out), FeeConfig(), _buy(1_000_000_000))
        assert r.state.real_token_reserves == 0
        assert r.state.completion_state is CompletionState.GRADUATING

    @pytest.mark.parametrize("lifecycle", [CompletionState.GRADUATING, CompletionState.MIGRATED])
    def test_trading_closed_after_graduation(self, lifecycle):
        s = _curve(completion_state=lifecycle, graduated_at=150)
        for params in (_buy(1_000_000_000), _sell(10**9, balance=10**9)):
            r = step(s, FeeConfig(), params)
            assert not r.accepted
            assert r.rejection == "TokenAlreadyGraduated"


class TestManualGraduate:
    def _funded(self, **kwargs) -> CurveState:
        return _curve(real_sol_reserves=85_000_000_000, virtual_sol_reserves=115_000_000_000, **kwargs)

    def test_threshold_met(self):
        r = step(self._funded(), FeeConfig(), TradeParams(action=Action.GRADUATE, trader="admin", now=900))
        assert r.accepted
        assert r.state.completion_state is CompletionState.GRADUATING
        assert r.state.graduated_at == 900
        assert r.record is None
        assert r.events[0].current is CompletionState.GRADUATING

    def test_threshold_not_met(self):
        r = step(_curve(), FeeConfig(), TradeParams(action=Action.GRADUATE, now=900))
        assert r.rejection == "GraduationThresholdNotMet"

    def test_already_graduating(self):
        s = self._funded(completion_state=CompletionState.GRADUATING, graduated_at=500)
        r = step(s, FeeConfig(), TradeParams(action=Action.GRADUATE, now=900))
        assert r.rejection == "TokenAlreadyGraduated"


class TestMigrate:
    def test_requires_graduating(self):
        r = step(_curve(), FeeConfig(), TradeParams(action=Action.MIGRATE, now=900))
        assert r.rejection == "NotGraduating"

    def test_once(self):
        s = _curve(completion_state=CompletionState.GRADUATING, graduated_at=500)
        r = step(s, FeeConfig(), TradeParams(action=Action.MIGRATE, now=900))
        assert r.accepted
        assert r.state.completion_state is CompletionState.MIGRATED
        assert r.state.graduated_at == 500
        assert r.events[0].previous is CompletionState.GRADUATING

        again = step(r.state, FeeConfig(), TradeParams(action=Action.MIGRATE, now=901))
        assert again.rejection == "NotGraduating"

    def test_reserves_unchanged(self):
        s = _curve(completion_state=CompletionState.GRADUATING, graduated_at=500)
        r = step(s, FeeConfig(), TradeParams(action=Action.MIGRATE, now=900))
        assert r.state.virtual_sol_reserves == s.virtual_sol_reserves
        assert r.state.real_token_reserves == s.real_token_reserves


# ---------------------------------------------------------------------------
# post-state invariant enforcement
# ---------------------------------------------------------------------------

def test_invariant_violation_rejects_step():
    s = _curve(real_sol_reserves=31_000_000_000)  # more real SOL than virtual
    r = step(s, FeeConfig(), _buy(1_000_000_000))
    assert not r.accepted
    assert r.rejection.startswith("invariant:")
    assert "inv_real_sol_backed" in r.rejection
    assert isinstance(r.error, InvariantViolation)
    assert "inv_real_sol_backed" in r.error.violations
    with pytest.raises(InvariantViolation):
        step_or_raise(s, FeeConfig(), _buy(1_000_000_000))
