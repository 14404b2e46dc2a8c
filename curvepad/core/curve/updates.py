"""State transition functions for the bonding-curve engine.

Updates evaluate against the PRE-state and the quote its guard produced,
and return a new `CurveState` via `dataclasses.replace()`. Every reserve
change goes through checked arithmetic, so a failing step raises before
any new state exists.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Optional

from .graduation import transition
from .math import checked_add, checked_sub
from .types import CompletionState, CurveState, Quote, TradeParams


def _trade_timestamp(state: CurveState, now: int) -> int:
    return max(state.last_trade_timestamp, now)


def apply_buy(state: CurveState, params: TradeParams, quote: Optional[Quote]) -> CurveState:
    assert quote is not None
    net_in = quote.net_sol
    tokens_out = quote.amount_out
    return replace(
        state,
        virtual_sol_reserves=checked_add(state.virtual_sol_reserves, net_in),
        virtual_token_reserves=checked_sub(state.virtual_token_reserves, tokens_out),
        real_sol_reserves=checked_add(state.real_sol_reserves, net_in),
        real_token_reserves=checked_sub(state.real_token_reserves, tokens_out),
        last_trade_timestamp=_trade_timestamp(state, params.now),
    )


def apply_sell(state: CurveState, params: TradeParams, quote: Optional[Quote]) -> CurveState:
    assert quote is not None
    tokens_in = quote.amount_in
    sol_out = quote.gross_sol
    return replace(
        state,
        virtual_token_reserves=checked_add(state.virtual_token_reserves, tokens_in),
        virtual_sol_reserves=checked_sub(state.virtual_sol_reserves, sol_out),
        real_token_reserves=checked_add(state.real_token_reserves, tokens_in),
        real_sol_reserves=checked_sub(state.real_sol_reserves, sol_out),
        last_trade_timestamp=_trade_timestamp(state, params.now),
    )


def apply_graduate(state: CurveState, params: TradeParams, quote: Optional[Quote]) -> CurveState:
    return transition(state, CompletionState.GRADUATING, params.now)


def apply_migrate(state: CurveState, params: TradeParams, quote: Optional[Quote]) -> CurveState:
    return transition(state, CompletionState.MIGRATED, params.now)
