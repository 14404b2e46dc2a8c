"""Guard functions for the bonding-curve engine.

One pure function per action, evaluated against the PRE-state and the
fee-config snapshot. A guard raises a `CurveError` naming the failed check;
trade guards return the priced `Quote` the update will apply.
"""

from __future__ import annotations

from typing import Optional

from .errors import ErrorCode, fail
from .pricing import quote_buy, quote_sell
from .types import CompletionState, CurveState, FeeConfig, Quote, TradeParams


def _require_tradable(state: CurveState, config: FeeConfig) -> None:
    if config.paused:
        raise fail(ErrorCode.TRADING_PAUSED, "platform is paused")
    if not state.is_active:
        raise fail(
            ErrorCode.TOKEN_ALREADY_GRADUATED,
            f"curve {state.curve_id!r} is {state.completion_state.value}",
        )


def guard_buy(state: CurveState, config: FeeConfig, params: TradeParams) -> Quote:
    _require_tradable(state, config)
    sol_in = params.amount
    if sol_in <= 0:
        raise fail(ErrorCode.INVALID_AMOUNT, "sol_in must be positive")
    if sol_in < state.min_buy_amount:
        raise fail(ErrorCode.BELOW_MINIMUM_BUY, f"{sol_in} < min_buy_amount {state.min_buy_amount}")
    if sol_in > state.max_buy_amount:
        raise fail(ErrorCode.ABOVE_MAXIMUM_BUY, f"{sol_in} > max_buy_amount {state.max_buy_amount}")

    quote = quote_buy(state, config, sol_in)
    if quote.amount_out == 0:
        raise fail(ErrorCode.INVALID_AMOUNT, "buy too small to release any tokens")
    if quote.amount_out < params.min_out:
        raise fail(ErrorCode.SLIPPAGE_EXCEEDED, f"tokens_out {quote.amount_out} < min_tokens_out {params.min_out}")
    if quote.amount_out > state.real_token_reserves:
        raise fail(
            ErrorCode.INSUFFICIENT_RESERVES,
            f"tokens_out {quote.amount_out} > real_token_reserves {state.real_token_reserves}",
        )
    return quote


def guard_sell(state: CurveState, config: FeeConfig, params: TradeParams) -> Quote:
    _require_tradable(state, config)
    tokens_in = params.amount
    if tokens_in <= 0:
        raise fail(ErrorCode.INVALID_AMOUNT, "tokens_in must be positive")
    if params.trader_token_balance < tokens_in:
        raise fail(
            ErrorCode.INSUFFICIENT_TOKEN_BALANCE,
            f"trader holds {params.trader_token_balance} < tokens_in {tokens_in}",
        )

    quote = quote_sell(state, config, tokens_in)
    if quote.gross_sol == 0:
        raise fail(ErrorCode.INVALID_AMOUNT, "sell too small to release any SOL")
    if quote.net_sol < params.min_out:
        raise fail(ErrorCode.SLIPPAGE_EXCEEDED, f"net_sol_out {quote.net_sol} < min_sol_out {params.min_out}")
    if quote.gross_sol > state.real_sol_reserves:
        raise fail(
            ErrorCode.INSUFFICIENT_CURVE_BALANCE,
            f"sol_out {quote.gross_sol} > real_sol_reserves {state.real_sol_reserves}",
        )
    return quote


def guard_graduate(state: CurveState, config: FeeConfig, params: TradeParams) -> Optional[Quote]:
    if not state.is_active:
        raise fail(ErrorCode.TOKEN_ALREADY_GRADUATED, f"curve is {state.completion_state.value}")
    if state.real_sol_reserves < state.graduation_threshold:
        raise fail(
            ErrorCode.GRADUATION_THRESHOLD_NOT_MET,
            f"real_sol_reserves {state.real_sol_reserves} < threshold {state.graduation_threshold}",
        )
    return None


def guard_migrate(state: CurveState, config: FeeConfig, params: TradeParams) -> Optional[Quote]:
    if state.completion_state is not CompletionState.GRADUATING:
        raise fail(ErrorCode.NOT_GRADUATING, f"curve is {state.completion_state.value}")
    return None
