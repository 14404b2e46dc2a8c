"""Constant-product pricing for the bonding curve.

Buy:  tokens_out = floor(vt * sol_in / (vs + sol_in))
Sell: sol_out    = floor(vs * tokens_in / (vt + tokens_in))

Products are formed in the u128 domain and narrowed back to u64. Rounding
is always floor, so every quote favors the curve over the trader. A zero
output is a valid quote; the executor rejects it before mutating state.

The quote helpers (`quote_buy`, `quote_sell`, spot price, market cap,
progress, slippage) are read-only and never touch a `CurveState`.
"""

from __future__ import annotations

from .errors import ErrorCode, fail
from .fees import gross_for_net, split_fee
from .math import (
    BPS_SCALE,
    bps_of,
    checked_add,
    checked_sub,
    mul_div_ceil,
    mul_div_floor,
    require_u64,
)
from .types import CurveState, Direction, FeeConfig, LAMPORTS_PER_SOL, Quote

PRICE_SCALE: int = LAMPORTS_PER_SOL  # spot prices are lamports per 1e9 token units


def _require_reserves(vs: int, vt: int) -> None:
    require_u64("virtual_sol_reserves", vs)
    require_u64("virtual_token_reserves", vt)
    if vs == 0 or vt == 0:
        raise fail(ErrorCode.INSUFFICIENT_RESERVES, "cannot price against an empty virtual reserve")


def tokens_out_for_sol(sol_in: int, virtual_sol_reserves: int, virtual_token_reserves: int) -> int:
    """Tokens released for `sol_in` lamports entering the curve."""
    require_u64("sol_in", sol_in)
    if sol_in == 0:
        raise fail(ErrorCode.INVALID_AMOUNT, "sol_in must be positive")
    _require_reserves(virtual_sol_reserves, virtual_token_reserves)

    denominator = checked_add(virtual_sol_reserves, sol_in)
    tokens_out = mul_div_floor(virtual_token_reserves, sol_in, denominator)
    if virtual_token_reserves <= tokens_out:
        raise fail(ErrorCode.INSUFFICIENT_RESERVES, "buy would drain the virtual token reserve")
    return tokens_out


def sol_out_for_tokens(tokens_in: int, virtual_token_reserves: int, virtual_sol_reserves: int) -> int:
    """Gross lamports released for `tokens_in` tokens entering the curve."""
    require_u64("tokens_in", tokens_in)
    if tokens_in == 0:
        raise fail(ErrorCode.INVALID_AMOUNT, "tokens_in must be positive")
    _require_reserves(virtual_sol_reserves, virtual_token_reserves)

    denominator = checked_add(virtual_token_reserves, tokens_in)
    sol_out = mul_div_floor(virtual_sol_reserves, tokens_in, denominator)
    if virtual_sol_reserves <= sol_out:
        raise fail(ErrorCode.INSUFFICIENT_RESERVES, "sell would drain the virtual SOL reserve")
    return sol_out


def sol_cost_for_tokens(tokens_out: int, virtual_sol_reserves: int, virtual_token_reserves: int) -> int:
    """
    Net lamports needed to receive at least `tokens_out` tokens.

    `ceil(vs * tokens_out / (vt - tokens_out))`, rounded up so the
    exact-out cost never undercharges.
    """
    require_u64("tokens_out", tokens_out)
    if tokens_out == 0:
        raise fail(ErrorCode.INVALID_AMOUNT, "tokens_out must be positive")
    _require_reserves(virtual_sol_reserves, virtual_token_reserves)
    if tokens_out >= virtual_token_reserves:
        raise fail(ErrorCode.INSUFFICIENT_RESERVES, "cannot buy the full virtual token reserve")
    remaining = checked_sub(virtual_token_reserves, tokens_out)
    return mul_div_ceil(virtual_sol_reserves, tokens_out, remaining)


def sol_in_for_tokens(state: CurveState, fee_config: FeeConfig, tokens_out: int) -> int:
    """Gross lamports whose post-fee buy releases at least `tokens_out`."""
    net = sol_cost_for_tokens(tokens_out, state.virtual_sol_reserves, state.virtual_token_reserves)
    return gross_for_net(net, fee_config.fee_basis_points)


def price_impact_bps(vs_before: int, vt_before: int, vs_after: int, vt_after: int) -> int:
    """Relative spot-price move `|p_after - p_before| / p_before` in bps (floor)."""
    _require_reserves(vs_before, vt_before)
    _require_reserves(vs_after, vt_after)
    diff = abs(vs_after * vt_before - vs_before * vt_after)
    return (diff * BPS_SCALE) // (vs_before * vt_after)


def quote_buy(state: CurveState, fee_config: FeeConfig, sol_in: int) -> Quote:
    """Fee comes off the gross SOL first; the net amount is priced."""
    split = split_fee(sol_in, fee_config.fee_basis_points)
    if split.net == 0:
        raise fail(ErrorCode.INVALID_AMOUNT, "sol_in is fully consumed by the fee")
    tokens_out = tokens_out_for_sol(split.net, state.virtual_sol_reserves, state.virtual_token_reserves)
    new_vs = checked_add(state.virtual_sol_reserves, split.net)
    new_vt = checked_sub(state.virtual_token_reserves, tokens_out)
    return Quote(
        direction=Direction.BUY,
        amount_in=sol_in,
        amount_out=tokens_out,
        gross_sol=split.gross,
        fee_amount=split.fee,
        net_sol=split.net,
        new_virtual_sol_reserves=new_vs,
        new_virtual_token_reserves=new_vt,
        price_impact_bps=price_impact_bps(
            state.virtual_sol_reserves, state.virtual_token_reserves, new_vs, new_vt,
        ),
    )


def quote_sell(state: CurveState, fee_config: FeeConfig, tokens_in: int) -> Quote:
    """The formula's SOL output is the gross amount; the fee comes off it."""
    sol_out = sol_out_for_tokens(tokens_in, state.virtual_token_reserves, state.virtual_sol_reserves)
    split = split_fee(sol_out, fee_config.fee_basis_points)
    new_vt = checked_add(state.virtual_token_reserves, tokens_in)
    new_vs = checked_sub(state.virtual_sol_reserves, sol_out)
    return Quote(
        direction=Direction.SELL,
        amount_in=tokens_in,
        amount_out=split.net,
        gross_sol=split.gross,
        fee_amount=split.fee,
        net_sol=split.net,
        new_virtual_sol_reserves=new_vs,
        new_virtual_token_reserves=new_vt,
        price_impact_bps=price_impact_bps(
            state.virtual_sol_reserves, state.virtual_token_reserves, new_vs, new_vt,
        ),
    )


# -- Read-only market views --------------------------------------------------

def spot_price_e9(virtual_sol_reserves: int, virtual_token_reserves: int) -> int:
    """Marginal price in lamports per 1e9 token base units (floor)."""
    _require_reserves(virtual_sol_reserves, virtual_token_reserves)
    return mul_div_floor(virtual_sol_reserves, PRICE_SCALE, virtual_token_reserves)


def market_cap_lamports(state: CurveState) -> int:
    """`total_supply` valued at the current spot price."""
    _require_reserves(state.virtual_sol_reserves, state.virtual_token_reserves)
    return mul_div_floor(state.total_supply, state.virtual_sol_reserves, state.virtual_token_reserves)


def graduation_progress_bps(state: CurveState) -> int:
    if state.graduation_threshold == 0:
        return BPS_SCALE
    progress = mul_div_floor(state.real_sol_reserves, BPS_SCALE, state.graduation_threshold)
    return min(progress, BPS_SCALE)


def min_out_with_slippage(expected_out: int, slippage_bps: int) -> int:
    """Lowest acceptable output for a caller tolerating `slippage_bps`."""
    require_u64("expected_out", expected_out)
    if not (0 <= slippage_bps <= BPS_SCALE):
        raise fail(ErrorCode.INVALID_AMOUNT, f"slippage_bps must be in [0, {BPS_SCALE}]")
    return checked_sub(expected_out, bps_of(expected_out, slippage_bps))


def slippage_bps(expected_out: int, actual_out: int) -> int:
    """Shortfall of `actual_out` against `expected_out` in bps (0 if not short)."""
    require_u64("expected_out", expected_out)
    require_u64("actual_out", actual_out)
    if expected_out == 0 or actual_out >= expected_out:
        return 0
    return mul_div_floor(expected_out - actual_out, BPS_SCALE, expected_out)
