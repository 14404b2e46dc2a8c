"""Effect functions for the bonding-curve engine.

Trade records are built from the POST-state (the reserve snapshot a
downstream indexer sees after the trade) plus the quote the step applied.
"""

from __future__ import annotations

from .graduation import snapshot
from .types import CurveState, Direction, Quote, TradeParams, TradeRecord


def _trade_record(state: CurveState, params: TradeParams, quote: Quote, direction: Direction) -> TradeRecord:
    return TradeRecord(
        trader=params.trader,
        curve_id=state.curve_id,
        direction=direction,
        amount_in=quote.amount_in,
        amount_out=quote.amount_out,
        fee_amount=quote.fee_amount,
        gross_sol=quote.gross_sol,
        net_sol=quote.net_sol,
        reserves=snapshot(state),
        timestamp=state.last_trade_timestamp,
    )


def effect_buy(state: CurveState, params: TradeParams, quote: Quote) -> TradeRecord:
    return _trade_record(state, params, quote, Direction.BUY)


def effect_sell(state: CurveState, params: TradeParams, quote: Quote) -> TradeRecord:
    return _trade_record(state, params, quote, Direction.SELL)
