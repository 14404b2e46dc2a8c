"""
Per-trader and platform trading statistics.

Counters are u64 and advance with checked arithmetic, so a counter that
would overflow fails the trade it belongs to instead of wrapping.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from ..core.curve.math import checked_add
from ..core.curve.types import Direction, TradeRecord


@dataclass(frozen=True)
class TraderStats:
    trader: str
    tokens_created: int = 0
    total_tokens_bought: int = 0
    total_tokens_sold: int = 0
    total_sol_spent: int = 0
    total_sol_received: int = 0
    total_volume_traded: int = 0
    total_fees_paid: int = 0
    trade_count: int = 0
    first_trade_timestamp: int = 0
    last_trade_timestamp: int = 0


@dataclass(frozen=True)
class PlatformStats:
    curves_created: int = 0
    curves_graduated: int = 0
    trades_executed: int = 0
    total_volume: int = 0
    fees_collected: int = 0


def apply_trade_to_trader(stats: TraderStats, record: TradeRecord) -> TraderStats:
    """Fold one trade into a trader's running totals."""
    if record.direction is Direction.BUY:
        stats = replace(
            stats,
            total_tokens_bought=checked_add(stats.total_tokens_bought, record.amount_out),
            total_sol_spent=checked_add(stats.total_sol_spent, record.amount_in),
        )
    else:
        stats = replace(
            stats,
            total_tokens_sold=checked_add(stats.total_tokens_sold, record.amount_in),
            total_sol_received=checked_add(stats.total_sol_received, record.amount_out),
        )
    first = stats.first_trade_timestamp if stats.trade_count else record.timestamp
    return replace(
        stats,
        total_volume_traded=checked_add(stats.total_volume_traded, record.gross_sol),
        total_fees_paid=checked_add(stats.total_fees_paid, record.fee_amount),
        trade_count=checked_add(stats.trade_count, 1),
        first_trade_timestamp=first,
        last_trade_timestamp=max(stats.last_trade_timestamp, record.timestamp),
    )


def apply_trade_to_platform(stats: PlatformStats, record: TradeRecord) -> PlatformStats:
    return replace(
        stats,
        trades_executed=checked_add(stats.trades_executed, 1),
        total_volume=checked_add(stats.total_volume, record.gross_sol),
        fees_collected=checked_add(stats.fees_collected, record.fee_amount),
    )


def count_curve_created(stats: PlatformStats) -> PlatformStats:
    return replace(stats, curves_created=checked_add(stats.curves_created, 1))


def count_graduation(stats: PlatformStats) -> PlatformStats:
    return replace(stats, curves_graduated=checked_add(stats.curves_graduated, 1))


def count_token_created(stats: TraderStats) -> TraderStats:
    return replace(stats, tokens_created=checked_add(stats.tokens_created, 1))
