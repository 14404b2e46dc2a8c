"""
In-memory ledger: durable-storage stand-in for curves, fee config and custody.

The engine itself never serializes access. `atomic()` provides the
single-writer, all-or-nothing unit a real ledger would: it serializes
callers on one lock and restores every table if the block raises.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, Optional

from ..core.curve.types import CurveState, FeeConfig
from .balances import BalanceTable
from .stats import PlatformStats, TraderStats


class UnknownCurveError(KeyError):
    """Raised when a curve id has no stored state."""


class DuplicateCurveError(ValueError):
    """Raised when creating a curve whose id is already taken."""


@dataclass
class InMemoryLedger:
    fee_config: FeeConfig = field(default_factory=FeeConfig)
    balances: BalanceTable = field(default_factory=BalanceTable)
    platform_stats: PlatformStats = field(default_factory=PlatformStats)
    _curves: Dict[str, CurveState] = field(default_factory=dict)
    _trader_stats: Dict[str, TraderStats] = field(default_factory=dict)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    # -- curves --------------------------------------------------------------

    def get_curve(self, curve_id: str) -> CurveState:
        try:
            return self._curves[curve_id]
        except KeyError:
            raise UnknownCurveError(curve_id) from None

    def has_curve(self, curve_id: str) -> bool:
        return curve_id in self._curves

    def put_curve(self, state: CurveState) -> None:
        self._curves[state.curve_id] = state

    def insert_curve(self, state: CurveState) -> None:
        if state.curve_id in self._curves:
            raise DuplicateCurveError(state.curve_id)
        self._curves[state.curve_id] = state

    def curve_ids(self) -> list[str]:
        return sorted(self._curves)

    # -- stats ---------------------------------------------------------------

    def get_trader_stats(self, trader: str) -> TraderStats:
        return self._trader_stats.get(trader) or TraderStats(trader=trader)

    def put_trader_stats(self, stats: TraderStats) -> None:
        self._trader_stats[stats.trader] = stats

    # -- atomicity -----------------------------------------------------------

    @contextmanager
    def atomic(self) -> Iterator["InMemoryLedger"]:
        """Serialize the block and roll back every table if it raises."""
        with self._lock:
            saved = (
                dict(self._curves),
                dict(self._trader_stats),
                self.fee_config,
                self.platform_stats,
                self.balances.copy(),
            )
            try:
                yield self
            except BaseException:
                (
                    self._curves,
                    self._trader_stats,
                    self.fee_config,
                    self.platform_stats,
                    self.balances,
                ) = saved
                raise
