"""
State management for the launchpad: custody balances, curve ledger, statistics.
"""

from .balances import NATIVE_ASSET, BalanceTable, curve_custody, token_asset
from .ledger import DuplicateCurveError, InMemoryLedger, UnknownCurveError
from .stats import PlatformStats, TraderStats

__all__ = [
    "NATIVE_ASSET",
    "BalanceTable",
    "curve_custody",
    "token_asset",
    "DuplicateCurveError",
    "InMemoryLedger",
    "UnknownCurveError",
    "PlatformStats",
    "TraderStats",
]
