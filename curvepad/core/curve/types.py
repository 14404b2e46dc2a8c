"""Data types for the bonding-curve engine.

All types are frozen dataclasses (immutable).

Units/conventions:
- SOL amounts are integer lamports (1 SOL = 1_000_000_000).
- token amounts are integer base units (6 decimals).
- `*_bps` rates are basis points (1/10_000).
- timestamps are unix seconds.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum, unique
from typing import Optional

from .errors import CurveError, ErrorCode, fail

LAMPORTS_PER_SOL: int = 1_000_000_000
TOKEN_DECIMALS: int = 6

DEFAULT_VIRTUAL_SOL_RESERVES: int = 30_000_000_000
DEFAULT_VIRTUAL_TOKEN_RESERVES: int = 1_073_000_000_000_000
DEFAULT_REAL_TOKEN_RESERVES: int = 793_100_000_000_000
DEFAULT_TOKEN_TOTAL_SUPPLY: int = 1_000_000_000_000_000
DEFAULT_GRADUATION_THRESHOLD: int = 85_000_000_000
DEFAULT_FEE_BASIS_POINTS: int = 100
MAX_FEE_BASIS_POINTS: int = 1_000


@unique
class CompletionState(Enum):
    ACTIVE = "Active"
    GRADUATING = "Graduating"
    MIGRATED = "Migrated"


@unique
class Action(Enum):
    BUY = "buy"
    SELL = "sell"
    GRADUATE = "graduate"
    MIGRATE = "migrate"


@unique
class Direction(Enum):
    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class CurveState:
    """Reserve accounting for one launched token."""

    curve_id: str = ""
    creator: str = ""

    # Pricing reserves
    virtual_sol_reserves: int = DEFAULT_VIRTUAL_SOL_RESERVES
    virtual_token_reserves: int = DEFAULT_VIRTUAL_TOKEN_RESERVES

    # Custodied reserves
    real_sol_reserves: int = 0
    real_token_reserves: int = DEFAULT_REAL_TOKEN_RESERVES
    total_supply: int = DEFAULT_TOKEN_TOTAL_SUPPLY

    # Lifecycle
    completion_state: CompletionState = CompletionState.ACTIVE
    graduation_threshold: int = DEFAULT_GRADUATION_THRESHOLD

    # Per-curve buy bounds (gross lamports)
    min_buy_amount: int = 1
    max_buy_amount: int = (1 << 64) - 1

    creation_timestamp: int = 0
    last_trade_timestamp: int = 0
    graduated_at: int = 0

    @property
    def is_active(self) -> bool:
        return self.completion_state is CompletionState.ACTIVE


@dataclass(frozen=True)
class FeeConfig:
    """Platform-wide trading configuration, read once per trade as a snapshot."""

    fee_basis_points: int = DEFAULT_FEE_BASIS_POINTS
    paused: bool = False

    def __post_init__(self) -> None:
        bps = self.fee_basis_points
        if not isinstance(bps, int) or isinstance(bps, bool):
            raise TypeError("fee_basis_points must be an int")
        if not isinstance(self.paused, bool):
            raise TypeError("paused must be a bool")
        if bps < 0 or bps > MAX_FEE_BASIS_POINTS:
            raise fail(
                ErrorCode.FEE_TOO_HIGH,
                f"fee_basis_points must be in [0, {MAX_FEE_BASIS_POINTS}], got {bps}",
            )

    def updated(
        self,
        *,
        fee_basis_points: Optional[int] = None,
        paused: Optional[bool] = None,
    ) -> "FeeConfig":
        """Return a new snapshot with the given fields replaced."""
        changes: dict[str, object] = {}
        if fee_basis_points is not None:
            changes["fee_basis_points"] = fee_basis_points
        if paused is not None:
            changes["paused"] = paused
        return replace(self, **changes)


@dataclass(frozen=True)
class TradeParams:
    """Parameters for an action. Unused fields default to 0/empty."""

    action: Action
    trader: str = ""
    amount: int = 0                 # buy: gross lamports in; sell: tokens in
    min_out: int = 0                # buy: min tokens out; sell: min net lamports out
    trader_token_balance: int = 0   # sell: tokens held by the trader
    now: int = 0


@dataclass(frozen=True)
class Quote:
    """Priced result of a trade, computed without touching state."""

    direction: Direction
    amount_in: int
    amount_out: int
    gross_sol: int
    fee_amount: int
    net_sol: int
    new_virtual_sol_reserves: int
    new_virtual_token_reserves: int
    price_impact_bps: int = 0


@dataclass(frozen=True)
class ReserveSnapshot:
    virtual_sol_reserves: int
    virtual_token_reserves: int
    real_sol_reserves: int
    real_token_reserves: int
    total_supply: int
    completion_state: CompletionState


@dataclass(frozen=True)
class TradeRecord:
    """Immutable record of one executed trade."""

    trader: str
    curve_id: str
    direction: Direction
    amount_in: int
    amount_out: int
    fee_amount: int
    gross_sol: int
    net_sol: int
    reserves: ReserveSnapshot
    timestamp: int


@dataclass(frozen=True)
class GraduationRecord:
    """Lifecycle transition emitted by the graduation state machine."""

    curve_id: str
    previous: CompletionState
    current: CompletionState
    reserves: ReserveSnapshot
    timestamp: int


@dataclass(frozen=True)
class StepResult:
    """Result of a single engine step."""

    accepted: bool
    state: CurveState | None = None
    record: TradeRecord | None = None
    events: tuple[GraduationRecord, ...] = ()
    rejection: str | None = None
    error: CurveError | None = None
