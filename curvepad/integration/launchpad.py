"""
Launchpad: imperative shell around the pure bonding-curve engine.

Each public operation:
- authorizes the caller through the `Authorizer`,
- opens the ledger's atomic unit and reads the curve plus a fee-config snapshot,
- runs `engine.step_or_raise()` (pure, fail-closed),
- performs the resulting asset transfers and statistics updates,
- commits the new curve state,
- publishes records to the event sink after commit (best-effort).

Any failure inside the atomic unit rolls back every ledger table, so a
rejected or failed operation leaves no observable side effects.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Iterable, Optional

from ..config import LaunchpadConfig
from ..core.curve import engine
from ..core.curve.errors import CurveError, ErrorCode, fail
from ..core.curve.graduation import snapshot
from ..core.curve.pricing import (
    graduation_progress_bps,
    market_cap_lamports,
    quote_buy,
    quote_sell,
    sol_in_for_tokens,
    spot_price_e9,
)
from ..core.curve.state import CurveParams, new_curve
from ..core.curve.types import (
    Action,
    CurveState,
    Direction,
    FeeConfig,
    GraduationRecord,
    Quote,
    StepResult,
    TradeParams,
    TradeRecord,
)
from ..state.balances import NATIVE_ASSET, curve_custody, is_custody, token_asset
from ..state.ledger import InMemoryLedger
from ..state.stats import (
    PlatformStats,
    TraderStats,
    apply_trade_to_platform,
    apply_trade_to_trader,
    count_curve_created,
    count_graduation,
    count_token_created,
)
from .collaborators import (
    AssetTransfer,
    AuthorizationError,
    Authorizer,
    Clock,
    EventSink,
    LedgerAssetTransfer,
    MemoryEventSink,
    MigrationVenue,
    Record,
    RecordingMigrationVenue,
    Role,
    StaticAuthorizer,
    SystemClock,
    Transfer,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketView:
    """Read-only pricing summary of one curve."""

    curve_id: str
    spot_price_e9: int
    market_cap_lamports: int
    graduation_progress_bps: int
    completion_state: str


def trade_transfers(record: TradeRecord, fee_recipient: str) -> list[Transfer]:
    """Asset movements implied by one executed trade."""
    custody = curve_custody(record.curve_id)
    token = token_asset(record.curve_id)
    if record.direction is Direction.BUY:
        transfers = [
            Transfer(NATIVE_ASSET, record.trader, custody, record.net_sol),
            Transfer(token, custody, record.trader, record.amount_out),
        ]
        if record.fee_amount:
            transfers.append(Transfer(NATIVE_ASSET, record.trader, fee_recipient, record.fee_amount))
        return transfers
    transfers = [
        Transfer(token, record.trader, custody, record.amount_in),
        Transfer(NATIVE_ASSET, custody, record.trader, record.net_sol),
    ]
    if record.fee_amount:
        transfers.append(Transfer(NATIVE_ASSET, custody, fee_recipient, record.fee_amount))
    return transfers


@dataclass
class Launchpad:
    ledger: InMemoryLedger = field(default_factory=InMemoryLedger)
    fee_recipient: str = "fee-recipient"
    curve_params: CurveParams = CurveParams()
    authorizer: Authorizer = field(default_factory=StaticAuthorizer)
    transfers: Optional[AssetTransfer] = None
    sink: EventSink = field(default_factory=MemoryEventSink)
    clock: Clock = field(default_factory=SystemClock)
    migrator: MigrationVenue = field(default_factory=RecordingMigrationVenue)

    def __post_init__(self) -> None:
        if self.transfers is None:
            self.transfers = LedgerAssetTransfer(self.ledger)

    @classmethod
    def from_config(cls, config: LaunchpadConfig, **collaborators: Any) -> "Launchpad":
        """Build a launchpad from a loaded `LaunchpadConfig`; keyword args override collaborators."""
        collaborators.setdefault("authorizer", StaticAuthorizer(admins=config.admins))
        return cls(
            ledger=InMemoryLedger(fee_config=config.fee_config),
            fee_recipient=config.fee_recipient,
            curve_params=config.curve_params,
            **collaborators,
        )

    # -- administration ------------------------------------------------------

    @property
    def fee_config(self) -> FeeConfig:
        return self.ledger.fee_config

    def update_fee_config(
        self,
        admin: str,
        *,
        fee_basis_points: Optional[int] = None,
        paused: Optional[bool] = None,
    ) -> FeeConfig:
        """Replace the platform fee/pause snapshot; fee > 1000 bps raises `ConfigError`."""
        self.authorizer.authorize(admin, Role.ADMIN)
        with self.ledger.atomic():
            updated = self.ledger.fee_config.updated(fee_basis_points=fee_basis_points, paused=paused)
            self.ledger.fee_config = updated
        logger.info(
            "fee config updated by %s: fee_bps=%d paused=%s",
            admin, updated.fee_basis_points, updated.paused,
        )
        return updated

    # -- curve lifecycle -----------------------------------------------------

    def create_curve(self, creator: str, curve_id: str) -> CurveState:
        """Launch a curve and mint its real token reserve into curve custody."""
        self.authorizer.authorize(creator, Role.CREATOR)
        if not curve_id:
            raise ValueError("curve_id must be non-empty")
        now = self.clock.now()
        with self.ledger.atomic():
            if self.ledger.fee_config.paused:
                raise fail(ErrorCode.TRADING_PAUSED, "platform is paused")
            state = new_curve(curve_id, creator, self.curve_params, now)
            self.ledger.insert_curve(state)
            self._transfers().execute(
                [Transfer(token_asset(curve_id), None, curve_custody(curve_id), state.real_token_reserves)]
            )
            self.ledger.platform_stats = count_curve_created(self.ledger.platform_stats)
            self.ledger.put_trader_stats(count_token_created(self.ledger.get_trader_stats(creator)))
        logger.info("curve %s created by %s (real_token_reserves=%d)", curve_id, creator, state.real_token_reserves)
        return state

    def buy(self, trader: str, curve_id: str, sol_in: int, min_tokens_out: int = 0) -> TradeRecord:
        self._authorize_trader(trader)
        params = TradeParams(
            action=Action.BUY,
            trader=trader,
            amount=sol_in,
            min_out=min_tokens_out,
            now=self.clock.now(),
        )
        return self._trade(curve_id, params)

    def sell(self, trader: str, curve_id: str, tokens_in: int, min_sol_out: int = 0) -> TradeRecord:
        self._authorize_trader(trader)
        params = TradeParams(
            action=Action.SELL,
            trader=trader,
            amount=tokens_in,
            min_out=min_sol_out,
            now=self.clock.now(),
        )
        return self._trade(curve_id, params)

    def graduate(self, admin: str, curve_id: str) -> GraduationRecord:
        """Manually move an `Active` curve that already meets its threshold to `Graduating`."""
        self.authorizer.authorize(admin, Role.ADMIN)
        params = TradeParams(action=Action.GRADUATE, trader=admin, now=self.clock.now())
        with self.ledger.atomic():
            result = self._step(self.ledger.get_curve(curve_id), params)
            self.ledger.put_curve(result.state)
            self.ledger.platform_stats = count_graduation(self.ledger.platform_stats)
        self._publish(result.events)
        return result.events[0]

    def migrate(self, admin: str, curve_id: str) -> GraduationRecord:
        """Hand a `Graduating` curve's final reserves to the liquidity venue, exactly once."""
        self.authorizer.authorize(admin, Role.ADMIN)
        params = TradeParams(action=Action.MIGRATE, trader=admin, now=self.clock.now())
        with self.ledger.atomic():
            pre = self.ledger.get_curve(curve_id)
            result = self._step(pre, params)
            self.migrator.migrate(curve_id, snapshot(pre))
            self.ledger.put_curve(result.state)
        logger.info("curve %s migrated", curve_id)
        self._publish(result.events)
        return result.events[0]

    # -- read-only views -----------------------------------------------------

    def curve(self, curve_id: str) -> CurveState:
        return self.ledger.get_curve(curve_id)

    def quote_buy(self, curve_id: str, sol_in: int) -> Quote:
        return quote_buy(self.ledger.get_curve(curve_id), self.ledger.fee_config, sol_in)

    def quote_sell(self, curve_id: str, tokens_in: int) -> Quote:
        return quote_sell(self.ledger.get_curve(curve_id), self.ledger.fee_config, tokens_in)

    def quote_sol_for_tokens(self, curve_id: str, tokens_out: int) -> int:
        return sol_in_for_tokens(self.ledger.get_curve(curve_id), self.ledger.fee_config, tokens_out)

    def market(self, curve_id: str) -> MarketView:
        state = self.ledger.get_curve(curve_id)
        return MarketView(
            curve_id=curve_id,
            spot_price_e9=spot_price_e9(state.virtual_sol_reserves, state.virtual_token_reserves),
            market_cap_lamports=market_cap_lamports(state),
            graduation_progress_bps=graduation_progress_bps(state),
            completion_state=state.completion_state.value,
        )

    def trader_stats(self, trader: str) -> TraderStats:
        return self.ledger.get_trader_stats(trader)

    @property
    def platform_stats(self) -> PlatformStats:
        return self.ledger.platform_stats

    def balance(self, identity: str, asset: str = NATIVE_ASSET) -> int:
        return self._transfers().balance_of(identity, asset)

    # -- internals -----------------------------------------------------------

    def _authorize_trader(self, trader: str) -> None:
        # Custody and fee accounts only move funds as a side of a trade.
        if is_custody(trader) or trader == self.fee_recipient:
            raise AuthorizationError(f"{trader} cannot trade")
        self.authorizer.authorize(trader, Role.TRADER)

    def _transfers(self) -> AssetTransfer:
        assert self.transfers is not None
        return self.transfers

    def _step(self, state: CurveState, params: TradeParams) -> StepResult:
        try:
            return engine.step_or_raise(state, self.ledger.fee_config, params)
        except CurveError as exc:
            logger.info(
                "%s on curve %s rejected: %s", params.action.value, state.curve_id, exc,
            )
            raise

    def _trade(self, curve_id: str, params: TradeParams) -> TradeRecord:
        with self.ledger.atomic():
            state = self.ledger.get_curve(curve_id)
            if params.action is Action.SELL:
                held = self._transfers().balance_of(params.trader, token_asset(curve_id))
                params = replace(params, trader_token_balance=held)
            result = self._step(state, params)
            record = result.record
            assert record is not None and result.state is not None
            self._transfers().execute(trade_transfers(record, self.fee_recipient))
            self.ledger.put_trader_stats(
                apply_trade_to_trader(self.ledger.get_trader_stats(params.trader), record)
            )
            platform = apply_trade_to_platform(self.ledger.platform_stats, record)
            if result.events:
                platform = count_graduation(platform)
            self.ledger.platform_stats = platform
            self.ledger.put_curve(result.state)

        logger.info(
            "%s %s on %s: in=%d out=%d fee=%d real_sol=%d",
            params.trader, record.direction.value, curve_id,
            record.amount_in, record.amount_out, record.fee_amount,
            record.reserves.real_sol_reserves,
        )
        for event in result.events:
            logger.info("curve %s graduated at real_sol=%d", curve_id, event.reserves.real_sol_reserves)
        self._publish([record, *result.events])
        return record

    def _publish(self, records: Iterable[Record]) -> None:
        # The trade is already committed; a sink failure is reported, not rolled back.
        for record in records:
            try:
                self.sink.publish(record)
            except Exception:
                logger.exception("event sink failed for %s", type(record).__name__)
