"""
Capability interfaces the launchpad shell consumes, plus in-memory defaults.

The pure engine never calls these; `Launchpad` does, inside the ledger's
atomic unit. Errors raised here propagate unchanged to the caller.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum, unique
from typing import FrozenSet, List, Protocol, Sequence, Union

from ..core.curve.types import GraduationRecord, ReserveSnapshot, TradeRecord
from ..state.balances import AssetId, Identity
from ..state.ledger import InMemoryLedger


class AuthorizationError(PermissionError):
    """The caller does not control the identity/role it claims."""


class TransferError(RuntimeError):
    """An asset movement could not be performed; nothing was moved."""


class MigrationError(RuntimeError):
    """The liquidity venue refused the graduating curve."""


@unique
class Role(Enum):
    TRADER = "trader"
    CREATOR = "creator"
    ADMIN = "admin"


@dataclass(frozen=True)
class Transfer:
    """One asset movement. `source=None` mints into `destination`."""

    asset: AssetId
    source: Identity | None
    destination: Identity
    amount: int


Record = Union[TradeRecord, GraduationRecord]


class Authorizer(Protocol):
    def authorize(self, identity: Identity, role: Role) -> None: ...


class AssetTransfer(Protocol):
    def balance_of(self, identity: Identity, asset: AssetId) -> int: ...

    def execute(self, transfers: Sequence[Transfer]) -> None: ...


class EventSink(Protocol):
    def publish(self, record: Record) -> None: ...


class Clock(Protocol):
    def now(self) -> int: ...


class MigrationVenue(Protocol):
    def migrate(self, curve_id: str, reserves: ReserveSnapshot) -> None: ...


# ---------------------------------------------------------------------------
# In-memory implementations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class StaticAuthorizer:
    """Admins come from configuration; every other role is open unless blocked."""

    admins: FrozenSet[Identity] = frozenset()
    blocked: FrozenSet[Identity] = frozenset()

    def authorize(self, identity: Identity, role: Role) -> None:
        if not identity:
            raise AuthorizationError("empty identity")
        if identity in self.blocked:
            raise AuthorizationError(f"{identity} is blocked")
        if role is Role.ADMIN and identity not in self.admins:
            raise AuthorizationError(f"{identity} is not an administrator")


@dataclass(frozen=True)
class LedgerAssetTransfer:
    """Moves balances inside an `InMemoryLedger`; a batch applies fully or not at all."""

    ledger: InMemoryLedger

    def balance_of(self, identity: Identity, asset: AssetId) -> int:
        return self.ledger.balances.get(identity, asset)

    def execute(self, transfers: Sequence[Transfer]) -> None:
        staged = self.ledger.balances.copy()
        try:
            for t in transfers:
                if t.source is None:
                    staged.add(t.destination, t.asset, t.amount)
                else:
                    staged.move(t.asset, t.source, t.destination, t.amount)
        except ValueError as exc:
            raise TransferError(str(exc)) from exc
        self.ledger.balances = staged


@dataclass
class MemoryEventSink:
    """Append-only record list."""

    records: List[Record] = field(default_factory=list)

    def publish(self, record: Record) -> None:
        self.records.append(record)


class SystemClock:
    def now(self) -> int:
        return int(time.time())


@dataclass
class FixedClock:
    """Manually advanced clock."""

    current: int = 0

    def now(self) -> int:
        return self.current

    def advance(self, seconds: int) -> int:
        self.current += seconds
        return self.current


@dataclass
class RecordingMigrationVenue:
    """Stores each migrated snapshot; refuses a second migration of the same curve."""

    migrated: dict[str, ReserveSnapshot] = field(default_factory=dict)

    def migrate(self, curve_id: str, reserves: ReserveSnapshot) -> None:
        if curve_id in self.migrated:
            raise MigrationError(f"curve {curve_id} already migrated")
        self.migrated[curve_id] = reserves
