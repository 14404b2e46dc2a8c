"""
Launchpad shell: authorization, custody transfers, event publication.
"""

from .collaborators import (
    AuthorizationError,
    FixedClock,
    LedgerAssetTransfer,
    MemoryEventSink,
    MigrationError,
    RecordingMigrationVenue,
    Role,
    StaticAuthorizer,
    SystemClock,
    Transfer,
    TransferError,
)
from .launchpad import Launchpad, MarketView, trade_transfers

__all__ = [
    "AuthorizationError",
    "FixedClock",
    "LedgerAssetTransfer",
    "MemoryEventSink",
    "MigrationError",
    "RecordingMigrationVenue",
    "Role",
    "StaticAuthorizer",
    "SystemClock",
    "Transfer",
    "TransferError",
    "Launchpad",
    "MarketView",
    "trade_transfers",
]
