"""
Multi-asset custody balances with deterministic ordering.

Implements BalanceTable[Identity, AssetId] -> Amount, where the native
currency is `NATIVE_ASSET` and each launched token is keyed by
`token_asset(curve_id)`. Curve custody accounts are ordinary identities (see
`curve_custody()`), so the same table holds trader, curve and
fee-recipient balances. Token and custody keys carry a prefix, so no curve
id can collide with the native asset or a plain trader name.
"""

from __future__ import annotations

from typing import Dict, Tuple

from ..core.curve.math import U64_MAX


# Type aliases
Identity = str
AssetId = str
Amount = int  # Non-negative u64

# Native currency identifier (lamports)
NATIVE_ASSET = "SOL"

CUSTODY_PREFIX = "curve:"
TOKEN_PREFIX = "token:"


def curve_custody(curve_id: str) -> Identity:
    """Identity of the account holding a curve's real SOL and tokens."""
    return CUSTODY_PREFIX + curve_id


def token_asset(curve_id: str) -> AssetId:
    """Asset id of the token launched on `curve_id`."""
    return TOKEN_PREFIX + curve_id


def is_custody(identity: Identity) -> bool:
    return identity.startswith(CUSTODY_PREFIX)


class BalanceTable:
    """
    Balance table mapping (identity, asset) -> amount.

    Balances are stored in a plain dict. Do not rely on dict iteration order;
    `sorted_items()` gives the deterministic view used for snapshots.
    """

    def __init__(self) -> None:
        self._balances: Dict[Tuple[Identity, AssetId], Amount] = {}

    def get(self, identity: Identity, asset: AssetId) -> Amount:
        """Get balance for (identity, asset). Returns 0 if not found."""
        return self._balances.get((identity, asset), 0)

    def set(self, identity: Identity, asset: AssetId, amount: Amount) -> None:
        """
        Set balance for (identity, asset).

        Raises:
            ValueError: If amount is negative or exceeds u64
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount > U64_MAX:
            raise ValueError(f"Balance exceeds u64: {amount}")
        if amount == 0:
            # Remove zero balances to keep table sparse
            self._balances.pop((identity, asset), None)
        else:
            self._balances[(identity, asset)] = amount

    def add(self, identity: Identity, asset: AssetId, delta: Amount) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            ValueError: If resulting balance would be negative or exceed u64
        """
        current = self.get(identity, asset)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(identity, asset, new_balance)

    def subtract(self, identity: Identity, asset: AssetId, delta: Amount) -> None:
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(identity, asset, -delta)

    def move(self, asset: AssetId, source: Identity, destination: Identity, amount: Amount) -> None:
        """Debit `source` and credit `destination` by `amount`."""
        if amount < 0:
            raise ValueError(f"Transfer amount must be non-negative: {amount}")
        self.subtract(source, asset, amount)
        self.add(destination, asset, amount)

    def total(self, asset: AssetId) -> Amount:
        return sum(amount for (_, a), amount in self._balances.items() if a == asset)

    def copy(self) -> "BalanceTable":
        clone = BalanceTable()
        clone._balances = dict(self._balances)
        return clone

    def sorted_items(self) -> list[tuple[Identity, AssetId, Amount]]:
        return [(i, a, amt) for (i, a), amt in sorted(self._balances.items())]

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"
