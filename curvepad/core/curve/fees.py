"""
Basis-point fee extraction (deterministic, integer-only).

The fee is always taken from a gross SOL amount and rounds down, so
`fee + net == gross` holds exactly and any rounding residue stays with
the curve side of the trade.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import ErrorCode, fail
from .math import BPS_SCALE, bps_of, checked_sub, mul_div_ceil, require_u64
from .types import MAX_FEE_BASIS_POINTS


def validate_fee_bps(fee_bps: int) -> int:
    if not isinstance(fee_bps, int) or isinstance(fee_bps, bool):
        raise TypeError("fee_bps must be an int")
    if not (0 <= fee_bps <= MAX_FEE_BASIS_POINTS):
        raise fail(ErrorCode.FEE_TOO_HIGH, f"fee_bps must be in [0, {MAX_FEE_BASIS_POINTS}]: {fee_bps}")
    return fee_bps


@dataclass(frozen=True)
class FeeSplit:
    gross: int
    fee: int
    net: int

    def __post_init__(self) -> None:
        for name, v in (("gross", self.gross), ("fee", self.fee), ("net", self.net)):
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be an int")
            if v < 0:
                raise ValueError(f"{name} must be non-negative: {v}")
        if self.fee + self.net != self.gross:
            raise AssertionError("fee split does not conserve the gross amount")


def compute_fee(gross: int, fee_bps: int) -> int:
    """`fee = floor(gross * fee_bps / 10_000)`."""
    require_u64("gross", gross)
    validate_fee_bps(fee_bps)
    return bps_of(gross, fee_bps)


def split_fee(gross: int, fee_bps: int) -> FeeSplit:
    fee = compute_fee(gross, fee_bps)
    return FeeSplit(gross=gross, fee=fee, net=checked_sub(gross, fee))


def gross_for_net(net: int, fee_bps: int) -> int:
    """
    Gross amount whose post-fee net is at least `net`.

    `gross = ceil(net * 10_000 / (10_000 - fee_bps))`; with floor fees,
    `gross - floor(gross * fee_bps / 10_000) >= net` then holds.
    """
    require_u64("net", net)
    validate_fee_bps(fee_bps)
    return mul_div_ceil(net, BPS_SCALE, BPS_SCALE - fee_bps)
