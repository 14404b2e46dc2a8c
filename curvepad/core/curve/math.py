"""Checked integer arithmetic for the bonding-curve engine.

Every reserve quantity is an unsigned 64-bit value. Python ints never wrap,
so the width is enforced explicitly: operands and results are range-checked
against ``U64_MAX`` and products that may exceed it are formed in the
widened (``U128_MAX``) domain before narrowing back with a range check.

Rounding is floor (``//``) unless a function says otherwise. All operands
here are non-negative, so floor equals truncation toward zero.
"""

from __future__ import annotations

from .errors import DivisionByZero, MathOverflow, MathUnderflow

U64_MAX: int = (1 << 64) - 1
U128_MAX: int = (1 << 128) - 1
BPS_SCALE: int = 10_000


def _require_int(name: str, value: int) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeError(f"{name} must be an int")


def require_u64(name: str, value: int) -> int:
    """Return *value* unchanged if it is a valid u64, else fail."""
    _require_int(name, value)
    if value < 0:
        raise MathUnderflow(f"{name} is negative: {value}")
    if value > U64_MAX:
        raise MathOverflow(f"{name} exceeds u64: {value}")
    return value


def _narrow(name: str, value: int) -> int:
    if value > U64_MAX:
        raise MathOverflow(f"{name} does not fit in u64")
    return value


def checked_add(a: int, b: int) -> int:
    require_u64("a", a)
    require_u64("b", b)
    return _narrow("a + b", a + b)


def checked_sub(a: int, b: int) -> int:
    require_u64("a", a)
    require_u64("b", b)
    if b > a:
        raise MathUnderflow(f"{a} - {b} is negative")
    return a - b


def checked_mul(a: int, b: int) -> int:
    require_u64("a", a)
    require_u64("b", b)
    return _narrow("a * b", a * b)


def checked_div(a: int, b: int) -> int:
    """Floor division of two u64 values."""
    require_u64("a", a)
    require_u64("b", b)
    if b == 0:
        raise DivisionByZero(f"{a} / 0")
    return a // b


def wide_mul(a: int, b: int) -> int:
    """``a * b`` in the u128 domain (cannot overflow for u64 operands)."""
    require_u64("a", a)
    require_u64("b", b)
    product = a * b
    if product > U128_MAX:  # pragma: no cover - unreachable for u64 inputs
        raise MathOverflow("a * b does not fit in u128")
    return product


def mul_div_floor(a: int, b: int, d: int) -> int:
    """``floor(a * b / d)`` with a u128 intermediate, narrowed to u64."""
    require_u64("d", d)
    if d == 0:
        raise DivisionByZero("mul_div denominator is zero")
    return _narrow("a * b / d", wide_mul(a, b) // d)


def mul_div_ceil(a: int, b: int, d: int) -> int:
    """``ceil(a * b / d)`` with a u128 intermediate, narrowed to u64."""
    require_u64("d", d)
    if d == 0:
        raise DivisionByZero("mul_div denominator is zero")
    return _narrow("ceil(a * b / d)", (wide_mul(a, b) + d - 1) // d)


def bps_of(amount: int, bps: int) -> int:
    """``floor(amount * bps / 10000)``."""
    return mul_div_floor(amount, bps, BPS_SCALE)
