"""Exception types for the bonding-curve engine.

Every failure carries an ``ErrorCode`` so callers can tell which check
failed. ``engine.step()`` reports the code as its rejection string;
``engine.step_or_raise()`` re-raises the typed exception.
"""

from __future__ import annotations

from enum import Enum, unique


@unique
class ErrorCode(Enum):
    # input validation
    INVALID_AMOUNT = "InvalidAmount"
    BELOW_MINIMUM_BUY = "BelowMinimumBuy"
    ABOVE_MAXIMUM_BUY = "AboveMaximumBuy"
    SLIPPAGE_EXCEEDED = "SlippageExceeded"
    INSUFFICIENT_TOKEN_BALANCE = "InsufficientTokenBalance"
    # arithmetic
    MATH_OVERFLOW = "MathOverflow"
    MATH_UNDERFLOW = "MathUnderflow"
    DIVISION_BY_ZERO = "DivisionByZero"
    # state
    TRADING_PAUSED = "TradingPaused"
    TOKEN_ALREADY_GRADUATED = "TokenAlreadyGraduated"
    NOT_GRADUATING = "NotGraduating"
    GRADUATION_THRESHOLD_NOT_MET = "GraduationThresholdNotMet"
    # capacity
    INSUFFICIENT_RESERVES = "InsufficientReserves"
    INSUFFICIENT_CURVE_BALANCE = "InsufficientCurveBalance"
    # configuration
    FEE_TOO_HIGH = "FeeTooHigh"
    INVALID_CURVE_PARAMETERS = "InvalidCurveParameters"
    # post-state
    INVARIANT_VIOLATION = "InvariantViolation"


class CurveError(Exception):
    """Base class for every engine failure."""

    def __init__(self, code: ErrorCode, message: str = "") -> None:
        self.code = code
        self.message = message
        super().__init__(f"{code.value}: {message}" if message else code.value)


class ValidationError(CurveError):
    """Caller-supplied amount or bound is unacceptable; retry with new parameters."""


class MathError(CurveError):
    """Checked arithmetic failed."""


class MathOverflow(MathError):
    def __init__(self, message: str = "") -> None:
        super().__init__(ErrorCode.MATH_OVERFLOW, message)


class MathUnderflow(MathError):
    def __init__(self, message: str = "") -> None:
        super().__init__(ErrorCode.MATH_UNDERFLOW, message)


class DivisionByZero(MathError):
    def __init__(self, message: str = "") -> None:
        super().__init__(ErrorCode.DIVISION_BY_ZERO, message)


class StateError(CurveError):
    """The curve or platform is not in a state that permits the action."""


class CapacityError(CurveError):
    """The curve cannot cover the requested output from its real reserves."""


class ConfigError(CurveError):
    """Rejected at configuration time (fee rate, curve parameters)."""


class InvariantViolation(CurveError):
    """Raised when a post-state violates one or more invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(ErrorCode.INVARIANT_VIOLATION, ", ".join(violations))


_CLASS_BY_CODE: dict[ErrorCode, type[CurveError]] = {
    ErrorCode.INVALID_AMOUNT: ValidationError,
    ErrorCode.BELOW_MINIMUM_BUY: ValidationError,
    ErrorCode.ABOVE_MAXIMUM_BUY: ValidationError,
    ErrorCode.SLIPPAGE_EXCEEDED: ValidationError,
    ErrorCode.INSUFFICIENT_TOKEN_BALANCE: ValidationError,
    ErrorCode.TRADING_PAUSED: StateError,
    ErrorCode.TOKEN_ALREADY_GRADUATED: StateError,
    ErrorCode.NOT_GRADUATING: StateError,
    ErrorCode.GRADUATION_THRESHOLD_NOT_MET: StateError,
    ErrorCode.INSUFFICIENT_RESERVES: CapacityError,
    ErrorCode.INSUFFICIENT_CURVE_BALANCE: CapacityError,
    ErrorCode.FEE_TOO_HIGH: ConfigError,
    ErrorCode.INVALID_CURVE_PARAMETERS: ConfigError,
}


def fail(code: ErrorCode, message: str = "") -> CurveError:
    """Build the exception matching *code* (``raise fail(...)``)."""
    if code is ErrorCode.MATH_OVERFLOW:
        return MathOverflow(message)
    if code is ErrorCode.MATH_UNDERFLOW:
        return MathUnderflow(message)
    if code is ErrorCode.DIVISION_BY_ZERO:
        return DivisionByZero(message)
    if code is ErrorCode.INVARIANT_VIOLATION:
        return InvariantViolation(message.split(",") if message else [])
    return _CLASS_BY_CODE[code](code, message)
