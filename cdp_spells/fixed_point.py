"""Fixed-point decimal arithmetic shared by every financial calculation.

All collateral, debt and price math goes through this module. Values are
``decimal.Decimal`` evaluated in a private context so the global decimal
context of the host process is never touched.

Examples:
    >>> to_fixed(div("1", "4"))
    '0.25'
    >>> to_wei("1.5", 18)
    1500000000000000000
"""
from __future__ import annotations

from decimal import (
    ROUND_FLOOR,
    ROUND_HALF_UP,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    Overflow,
)
from typing import Union

# Enough digits for rate ** 31_545_000 to stay exact at 18 fractional places.
PRECISION = 200

CONTEXT = Context(
    prec=PRECISION,
    rounding=ROUND_HALF_UP,
    traps=[DivisionByZero, Overflow, InvalidOperation],
)

ZERO = Decimal(0)
ONE = Decimal(1)

Numeric = Union[Decimal, int, str]


def to_decimal(value: Numeric) -> Decimal:
    """Convert ``value`` to a finite Decimal without losing precision.

    Floats are refused: they already carry binary rounding error.
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or isinstance(value, float):
        raise TypeError(f"Cannot convert {type(value).__name__} exactly: {value!r}")
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        result = CONTEXT.create_decimal(value.strip())
    else:
        raise TypeError(f"Unsupported numeric type: {type(value).__name__}")

    if not result.is_finite():
        raise InvalidOperation(f"Non-finite value: {value!r}")
    return result


def ensure_value(value: Numeric | None) -> Decimal:
    """Lenient conversion for user-typed amounts: blank or junk becomes zero."""
    if value is None or value == "":
        return ZERO
    try:
        return to_decimal(value)
    except (ArithmeticError, TypeError):
        return ZERO


def plus(a: Numeric, b: Numeric) -> Decimal:
    return CONTEXT.add(to_decimal(a), to_decimal(b))


def minus(a: Numeric, b: Numeric) -> Decimal:
    return CONTEXT.subtract(to_decimal(a), to_decimal(b))


def times(a: Numeric, b: Numeric) -> Decimal:
    return CONTEXT.multiply(to_decimal(a), to_decimal(b))


def div(a: Numeric, b: Numeric) -> Decimal:
    """Divide ``a`` by ``b``; a zero divisor raises ``DivisionByZero``."""
    return CONTEXT.divide(to_decimal(a), to_decimal(b))


def power(base: Numeric, exponent: int) -> Decimal:
    """Raise ``base`` to an integer ``exponent``.

    Overflow raises ``decimal.Overflow`` (an ``ArithmeticError``).
    """
    if isinstance(exponent, bool) or not isinstance(exponent, int):
        raise TypeError(f"Exponent must be an int, got {exponent!r}")
    return CONTEXT.power(to_decimal(base), exponent)


def max_of(*values: Numeric) -> Decimal:
    return max(to_decimal(v) for v in values)


def min_of(*values: Numeric) -> Decimal:
    return min(to_decimal(v) for v in values)


def is_zero(value: Numeric) -> bool:
    return to_decimal(value).is_zero()


def gt(a: Numeric, b: Numeric) -> bool:
    return to_decimal(a) > to_decimal(b)


def lt(a: Numeric, b: Numeric) -> bool:
    return to_decimal(a) < to_decimal(b)


def to_fixed(value: Numeric, places: int | None = None) -> str:
    """Render ``value`` in plain notation.

    Without ``places`` trailing zeros are stripped; with ``places`` the value
    is rounded half-up to exactly that many fractional digits.
    """
    d = to_decimal(value)
    if places is None:
        d = d.normalize(CONTEXT)
    else:
        d = d.quantize(Decimal(1).scaleb(-places), context=CONTEXT)
    if d.is_zero():
        d = d.copy_abs()
    return format(d, "f")


def to_wei(amount: Numeric, decimals: int) -> int:
    """Scale a display amount to integer units, truncating toward negative infinity."""
    scaled = CONTEXT.scaleb(to_decimal(amount), decimals)
    return int(scaled.to_integral_value(rounding=ROUND_FLOOR))


def from_wei(raw: Numeric, decimals: int) -> Decimal:
    return div(raw, 10**decimals)
