"""Field capabilities and checks shared by the CDP strategies."""
from __future__ import annotations

from dataclasses import replace
from decimal import Decimal

from ..fixed_point import (
    CONTEXT,
    ZERO,
    Numeric,
    gt,
    is_zero,
    lt,
    plus,
    times,
    to_decimal,
    to_fixed,
    to_wei,
)
from ..models import Position, PositionType, ProtocolLimits
from ..risk import compute_liquidation_price, compute_status
from .fields import FieldScope, FieldValue, Updater, Validator


def amount_validator(label: str, check_balance: bool = False) -> Validator:
    """Require a token and a non-negative amount, optionally within balance."""

    def validate(field: FieldValue, scope: FieldScope) -> str | None:
        if field.token is None:
            return f"{label} token is required"
        if not field.value.strip():
            return f"{label} amount is required"
        try:
            amount = to_decimal(field.value)
        except (ArithmeticError, TypeError):
            return f"{label} amount must be a number"
        if lt(amount, ZERO):
            return f"{label} amount cannot be negative"
        if check_balance:
            balance = scope.context.balances.get(field.token.key)
            if balance is not None and lt(balance, amount):
                return (
                    f"Your amount exceeds your maximum limit of "
                    f"{to_fixed(balance, 2)} {field.token.symbol}"
                )
        return None

    return validate


def projected_status(collateral_index: int = 0, debt_index: int = 1) -> Updater:
    def update(field: FieldValue, scope: FieldScope) -> FieldValue:
        collateral = scope.amount(collateral_index)
        debt = scope.amount(debt_index)
        if is_zero(collateral) and is_zero(debt):
            return field
        position = scope.position
        status = compute_status(collateral, debt, position.spot_price)
        return replace(
            field,
            value=to_fixed(status),
            status=status,
            liquidation=position.liquidation_ratio,
            display=f"{to_fixed(times(status, 100), 2)}%",
        )

    return update


def projected_liquidation_price(
    collateral_index: int = 0, debt_index: int = 1
) -> Updater:
    def update(field: FieldValue, scope: FieldScope) -> FieldValue:
        position = scope.position
        liquidation_price = compute_liquidation_price(
            scope.amount(collateral_index),
            scope.amount(debt_index),
            position.price,
            position.spot_price,
            position.liquidation_ratio,
        )
        return replace(
            field,
            value=to_fixed(liquidation_price),
            display=(
                f"{format_usd_max(liquidation_price, position.price)}"
                f" / {format_usd(position.price)}"
            ),
        )

    return update


def projected_debt(
    position: Position, new_debt: Numeric, borrow_fee: Numeric
) -> Decimal:
    """Position debt after borrowing ``new_debt`` and paying the fee on it."""
    amount = to_decimal(new_debt)
    return plus(position.debt, plus(amount, times(amount, borrow_fee)))


def check_min_debt(
    position: Position,
    new_debt: Numeric,
    borrow_fee: Numeric,
    limits: ProtocolLimits,
    symbol: str,
    allow_zero: bool = False,
) -> str | None:
    if is_zero(limits.min_debt):
        return None
    total = plus(projected_debt(position, new_debt, borrow_fee), limits.liquidation_reserve)
    below = lt(total, limits.min_debt)
    if is_zero(total):
        below = not allow_zero
    if below:
        return (
            f"Minimum total debt requirement is "
            f"{to_fixed(limits.min_debt)} {symbol}"
        )
    return None


def check_debt_ceiling(
    position_type: PositionType, new_debt: Numeric, borrow_fee: Numeric = ZERO
) -> str | None:
    """Compare the type's raw total debt plus the new borrow with its ceiling."""
    if is_zero(position_type.debt_ceiling):
        return None
    amount = to_decimal(new_debt)
    borrowed = to_wei(plus(amount, times(amount, borrow_fee)), 18)
    if gt(plus(position_type.total_debt, borrowed), position_type.debt_ceiling):
        return f"Debt ceiling reached for {position_type.type_name}"
    return None


def format_usd(value: Numeric) -> str:
    amount = to_decimal(value).quantize(Decimal("0.01"), context=CONTEXT)
    sign = "-" if amount.is_signed() and not amount.is_zero() else ""
    return f"{sign}${format(amount.copy_abs(), ',f')}"


def format_usd_max(value: Numeric, maximum: Numeric) -> str:
    """``format_usd`` capped at ``maximum``, shown as "> $max" above it."""
    if gt(value, maximum):
        return f"> {format_usd(maximum)}"
    return format_usd(value)
