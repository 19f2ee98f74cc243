"""Collateralization metrics shared by the position parsers and strategies."""
from __future__ import annotations

from decimal import Decimal

from .fixed_point import ZERO, div, is_zero, max_of, minus, times
from .models import MAX_RISK_STATUS


def compute_status(
    collateral: Decimal, debt: Decimal, spot_price: Decimal
) -> Decimal:
    """debt / (collateral * spot_price).

    No collateral: the maximal-risk sentinel when debt is outstanding,
    zero otherwise.
    """
    if is_zero(collateral):
        return MAX_RISK_STATUS if not is_zero(debt) else ZERO
    return div(debt, times(collateral, spot_price))


def compute_liquidation_price(
    collateral: Decimal,
    debt: Decimal,
    price: Decimal,
    spot_price: Decimal,
    liquidation_ratio: Decimal,
) -> Decimal:
    """Market price at which the position becomes liquidatable."""
    if is_zero(collateral):
        return times(price, MAX_RISK_STATUS) if not is_zero(debt) else ZERO
    liquidation_spot = div(div(debt, collateral), liquidation_ratio)
    if not is_zero(spot_price):
        liquidation_spot = div(times(liquidation_spot, price), spot_price)
    return max_of(liquidation_spot, ZERO)


def compute_net_value(
    collateral: Decimal, debt: Decimal, price: Decimal
) -> Decimal:
    return minus(times(collateral, price), debt)
