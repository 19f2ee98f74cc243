"""Pure computation of Liquity trove metrics: no I/O.

Liquity reports every amount, the ETH price and the borrowing rate at WAD
(1e18) scale. There is a single collateral class (ETH) and no redemption
price adjustment, so spot price and market price coincide.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ...fixed_point import ONE, ZERO, div
from ...models import Position, PositionType
from ...risk import compute_liquidation_price, compute_net_value, compute_status

WAD = 10**18

MINIMUM_COLLATERAL_RATIO = Decimal("1.1")

TROVE_ACTIVE = 1

TYPE_NAME = "ETH"


@dataclass(frozen=True)
class LiquitySnapshot:
    """Raw reads for one refresh. ``trove`` is ``(debt, coll, stake, status, index)``."""

    price: int
    borrow_rate: int
    system_debt: int
    trove: tuple[int, ...] | None = None


def compute_trove_type(
    price_raw: int, borrow_rate_raw: int, system_debt_raw: int, token_key: str = "eth"
) -> PositionType:
    price = div(price_raw, WAD)
    return PositionType(
        type_name=TYPE_NAME,
        token=TYPE_NAME,
        token_key=token_key,
        rate=ZERO,
        spot_price=price,
        price=price,
        liquidation_ratio=div(ONE, MINIMUM_COLLATERAL_RATIO),
        debt_ceiling=ZERO,
        total_debt=div(system_debt_raw, WAD),
        borrow_fee=div(borrow_rate_raw, WAD),
    )


def compute_trove(
    owner: str, trove_raw: tuple[int, ...], position_type: PositionType
) -> Position | None:
    """Build the owner's Position; ``None`` when the trove is not active."""
    debt_raw, coll_raw, _stake, status, _index = trove_raw[:5]
    if int(status) != TROVE_ACTIVE:
        return None

    collateral = div(coll_raw, WAD)
    debt = div(debt_raw, WAD)
    price = position_type.price
    return Position(
        id=owner,
        owner=owner,
        type_name=position_type.type_name,
        token=position_type.token,
        token_key=position_type.token_key,
        collateral=collateral,
        debt=debt,
        liquidated_collateral=ZERO,
        rate=ZERO,
        price=price,
        spot_price=price,
        liquidation_ratio=position_type.liquidation_ratio,
        net_value=compute_net_value(collateral, debt, price),
        status=compute_status(collateral, debt, price),
        liquidation_price=compute_liquidation_price(
            collateral, debt, price, price, position_type.liquidation_ratio
        ),
    )
