"""Pure computation of Reflexer safe metrics from raw resolver data: no I/O.

Raw values come straight from the chain at fixed integer scales:
amounts are WAD (1e18), rates, prices and ratios are RAY (1e27), and the
redemption price is a RAY read from the oracle relayer's storage.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Sequence

from ...config import DEFAULT_PERIODS_PER_YEAR, CollateralTypeConfig
from ...fixed_point import CONTEXT, ONE, div, minus, power, times, to_decimal
from ...models import Position, PositionType
from ...risk import compute_liquidation_price, compute_net_value, compute_status

logger = logging.getLogger(__name__)

WAD = 10**18
RAY = 10**27
RAY_SQUARED = 10**54

# Applied to reported aggregate debt before comparing against the ceiling.
DEBT_BUFFER = Decimal("1.00002")

RATE_PLACES = Decimal("1e-18")


@dataclass(frozen=True)
class ReflexerSnapshot:
    """Raw resolver output for one refresh."""

    type_names: tuple[str, ...]
    types_raw: tuple[tuple[int, ...], ...]
    positions_raw: tuple[tuple[Any, ...], ...]
    redemption_price: int


def compute_rate(
    rate_per_period: int | str | Decimal,
    periods_per_year: int = DEFAULT_PERIODS_PER_YEAR,
) -> Decimal:
    """Annualise a per-period RAY rate.

    rate = (rate_per_period / 1e27) ** periods_per_year - 1, 18 decimals.
    """
    per_period = div(rate_per_period, RAY)
    compounded = minus(power(per_period, periods_per_year), ONE)
    return compounded.quantize(RATE_PLACES, context=CONTEXT)


def compute_spot_price(price_raw: int | str | Decimal) -> Decimal:
    return div(price_raw, RAY)


def compute_price(
    price_raw: int | str | Decimal, redemption_price: int | str | Decimal
) -> Decimal:
    """Market price: price_raw * redemption_price / 1e54."""
    return div(times(price_raw, redemption_price), RAY_SQUARED)


def compute_liquidation_ratio(ratio_raw: int | str | Decimal) -> Decimal:
    """Inverse of the collateral-to-debt ratio: 1 / (ratio_raw / 1e27)."""
    return div(ONE, div(ratio_raw, RAY))


def compute_types(
    raw_types: Sequence[Sequence[Any]],
    redemption_price: int,
    catalog: Sequence[CollateralTypeConfig],
    periods_per_year: int = DEFAULT_PERIODS_PER_YEAR,
) -> list[PositionType]:
    """Build PositionType records; ``raw_types[i]`` belongs to ``catalog[i]``.

    Each raw tuple is ``(rate_per_period, price, liquidation_ratio_raw,
    debt_ceiling, total_debt)``.
    """
    if len(raw_types) != len(catalog):
        logger.warning(
            "Resolver returned %d collateral types for %d configured",
            len(raw_types), len(catalog),
        )

    types: list[PositionType] = []
    for col, raw in zip(catalog, raw_types):
        rate_raw, price_raw, ratio_raw, debt_ceiling, total_debt = raw[:5]
        types.append(
            PositionType(
                type_name=col.type,
                token=col.token,
                token_key=col.key,
                rate=compute_rate(rate_raw, periods_per_year),
                spot_price=compute_spot_price(price_raw),
                price=compute_price(price_raw, redemption_price),
                liquidation_ratio=compute_liquidation_ratio(ratio_raw),
                debt_ceiling=to_decimal(debt_ceiling),
                total_debt=times(total_debt, DEBT_BUFFER),
                redemption_price=div(redemption_price, RAY),
                disabled=col.disabled,
                token_type=col.token_type,
            )
        )
    return types


def parse_position(
    raw: Sequence[Any],
    redemption_price: int,
    catalog: Sequence[CollateralTypeConfig],
    periods_per_year: int = DEFAULT_PERIODS_PER_YEAR,
) -> Position:
    """Build one Position from a resolver safe tuple.

    Tuple layout: ``(id, owner, type, collateral, _, debt, liquidated,
    rate_per_period, price, liquidation_ratio_raw, handler)``.
    """
    (
        safe_id,
        owner,
        type_name,
        collateral_raw,
        _,
        debt_raw,
        liquidated_raw,
        rate_raw,
        price_raw,
        ratio_raw,
        handler,
    ) = raw[:11]

    collateral = div(collateral_raw, WAD)
    debt = div(debt_raw, WAD)
    spot_price = compute_spot_price(price_raw)
    price = compute_price(price_raw, redemption_price)
    liquidation_ratio = compute_liquidation_ratio(ratio_raw)

    col = _find_collateral_type(catalog, type_name)
    if col is None:
        logger.warning("Unknown collateral type '%s' for safe %s", type_name, safe_id)

    return Position(
        id=str(safe_id),
        owner=str(owner),
        type_name=type_name,
        token=col.token if col else type_name,
        token_key=col.key if col else "",
        collateral=collateral,
        debt=debt,
        liquidated_collateral=div(liquidated_raw, WAD),
        rate=compute_rate(rate_raw, periods_per_year),
        price=price,
        spot_price=spot_price,
        liquidation_ratio=liquidation_ratio,
        net_value=compute_net_value(collateral, debt, price),
        status=compute_status(collateral, debt, spot_price),
        liquidation_price=compute_liquidation_price(
            collateral, debt, price, spot_price, liquidation_ratio
        ),
        handler=str(handler),
    )


def compute_positions(
    raw_positions: Sequence[Sequence[Any]],
    redemption_price: int,
    catalog: Sequence[CollateralTypeConfig],
    periods_per_year: int = DEFAULT_PERIODS_PER_YEAR,
) -> list[Position]:
    return [
        parse_position(raw, redemption_price, catalog, periods_per_year)
        for raw in raw_positions
    ]


def _find_collateral_type(
    catalog: Sequence[CollateralTypeConfig], type_name: str
) -> CollateralTypeConfig | None:
    for col in catalog:
        if col.type == type_name:
            return col
    return None
