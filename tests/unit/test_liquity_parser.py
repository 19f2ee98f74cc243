"""Unit tests for the Liquity trove computation: pure logic, no I/O."""
from __future__ import annotations

from decimal import Decimal

from cdp_spells.fixed_point import to_fixed
from cdp_spells.protocols.liquity.parser import (
    TROVE_ACTIVE,
    compute_trove,
    compute_trove_type,
)

WAD = 10**18
OWNER = "0xOWNER"


class TestComputeTroveType:
    def test_prices_and_fee(self) -> None:
        trove_type = compute_trove_type(2000 * WAD, 5 * 10**15, 100_000_000 * WAD)
        assert trove_type.type_name == "ETH"
        assert trove_type.price == Decimal(2000)
        assert trove_type.spot_price == trove_type.price
        assert trove_type.borrow_fee == Decimal("0.005")
        assert trove_type.total_debt == Decimal(100_000_000)
        assert to_fixed(trove_type.liquidation_ratio, 18) == "0.909090909090909091"

    def test_no_ceiling(self) -> None:
        trove_type = compute_trove_type(2000 * WAD, 0, 0)
        assert not trove_type.debt_ceiling_reached

    def test_custom_token_key(self) -> None:
        assert compute_trove_type(WAD, 0, 0, token_key="weth").token_key == "weth"


class TestComputeTrove:
    def test_active_trove(self) -> None:
        trove_type = compute_trove_type(2000 * WAD, 0, 0)
        trove = compute_trove(
            OWNER, (5000 * WAD, 10 * WAD, 10 * WAD, TROVE_ACTIVE, 3), trove_type
        )
        assert trove is not None
        assert trove.id == OWNER
        assert trove.collateral == Decimal(10)
        assert trove.debt == Decimal(5000)
        assert to_fixed(trove.status) == "0.25"
        assert to_fixed(trove.liquidation_price) == "550"
        assert to_fixed(trove.net_value) == "15000"

    def test_closed_trove_is_none(self) -> None:
        trove_type = compute_trove_type(2000 * WAD, 0, 0)
        assert compute_trove(OWNER, (0, 0, 0, 2, 0), trove_type) is None

    def test_nonexistent_trove_is_none(self) -> None:
        trove_type = compute_trove_type(2000 * WAD, 0, 0)
        assert compute_trove(OWNER, (0, 0, 0, 0, 0), trove_type) is None
