"""Integration tests for the position watcher and runtime wiring."""
from __future__ import annotations

import asyncio
from dataclasses import replace
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from cdp_spells.config import AppConfig, ProtocolConfig
from cdp_spells.models import Position, PositionBook, PositionType
from cdp_spells.protocols.liquity import LiquityAdapter
from cdp_spells.services.runtime import Runtime
from cdp_spells.services.watcher import PositionWatcher

OWNER = "0xOWNER"


def _position(position_type: PositionType, debt: str, collateral: str = "10") -> Position:
    collateral_d = Decimal(collateral)
    debt_d = Decimal(debt)
    return replace(
        Position.blank(position_type, OWNER),
        id="7",
        collateral=collateral_d,
        debt=debt_d,
        status=debt_d / (collateral_d * position_type.spot_price),
    )


def _service(book: PositionBook) -> MagicMock:
    service = MagicMock()
    service.refresh = AsyncMock(return_value=book)
    return service


class TestStatusLabel:
    def test_healthy(self, eth_type: PositionType) -> None:
        assert PositionWatcher.status_label(_position(eth_type, "5000")) == "Healthy"

    def test_warning(self, eth_type: PositionType) -> None:
        # status 0.65 against a 0.6667 threshold
        assert PositionWatcher.status_label(_position(eth_type, "13000")) == "WARNING"

    def test_liquidatable(self, eth_type: PositionType) -> None:
        assert PositionWatcher.status_label(_position(eth_type, "14000")) == "LIQUIDATABLE"

    def test_no_debt(self, eth_type: PositionType) -> None:
        assert PositionWatcher.status_label(_position(eth_type, "0")) == "No debt"


class TestCheck:
    @pytest.mark.asyncio
    async def test_reports_each_position(self, eth_type: PositionType, caplog) -> None:
        caplog.set_level("INFO")
        book = PositionBook(types=(eth_type,), positions=(_position(eth_type, "5000"),))
        watcher = PositionWatcher({"reflexer": _service(book)}, OWNER)

        entries = await watcher.check()

        assert [(e.protocol, e.position.id, e.label) for e in entries] == [
            ("reflexer", "7", "Healthy")
        ]
        assert "reflexer #7 (ETH-A)" in caplog.text
        assert "Status: 25.00%" in caplog.text

    @pytest.mark.asyncio
    async def test_unavailable_book_is_skipped(self, caplog) -> None:
        watcher = PositionWatcher(
            {"liquity": _service(PositionBook(available=False))}, OWNER
        )
        assert await watcher.check() == []
        assert "position data unavailable" in caplog.text

    @pytest.mark.asyncio
    async def test_loop_survives_errors(self, eth_type: PositionType) -> None:
        service = MagicMock()
        service.refresh = AsyncMock(side_effect=[RuntimeError("boom"), PositionBook()])
        watcher = PositionWatcher({"reflexer": service}, OWNER)

        sleeps: list[int] = []

        async def fake_sleep(seconds):
            sleeps.append(seconds)
            if len(sleeps) == 2:
                raise asyncio.CancelledError()

        with patch("cdp_spells.services.watcher.asyncio.sleep", side_effect=fake_sleep):
            with pytest.raises(asyncio.CancelledError):
                await watcher.run_continuous(30)

        assert sleeps == [60, 30]


class TestRuntime:
    def test_builds_services(self, sample_app_config: AppConfig) -> None:
        runtime = Runtime(sample_app_config)
        assert set(runtime.services) == {"reflexer", "liquity"}
        assert runtime.service("liquity").protocol_name == "liquity"

    def test_hint_lookup_only_for_liquity(self, sample_app_config: AppConfig) -> None:
        runtime = Runtime(sample_app_config)
        assert isinstance(runtime.hints("liquity"), LiquityAdapter)
        assert runtime.hints("reflexer") is None

    def test_session_uses_protocol_limits(self, sample_app_config: AppConfig) -> None:
        session = Runtime(sample_app_config).session("liquity-deposit-borrow")
        assert session.strategy.protocol == "liquity"

    def test_session_carries_wallet_balances(self, sample_app_config: AppConfig) -> None:
        runtime = Runtime(sample_app_config)
        session = runtime.session("reflexer-deposit-borrow", {"eth": Decimal("1.5")})
        assert session.balances == {"eth": Decimal("1.5")}
        assert runtime.session("reflexer-deposit-borrow").balances == {}

    def test_unknown_protocol_is_skipped(
        self, sample_app_config: AppConfig, caplog
    ) -> None:
        protocols = dict(sample_app_config.protocols)
        protocols["maker"] = ProtocolConfig(chain="ethereum")
        runtime = Runtime(replace(sample_app_config, protocols=protocols))
        assert "maker" not in runtime.services
        assert "No adapter factory for protocol 'maker'" in caplog.text

    def test_unconfigured_service(self, sample_app_config: AppConfig) -> None:
        with pytest.raises(KeyError):
            Runtime(sample_app_config).service("maker")
