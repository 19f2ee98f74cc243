"""Periodic position refresh with risk status logging."""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal

from ..config import WatchConfig
from ..fixed_point import gt, is_zero, times, to_fixed
from ..models import Position
from .position_service import PositionService

logger = logging.getLogger(__name__)

# Fraction of the liquidation threshold at which a position is flagged.
WARNING_MARGIN = Decimal("0.9")

# Pause after an unexpected error in the loop.
RETRY_SECONDS = 60


@dataclass(frozen=True)
class WatchEntry:
    protocol: str
    position: Position
    label: str


class PositionWatcher:
    """Refreshes every protocol's positions for one owner and logs their risk."""

    def __init__(
        self,
        services: dict[str, PositionService],
        owner: str,
        config: WatchConfig | None = None,
    ) -> None:
        self._services = services
        self._owner = owner
        self._config = config or WatchConfig()

    @staticmethod
    def status_label(position: Position) -> str:
        if is_zero(position.debt):
            return "No debt"
        if not gt(position.liquidation_ratio, position.status):
            return "LIQUIDATABLE"
        if gt(position.status, times(position.liquidation_ratio, WARNING_MARGIN)):
            return "WARNING"
        return "Healthy"

    async def check(self) -> list[WatchEntry]:
        entries: list[WatchEntry] = []
        for name, service in self._services.items():
            book = await service.refresh(self._owner)
            if not book.available:
                logger.warning("%s: position data unavailable", name)
                continue
            if not book.positions:
                logger.info("%s: no positions for %s", name, self._owner)
                continue

            for position in book.positions:
                label = self.status_label(position)
                logger.info(
                    "%s #%s (%s) · Collateral: %s  Debt: %s  Status: %s%%  "
                    "Liquidation price: %s · %s",
                    name,
                    position.id,
                    position.type_name,
                    to_fixed(position.collateral, 4),
                    to_fixed(position.debt, 2),
                    to_fixed(times(position.status, 100), 2),
                    to_fixed(position.liquidation_price, 2),
                    label,
                )
                entries.append(WatchEntry(name, position, label))
        return entries

    async def run_continuous(self, interval_seconds: int | None = None) -> None:
        interval = interval_seconds or self._config.interval_seconds
        logger.info("Watching %s every %d seconds", self._owner, interval)

        while True:
            try:
                await self.check()
                await asyncio.sleep(interval)
            except Exception as e:
                logger.error("Error in watch loop: %s", e)
                await asyncio.sleep(RETRY_SECONDS)
