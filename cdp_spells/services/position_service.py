"""Position refresh with the data-unavailable failure policy."""
from __future__ import annotations

import logging

from ..interfaces.position_source import PositionSource
from ..models import Position, PositionBook, PositionType

logger = logging.getLogger(__name__)


class PositionService:
    """Read a protocol's raw state and compute position records.

    A failed chain read is logged and reported as an empty, unavailable
    book. Callers must not read that as "the user has no positions".
    Arithmetic errors from the computation itself propagate.
    """

    def __init__(self, source: PositionSource) -> None:
        self._source = source

    @property
    def protocol_name(self) -> str:
        return self._source.protocol_name

    async def refresh(self, owner: str | None = None) -> PositionBook:
        try:
            snapshot = await self._source.read_snapshot(owner)
        except Exception as e:
            logger.error(
                "Error reading %s position data: %s", self._source.protocol_name, e
            )
            return PositionBook(available=False)

        book = self._source.build_book(snapshot, owner)
        logger.info(
            "%s: %d position types, %d positions",
            self._source.protocol_name, len(book.types), len(book.positions),
        )
        return book

    async def fetch_types(self) -> list[PositionType]:
        book = await self.refresh()
        return list(book.types)

    async def fetch_positions(self, owner: str) -> list[Position]:
        book = await self.refresh(owner)
        return list(book.positions)
