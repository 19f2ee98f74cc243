"""Reflexer protocol adapter: reads safes and collateral types from the resolver."""
from __future__ import annotations

import logging

from ...config import ProtocolConfig
from ...interfaces.chain import ChainClient
from ...models import PositionBook
from . import parser

logger = logging.getLogger(__name__)

COL_INFO_SIGNATURE = "getColInfo(string[])"
COL_INFO_RETURNS = ["(uint256,uint256,uint256,uint256,uint256)[]"]

SAFES_SIGNATURE = "getSafes(address)"
SAFES_RETURNS = [
    "(uint256,address,string,uint256,uint256,uint256,uint256,uint256,uint256,uint256,address)[]"
]


class ReflexerAdapter:
    """Fetch raw Reflexer state and turn it into position records."""

    def __init__(self, chain_client: ChainClient, config: ProtocolConfig) -> None:
        self._client = chain_client
        self._config = config
        self._resolver = config.contracts.get("resolver", "")
        self._oracle_relayer = config.contracts.get("oracle_relayer", "")

    @property
    def protocol_name(self) -> str:
        return "reflexer"

    async def _get_redemption_price(self) -> int:
        return await self._client.get_storage_at(
            self._oracle_relayer, self._config.redemption_price_slot
        )

    async def _get_col_info(self, type_names: list[str]) -> list[tuple[int, ...]]:
        (rows,) = await self._client.call_function(
            self._resolver,
            COL_INFO_SIGNATURE,
            COL_INFO_RETURNS,
            ["string[]"],
            [type_names],
        )
        return [tuple(row) for row in rows]

    async def _get_safes(self, owner: str) -> list[tuple]:
        (rows,) = await self._client.call_function(
            self._resolver,
            SAFES_SIGNATURE,
            SAFES_RETURNS,
            ["address"],
            [owner],
        )
        return [tuple(row) for row in rows]

    async def read_snapshot(self, owner: str | None = None) -> parser.ReflexerSnapshot:
        """Read collateral types, the owner's safes and the redemption price.

        Any chain failure propagates; callers decide how to degrade.
        """
        type_names = [col.type for col in self._config.collateral_types]
        types_raw = await self._get_col_info(type_names)
        redemption_price = await self._get_redemption_price()

        positions_raw: list[tuple] = []
        if owner:
            logger.info("Checking Reflexer safes for %s", owner)
            positions_raw = await self._get_safes(owner)
            logger.info("Found %d safes", len(positions_raw))

        return parser.ReflexerSnapshot(
            type_names=tuple(type_names),
            types_raw=tuple(types_raw),
            positions_raw=tuple(positions_raw),
            redemption_price=redemption_price,
        )

    def build_book(
        self, snapshot: parser.ReflexerSnapshot, owner: str | None = None
    ) -> PositionBook:
        catalog = self._config.collateral_types
        periods = self._config.periods_per_year
        types = parser.compute_types(
            snapshot.types_raw, snapshot.redemption_price, catalog, periods
        )
        positions = parser.compute_positions(
            snapshot.positions_raw, snapshot.redemption_price, catalog, periods
        )
        for position in positions:
            logger.debug(
                "Safe %s (%s): collateral %s debt %s status %s",
                position.id, position.type_name,
                position.collateral, position.debt, position.status,
            )
        return PositionBook(types=tuple(types), positions=tuple(positions))
