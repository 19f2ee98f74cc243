"""Liquity protocol adapter: trove reads and sorted-list insertion hints."""
from __future__ import annotations

import logging

from ...config import ProtocolConfig
from ...interfaces.chain import ChainClient
from ...models import PositionBook
from . import parser

logger = logging.getLogger(__name__)


class LiquityAdapter:
    """Fetch Liquity trove state; doubles as the hint lookup for spells."""

    def __init__(self, chain_client: ChainClient, config: ProtocolConfig) -> None:
        self._client = chain_client
        self._config = config
        self._trove_manager = config.contracts.get("trove_manager", "")
        self._price_feed = config.contracts.get("price_feed", "")
        self._resolver = config.contracts.get("resolver", "")

    @property
    def protocol_name(self) -> str:
        return "liquity"

    async def _uint(self, to: str, signature: str) -> int:
        (value,) = await self._client.call_function(to, signature, ["uint256"])
        return int(value)

    async def read_snapshot(self, owner: str | None = None) -> parser.LiquitySnapshot:
        price = await self._uint(self._price_feed, "lastGoodPrice()")
        borrow_rate = await self._uint(
            self._trove_manager, "getBorrowingRateWithDecay()"
        )
        system_debt = await self._uint(self._trove_manager, "getEntireSystemDebt()")

        trove = None
        if owner:
            logger.info("Checking Liquity trove for %s", owner)
            trove = await self._client.call_function(
                self._trove_manager,
                "Troves(address)",
                ["uint256", "uint256", "uint256", "uint8", "uint128"],
                ["address"],
                [owner],
            )

        return parser.LiquitySnapshot(
            price=price,
            borrow_rate=borrow_rate,
            system_debt=system_debt,
            trove=tuple(trove) if trove is not None else None,
        )

    def build_book(
        self, snapshot: parser.LiquitySnapshot, owner: str | None = None
    ) -> PositionBook:
        token_key = "eth"
        if self._config.collateral_types:
            token_key = self._config.collateral_types[0].key
        position_type = parser.compute_trove_type(
            snapshot.price, snapshot.borrow_rate, snapshot.system_debt, token_key
        )

        positions = []
        if owner and snapshot.trove is not None:
            trove = parser.compute_trove(owner, snapshot.trove, position_type)
            if trove is not None:
                positions.append(trove)
            else:
                logger.info("No active trove for %s", owner)

        return PositionBook(types=(position_type,), positions=tuple(positions))

    async def get_position_hints(self, collateral: int, debt: int) -> tuple[str, str]:
        """Ask the resolver where a trove with these totals sorts."""
        upper, lower = await self._client.call_function(
            self._resolver,
            "getTrovePositionHints(uint256,uint256,uint256,uint256)",
            ["address", "address"],
            ["uint256", "uint256", "uint256", "uint256"],
            [collateral, debt, self._config.hint_search_iterations, 0],
        )
        logger.debug("Trove hints for %s/%s: %s %s", collateral, debt, upper, lower)
        return str(upper), str(lower)
