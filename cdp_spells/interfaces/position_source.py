"""Position source protocol: raw on-chain reads plus record computation."""
from typing import Any, Protocol

from ..models import PositionBook


class PositionSource(Protocol):
    """Abstract interface for a protocol's position data feed.

    ``read_snapshot`` performs every chain read and may fail;
    ``build_book`` is pure and turns the raw snapshot into records.
    """

    @property
    def protocol_name(self) -> str: ...

    async def read_snapshot(self, owner: str | None = None) -> Any: ...

    def build_book(self, snapshot: Any, owner: str | None = None) -> PositionBook: ...
