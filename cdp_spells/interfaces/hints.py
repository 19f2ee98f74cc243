"""Hint lookup protocol: sorted-list insertion hints for a position."""
from typing import Protocol


class HintLookup(Protocol):
    """Return ``(upper_hint, lower_hint)`` for the given integer-scale totals."""

    async def get_position_hints(self, collateral: int, debt: int) -> tuple[str, str]: ...
