"""Chain client protocol: blockchain RPC abstraction."""
from typing import Any, Protocol, Sequence


class ChainClient(Protocol):
    """Abstract interface for read-only EVM RPC interactions."""

    async def eth_call(self, to: str, data: str, block: str = "latest") -> bytes: ...

    async def get_storage_at(
        self, address: str, slot: int, block: str = "latest"
    ) -> int: ...

    async def call_function(
        self,
        to: str,
        signature: str,
        return_types: Sequence[str],
        arg_types: Sequence[str] = (),
        args: Sequence[Any] = (),
    ) -> tuple[Any, ...]: ...
