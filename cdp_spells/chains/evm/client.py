"""EVM JSON-RPC client with fallback support."""
import logging
import ssl
from typing import Any, Sequence

import aiohttp
import certifi

from ...config import ChainConfig
from ...errors import RpcError
from .abi import decode_result, encode_call

logger = logging.getLogger(__name__)


class EvmClient:
    """EVM node RPC client with automatic endpoint fallback."""

    def __init__(self, config: ChainConfig) -> None:
        self.endpoints = list(config.rpc_endpoints)
        self.timeout = config.rpc_timeout
        self.current_rpc_index = 0
        self._request_id = 0

    async def rpc_call(self, method: str, params: list[Any]) -> Any:
        """Make RPC call with fallback to alternative endpoints."""
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        ssl_context = ssl.create_default_context(cafile=certifi.where())

        last_error: Exception | None = None
        for attempt in range(len(self.endpoints)):
            rpc_index = (self.current_rpc_index + attempt) % len(self.endpoints)
            rpc_url = self.endpoints[rpc_index]

            try:
                connector = aiohttp.TCPConnector(ssl=ssl_context)
                async with aiohttp.ClientSession(connector=connector) as session:
                    async with session.post(
                        rpc_url,
                        json=payload,
                        timeout=aiohttp.ClientTimeout(total=self.timeout),
                    ) as response:
                        result = await response.json()
                        if "error" in result:
                            raise RuntimeError(f"RPC Error: {result['error']}")

                        if rpc_index != self.current_rpc_index:
                            logger.info("Switched to RPC endpoint: %s", rpc_url)
                            self.current_rpc_index = rpc_index

                        return result.get("result")
            except Exception as e:
                last_error = e
                logger.warning("RPC endpoint %s failed: %s", rpc_url, e)
                if attempt < len(self.endpoints) - 1:
                    logger.info("Trying next endpoint...")
                continue

        raise RpcError(f"All RPC endpoints failed. Last error: {last_error}")

    async def eth_call(self, to: str, data: str, block: str = "latest") -> bytes:
        """Execute a read-only contract call and return the raw return data."""
        result = await self.rpc_call("eth_call", [{"to": to, "data": data}, block])
        return _hex_to_bytes(result)

    async def get_storage_at(
        self, address: str, slot: int, block: str = "latest"
    ) -> int:
        """Read one 32-byte storage word as an unsigned integer."""
        result = await self.rpc_call(
            "eth_getStorageAt", [address, hex(slot), block]
        )
        raw = _hex_to_bytes(result)
        return int.from_bytes(raw, "big") if raw else 0

    async def call_function(
        self,
        to: str,
        signature: str,
        return_types: Sequence[str],
        arg_types: Sequence[str] = (),
        args: Sequence[Any] = (),
    ) -> tuple[Any, ...]:
        """ABI-encode a call to ``signature`` on ``to`` and decode its result."""
        data = await self.eth_call(to, encode_call(signature, arg_types, args))
        if not data:
            raise RpcError(f"Empty result from {signature} at {to}")
        return decode_result(return_types, data)


def _hex_to_bytes(value: Any) -> bytes:
    if not value:
        return b""
    text = str(value)
    if text.startswith(("0x", "0X")):
        text = text[2:]
    if len(text) % 2:
        text = "0" + text
    return bytes.fromhex(text)
