"""Pure ABI helpers for read-only contract calls: no I/O."""
from __future__ import annotations

from typing import Any, Sequence

from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector


def encode_call(
    signature: str,
    arg_types: Sequence[str] = (),
    args: Sequence[Any] = (),
) -> str:
    """Build ``0x``-prefixed calldata for ``signature``.

    Examples:
        "getSafes(address)", ["address"], ["0xabc..."]
    """
    if len(arg_types) != len(args):
        raise ValueError(
            f"{signature}: {len(arg_types)} argument types for {len(args)} values"
        )
    selector = function_signature_to_4byte_selector(signature)
    body = encode(list(arg_types), list(args)) if arg_types else b""
    return "0x" + (selector + body).hex()


def decode_result(return_types: Sequence[str], data: bytes) -> tuple[Any, ...]:
    """Decode call return data into Python values."""
    return tuple(decode(list(return_types), data))
