"""Unit tests for ABI call encoding."""
from __future__ import annotations

import pytest
from eth_abi import encode

from cdp_spells.chains.evm.abi import decode_result, encode_call


class TestEncodeCall:
    def test_selector_only(self) -> None:
        # keccak("getEntireSystemDebt()")[:4]
        data = encode_call("getEntireSystemDebt()")
        assert data.startswith("0x")
        assert len(data) == 2 + 8

    def test_known_selector(self) -> None:
        assert encode_call("balanceOf(address)", ["address"], [
            "0x0000000000000000000000000000000000000001"
        ]).startswith("0x70a08231")

    def test_encodes_arguments(self) -> None:
        data = encode_call("Troves(address)", ["address"], [
            "0x00000000000000000000000000000000000000aa"
        ])
        assert len(data) == 2 + 8 + 64
        assert data.endswith("aa")

    def test_argument_count_mismatch(self) -> None:
        with pytest.raises(ValueError, match="argument types"):
            encode_call("Troves(address)", ["address"], [])


class TestDecodeResult:
    def test_decodes_tuple(self) -> None:
        raw = encode(["uint256", "uint8"], [42, 1])
        assert decode_result(["uint256", "uint8"], raw) == (42, 1)
