"""Unit tests for config loading, env interpolation, and validation."""
from __future__ import annotations

from decimal import Decimal
from pathlib import Path

import pytest

from cdp_spells.config import (
    DEFAULT_PERIODS_PER_YEAR,
    AppConfig,
    ChainConfig,
    ProtocolConfig,
    _interpolate_env,
    _to_amount,
    load_config,
)


class TestInterpolateEnv:
    def test_simple_substitution(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert _interpolate_env("${MY_VAR}") == "hello"

    def test_missing_var_becomes_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("NONEXISTENT_VAR_XYZ", raising=False)
        assert _interpolate_env("${NONEXISTENT_VAR_XYZ}") == ""

    def test_nested_dict(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TOK", "secret")
        result = _interpolate_env({"key": "${TOK}", "plain": "text"})
        assert result == {"key": "secret", "plain": "text"}

    def test_nested_list(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("A", "x")
        assert _interpolate_env(["${A}", "y"]) == ["x", "y"]

    def test_non_string_passthrough(self) -> None:
        assert _interpolate_env(42) == 42
        assert _interpolate_env(True) is True


class TestToAmount:
    def test_yaml_float_keeps_literal(self) -> None:
        assert _to_amount(0.1) == Decimal("0.1")

    def test_blank_uses_default(self) -> None:
        assert _to_amount(None) == Decimal(0)
        assert _to_amount("", "5") == Decimal(5)


class TestLoadConfig:
    def test_loads_valid_yaml(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        assert isinstance(cfg, AppConfig)
        assert cfg.watch.interval_seconds == 120
        assert cfg.chains["ethereum"].rpc_timeout == 10
        assert cfg.tokens["lusd"].decimals == 18

    def test_protocol_settings(self, sample_yaml_path: Path) -> None:
        cfg = load_config(sample_yaml_path)
        liquity = cfg.protocols["liquity"]
        assert liquity.min_debt == Decimal(2000)
        assert liquity.liquidation_reserve == Decimal(200)
        assert liquity.hint_search_iterations == 15
        assert liquity.limits.min_debt == Decimal(2000)

        reflexer = cfg.protocols["reflexer"]
        assert reflexer.redemption_price_slot == 4
        assert reflexer.periods_per_year == DEFAULT_PERIODS_PER_YEAR
        assert reflexer.collateral_type("ETH-A").key == "eth"
        assert reflexer.collateral_type("WBTC-A") is None

    def test_token_registry(self, sample_yaml_path: Path) -> None:
        registry = load_config(sample_yaml_path).token_registry()
        assert registry["rai"].symbol == "RAI"
        assert registry["rai"].key == "rai"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nonexistent.yaml")

    def test_env_interpolation_in_yaml(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("TEST_RPC", "https://rpc.from-env.com")
        yaml_content = """\
chains:
  ethereum:
    rpc_endpoints: ["${TEST_RPC}"]
protocols:
  liquity:
    chain: ethereum
    contracts: {}
"""
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(yaml_content)
        cfg = load_config(cfg_file)
        assert cfg.chains["ethereum"].rpc_endpoints == ("https://rpc.from-env.com",)


class TestValidation:
    def test_no_protocols_raises(self, tmp_path: Path) -> None:
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text("chains:\n  ethereum:\n    rpc_endpoints: [x]\n")
        with pytest.raises(ValueError, match="At least one protocol"):
            load_config(cfg_file)

    def test_unknown_chain_raises(self, tmp_path: Path) -> None:
        yaml_content = """\
chains:
  ethereum:
    rpc_endpoints: ["https://rpc.test.com"]
protocols:
  liquity:
    chain: polygon
"""
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(yaml_content)
        with pytest.raises(ValueError, match="unknown chain"):
            load_config(cfg_file)

    def test_unknown_token_raises(self, tmp_path: Path) -> None:
        yaml_content = """\
chains:
  ethereum:
    rpc_endpoints: ["https://rpc.test.com"]
protocols:
  reflexer:
    chain: ethereum
    collateral_types:
      - {type: ETH-A, token: ETH, key: eth}
"""
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(yaml_content)
        with pytest.raises(ValueError, match="unknown token"):
            load_config(cfg_file)

    def test_chain_without_endpoints_raises(self, tmp_path: Path) -> None:
        yaml_content = """\
chains:
  ethereum: {}
protocols:
  liquity:
    chain: ethereum
"""
        cfg_file = tmp_path / "config.yaml"
        cfg_file.write_text(yaml_content)
        with pytest.raises(ValueError, match="no RPC endpoints"):
            load_config(cfg_file)


class TestFrozenConfigs:
    def test_chain_config_immutable(self) -> None:
        c = ChainConfig(rpc_endpoints=("a",))
        with pytest.raises(AttributeError):
            c.rpc_timeout = 999  # type: ignore[misc]

    def test_protocol_config_immutable(self) -> None:
        p = ProtocolConfig(chain="ethereum")
        with pytest.raises(AttributeError):
            p.min_debt = Decimal(1)  # type: ignore[misc]
