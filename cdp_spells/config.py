"""Configuration loader: reads config.yaml, interpolates env vars, validates."""
from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from .fixed_point import to_decimal
from .models import ProtocolLimits, Token

logger = logging.getLogger(__name__)

DEFAULT_PERIODS_PER_YEAR = 31_545_000

# ---------------------------------------------------------------------------
# Frozen config dataclasses
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ChainConfig:
    rpc_endpoints: tuple[str, ...] = ()
    rpc_timeout: int = 30


@dataclass(frozen=True)
class TokenConfig:
    symbol: str = ""
    address: str = ""
    decimals: int = 18


@dataclass(frozen=True)
class CollateralTypeConfig:
    type: str = ""
    token: str = ""
    key: str = ""
    disabled: bool = False
    token_type: str = ""


@dataclass(frozen=True)
class ProtocolConfig:
    chain: str = ""
    contracts: dict[str, str] = field(default_factory=dict)
    min_debt: Decimal = Decimal(0)
    liquidation_reserve: Decimal = Decimal(0)
    redemption_price_slot: int = 4
    periods_per_year: int = DEFAULT_PERIODS_PER_YEAR
    hint_search_iterations: int = 0
    collateral_types: tuple[CollateralTypeConfig, ...] = ()

    @property
    def limits(self) -> ProtocolLimits:
        return ProtocolLimits(
            min_debt=self.min_debt,
            liquidation_reserve=self.liquidation_reserve,
        )

    def collateral_type(self, type_name: str) -> CollateralTypeConfig | None:
        for col in self.collateral_types:
            if col.type == type_name:
                return col
        return None


@dataclass(frozen=True)
class WatchConfig:
    interval_seconds: int = 300


@dataclass(frozen=True)
class AppConfig:
    watch: WatchConfig = field(default_factory=WatchConfig)
    chains: dict[str, ChainConfig] = field(default_factory=dict)
    tokens: dict[str, TokenConfig] = field(default_factory=dict)
    protocols: dict[str, ProtocolConfig] = field(default_factory=dict)

    def token_registry(self) -> dict[str, Token]:
        return {
            key: Token(
                key=key,
                symbol=tok.symbol,
                address=tok.address,
                decimals=tok.decimals,
            )
            for key, tok in self.tokens.items()
        }


# ---------------------------------------------------------------------------
# Env interpolation
# ---------------------------------------------------------------------------

_ENV_VAR_RE = re.compile(r"\$\{([^}]+)}")


def _interpolate_env(value: Any) -> Any:
    """Recursively replace ${VAR} references with environment variable values."""
    if isinstance(value, str):
        return _ENV_VAR_RE.sub(lambda m: os.environ.get(m.group(1), ""), value)
    if isinstance(value, dict):
        return {k: _interpolate_env(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_interpolate_env(item) for item in value]
    return value


def _to_amount(raw: Any, default: str = "0") -> Decimal:
    # YAML hands back floats for "0.5"; go through str() to keep the literal.
    if raw is None or raw == "":
        raw = default
    return to_decimal(str(raw))


# ---------------------------------------------------------------------------
# YAML → dataclass builders
# ---------------------------------------------------------------------------


def _build_watch(raw: dict[str, Any]) -> WatchConfig:
    return WatchConfig(interval_seconds=int(raw.get("interval_seconds", 300)))


def _build_chains(raw: dict[str, Any]) -> dict[str, ChainConfig]:
    chains: dict[str, ChainConfig] = {}
    for name, cfg in raw.items():
        chains[name] = ChainConfig(
            rpc_endpoints=tuple(cfg.get("rpc_endpoints", [])),
            rpc_timeout=int(cfg.get("rpc_timeout", 30)),
        )
    return chains


def _build_tokens(raw: dict[str, Any]) -> dict[str, TokenConfig]:
    tokens: dict[str, TokenConfig] = {}
    for key, cfg in raw.items():
        tokens[key] = TokenConfig(
            symbol=cfg.get("symbol", key.upper()),
            address=cfg.get("address", ""),
            decimals=int(cfg.get("decimals", 18)),
        )
    return tokens


def _build_collateral_types(
    raw: list[dict[str, Any]],
) -> tuple[CollateralTypeConfig, ...]:
    return tuple(
        CollateralTypeConfig(
            type=c.get("type", ""),
            token=c.get("token", ""),
            key=c.get("key", ""),
            disabled=bool(c.get("disabled", False)),
            token_type=c.get("token_type", ""),
        )
        for c in raw
    )


def _build_protocols(raw: dict[str, Any]) -> dict[str, ProtocolConfig]:
    protocols: dict[str, ProtocolConfig] = {}
    for name, cfg in raw.items():
        protocols[name] = ProtocolConfig(
            chain=cfg.get("chain", ""),
            contracts=dict(cfg.get("contracts", {})),
            min_debt=_to_amount(cfg.get("min_debt")),
            liquidation_reserve=_to_amount(cfg.get("liquidation_reserve")),
            redemption_price_slot=int(cfg.get("redemption_price_slot", 4)),
            periods_per_year=int(
                cfg.get("periods_per_year", DEFAULT_PERIODS_PER_YEAR)
            ),
            hint_search_iterations=int(cfg.get("hint_search_iterations", 0)),
            collateral_types=_build_collateral_types(
                cfg.get("collateral_types", [])
            ),
        )
    return protocols


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(config_path: str | Path | None = None) -> AppConfig:
    """Load and validate application configuration from YAML + .env.

    Args:
        config_path: Path to config.yaml. Defaults to ``config.yaml`` in the
            project root (one level up from this package).
    """
    load_dotenv()

    if config_path is None:
        config_path = Path(__file__).resolve().parent.parent / "config.yaml"
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}

    raw = _interpolate_env(raw)

    cfg = AppConfig(
        watch=_build_watch(raw.get("watch", {})),
        chains=_build_chains(raw.get("chains", {})),
        tokens=_build_tokens(raw.get("tokens", {})),
        protocols=_build_protocols(raw.get("protocols", {})),
    )

    _validate(cfg)
    logger.info("Configuration loaded from %s", config_path)
    return cfg


def _validate(cfg: AppConfig) -> None:
    """Raise on invalid configuration."""
    if not cfg.protocols:
        raise ValueError("At least one protocol must be configured")

    for name, proto in cfg.protocols.items():
        if proto.chain not in cfg.chains:
            raise ValueError(
                f"Protocol '{name}' references unknown chain '{proto.chain}'"
            )
        for col in proto.collateral_types:
            if col.key not in cfg.tokens:
                raise ValueError(
                    f"Collateral type '{col.type}' of '{name}' references "
                    f"unknown token '{col.key}'"
                )

    for name, chain in cfg.chains.items():
        if not chain.rpc_endpoints:
            raise ValueError(f"Chain '{name}' has no RPC endpoints")
