"""Shared test fixtures and sample data."""
from __future__ import annotations

import textwrap
from decimal import Decimal
from pathlib import Path

import pytest

from cdp_spells.config import (
    AppConfig,
    ChainConfig,
    CollateralTypeConfig,
    ProtocolConfig,
    TokenConfig,
    WatchConfig,
)
from cdp_spells.fixed_point import div
from cdp_spells.models import (
    Position,
    PositionType,
    ProtocolLimits,
    StrategyContext,
    Token,
)

RAY = 10**27
WAD = 10**18

OWNER = "0x00000000000000000000000000000000000000aa"


# ---------------------------------------------------------------------------
# Config fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def sample_chain_config() -> ChainConfig:
    return ChainConfig(
        rpc_endpoints=("https://rpc1.example.com", "https://rpc2.example.com"),
        rpc_timeout=10,
    )


@pytest.fixture()
def eth_a() -> CollateralTypeConfig:
    return CollateralTypeConfig(type="ETH-A", token="ETH", key="eth")


@pytest.fixture()
def reflexer_config(eth_a: CollateralTypeConfig) -> ProtocolConfig:
    return ProtocolConfig(
        chain="ethereum",
        contracts={"resolver": "0xRESOLVER", "oracle_relayer": "0xRELAYER"},
        min_debt=Decimal("1"),
        collateral_types=(eth_a,),
    )


@pytest.fixture()
def liquity_config() -> ProtocolConfig:
    return ProtocolConfig(
        chain="ethereum",
        contracts={
            "trove_manager": "0xTROVES",
            "price_feed": "0xFEED",
            "resolver": "0xHINTS",
        },
        min_debt=Decimal("2000"),
        liquidation_reserve=Decimal("200"),
        hint_search_iterations=15,
        collateral_types=(CollateralTypeConfig(type="ETH", token="ETH", key="eth"),),
    )


@pytest.fixture()
def sample_app_config(
    sample_chain_config: ChainConfig,
    reflexer_config: ProtocolConfig,
    liquity_config: ProtocolConfig,
) -> AppConfig:
    return AppConfig(
        watch=WatchConfig(interval_seconds=60),
        chains={"ethereum": sample_chain_config},
        tokens={
            "eth": TokenConfig(symbol="ETH", address="0xETH", decimals=18),
            "lusd": TokenConfig(symbol="LUSD", address="0xLUSD", decimals=18),
            "rai": TokenConfig(symbol="RAI", address="0xRAI", decimals=18),
        },
        protocols={"reflexer": reflexer_config, "liquity": liquity_config},
    )


@pytest.fixture()
def tokens(sample_app_config: AppConfig) -> dict[str, Token]:
    return sample_app_config.token_registry()


# ---------------------------------------------------------------------------
# Model fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def eth_type() -> PositionType:
    return PositionType(
        type_name="ETH-A",
        token="ETH",
        token_key="eth",
        rate=Decimal("0.02"),
        spot_price=Decimal("2000"),
        price=Decimal("2000"),
        liquidation_ratio=div(1, "1.5"),
        debt_ceiling=Decimal(0),
        total_debt=Decimal(0),
    )


@pytest.fixture()
def liquity_type() -> PositionType:
    return PositionType(
        type_name="ETH",
        token="ETH",
        token_key="eth",
        rate=Decimal(0),
        spot_price=Decimal("2000"),
        price=Decimal("2000"),
        liquidation_ratio=div(1, "1.1"),
        debt_ceiling=Decimal(0),
        total_debt=Decimal(0),
        borrow_fee=Decimal("0.005"),
    )


@pytest.fixture()
def open_trove(liquity_type: PositionType) -> Position:
    return Position(
        id=OWNER,
        owner=OWNER,
        type_name="ETH",
        token="ETH",
        token_key="eth",
        collateral=Decimal("10"),
        debt=Decimal("5000"),
        liquidated_collateral=Decimal(0),
        rate=Decimal(0),
        price=Decimal("2000"),
        spot_price=Decimal("2000"),
        liquidation_ratio=liquity_type.liquidation_ratio,
        net_value=Decimal("15000"),
        status=Decimal("0.25"),
        liquidation_price=Decimal("550"),
    )


@pytest.fixture()
def reflexer_context(eth_type: PositionType, tokens: dict[str, Token]) -> StrategyContext:
    return StrategyContext(
        position=Position.blank(eth_type, OWNER),
        position_type=eth_type,
        limits=ProtocolLimits(min_debt=Decimal("1")),
        tokens=tokens,
    )


@pytest.fixture()
def liquity_context(
    open_trove: Position, liquity_type: PositionType, tokens: dict[str, Token]
) -> StrategyContext:
    return StrategyContext(
        position=open_trove,
        position_type=liquity_type,
        limits=ProtocolLimits(
            min_debt=Decimal("2000"), liquidation_reserve=Decimal("200")
        ),
        tokens=tokens,
    )


# ---------------------------------------------------------------------------
# Sample on-chain data
# ---------------------------------------------------------------------------


@pytest.fixture()
def raw_eth_type() -> tuple[int, ...]:
    """(rate_per_period, price, liquidation_ratio, debt_ceiling, total_debt)."""
    return (RAY, 2000 * RAY, 15 * RAY // 10, 10**6 * WAD, 1000 * WAD)


@pytest.fixture()
def raw_safe() -> tuple:
    """Safe 7: 10 ETH, 5000 RAI, price 2000, 150% ratio."""
    return (
        7,
        OWNER,
        "ETH-A",
        10 * WAD,
        0,
        5000 * WAD,
        0,
        RAY,
        2000 * RAY,
        15 * RAY // 10,
        "0x00000000000000000000000000000000000000bb",
    )


# ---------------------------------------------------------------------------
# Config YAML fixture
# ---------------------------------------------------------------------------

SAMPLE_YAML = textwrap.dedent("""\
    watch:
      interval_seconds: 120
    chains:
      ethereum:
        rpc_endpoints: ["https://rpc.example.com"]
        rpc_timeout: 10
    tokens:
      eth: {symbol: ETH, address: "0xETH", decimals: 18}
      lusd: {symbol: LUSD, address: "0xLUSD"}
      rai: {symbol: RAI, address: "0xRAI"}
    protocols:
      reflexer:
        chain: ethereum
        contracts:
          resolver: "0xRESOLVER"
          oracle_relayer: "0xRELAYER"
        min_debt: 1
        collateral_types:
          - {type: ETH-A, token: ETH, key: eth}
      liquity:
        chain: ethereum
        contracts:
          trove_manager: "0xTROVES"
          price_feed: "0xFEED"
          resolver: "0xHINTS"
        min_debt: "2000"
        liquidation_reserve: 200
        hint_search_iterations: 15
""")


@pytest.fixture()
def sample_yaml_path(tmp_path: Path) -> Path:
    cfg_file = tmp_path / "config.yaml"
    cfg_file.write_text(SAMPLE_YAML)
    return cfg_file
