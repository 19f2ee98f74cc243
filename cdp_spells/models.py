"""Data models: all frozen (immutable)."""
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping

from .fixed_point import ZERO, gt

# Status reported for zero collateral against outstanding debt (110%).
MAX_RISK_STATUS = Decimal("1.1")

NO_REGISTERS: tuple[int, int, int, int] = (0, 0, 0, 0)


@dataclass(frozen=True)
class Token:
    """ERC-20 (or native) token known to the strategies."""

    key: str
    symbol: str
    address: str
    decimals: int = 18


@dataclass(frozen=True)
class PositionType:
    """Protocol-wide parameters for one collateral class."""

    type_name: str
    token: str
    token_key: str
    rate: Decimal
    spot_price: Decimal
    price: Decimal
    liquidation_ratio: Decimal
    debt_ceiling: Decimal
    total_debt: Decimal
    redemption_price: Decimal = Decimal(1)
    borrow_fee: Decimal = ZERO
    disabled: bool = False
    token_type: str = ""

    @property
    def debt_ceiling_reached(self) -> bool:
        if self.debt_ceiling.is_zero():
            return False
        return gt(self.total_debt, self.debt_ceiling)


@dataclass(frozen=True)
class Position:
    """A single user's collateral/debt pair against one PositionType."""

    id: str
    owner: str
    type_name: str
    token: str
    token_key: str
    collateral: Decimal
    debt: Decimal
    liquidated_collateral: Decimal
    rate: Decimal
    price: Decimal
    spot_price: Decimal
    liquidation_ratio: Decimal
    net_value: Decimal
    status: Decimal
    liquidation_price: Decimal
    handler: str = ""

    @classmethod
    def blank(cls, position_type: PositionType, owner: str = "") -> Position:
        """Empty position of ``position_type``, used when opening a new one."""
        return cls(
            id="0",
            owner=owner,
            type_name=position_type.type_name,
            token=position_type.token,
            token_key=position_type.token_key,
            collateral=ZERO,
            debt=ZERO,
            liquidated_collateral=ZERO,
            rate=position_type.rate,
            price=position_type.price,
            spot_price=position_type.spot_price,
            liquidation_ratio=position_type.liquidation_ratio,
            net_value=ZERO,
            status=ZERO,
            liquidation_price=ZERO,
        )

    @property
    def is_new(self) -> bool:
        return self.id in ("", "0")

    @property
    def is_open(self) -> bool:
        return not self.collateral.is_zero() and not self.debt.is_zero()


@dataclass(frozen=True)
class PositionBook:
    """Snapshot of one refresh. ``available=False`` means the read failed."""

    types: tuple[PositionType, ...] = ()
    positions: tuple[Position, ...] = ()
    available: bool = True

    def find_position(self, position_id: str) -> Position | None:
        for position in self.positions:
            if position.id == position_id:
                return position
        return None

    def find_type(self, type_name: str) -> PositionType | None:
        for position_type in self.types:
            if position_type.type_name == type_name:
                return position_type
        return None

    def select(
        self,
        position_id: str | None = None,
        type_name: str | None = None,
        owner: str = "",
    ) -> Position | None:
        """Resolve the position a strategy works on.

        Without an id the owner's first position (of ``type_name``, when
        given) is used. ``position_id="0"`` asks for a new position, which is
        a blank one of the requested type (or the first known type).
        """
        if position_id is None:
            for position in self.positions:
                if type_name is None or position.type_name == type_name:
                    return position
        elif position_id != "0":
            existing = self.find_position(position_id)
            if existing is not None:
                return existing

        position_type = self.find_type(type_name) if type_name else None
        if position_type is None and self.types:
            position_type = self.types[0]
        if position_type is None:
            return None
        return Position.blank(position_type, owner)

    @property
    def debt_ceiling_reached(self) -> bool:
        return any(t.debt_ceiling_reached for t in self.types)


@dataclass(frozen=True)
class ProtocolLimits:
    """Protocol-wide minimums not exposed by the position feed."""

    min_debt: Decimal = ZERO
    liquidation_reserve: Decimal = ZERO


@dataclass(frozen=True)
class StrategyContext:
    """Everything a strategy evaluation may read besides its own fields."""

    position: Position | None
    position_type: PositionType | None = None
    limits: ProtocolLimits = field(default_factory=ProtocolLimits)
    balances: Mapping[str, Decimal] = field(default_factory=dict)
    tokens: Mapping[str, Token] = field(default_factory=dict)

    def token(self, key: str) -> Token | None:
        return self.tokens.get(key)


@dataclass(frozen=True)
class OperationDescriptor:
    """One step of a compiled spell."""

    connector: str
    method: str
    args: tuple[str, ...] = ()
    get_ids: tuple[int, int, int, int] = NO_REGISTERS
    set_ids: tuple[int, int, int, int] = NO_REGISTERS

    def to_dict(self) -> dict[str, Any]:
        return {
            "connector": self.connector,
            "method": self.method,
            "args": list(self.args),
            "getIds": list(self.get_ids),
            "setIds": list(self.set_ids),
        }
