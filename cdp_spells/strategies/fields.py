"""Strategy field variants and their evaluated values.

A strategy is an ordered chain of fields. Editable amounts carry a
``validate`` capability, derived displays an ``update`` capability. Both
receive a :class:`FieldScope` that holds only the fields *before* them, so
a field can never depend on one that comes later in the chain.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable, ClassVar, Optional, Union

from ..fixed_point import ensure_value
from ..models import Position, StrategyContext, Token


class FieldKind(str, Enum):
    INPUT_AMOUNT = "input-with-token"
    HEADING = "heading"
    STATUS = "status"
    VALUE = "value"


@dataclass(frozen=True)
class FieldValue:
    """Current state of one field as shown to the user."""

    name: str
    kind: FieldKind
    value: str = ""
    token: Token | None = None
    status: Decimal | None = None
    liquidation: Decimal | None = None
    display: str = ""
    placeholder: str = ""

    @property
    def amount(self) -> Decimal:
        return ensure_value(self.value)


@dataclass(frozen=True)
class FieldScope:
    """Read access for a field capability: earlier fields plus the context."""

    previous: tuple[FieldValue, ...]
    context: StrategyContext

    @property
    def position(self) -> Position:
        if self.context.position is None:
            raise LookupError("No position in strategy context")
        return self.context.position

    def amount(self, index: int) -> Decimal:
        if index < 0 or index >= len(self.previous):
            raise IndexError(
                f"Field {index} is not visible from field {len(self.previous)}"
            )
        return self.previous[index].amount


Validator = Callable[[FieldValue, FieldScope], Optional[str]]
Updater = Callable[[FieldValue, FieldScope], FieldValue]


@dataclass(frozen=True)
class AmountInput:
    """Editable amount bound to a token.

    ``position_token`` binds the token of the position's collateral type
    instead of a fixed ``token_key``.
    """

    name: str
    token_key: str = ""
    position_token: bool = False
    placeholder: str = ""
    validate: Validator | None = None

    kind: ClassVar[FieldKind] = FieldKind.INPUT_AMOUNT

    def default_token(self, context: StrategyContext | None) -> Token | None:
        if context is None:
            return None
        key = self.token_key
        if self.position_token and context.position is not None:
            key = context.position.token_key
        return context.token(key) if key else None

    def initial(self, context: StrategyContext | None) -> FieldValue:
        token = self.default_token(context)
        placeholder = ""
        if token is not None and self.placeholder:
            placeholder = self.placeholder.format(symbol=token.symbol)
        return FieldValue(
            name=self.name, kind=self.kind, token=token, placeholder=placeholder
        )


@dataclass(frozen=True)
class Heading:
    name: str

    kind: ClassVar[FieldKind] = FieldKind.HEADING

    def initial(self, context: StrategyContext | None) -> FieldValue:
        return FieldValue(name=self.name, kind=self.kind)


@dataclass(frozen=True)
class StatusDisplay:
    name: str
    update: Updater

    kind: ClassVar[FieldKind] = FieldKind.STATUS

    def initial(self, context: StrategyContext | None) -> FieldValue:
        return FieldValue(name=self.name, kind=self.kind)


@dataclass(frozen=True)
class ValueDisplay:
    name: str
    update: Updater
    default: str = "-"

    kind: ClassVar[FieldKind] = FieldKind.VALUE

    def initial(self, context: StrategyContext | None) -> FieldValue:
        return FieldValue(
            name=self.name, kind=self.kind, value=self.default, display=self.default
        )


StrategyField = Union[AmountInput, Heading, StatusDisplay, ValueDisplay]
