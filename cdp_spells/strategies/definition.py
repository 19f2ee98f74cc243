"""Declarative strategy definition."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from ..interfaces.hints import HintLookup
from ..models import OperationDescriptor, StrategyContext
from .fields import AmountInput, FieldValue, StrategyField


StrategyValidator = Callable[[tuple[FieldValue, ...], StrategyContext], Optional[str]]
SpellBuilder = Callable[
    [tuple[FieldValue, ...], StrategyContext, Optional[HintLookup]],
    Awaitable[Sequence[OperationDescriptor]],
]


@dataclass(frozen=True)
class Strategy:
    """A named chain of fields plus the spells its confirmed inputs produce."""

    key: str
    protocol: str
    name: str
    description: str
    fields: tuple[StrategyField, ...]
    spells: SpellBuilder
    validate: StrategyValidator | None = None
    details: tuple[str, ...] = ()
    submit_text: str = ""
    author: str = ""
    needs_hints: bool = False

    @property
    def input_indexes(self) -> tuple[int, ...]:
        return tuple(
            i for i, field in enumerate(self.fields) if isinstance(field, AmountInput)
        )
