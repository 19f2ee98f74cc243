"""Component evaluator: validation and derived-field updates for a strategy.

:func:`evaluate` is pure. :class:`ComponentEvaluator` keeps the current
values of one strategy instance and publishes every state transition to its
listeners.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable

from ..fixed_point import is_zero, to_decimal
from ..models import StrategyContext, Token
from .definition import Strategy
from .fields import AmountInput, FieldScope, FieldValue, StatusDisplay, ValueDisplay

logger = logging.getLogger(__name__)


class EvaluationState(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    READY = "ready"
    INVALID = "invalid"
    DATA_UNAVAILABLE = "data-unavailable"


@dataclass(frozen=True)
class Evaluation:
    state: EvaluationState
    fields: tuple[FieldValue, ...]
    error: str | None = None
    noop: bool = False

    @property
    def ready(self) -> bool:
        return self.state == EvaluationState.READY


Listener = Callable[[Evaluation], None]


def initial_values(
    strategy: Strategy, context: StrategyContext | None
) -> tuple[FieldValue, ...]:
    return tuple(field.initial(context) for field in strategy.fields)


def _zero_amount(field: FieldValue) -> bool:
    """Blank or a parsed zero; unparseable input is left to the field check."""
    if not field.value.strip():
        return True
    try:
        return is_zero(to_decimal(field.value))
    except (ArithmeticError, TypeError):
        return False


def evaluate(
    strategy: Strategy,
    values: tuple[FieldValue, ...],
    context: StrategyContext | None,
) -> Evaluation:
    """Run validation, derived updates and the strategy check in field order.

    Arithmetic errors from the decimal context propagate unchanged.
    """
    if len(values) != len(strategy.fields):
        raise ValueError(
            f"Strategy {strategy.key} has {len(strategy.fields)} fields, "
            f"got {len(values)} values"
        )
    if context is None or context.position is None:
        return Evaluation(
            EvaluationState.DATA_UNAVAILABLE, values, error="Position data unavailable"
        )

    inputs = strategy.input_indexes
    if len(inputs) >= 2 and all(_zero_amount(values[i]) for i in inputs[:2]):
        return Evaluation(EvaluationState.READY, values, noop=True)

    for index, field in enumerate(strategy.fields):
        if isinstance(field, AmountInput) and field.validate is not None:
            message = field.validate(values[index], FieldScope(values[:index], context))
            if message:
                return Evaluation(EvaluationState.INVALID, values, error=message)

    finalized: list[FieldValue] = []
    for index, field in enumerate(strategy.fields):
        value = values[index]
        if isinstance(field, (StatusDisplay, ValueDisplay)):
            value = field.update(value, FieldScope(tuple(finalized), context))
        finalized.append(value)
    fields = tuple(finalized)

    if strategy.validate is not None:
        message = strategy.validate(fields, context)
        if message:
            return Evaluation(EvaluationState.INVALID, fields, error=message)
    return Evaluation(EvaluationState.READY, fields)


class ComponentEvaluator:
    """Stateful wrapper around :func:`evaluate` for one strategy instance."""

    def __init__(
        self, strategy: Strategy, context: StrategyContext | None = None
    ) -> None:
        self._strategy = strategy
        self._context = context
        self._values = initial_values(strategy, context)
        self._current = Evaluation(EvaluationState.IDLE, self._values)
        self._listeners: list[Listener] = []

    @property
    def strategy(self) -> Strategy:
        return self._strategy

    @property
    def current(self) -> Evaluation:
        return self._current

    @property
    def context(self) -> StrategyContext | None:
        return self._context

    @property
    def values(self) -> tuple[FieldValue, ...]:
        return self._values

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; the returned callable unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def set_value(self, index: int, value: str) -> Evaluation:
        self._require_input(index)
        self._replace(index, value=str(value))
        return self._run()

    def set_token(self, index: int, token: Token) -> Evaluation:
        self._require_input(index)
        self._replace(index, token=token)
        return self._run()

    def set_context(self, context: StrategyContext) -> Evaluation:
        self._context = context
        values = list(self._values)
        for index, field in enumerate(self._strategy.fields):
            if isinstance(field, AmountInput):
                if values[index].token is None or field.position_token:
                    fresh = field.initial(context)
                    values[index] = replace(
                        values[index], token=fresh.token, placeholder=fresh.placeholder
                    )
        self._values = tuple(values)
        return self._run()

    def mark_unavailable(self) -> Evaluation:
        self._context = None
        evaluation = Evaluation(
            EvaluationState.DATA_UNAVAILABLE,
            self._values,
            error="Position data unavailable",
        )
        self._publish(evaluation)
        return evaluation

    def _require_input(self, index: int) -> None:
        if not isinstance(self._strategy.fields[index], AmountInput):
            raise ValueError(
                f"Field {index} of {self._strategy.key} is not editable"
            )

    def _replace(self, index: int, **changes) -> None:
        values = list(self._values)
        values[index] = replace(values[index], **changes)
        self._values = tuple(values)

    def _run(self) -> Evaluation:
        previous = self._current
        self._publish(Evaluation(EvaluationState.VALIDATING, self._values))
        try:
            evaluation = evaluate(self._strategy, self._values, self._context)
        except ArithmeticError:
            logger.error("Arithmetic error evaluating %s", self._strategy.key)
            self._publish(previous)
            raise
        self._values = evaluation.fields
        self._publish(evaluation)
        return evaluation

    def _publish(self, evaluation: Evaluation) -> None:
        self._current = evaluation
        for listener in list(self._listeners):
            try:
                listener(evaluation)
            except Exception as e:
                logger.error("Evaluation listener failed: %s", e)
