"""Strategy session: one strategy instance bound to a position selection.

Position reads are asynchronous and may complete out of order. Each read
carries the request token current when it started; once the selection
changes, results of older reads are dropped instead of overwriting the
context of the newer selection.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, Mapping

from ..errors import DataUnavailable, ValidationError
from ..interfaces.hints import HintLookup
from ..models import OperationDescriptor, ProtocolLimits, StrategyContext, Token
from ..strategies.compiler import compile_spells
from ..strategies.definition import Strategy
from ..strategies.evaluator import (
    ComponentEvaluator,
    Evaluation,
    EvaluationState,
    Listener,
)
from .position_service import PositionService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Selection:
    owner: str = ""
    position_id: str | None = None
    type_name: str | None = None


class StrategySession:
    def __init__(
        self,
        strategy: Strategy,
        service: PositionService,
        tokens: Mapping[str, Token],
        limits: ProtocolLimits | None = None,
        hints: HintLookup | None = None,
        balances: Mapping[str, Decimal] | None = None,
    ) -> None:
        self._strategy = strategy
        self._service = service
        self._tokens = dict(tokens)
        self._limits = limits or ProtocolLimits()
        self._hints = hints
        self._balances = dict(balances or {})
        self._evaluator = ComponentEvaluator(strategy)
        self._selection = Selection()
        self._request_token = 0
        self._inflight: asyncio.Task | None = None
        self._inflight_token = -1

    @property
    def strategy(self) -> Strategy:
        return self._strategy

    @property
    def selection(self) -> Selection:
        return self._selection

    @property
    def current(self) -> Evaluation:
        return self._evaluator.current

    @property
    def context(self) -> StrategyContext | None:
        return self._evaluator.context

    @property
    def balances(self) -> dict[str, Decimal]:
        return dict(self._balances)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self._evaluator.subscribe(listener)

    def select(
        self,
        owner: str = "",
        position_id: str | None = None,
        type_name: str | None = None,
    ) -> None:
        """Switch the position the strategy works on; pending reads go stale."""
        selection = Selection(owner=owner, position_id=position_id, type_name=type_name)
        if selection == self._selection:
            return
        self._selection = selection
        self._request_token += 1
        logger.debug("Selection changed to %s (token %d)", selection, self._request_token)

    async def refresh(self) -> Evaluation:
        """Load the context for the current selection and re-evaluate.

        Concurrent calls for the same selection share one read.
        """
        task = self._inflight
        if (
            task is not None
            and not task.done()
            and self._inflight_token == self._request_token
        ):
            return await task

        token = self._request_token
        task = asyncio.ensure_future(self._load(token, self._selection))
        self._inflight = task
        self._inflight_token = token
        return await task

    async def _load(self, token: int, selection: Selection) -> Evaluation:
        book = await self._service.refresh(selection.owner or None)
        if token != self._request_token:
            logger.debug(
                "Dropping stale %s read (token %d, current %d)",
                self._service.protocol_name, token, self._request_token,
            )
            return self._evaluator.current

        if not book.available:
            return self._evaluator.mark_unavailable()

        position = book.select(selection.position_id, selection.type_name, selection.owner)
        if position is None:
            logger.warning("No %s position types available", self._service.protocol_name)
            return self._evaluator.mark_unavailable()

        context = StrategyContext(
            position=position,
            position_type=book.find_type(position.type_name),
            limits=self._limits,
            balances=self._balances,
            tokens=self._tokens,
        )
        return self._evaluator.set_context(context)

    def set_value(self, index: int, value: str) -> Evaluation:
        return self._evaluator.set_value(index, value)

    def set_token(self, index: int, token: Token) -> Evaluation:
        return self._evaluator.set_token(index, token)

    def require_ready(self) -> Evaluation:
        """Return the current evaluation or raise why it cannot be used."""
        evaluation = self._evaluator.current
        if evaluation.state in (EvaluationState.IDLE, EvaluationState.DATA_UNAVAILABLE):
            raise DataUnavailable(
                f"No {self._service.protocol_name} position data loaded"
            )
        if evaluation.state == EvaluationState.INVALID:
            raise ValidationError(evaluation.error or "Invalid input")
        return evaluation

    async def compile(self) -> tuple[OperationDescriptor, ...]:
        return await compile_spells(
            self._strategy,
            self._evaluator.current,
            self._evaluator.context,
            self._hints,
        )
