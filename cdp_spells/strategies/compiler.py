"""Spell compiler: turns a ready evaluation into operation descriptors."""
from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..errors import CompilationError
from ..interfaces.hints import HintLookup
from ..models import NO_REGISTERS, OperationDescriptor, StrategyContext, Token
from .definition import Strategy
from .evaluator import Evaluation
from .fields import FieldValue

logger = logging.getLogger(__name__)

REGISTER_SLOTS = 4


def _registers(ids: Sequence[int], label: str) -> tuple[int, int, int, int]:
    values = tuple(ids)
    if len(values) != REGISTER_SLOTS:
        raise ValueError(f"{label} needs {REGISTER_SLOTS} slots, got {len(values)}")
    for value in values:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"{label} slots must be non-negative ints: {values!r}")
    return values  # type: ignore[return-value]


def operation(
    connector: str,
    method: str,
    args: Iterable[object] = (),
    get_ids: Sequence[int] = NO_REGISTERS,
    set_ids: Sequence[int] = NO_REGISTERS,
) -> OperationDescriptor:
    """Build one descriptor; ``args`` are stringified in order."""
    return OperationDescriptor(
        connector=connector,
        method=method,
        args=tuple(str(arg) for arg in args),
        get_ids=_registers(get_ids, "get_ids"),
        set_ids=_registers(set_ids, "set_ids"),
    )


async def request_hints(
    hints: HintLookup | None, collateral: int, debt: int
) -> tuple[str, str]:
    """Look up insertion hints; any failure blocks compilation."""
    if hints is None:
        raise CompilationError("No hint lookup configured")
    try:
        upper, lower = await hints.get_position_hints(collateral, debt)
    except Exception as e:
        logger.error("Hint lookup failed for %s/%s: %s", collateral, debt, e)
        raise CompilationError(f"Hint lookup failed: {e}") from e
    if not upper or not lower:
        raise CompilationError("Hint lookup returned an empty hint")
    return upper, lower


def require_token(field: FieldValue) -> Token:
    if field.token is None:
        raise CompilationError(f"{field.name} has no token")
    return field.token


async def compile_spells(
    strategy: Strategy,
    evaluation: Evaluation,
    context: StrategyContext | None,
    hints: HintLookup | None = None,
) -> tuple[OperationDescriptor, ...]:
    if not evaluation.ready:
        raise CompilationError(
            f"Strategy {strategy.key} is not ready ({evaluation.state.value})"
        )
    if evaluation.noop:
        return ()
    if context is None or context.position is None:
        raise CompilationError("No position loaded")
    if strategy.needs_hints and hints is None:
        raise CompilationError(f"Strategy {strategy.key} requires a hint lookup")

    spells = tuple(await strategy.spells(evaluation.fields, context, hints))
    logger.info("Compiled %d spells for %s", len(spells), strategy.key)
    return spells
