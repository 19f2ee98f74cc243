"""Reflexer SAFE strategies."""
from __future__ import annotations

from ..fixed_point import is_zero, to_wei
from ..interfaces.hints import HintLookup
from ..models import OperationDescriptor, StrategyContext
from .common import (
    amount_validator,
    check_debt_ceiling,
    check_min_debt,
    projected_liquidation_price,
    projected_status,
)
from .compiler import operation, require_token
from .definition import Strategy
from .fields import AmountInput, FieldValue, Heading, StatusDisplay, ValueDisplay

CONNECTOR = "REFLEXER-A"

# Register holding the id of a SAFE opened earlier in the same spell.
SAFE_REGISTER = 1

DEBT_TOKEN = "rai"


def validate_safe(
    fields: tuple[FieldValue, ...], context: StrategyContext
) -> str | None:
    position_type = context.position_type
    if position_type is not None and position_type.disabled:
        return f"Collateral type {position_type.type_name} is disabled"

    symbol = fields[1].token.symbol if fields[1].token else "RAI"
    message = check_min_debt(
        context.position, fields[1].amount, 0, context.limits, symbol, allow_zero=True
    )
    if message:
        return message
    if position_type is not None:
        return check_debt_ceiling(position_type, fields[1].amount)
    return None


async def deposit_borrow_spells(
    fields: tuple[FieldValue, ...],
    context: StrategyContext,
    hints: HintLookup | None,
) -> list[OperationDescriptor]:
    position = context.position
    collateral_token = require_token(fields[0])
    debt_token = require_token(fields[1])
    deposit = to_wei(fields[0].amount, collateral_token.decimals)
    borrow = to_wei(fields[1].amount, debt_token.decimals)

    spells = []
    safe_id = position.id
    reads_safe = (0, 0, 0, 0)
    if position.is_new:
        spells.append(
            operation(
                CONNECTOR, "open", [position.type_name], set_ids=(SAFE_REGISTER, 0, 0, 0)
            )
        )
        safe_id = "0"
        reads_safe = (SAFE_REGISTER, 0, 0, 0)

    if not is_zero(deposit):
        spells.append(
            operation(CONNECTOR, "deposit", [safe_id, deposit], get_ids=reads_safe)
        )
    if not is_zero(borrow):
        spells.append(
            operation(CONNECTOR, "borrow", [safe_id, borrow], get_ids=reads_safe)
        )
    return spells


DEPOSIT_BORROW = Strategy(
    key="reflexer-deposit-borrow",
    protocol="reflexer",
    name="Deposit & Borrow",
    description="Deposit collateral & borrow RAI in a single txn.",
    fields=(
        AmountInput(
            "Collateral",
            position_token=True,
            placeholder="{symbol} to Deposit",
            validate=amount_validator("Collateral", check_balance=True),
        ),
        AmountInput(
            "Debt",
            token_key=DEBT_TOKEN,
            placeholder="{symbol} to Borrow",
            validate=amount_validator("Debt"),
        ),
        Heading("Projected Debt Position"),
        StatusDisplay("Status", update=projected_status()),
        ValueDisplay("Liquidation Price", update=projected_liquidation_price()),
    ),
    spells=deposit_borrow_spells,
    validate=validate_safe,
    details=("Deposit collateral into the SAFE", "Borrow RAI as Debt"),
    submit_text="Deposit & Borrow",
)
