"""Liquity trove strategies."""
from __future__ import annotations

from decimal import Decimal

from ..fixed_point import ZERO, plus, times, to_wei
from ..interfaces.hints import HintLookup
from ..models import OperationDescriptor, StrategyContext
from .common import (
    amount_validator,
    check_min_debt,
    projected_debt,
    projected_liquidation_price,
    projected_status,
)
from .compiler import operation, request_hints, require_token
from .definition import Strategy
from .fields import AmountInput, FieldValue, Heading, StatusDisplay, ValueDisplay

CONNECTOR = "LIQUITY-A"

# Register holding the borrowed LUSD between adjust and stabilityDeposit.
BORROW_REGISTER = 1

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

COLLATERAL_TOKEN = "eth"
DEBT_TOKEN = "lusd"


def _fields() -> tuple:
    return (
        AmountInput(
            "Collateral",
            token_key=COLLATERAL_TOKEN,
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
        ValueDisplay("Liquidation Price (in ETH)", update=projected_liquidation_price()),
    )


def _borrow_fee(context: StrategyContext) -> Decimal:
    if context.position_type is None:
        return ZERO
    return context.position_type.borrow_fee


def validate_trove(
    fields: tuple[FieldValue, ...], context: StrategyContext
) -> str | None:
    position = context.position
    if not position.is_open:
        return "You should open new trove first"
    symbol = fields[1].token.symbol if fields[1].token else "LUSD"
    return check_min_debt(
        position, fields[1].amount, _borrow_fee(context), context.limits, symbol
    )


async def _adjust(
    fields: tuple[FieldValue, ...],
    context: StrategyContext,
    hints: HintLookup | None,
    set_ids=(0, 0, 0, 0),
) -> tuple[OperationDescriptor, int]:
    position = context.position
    collateral_token = require_token(fields[0])
    debt_token = require_token(fields[1])
    fee = _borrow_fee(context)

    deposit = to_wei(fields[0].amount, collateral_token.decimals)
    borrow = to_wei(fields[1].amount, debt_token.decimals)
    total_collateral = to_wei(
        plus(position.collateral, fields[0].amount), collateral_token.decimals
    )
    total_debt = to_wei(
        projected_debt(position, fields[1].amount, fee), debt_token.decimals
    )
    upper, lower = await request_hints(hints, total_collateral, total_debt)

    max_fee = to_wei(times(fee, 100), 18)
    adjust = operation(
        CONNECTOR,
        "adjust",
        [max_fee, deposit, 0, borrow, 0, upper, lower],
        set_ids=set_ids,
    )
    return adjust, borrow


async def deposit_borrow_spells(
    fields: tuple[FieldValue, ...],
    context: StrategyContext,
    hints: HintLookup | None,
) -> list[OperationDescriptor]:
    adjust, _ = await _adjust(fields, context, hints)
    return [adjust]


async def borrow_stability_deposit_spells(
    fields: tuple[FieldValue, ...],
    context: StrategyContext,
    hints: HintLookup | None,
) -> list[OperationDescriptor]:
    adjust, borrow = await _adjust(
        fields, context, hints, set_ids=(0, 0, BORROW_REGISTER, 0)
    )
    deposit = operation(
        CONNECTOR,
        "stabilityDeposit",
        [borrow, ZERO_ADDRESS],
        get_ids=(BORROW_REGISTER, 0, 0, 0),
    )
    return [adjust, deposit]


DEPOSIT_BORROW = Strategy(
    key="liquity-deposit-borrow",
    protocol="liquity",
    name="Deposit & Borrow",
    description="Deposit collateral & borrow asset in a single txn.",
    fields=_fields(),
    spells=deposit_borrow_spells,
    validate=validate_trove,
    details=("Deposit ETH as collateral", "Borrow LUSD as Debt"),
    submit_text="Deposit & Borrow",
    needs_hints=True,
)

BORROW_STABILITY_DEPOSIT = Strategy(
    key="liquity-borrow-stability-deposit",
    protocol="liquity",
    name="Borrow & Deposit to Stability Pool",
    description="Borrow LUSD against ETH and put it in the stability pool.",
    fields=_fields(),
    spells=borrow_stability_deposit_spells,
    validate=validate_trove,
    details=(
        "Deposit ETH as collateral",
        "Borrow LUSD as Debt",
        "Deposit the borrowed LUSD into the Stability Pool",
    ),
    submit_text="Borrow & Deposit",
    needs_hints=True,
)
