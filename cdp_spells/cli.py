"""Command-line interface for the CDP spell builder."""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import sys
from decimal import Decimal
from typing import Any

from .config import load_config
from .errors import CompilationError, DataUnavailable, ValidationError
from .fixed_point import to_decimal, to_fixed
from .logging_setup import configure_logging
from .services import PositionWatcher, Runtime
from .strategies import STRATEGIES

logger = logging.getLogger(__name__)

RATE_DIGITS = 18


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="cdp-spells",
        description="Compute CDP positions and compile strategy spells",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    types_parser = sub.add_parser("types", help="List collateral types")
    types_parser.add_argument("--protocol", default=None, help="Only this protocol")

    positions_parser = sub.add_parser("positions", help="List an owner's positions")
    positions_parser.add_argument("owner", help="Owner address")
    positions_parser.add_argument("--protocol", default=None, help="Only this protocol")

    sub.add_parser("strategies", help="List available strategies")

    compile_parser = sub.add_parser("compile", help="Validate inputs and print spells")
    compile_parser.add_argument("strategy", choices=sorted(STRATEGIES))
    compile_parser.add_argument("--owner", default="", help="Owner address")
    compile_parser.add_argument(
        "--position-id",
        default=None,
        help="Existing position id (default: the owner's first position)",
    )
    compile_parser.add_argument(
        "--new", action="store_true", help="Work on a new position instead"
    )
    compile_parser.add_argument(
        "--type", dest="type_name", default=None, help="Collateral type for a new position"
    )
    compile_parser.add_argument("--collateral", default="0", help="Collateral amount")
    compile_parser.add_argument("--debt", default="0", help="Debt amount")
    compile_parser.add_argument(
        "--balance",
        action="append",
        metavar="KEY=AMOUNT",
        help="Wallet balance of a token, checked against the deposit (repeatable)",
    )

    watch_parser = sub.add_parser("watch", help="Periodically log position risk")
    watch_parser.add_argument("owner", help="Owner address")
    watch_parser.add_argument(
        "interval",
        nargs="?",
        type=int,
        default=None,
        help="Refresh interval in seconds (overrides config)",
    )

    return parser


def _as_record(value: Any) -> dict[str, Any]:
    """Dataclass as a dict; annual rates keep all 18 fractional digits."""
    record = dataclasses.asdict(value)
    if isinstance(record.get("rate"), Decimal):
        record["rate"] = to_fixed(record["rate"], RATE_DIGITS)
    return record


def _parse_balances(entries: list[str] | None) -> dict[str, Decimal]:
    balances = {}
    for entry in entries or ():
        key, sep, amount = entry.partition("=")
        if not sep or not key:
            raise ValueError(f"Balance must look like KEY=AMOUNT, got '{entry}'")
        balances[key.strip()] = to_decimal(amount)
    return balances


def _json_default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return to_fixed(value)
    if dataclasses.is_dataclass(value):
        return _as_record(value)
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, default=_json_default, indent=2))


def _selected(runtime: Runtime, protocol: str | None) -> dict:
    services = runtime.services
    if protocol is None:
        return services
    return {protocol: runtime.service(protocol)}


async def _list_types(runtime: Runtime, protocol: str | None) -> None:
    result = {}
    for name, service in _selected(runtime, protocol).items():
        result[name] = [_as_record(t) for t in await service.fetch_types()]
    _print_json(result)


async def _list_positions(runtime: Runtime, owner: str, protocol: str | None) -> None:
    result = {}
    for name, service in _selected(runtime, protocol).items():
        book = await service.refresh(owner)
        result[name] = {
            "available": book.available,
            "positions": [_as_record(p) for p in book.positions],
        }
    _print_json(result)


def _list_strategies() -> None:
    _print_json([
        {
            "key": s.key,
            "protocol": s.protocol,
            "name": s.name,
            "description": s.description,
            "details": list(s.details),
            "fields": [f.name for f in s.fields],
        }
        for s in STRATEGIES.values()
    ])


async def _compile(runtime: Runtime, args: argparse.Namespace) -> int:
    try:
        balances = _parse_balances(args.balance)
    except (ValueError, ArithmeticError) as e:
        logger.error("Invalid --balance: %s", e)
        return 2

    session = runtime.session(args.strategy, balances)
    position_id = "0" if args.new else args.position_id
    session.select(args.owner, position_id, args.type_name)
    await session.refresh()

    inputs = session.strategy.input_indexes
    session.set_value(inputs[0], args.collateral)
    session.set_value(inputs[1], args.debt)

    try:
        evaluation = session.require_ready()
        spells = await session.compile()
    except (DataUnavailable, ValidationError, CompilationError) as e:
        logger.error("Cannot compile %s: %s", args.strategy, e)
        return 2

    _print_json({
        "strategy": args.strategy,
        "fields": [
            {"name": f.name, "value": f.value, "display": f.display}
            for f in evaluation.fields
        ],
        "spells": [spell.to_dict() for spell in spells],
    })
    return 0


async def _run(args: argparse.Namespace) -> int:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    runtime = Runtime(config)

    if args.command == "types":
        await _list_types(runtime, args.protocol)
    elif args.command == "positions":
        await _list_positions(runtime, args.owner, args.protocol)
    elif args.command == "strategies":
        _list_strategies()
    elif args.command == "compile":
        return await _compile(runtime, args)
    elif args.command == "watch":
        watcher = PositionWatcher(runtime.services, args.owner, config.watch)
        await watcher.run_continuous(args.interval)
    else:
        build_parser().print_help()
        return 1
    return 0


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    sys.exit(asyncio.run(_run(args)))
