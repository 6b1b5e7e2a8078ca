from __future__ import annotations

import argparse
import json
import sys
from typing import Optional, Sequence

from pydantic import ValidationError

from splitledger.logging import configure_logging, get_logger
from splitledger.models import Expense
from splitledger.schemas import load_expenses
from splitledger.services.balances import calculate_balances, nonzero_balances
from splitledger.services.settlement import settle
from splitledger.services.validation import ExpenseValidationError, validate_expenses


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="splitledger",
        description="Compute balances and settlement transfers for shared expenses.",
    )
    parser.add_argument("--log-level", default=None, help="override LOG_LEVEL")
    commands = parser.add_subparsers(dest="command", required=True)

    balances = commands.add_parser("balances", help="print the net balance of every participant")
    balances.add_argument("file", help="JSON file with expenses, '-' for stdin")
    balances.add_argument("--all", action="store_true", help="include participants with a zero balance")
    balances.add_argument("--strict", action="store_true", help="validate expenses before computing balances")

    plan = commands.add_parser("settle", help="print the transfers that settle all balances")
    plan.add_argument("file", help="JSON file with expenses, '-' for stdin")
    plan.add_argument("--strict", action="store_true", help="validate expenses before settling")

    return parser


def _read_expenses(path: str) -> list[Expense]:
    if path == "-":
        return load_expenses(sys.stdin.read())
    with open(path, "rb") as fh:
        return load_expenses(fh.read())


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    configure_logging(args.log_level)
    log = get_logger(__name__)
    log.debug("cli.start", command=args.command, file=args.file)

    try:
        expenses = _read_expenses(args.file)
        if args.strict:
            validate_expenses(expenses)
    except (OSError, ExpenseValidationError, ValidationError, ValueError) as exc:
        log.warning("cli.invalid_input", error=str(exc))
        print(f"error: {exc}", file=sys.stderr)
        return 2

    balances = calculate_balances(expenses)
    if args.command == "balances":
        shown = balances if args.all else nonzero_balances(balances)
        output: object = {participant: str(amount) for participant, amount in shown.items()}
    else:
        output = [
            {"from": t.payer, "to": t.payee, "amount": str(t.amount)}
            for t in settle(balances)
        ]

    print(json.dumps(output, indent=2))
    return 0
