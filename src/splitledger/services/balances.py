from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Mapping, Union

from splitledger.models import Expense

ZERO = Decimal(0)

AmountLike = Union[Decimal, int, float, str]


def to_amount(value: AmountLike) -> Decimal:
    """Coerce a numeric value to ``Decimal`` without binary-float drift.

    Floats go through ``str`` so ``0.1`` becomes ``Decimal("0.1")`` rather
    than its exact binary expansion.
    """
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        return Decimal(str(value))
    return Decimal(value)


def _adjust(balances: dict[str, Decimal], participant: str, delta: Decimal) -> None:
    balances[participant] = balances.get(participant, ZERO) + delta


def calculate_balances(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """Net balance per participant: positive is owed to them, negative they owe.

    Keys keep the order in which participants are first seen. A payer who is
    also a participant is credited the full amount and debited their share.
    Shares are not checked against the amount.
    """
    balances: dict[str, Decimal] = {}
    for expense in expenses:
        _adjust(balances, expense.payer, to_amount(expense.amount))
        for share in expense.shares:
            _adjust(balances, share.participant, -to_amount(share.share))
    return balances


def nonzero_balances(balances: Mapping[str, Decimal]) -> dict[str, Decimal]:
    return {participant: balance for participant, balance in balances.items() if balance != 0}


def outstanding_balances(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    return nonzero_balances(calculate_balances(expenses))
