from __future__ import annotations

from decimal import Decimal
from typing import Iterable, Optional

from splitledger.config import get_settings
from splitledger.logging import get_logger
from splitledger.models import Expense
from splitledger.services.balances import ZERO, to_amount


class ExpenseValidationError(ValueError):
    def __init__(self, message: str, index: Optional[int] = None) -> None:
        self.index = index
        self.message = message
        prefix = f"expense #{index}: " if index is not None else ""
        super().__init__(f"{prefix}{message}")


def _check_money(value: Decimal, label: str, index: Optional[int]) -> None:
    if not value.is_finite():
        raise ExpenseValidationError(f"{label} must be a finite number", index)
    if value < 0:
        raise ExpenseValidationError(f"{label} must be non-negative", index)


def validate_expense(expense: Expense, tolerance: Decimal, index: Optional[int] = None) -> None:
    if not expense.payer:
        raise ExpenseValidationError("payer must not be empty", index)

    amount = to_amount(expense.amount)
    _check_money(amount, "amount", index)

    if not expense.shares:
        raise ExpenseValidationError("expense must have at least one participant", index)

    seen: set[str] = set()
    total = ZERO
    for share in expense.shares:
        if not share.participant:
            raise ExpenseValidationError("participant must not be empty", index)
        value = to_amount(share.share)
        _check_money(value, f"share of {share.participant}", index)
        if share.participant in seen:
            get_logger(__name__).warning(
                "validation.duplicate_participant",
                index=index,
                participant=share.participant,
            )
        seen.add(share.participant)
        total += value

    if abs(total - amount) > tolerance:
        raise ExpenseValidationError(f"shares add up to {total}, expected {amount}", index)


def validate_expenses(expenses: Iterable[Expense], tolerance: Optional[Decimal] = None) -> list[Expense]:
    """Reject malformed expenses before they reach the balance calculation.

    The calculation itself accepts anything; this is the optional strict
    boundary. Duplicate participants are allowed and only logged.
    """
    if tolerance is None:
        tolerance = get_settings().share_tolerance

    checked: list[Expense] = []
    for index, expense in enumerate(expenses):
        validate_expense(expense, tolerance, index)
        checked.append(expense)
    return checked
