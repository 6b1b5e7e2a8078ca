from __future__ import annotations

from decimal import Decimal
from typing import Iterable, List, Mapping

from splitledger.models import Expense, Transfer
from splitledger.services.balances import calculate_balances, to_amount


def settle(balances: Mapping[str, Decimal]) -> List[Transfer]:
    """Greedy settlement plan that zeroes every balance.

    Debtors are paired in mapping order; for each debtor the creditors are
    scanned from the last one backward. The pairing depends on key order, so
    differently ordered inputs can give different but equally valid plans.
    The transfer count is small but not guaranteed minimal.
    """
    debtors: list[tuple[str, Decimal]] = []
    creditors: list[tuple[str, Decimal]] = []

    for participant, balance in balances.items():
        balance = to_amount(balance)
        if not balance.is_finite():
            continue
        if balance < 0:
            debtors.append((participant, -balance))
        elif balance > 0:
            creditors.append((participant, balance))

    transfers: list[Transfer] = []

    for debt_id, debt_amount in debtors:
        # Creditors past the scan position are always exhausted and popped,
        # so the one being scanned is always the last element.
        while debt_amount > 0 and creditors:
            cred_id, cred_amount = creditors[-1]
            # creditors start positive and are popped on reaching zero, so this
            # only fires if that entry invariant is ever broken
            if cred_amount == 0:
                creditors.pop()
                continue

            transfer_amount = min(debt_amount, cred_amount)
            transfers.append(Transfer(payer=debt_id, payee=cred_id, amount=transfer_amount))

            debt_amount -= transfer_amount
            cred_amount -= transfer_amount

            if cred_amount == 0:
                creditors.pop()
            else:
                creditors[-1] = (cred_id, cred_amount)

    return transfers


def calculate_debts(expenses: Iterable[Expense]) -> List[Transfer]:
    return settle(calculate_balances(expenses))
