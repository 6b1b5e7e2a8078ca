from __future__ import annotations

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from splitledger.config import get_settings
from splitledger.models import Expense, ParticipantShare
from splitledger.services.split import equal_shares


class ParticipantPayload(BaseModel):
    address: str
    share: Optional[Decimal] = None


class ExpensePayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    description: str = ""
    amount: Decimal
    paid_by_address: str = Field(..., alias="paidByAddress")
    participants: list[ParticipantPayload]
    currency: str = Field(default_factory=lambda: get_settings().currency)

    @model_validator(mode="after")
    def _shares_all_or_none(self) -> "ExpensePayload":
        given = [p.share is not None for p in self.participants]
        if any(given) and not all(given):
            raise ValueError("either every participant has a share or none does")
        return self

    def to_expense(self, quantum: Optional[Decimal] = None) -> Expense:
        if self.participants and self.participants[0].share is None:
            shares = equal_shares(self.amount, [p.address for p in self.participants], quantum)
        else:
            shares = tuple(
                ParticipantShare(participant=p.address, share=p.share)  # type: ignore[arg-type]
                for p in self.participants
            )
        return Expense(payer=self.paid_by_address, amount=self.amount, shares=shares)


_expense_list = TypeAdapter(list[ExpensePayload])


def load_expenses(data: str | bytes, quantum: Optional[Decimal] = None) -> list[Expense]:
    """Parse a JSON array of expense documents.

    Documents use the stored shape: ``paidByAddress``, ``amount`` and
    ``participants`` as ``{"address", "share"}`` objects. Leaving every
    ``share`` out splits the amount equally.
    """
    payloads = _expense_list.validate_json(data)
    return [payload.to_expense(quantum) for payload in payloads]
