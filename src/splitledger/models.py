from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional


@dataclass(frozen=True, slots=True)
class ParticipantShare:
    participant: str
    share: Decimal


@dataclass(frozen=True, slots=True)
class Expense:
    payer: str
    amount: Decimal
    shares: tuple[ParticipantShare, ...] = ()


@dataclass(frozen=True, slots=True)
class Transfer:
    payer: str
    payee: str
    amount: Decimal


@dataclass(slots=True)
class SettlementRecord:
    id: str
    group_id: str
    payer: str
    payee: str
    amount: Decimal
    is_paid: bool = False
    txn_id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def involves(self, address: str) -> bool:
        return address in (self.payer, self.payee)
