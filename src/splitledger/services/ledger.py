"""Group-level settlement bookkeeping on top of a pluggable store.

Every expense mutation is followed by a full recomputation: the group's
expenses are re-read, settled from scratch, and the stored settlements are
replaced as a whole. The store is responsible for making the replacement
atomic; serializing recomputations of one group is up to the caller.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional, Protocol, Sequence

from splitledger.logging import get_logger
from splitledger.models import Expense, SettlementRecord, Transfer
from splitledger.services.balances import calculate_balances, nonzero_balances
from splitledger.services.settlement import settle
from splitledger.services.validation import validate_expenses


class SettlementRepository(Protocol):
    async def fetch_group_expenses(self, group_id: str) -> Sequence[Expense]: ...

    async def replace_group_settlements(
        self, group_id: str, transfers: Sequence[Transfer]
    ) -> list[SettlementRecord]: ...

    async def get_settlement(self, settlement_id: str) -> Optional[SettlementRecord]: ...

    async def update_settlement(self, record: SettlementRecord) -> None: ...

    async def list_settlements(self) -> Sequence[SettlementRecord]: ...


class SettlementNotFoundError(LookupError):
    pass


def _newest_first(records: Sequence[SettlementRecord]) -> list[SettlementRecord]:
    return sorted(records, key=lambda record: record.created_at, reverse=True)


async def recompute_group_settlements(
    repo: SettlementRepository,
    group_id: str,
    *,
    strict: bool = False,
) -> list[SettlementRecord]:
    log = get_logger(__name__)
    expenses = list(await repo.fetch_group_expenses(group_id))
    if strict:
        validate_expenses(expenses)

    transfers = settle(calculate_balances(expenses))
    records = await repo.replace_group_settlements(group_id, transfers)
    log.info(
        "ledger.recompute",
        group_id=group_id,
        expenses=len(expenses),
        settlements=len(records),
    )
    return records


async def get_group_balances(repo: SettlementRepository, group_id: str) -> dict[str, Decimal]:
    expenses = await repo.fetch_group_expenses(group_id)
    return nonzero_balances(calculate_balances(expenses))


async def mark_settlement_paid(
    repo: SettlementRepository,
    settlement_id: str,
    txn_id: Optional[str],
) -> SettlementRecord:
    record = await repo.get_settlement(settlement_id)
    if record is None:
        raise SettlementNotFoundError(f"settlement {settlement_id} not found")

    record.is_paid = True
    record.txn_id = txn_id
    await repo.update_settlement(record)
    get_logger(__name__).info("ledger.settlement_paid", settlement_id=settlement_id, txn_id=txn_id)
    return record


async def find_settlements(
    repo: SettlementRepository,
    group_id: Optional[str] = None,
    address: Optional[str] = None,
) -> list[SettlementRecord]:
    records = await repo.list_settlements()
    if group_id is not None:
        records = [record for record in records if record.group_id == group_id]
    if address is not None:
        records = [record for record in records if record.involves(address)]
    return _newest_first(records)


async def get_group_settlements(repo: SettlementRepository, group_id: str) -> list[SettlementRecord]:
    records = await find_settlements(repo, group_id=group_id)
    return [record for record in records if not record.is_paid]


async def get_pending_settlements(repo: SettlementRepository, address: str) -> list[SettlementRecord]:
    records = await find_settlements(repo, address=address)
    return [record for record in records if not record.is_paid]
