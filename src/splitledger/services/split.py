from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from fractions import Fraction
from typing import Optional, Sequence

from splitledger.config import get_settings
from splitledger.models import ParticipantShare
from splitledger.services.balances import AmountLike, to_amount


def split_amount(
    amount: AmountLike,
    participants: Sequence[str],
    quantum: Optional[Decimal] = None,
) -> dict[str, Decimal]:
    """Split ``amount`` equally in whole units of ``quantum``.

    Leftover units are handed out one at a time from the first participant,
    so the shares always add up to ``amount`` exactly. Unit counts are plain
    integers, so the split does not depend on the decimal context precision.
    """
    try:
        amount = to_amount(amount)
    except InvalidOperation as exc:
        raise ValueError(f"amount {amount!r} is not a number") from exc
    if quantum is None:
        quantum = get_settings().amount_quantum
    if not quantum.is_finite() or quantum <= 0:
        raise ValueError("quantum must be a positive finite number")
    if not amount.is_finite():
        raise ValueError("amount must be a finite number")
    if amount < 0:
        raise ValueError("amount must be non-negative")
    if not participants:
        raise ValueError("participants must not be empty")

    ratio = Fraction(amount) / Fraction(quantum)
    if ratio.denominator != 1:
        raise ValueError(f"amount {amount} cannot be split in units of {quantum}")

    units = ratio.numerator
    n = len(participants)
    # round() on a Fraction rounds half to even
    base_share = round(Fraction(units, n))

    shares = [base_share for _ in participants]
    remainder = units - sum(shares)

    idx = 0
    step = 1 if remainder > 0 else -1
    while remainder != 0:
        shares[idx] += step
        remainder -= step
        idx = (idx + 1) % n

    result: dict[str, Decimal] = {}
    with localcontext() as ctx:
        ctx.prec = len(str(units)) + len(quantum.as_tuple().digits) + 2
        for participant, share in zip(participants, shares):
            result[participant] = result.get(participant, Decimal(0)) + share * quantum
    return result


def equal_shares(
    amount: AmountLike,
    participants: Sequence[str],
    quantum: Optional[Decimal] = None,
) -> tuple[ParticipantShare, ...]:
    split = split_amount(amount, participants, quantum)
    return tuple(ParticipantShare(participant=p, share=s) for p, s in split.items())
