from decimal import Decimal

from splitledger.models import Expense, ParticipantShare, Transfer
from splitledger.services.balances import calculate_balances
from splitledger.services.settlement import calculate_debts, settle


def _apply(balances, transfers):
    after = dict(balances)
    for t in transfers:
        after[t.payer] += t.amount
        after[t.payee] -= t.amount
    return after


def test_settle_single_creditor():
    balances = {"A": Decimal(60), "B": Decimal(-30), "C": Decimal(-30)}

    transfers = settle(balances)

    assert transfers == [
        Transfer(payer="B", payee="A", amount=Decimal(30)),
        Transfer(payer="C", payee="A", amount=Decimal(30)),
    ]
    assert all(value == 0 for value in _apply(balances, transfers).values())


def test_settle_scans_creditors_from_the_end():
    balances = {
        "D1": Decimal(-50),
        "C1": Decimal(20),
        "D2": Decimal(-30),
        "C2": Decimal(40),
        "C3": Decimal(20),
    }

    transfers = settle(balances)

    assert transfers == [
        Transfer(payer="D1", payee="C3", amount=Decimal(20)),
        Transfer(payer="D1", payee="C2", amount=Decimal(30)),
        Transfer(payer="D2", payee="C2", amount=Decimal(10)),
        Transfer(payer="D2", payee="C1", amount=Decimal(20)),
    ]
    assert all(value == 0 for value in _apply(balances, transfers).values())


def test_settle_three_debtors_one_creditor():
    balances = {
        "creditor": Decimal("60.5"),
        "d1": Decimal("-10.25"),
        "d2": Decimal("-20.25"),
        "d3": Decimal("-30"),
    }

    transfers = settle(balances)

    assert len(transfers) == 3
    assert all(t.payee == "creditor" for t in transfers)
    assert all(t.amount > 0 for t in transfers)
    assert sum(t.amount for t in transfers) == Decimal("60.5")

    remaining = [_apply(balances, transfers[: i + 1])["creditor"] for i in range(len(transfers))]
    assert remaining[0] > 0
    assert remaining[1] > 0
    assert remaining[2] == 0


def test_settle_skips_zero_balances():
    balances = {"A": Decimal(0), "B": Decimal("0.00")}
    assert settle(balances) == []


def test_settle_empty():
    assert settle({}) == []
    assert calculate_debts([]) == []


def test_settle_transfer_count_bound_and_positivity():
    balances = {
        "a": Decimal("-12.34"),
        "b": Decimal("45.67"),
        "c": Decimal("-7.01"),
        "d": Decimal("-26.32"),
        "e": Decimal("3.5"),
        "f": Decimal("-3.5"),
    }
    assert sum(balances.values()) == 0
    debtors = sum(1 for v in balances.values() if v < 0)
    creditors = sum(1 for v in balances.values() if v > 0)

    transfers = settle(balances)

    assert len(transfers) <= debtors + creditors - 1
    for t in transfers:
        assert t.amount > 0
        assert t.payer != t.payee
    assert all(value == 0 for value in _apply(balances, transfers).values())


def test_settle_leaves_residue_when_totals_differ():
    balances = {"A": Decimal(50), "B": Decimal(-30), "C": Decimal(-30)}

    transfers = settle(balances)

    assert transfers == [
        Transfer(payer="B", payee="A", amount=Decimal(30)),
        Transfer(payer="C", payee="A", amount=Decimal(20)),
    ]
    assert _apply(balances, transfers)["C"] == Decimal(-10)


def test_settle_ignores_non_finite_balances():
    balances = {"A": Decimal(10), "B": Decimal("NaN"), "C": Decimal(-10)}
    assert settle(balances) == [Transfer(payer="C", payee="A", amount=Decimal(10))]


def test_calculate_debts_net_single_transfer():
    expenses = [
        Expense(
            payer="B",
            amount=Decimal(75),
            shares=(
                ParticipantShare("A", Decimal(25)),
                ParticipantShare("B", Decimal(25)),
                ParticipantShare("C", Decimal(25)),
            ),
        ),
        Expense(
            payer="C",
            amount=Decimal(25),
            shares=(ParticipantShare("C", Decimal(25)),),
        ),
        Expense(
            payer="C",
            amount=Decimal(25),
            shares=(ParticipantShare("B", Decimal(25)),),
        ),
    ]

    assert {k: v for k, v in calculate_balances(expenses).items() if v != 0} == {
        "B": Decimal(25),
        "A": Decimal(-25),
    }
    assert calculate_debts(expenses) == [Transfer(payer="A", payee="B", amount=Decimal(25))]


def test_calculate_debts_is_deterministic():
    expenses = [
        Expense("x", Decimal("10.10"), (ParticipantShare("y", Decimal("5.05")), ParticipantShare("z", Decimal("5.05")))),
        Expense("y", Decimal("3"), (ParticipantShare("x", Decimal("1")), ParticipantShare("z", Decimal("2")))),
    ]

    first = calculate_debts(expenses)
    second = calculate_debts(expenses)

    assert first == second
    assert first


def test_settle_accepts_plain_numbers():
    assert settle({"A": 5, "B": -5}) == [Transfer(payer="B", payee="A", amount=Decimal(5))]
