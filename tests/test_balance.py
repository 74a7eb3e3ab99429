from decimal import Decimal

import pytest

from hostel_ledger.models.base.enums import PaymentStatusLabel
from hostel_ledger.services.payment.balance import compute_balance, payment_status, total_outstanding


@pytest.mark.parametrize(
    "expected, paid, label",
    [
        (None, "0", PaymentStatusLabel.UNASSIGNED),
        (None, "500", PaymentStatusLabel.UNASSIGNED),
        ("1000", "0", PaymentStatusLabel.UNPAID),
        ("1000", "999.99", PaymentStatusLabel.PARTIAL),
        ("1000", "1000", PaymentStatusLabel.PAID),
        ("1000", "1200", PaymentStatusLabel.PAID),
    ],
)
def test_payment_status(expected, paid, label):
    expected = Decimal(expected) if expected is not None else None
    assert payment_status(expected, Decimal(paid)) == label


def test_compute_balance_handles_missing_sums():
    view = compute_balance(Decimal("1000"), None)

    assert view.paid == Decimal("0.00")
    assert view.balance == Decimal("1000.00")


def test_compute_balance_without_room():
    view = compute_balance(None, Decimal("300"))

    assert view.expected is None
    assert view.balance is None


def test_total_outstanding_ignores_credit_and_unassigned():
    balances = [Decimal("700"), Decimal("-200"), None, Decimal("0"), Decimal("50.25")]
    assert total_outstanding(balances) == Decimal("750.25")


def test_total_outstanding_of_nothing_is_zero():
    assert total_outstanding([]) == Decimal("0.00")
