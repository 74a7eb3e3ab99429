"""
Derived balance rules.

A student's balance is never stored: it is the active room's price
minus everything the student has paid.
"""

from decimal import Decimal
from typing import Iterable, Optional

from hostel_ledger.models.base.enums import PaymentStatusLabel
from hostel_ledger.schemas.payment.payment import BalanceView
from hostel_ledger.utils.money import to_decimal, to_optional_decimal


def payment_status(expected: Optional[Decimal], paid: Decimal) -> PaymentStatusLabel:
    if expected is None:
        return PaymentStatusLabel.UNASSIGNED
    if paid >= expected:
        return PaymentStatusLabel.PAID
    if paid > 0:
        return PaymentStatusLabel.PARTIAL
    return PaymentStatusLabel.UNPAID


def compute_balance(expected, paid) -> BalanceView:
    """
    Build the balance view for one student.

    ``expected`` is None when the student holds no active assignment,
    in which case the balance is None as well.
    """
    expected = to_optional_decimal(expected)
    paid = to_decimal(paid)
    balance = expected - paid if expected is not None else None
    return BalanceView(
        expected=expected,
        paid=paid,
        balance=balance,
        status=payment_status(expected, paid),
    )


def total_outstanding(balances: Iterable[Optional[Decimal]]) -> Decimal:
    """Sum of positive balances; overpayments and unassigned students count as zero."""
    return sum(
        (b for b in balances if b is not None and b > 0),
        Decimal("0.00"),
    )
