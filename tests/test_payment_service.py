from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select

from hostel_ledger.models.base.enums import PaymentPurpose, PaymentStatusLabel
from hostel_ledger.models.payment.payment import Payment
from hostel_ledger.schemas.payment.payment import PaymentCreate
from hostel_ledger.services.base.service_result import ErrorCode
from hostel_ledger.services.common.errors import ValidationError
from hostel_ledger.services.common.unit_of_work import UnitOfWork
from hostel_ledger.services.communication.email_service import NotificationService
from hostel_ledger.services.payment.payment_service import PaymentService, append_payment
from hostel_ledger.services.payment.summary_cache import BalanceSummaryCache

from .conftest import FailingEmailSender


def _pay(container, hostel_id, user_id, amount, **kwargs):
    return container.payments.record_payment(
        hostel_id, PaymentCreate(user_id=user_id, amount=Decimal(amount), **kwargs)
    )


def test_receipt_reports_running_balance(container, seeded):
    container.assignments.assign(seeded.alice_id, seeded.room_101, seeded.hostel_id).unwrap()

    receipt = _pay(container, seeded.hostel_id, seeded.alice_id, "300").unwrap()

    assert receipt.payment.amount == Decimal("300")
    assert receipt.total_paid == Decimal("300")
    assert receipt.expected == Decimal("1000")
    assert receipt.balance_after == Decimal("700")
    assert receipt.is_fully_paid is False


def test_total_paid_grows_with_each_payment(container, seeded, clock):
    container.assignments.assign(seeded.alice_id, seeded.room_101, seeded.hostel_id).unwrap()

    totals = []
    for amount in ("100", "250.50", "49.50"):
        clock.advance(minutes=1)
        totals.append(_pay(container, seeded.hostel_id, seeded.alice_id, amount).unwrap().total_paid)

    assert totals == [Decimal("100"), Decimal("350.50"), Decimal("400")]


def test_payment_without_room_has_no_balance(container, seeded):
    receipt = _pay(container, seeded.hostel_id, seeded.bob_id, "200").unwrap()

    assert receipt.expected is None
    assert receipt.balance_after is None
    balance = container.payments.student_balance(seeded.bob_id, seeded.hostel_id).unwrap()
    assert balance.status == PaymentStatusLabel.UNASSIGNED
    assert balance.paid == Decimal("200")


def test_overpayment_gives_negative_balance(container, seeded, email_sender):
    container.assignments.assign(seeded.alice_id, seeded.room_103, seeded.hostel_id).unwrap()

    receipt = _pay(container, seeded.hostel_id, seeded.alice_id, "1000").unwrap()

    assert receipt.balance_after == Decimal("-200")
    assert receipt.is_fully_paid is True
    assert email_sender.subjects_for("alice@students.example.com") == ["Payment Receipt", "Payment Completed"]


def test_partial_payment_sends_only_receipt(container, seeded, email_sender):
    container.assignments.assign(seeded.alice_id, seeded.room_101, seeded.hostel_id).unwrap()

    _pay(container, seeded.hostel_id, seeded.alice_id, "10").unwrap()

    assert email_sender.subjects_for("alice@students.example.com") == ["Payment Receipt"]


def test_email_failure_does_not_undo_payment(seeded, session_factory, clock):
    sender = FailingEmailSender()
    service = PaymentService(
        session_factory,
        BalanceSummaryCache(clock=clock),
        notifications=NotificationService(sender),
        clock=clock,
    )

    result = service.record_payment(
        seeded.hostel_id, PaymentCreate(user_id=seeded.alice_id, amount=Decimal("50"))
    )

    assert result.is_success
    assert sender.attempts == 1
    session = session_factory()
    try:
        assert session.execute(select(func.count(Payment.id))).scalar_one() == 1
    finally:
        session.close()


def test_payment_for_unknown_student(container, seeded):
    result = _pay(container, seeded.hostel_id, seeded.outsider_id, "50")
    assert result.error_code == ErrorCode.NOT_FOUND


@pytest.mark.parametrize("amount", ["0", "-5"])
def test_non_positive_amount_is_rejected_by_schema(seeded, amount):
    with pytest.raises(PydanticValidationError):
        PaymentCreate(user_id=seeded.alice_id, amount=Decimal(amount))


def test_append_payment_rejects_non_positive_amount(seeded, session_factory, clock):
    with pytest.raises(ValidationError):
        with UnitOfWork(session_factory) as uow:
            append_payment(
                uow,
                student_id=seeded.alice_id,
                hostel_id=seeded.hostel_id,
                amount=Decimal("0"),
                currency="UGX",
                purpose=PaymentPurpose.BOOKING,
                now=clock(),
            )


def test_currency_and_purpose_are_recorded(container, seeded):
    receipt = _pay(
        container, seeded.hostel_id, seeded.bob_id, "75",
        currency="usd", purpose=PaymentPurpose.INSTALMENT,
    ).unwrap()

    assert receipt.payment.currency == "USD"
    assert receipt.payment.purpose == PaymentPurpose.INSTALMENT


def test_list_payments_newest_first_with_filters(container, seeded, clock):
    _pay(container, seeded.hostel_id, seeded.alice_id, "100").unwrap()
    clock.advance(minutes=5)
    _pay(container, seeded.hostel_id, seeded.bob_id, "200").unwrap()
    clock.advance(minutes=5)
    _pay(container, seeded.hostel_id, seeded.alice_id, "300").unwrap()

    page = container.payments.list_payments(seeded.hostel_id).unwrap()
    assert [p.amount for p in page.items] == [Decimal("300"), Decimal("200"), Decimal("100")]
    assert page.items[0].student_name == "Alice Namuli"

    only_bob = container.payments.list_payments(seeded.hostel_id, user_id=seeded.bob_id).unwrap()
    assert [p.amount for p in only_bob.items] == [Decimal("200")]

    searched = container.payments.list_payments(seeded.hostel_id, search="NAMULI").unwrap()
    assert searched.meta.total_items == 2

    paged = container.payments.list_payments(seeded.hostel_id, page=2, page_size=2).unwrap()
    assert [p.amount for p in paged.items] == [Decimal("100")]


def test_payments_of_other_hostels_are_not_listed(container, seeded):
    _pay(container, seeded.other_hostel_id, seeded.outsider_id, "500").unwrap()

    page = container.payments.list_payments(seeded.hostel_id).unwrap()

    assert page.items == []
    assert page.meta.total_items == 0
