from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from hostel_ledger.models.base.enums import PaymentPurpose
from hostel_ledger.schemas.payment.payment import PaymentReceipt, PaymentResponse
from hostel_ledger.services.communication.email_service import NotificationService
from hostel_ledger.utils.email import TemplateRenderer, format_money

from .conftest import FailingEmailSender, RecordingEmailSender


def _receipt(amount="250000", total_paid="400000", expected="1000000", balance_after="600000"):
    return PaymentReceipt(
        payment=PaymentResponse(
            id=uuid4(),
            created_at=datetime(2025, 1, 15, tzinfo=timezone.utc),
            student_id=uuid4(),
            hostel_id=uuid4(),
            amount=Decimal(amount),
            currency="UGX",
            purpose=PaymentPurpose.INSTALMENT,
        ),
        total_paid=Decimal(total_paid),
        expected=Decimal(expected) if expected is not None else None,
        balance_after=Decimal(balance_after) if balance_after is not None else None,
    )


@pytest.fixture
def sender():
    return RecordingEmailSender()


@pytest.fixture
def notifications(sender):
    return NotificationService(sender)


def test_receipt_body(notifications, sender):
    receipt = _receipt()

    assert notifications.send_payment_receipt("alice@students.example.com", "Alice", receipt) is True

    message = sender.sent[0]
    assert message.subject == "Payment Receipt"
    assert "Hello Alice," in message.html
    assert "<strong>UGX 250,000.00</strong> (instalment)" in message.html
    assert "Total paid: UGX 400,000.00" in message.html
    assert "Balance: UGX 600,000.00" in message.html
    assert str(receipt.payment.id) in message.html


def test_receipt_without_room_shows_dash(notifications, sender):
    notifications.send_payment_receipt("a@students.example.com", "Alice", _receipt(expected=None, balance_after=None))

    assert "Room price: -" in sender.sent[0].html
    assert "Balance: -" in sender.sent[0].html


def test_names_are_escaped(notifications, sender):
    notifications.send_welcome("a@students.example.com", "<b>Alice</b>", "Heights & Co", None)

    html = sender.sent[0].html
    assert "&lt;b&gt;Alice&lt;/b&gt;" in html
    assert "Heights &amp; Co" in html
    assert "Your room" not in html
    assert sender.sent[0].subject == "Welcome to Heights & Co"


def test_welcome_with_room(notifications, sender):
    notifications.send_welcome("a@students.example.com", "Alice", "Makerere Heights", "101")

    assert "Your room: <strong>101</strong>" in sender.sent[0].html


def test_notice_keeps_line_breaks(notifications, sender):
    notifications.send_notice("a@students.example.com", "Alice", "Water", "No water <today>\nSorry")

    assert "No water &lt;today&gt;<br>Sorry" in sender.sent[0].html


def test_delivery_failure_is_reported_not_raised():
    failing = FailingEmailSender()
    notifications = NotificationService(failing)

    assert notifications.send_payment_completed("a@students.example.com", "Alice", _receipt()) is False
    assert failing.attempts == 1


def test_missing_template_is_reported_not_raised(sender, tmp_path):
    notifications = NotificationService(sender, TemplateRenderer(tmp_path))

    assert notifications.send_notice("a@students.example.com", "Alice", "Hi", "Hello") is False
    assert sender.sent == []


def test_format_money():
    assert format_money(Decimal("1500"), "UGX") == "UGX 1,500.00"
    assert format_money(None, "UGX") == "-"
