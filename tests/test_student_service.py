from decimal import Decimal

import pytest
from pydantic import ValidationError
from sqlalchemy import func, select

from hostel_ledger.models.base.enums import RoomStatus
from hostel_ledger.models.payment.payment import Payment
from hostel_ledger.models.room.room import Room
from hostel_ledger.models.user.user import User
from hostel_ledger.schemas.payment.payment import PaymentCreate
from hostel_ledger.schemas.student.student import NotifyRequest, StudentCreate
from hostel_ledger.services.base.service_result import ErrorCode


def _count(session_factory, stmt):
    session = session_factory()
    try:
        return session.execute(stmt).scalar_one()
    finally:
        session.close()


def test_register_with_room_and_initial_payment(container, seeded, session_factory, email_sender):
    registration = container.students.register_student(
        seeded.hostel_id,
        StudentCreate(
            email="Dan@Students.example.com",
            name="Dan Mugisha",
            access_number="A2001",
            room_id=seeded.room_103,
            initial_payment=Decimal("300"),
        ),
    ).unwrap()

    assert registration.student.email == "dan@students.example.com"
    assert registration.student.room.room_number == "103"
    assert registration.assignment.room_id == seeded.room_103
    assert registration.payment.amount == Decimal("300")
    assert registration.payment.currency == "UGX"
    assert registration.payment.purpose.value == "booking"

    session = session_factory()
    try:
        assert session.get(Room, seeded.room_103).status == RoomStatus.OCCUPIED
    finally:
        session.close()
    assert email_sender.subjects_for("dan@students.example.com") == ["Welcome to Makerere Heights"]


def test_registration_rolls_back_when_room_is_taken(container, seeded, session_factory):
    container.assignments.assign(seeded.alice_id, seeded.room_101, seeded.hostel_id).unwrap()

    result = container.students.register_student(
        seeded.hostel_id,
        StudentCreate(
            email="erin@students.example.com",
            name="Erin",
            room_id=seeded.room_101,
            initial_payment=Decimal("500"),
        ),
    )

    assert result.error_code == ErrorCode.ROOM_UNAVAILABLE
    assert _count(session_factory, select(func.count(User.id)).where(User.email == "erin@students.example.com")) == 0
    assert _count(session_factory, select(func.count(Payment.id))) == 0


def test_registration_without_room(container, seeded):
    registration = container.students.register_student(
        seeded.hostel_id,
        StudentCreate(email="frank@students.example.com", name="Frank"),
    ).unwrap()

    assert registration.student.room is None
    assert registration.assignment is None
    assert registration.payment is None


def test_email_of_staff_cannot_register_as_student(container, seeded):
    result = container.students.register_student(
        seeded.hostel_id,
        StudentCreate(email="admin@heights.example.com", name="Sneaky"),
    )
    assert result.error_code == ErrorCode.CONFLICT


def test_student_of_another_hostel_is_rejected(container, seeded):
    result = container.students.register_student(
        seeded.hostel_id,
        StudentCreate(email="carol@students.example.com", name="Carol Akello"),
    )
    assert result.error_code == ErrorCode.CONFLICT


def test_delete_student_frees_room_and_keeps_payments(container, seeded, session_factory):
    container.assignments.assign(seeded.alice_id, seeded.room_101, seeded.hostel_id).unwrap()
    container.payments.record_payment(
        seeded.hostel_id,
        PaymentCreate(user_id=seeded.alice_id, amount=Decimal("400")),
    ).unwrap()

    assert container.students.delete_student(seeded.alice_id, seeded.hostel_id).unwrap() is True

    session = session_factory()
    try:
        assert session.get(Room, seeded.room_101).status == RoomStatus.AVAILABLE
        assert session.get(User, seeded.alice_id).is_deleted is True
    finally:
        session.close()
    assert _count(session_factory, select(func.count(Payment.id))) == 1
    assert container.students.get_student(seeded.alice_id, seeded.hostel_id).error_code == ErrorCode.NOT_FOUND
    names = [s.name for s in container.students.list_students(seeded.hostel_id).unwrap()]
    assert names == ["Bob Okello"]


def test_deleted_student_can_be_registered_again(container, seeded):
    container.students.delete_student(seeded.bob_id, seeded.hostel_id).unwrap()

    registration = container.students.register_student(
        seeded.hostel_id,
        StudentCreate(email="bob@students.example.com", name="Bob Okello", room_id=seeded.room_102),
    ).unwrap()

    assert registration.student.user_id == seeded.bob_id
    assert registration.student.room.room_number == "102"


def test_delete_student_of_another_hostel(container, seeded):
    result = container.students.delete_student(seeded.outsider_id, seeded.hostel_id)
    assert result.error_code == ErrorCode.NOT_FOUND


def test_list_students_includes_current_room(container, seeded):
    container.assignments.assign(seeded.bob_id, seeded.room_102, seeded.hostel_id).unwrap()

    students = container.students.list_students(seeded.hostel_id).unwrap()

    by_name = {s.name: s for s in students}
    assert by_name["Alice Namuli"].room is None
    assert by_name["Bob Okello"].room.price == Decimal("1500")
    assert by_name["Alice Namuli"].access_number == "A1001"


def test_notify_all_students(container, seeded, email_sender):
    result = container.students.notify_students(
        seeded.hostel_id,
        NotifyRequest(subject="Water outage", message="No water on Saturday.\nSorry."),
    ).unwrap()

    assert (result.requested, result.sent) == (2, 2)
    assert sorted(m.to for m in email_sender.sent) == ["alice@students.example.com", "bob@students.example.com"]
    assert "<br>" in email_sender.sent[0].html


def test_notify_one_student(container, seeded, email_sender):
    result = container.students.notify_students(
        seeded.hostel_id,
        NotifyRequest(subject="Fees", message="Please clear your balance", user_id=seeded.bob_id),
    ).unwrap()

    assert result.sent == 1
    assert [m.to for m in email_sender.sent] == ["bob@students.example.com"]


@pytest.mark.parametrize("email", ["not-an-email", "ivan@", "ivan@campus.test"])
def test_student_email_is_validated(email):
    with pytest.raises(ValidationError):
        StudentCreate(email=email, name="Ivan")
