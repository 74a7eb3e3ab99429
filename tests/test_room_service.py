from decimal import Decimal

from hostel_ledger.models.base.enums import RoomStatus
from hostel_ledger.schemas.room.room import RoomCreate, RoomUpdate
from hostel_ledger.services.base.service_result import ErrorCode


def test_create_room_defaults_to_available(container, seeded):
    result = container.rooms.create_room(
        seeded.hostel_id,
        RoomCreate(room_number="  201 ", price=Decimal("1200"), room_type="single"),
    )

    assert result.is_success
    room = result.data
    assert room.room_number == "201"
    assert room.status == RoomStatus.AVAILABLE
    assert room.hostel_id == seeded.hostel_id


def test_room_number_is_unique_within_a_hostel(container, seeded):
    duplicate = container.rooms.create_room(seeded.hostel_id, RoomCreate(room_number="101", price=Decimal("1")))
    assert duplicate.error_code == ErrorCode.ALREADY_EXISTS

    elsewhere = container.rooms.create_room(seeded.other_hostel_id, RoomCreate(room_number="101", price=Decimal("1")))
    assert elsewhere.is_success


def test_rooms_are_invisible_to_other_hostels(container, seeded):
    result = container.rooms.get_room(seeded.room_101, seeded.other_hostel_id)
    assert result.error_code == ErrorCode.NOT_FOUND


def test_list_rooms_is_paginated(container, seeded):
    page = container.rooms.list_rooms(seeded.hostel_id, page=1, page_size=2).unwrap()

    assert len(page.items) == 2
    assert page.meta.total_items == 3


def test_available_rooms_exclude_occupied_and_maintenance(container, seeded):
    container.assignments.assign(seeded.alice_id, seeded.room_101, seeded.hostel_id).unwrap()
    container.rooms.update_room(
        seeded.room_103, seeded.hostel_id, RoomUpdate(status=RoomStatus.MAINTENANCE)
    ).unwrap()

    available = container.rooms.list_available_rooms(seeded.hostel_id).unwrap()

    assert [r.room_number for r in available] == ["102"]


def test_occupied_room_status_cannot_be_changed(container, seeded):
    container.assignments.assign(seeded.alice_id, seeded.room_101, seeded.hostel_id).unwrap()

    result = container.rooms.update_room(
        seeded.room_101, seeded.hostel_id, RoomUpdate(status=RoomStatus.AVAILABLE)
    )

    assert result.error_code == ErrorCode.ROOM_HAS_ACTIVE_ASSIGNMENT
    room = container.rooms.get_room(seeded.room_101, seeded.hostel_id).unwrap()
    assert room.status == RoomStatus.OCCUPIED


def test_room_cannot_be_marked_occupied_by_hand(container, seeded):
    result = container.rooms.update_room(
        seeded.room_102, seeded.hostel_id, RoomUpdate(status=RoomStatus.OCCUPIED)
    )
    assert result.error_code == ErrorCode.VALIDATION_ERROR


def test_price_of_occupied_room_can_change(container, seeded):
    container.assignments.assign(seeded.alice_id, seeded.room_101, seeded.hostel_id).unwrap()

    room = container.rooms.update_room(
        seeded.room_101, seeded.hostel_id, RoomUpdate(price=Decimal("1100"))
    ).unwrap()

    assert room.price == Decimal("1100")
    balance = container.payments.student_balance(seeded.alice_id, seeded.hostel_id).unwrap()
    assert balance.expected == Decimal("1100")


def test_price_change_invalidates_summary(container, seeded):
    container.assignments.assign(seeded.alice_id, seeded.room_101, seeded.hostel_id).unwrap()
    first = container.summaries.get_summary(seeded.hostel_id).unwrap()

    container.rooms.update_room(seeded.room_101, seeded.hostel_id, RoomUpdate(price=Decimal("2000"))).unwrap()
    second = container.summaries.get_summary(seeded.hostel_id)

    assert second.metadata["cached"] is False
    assert second.data.total_outstanding == Decimal("2000")
    assert first.total_outstanding == Decimal("1000")


def test_delete_occupied_room_is_rejected(container, seeded):
    container.assignments.assign(seeded.alice_id, seeded.room_101, seeded.hostel_id).unwrap()

    result = container.rooms.delete_room(seeded.room_101, seeded.hostel_id)

    assert result.error_code == ErrorCode.ROOM_HAS_ACTIVE_ASSIGNMENT
    assert container.rooms.get_room(seeded.room_101, seeded.hostel_id).is_success


def test_delete_free_room(container, seeded):
    assert container.rooms.delete_room(seeded.room_103, seeded.hostel_id).unwrap() is True
    assert container.rooms.get_room(seeded.room_103, seeded.hostel_id).error_code == ErrorCode.NOT_FOUND
