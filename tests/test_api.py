from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from hostel_ledger.api import deps
from hostel_ledger.core.cache import MemoryBackend
from hostel_ledger.core.constants import REQUEST_ID_HEADER
from hostel_ledger.main import create_app
from hostel_ledger.models.base.enums import UserRole
from hostel_ledger.schemas.auth.current_user import CurrentUser

API = "/api/v1"


@pytest.fixture
def tokens(seeded):
    return {
        "admin": {"sub": str(seeded.admin_id), "role": "hostel_admin", "hostel_id": str(seeded.hostel_id)},
        "custodian": {"sub": str(seeded.custodian_id), "role": "custodian"},
        "root": {"sub": str(seeded.super_admin_id), "role": "super_admin"},
        "student": {"sub": str(seeded.alice_id), "role": "user", "hostel_id": str(seeded.hostel_id)},
    }


@pytest.fixture
def app(settings, session_factory, clock, email_sender, tokens):
    def verify_token(token):
        if token not in tokens:
            raise ValueError("unknown token")
        return tokens[token]

    return create_app(
        settings=settings,
        session_factory=session_factory,
        clock=clock,
        email_sender=email_sender,
        cache_backend=MemoryBackend(),
        token_verifier=verify_token,
        configure_logging=False,
    )


@pytest.fixture
def client(app):
    return TestClient(app)


def auth(name):
    return {"Authorization": f"Bearer {name}"}


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={REQUEST_ID_HEADER: "req-123"})
    assert response.headers[REQUEST_ID_HEADER] == "req-123"


def test_missing_token_is_unauthorized(client):
    response = client.get(f"{API}/rooms")

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


def test_unknown_token_is_unauthorized(client):
    assert client.get(f"{API}/rooms", headers=auth("forged")).status_code == 401


def test_students_cannot_manage_rooms(client):
    response = client.get(f"{API}/rooms", headers=auth("student"))
    assert response.status_code == 403


def test_room_crud(client):
    created = client.post(
        f"{API}/rooms",
        json={"room_number": "301", "price": "1800.00", "room_type": "single"},
        headers=auth("admin"),
    )
    assert created.status_code == 201
    room_id = created.json()["id"]

    duplicate = client.post(f"{API}/rooms", json={"room_number": "301", "price": "1"}, headers=auth("admin"))
    assert duplicate.status_code == 409
    assert duplicate.json()["error"]["code"] == "ALREADY_EXISTS"

    updated = client.patch(f"{API}/rooms/{room_id}", json={"price": "1900"}, headers=auth("admin"))
    assert updated.status_code == 200
    assert Decimal(updated.json()["price"]) == Decimal("1900")

    listing = client.get(f"{API}/rooms", params={"page_size": 2}, headers=auth("admin")).json()
    assert listing["meta"]["total_items"] == 4
    assert len(listing["items"]) == 2

    assert client.delete(f"{API}/rooms/{room_id}", headers=auth("admin")).status_code == 204
    assert client.get(f"{API}/rooms/{room_id}", headers=auth("admin")).status_code == 404


def test_explicit_null_price_is_rejected(client, seeded):
    response = client.patch(f"{API}/rooms/{seeded.room_101}", json={"price": None}, headers=auth("admin"))

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_custodian_works_in_profile_hostel(client, seeded):
    response = client.get(f"{API}/rooms/available", headers=auth("custodian"))

    assert response.status_code == 200
    assert {r["hostel_id"] for r in response.json()} == {str(seeded.hostel_id)}


def test_super_admin_must_pick_a_hostel(client, seeded):
    assert client.get(f"{API}/rooms", headers=auth("root")).status_code == 403

    response = client.get(f"{API}/rooms", params={"hostel_id": str(seeded.other_hostel_id)}, headers=auth("root"))
    assert response.status_code == 200
    assert [r["room_number"] for r in response.json()["items"]] == ["A1"]


def test_register_pay_and_summarize(client, seeded, email_sender):
    registered = client.post(
        f"{API}/students",
        json={
            "email": "hana@students.example.com",
            "name": "Hana",
            "room_id": str(seeded.room_101),
            "initial_payment": "400",
        },
        headers=auth("admin"),
    )
    assert registered.status_code == 201
    student_id = registered.json()["student"]["user_id"]

    first = client.get(f"{API}/payments/summary", headers=auth("admin"))
    second = client.get(f"{API}/payments/summary", headers=auth("admin"))
    assert first.headers["X-Cache"] == "MISS"
    assert second.headers["X-Cache"] == "HIT"
    assert Decimal(first.json()["total_outstanding"]) == Decimal("600")

    paid = client.post(
        f"{API}/payments",
        json={"user_id": student_id, "amount": "600", "purpose": "balance_clearance"},
        headers=auth("admin"),
    )
    assert paid.status_code == 201
    assert Decimal(paid.json()["balance_after"]) == Decimal("0")

    third = client.get(f"{API}/payments/summary", headers=auth("admin"))
    assert third.headers["X-Cache"] == "MISS"
    assert Decimal(third.json()["total_collected"]) == Decimal("1000")

    balance = client.get(f"{API}/payments/students/{student_id}/balance", headers=auth("admin")).json()
    assert balance["status"] == "paid"
    assert "Payment Completed" in email_sender.subjects_for("hana@students.example.com")


def test_non_positive_payment_is_rejected(client, seeded):
    response = client.post(
        f"{API}/payments",
        json={"user_id": str(seeded.alice_id), "amount": "0"},
        headers=auth("admin"),
    )
    assert response.status_code == 422


def test_assignment_conflicts(client, seeded):
    assigned = client.post(
        f"{API}/students/{seeded.alice_id}/assignment",
        json={"room_id": str(seeded.room_102)},
        headers=auth("admin"),
    )
    assert assigned.status_code == 201

    taken = client.post(
        f"{API}/students/{seeded.bob_id}/assignment",
        json={"room_id": str(seeded.room_102)},
        headers=auth("admin"),
    )
    assert taken.status_code == 409
    error = taken.json()["error"]
    assert (error["code"], error["message"]) == ("ROOM_UNAVAILABLE", "Invalid or unavailable room")

    status_change = client.patch(
        f"{API}/rooms/{seeded.room_102}", json={"status": "available"}, headers=auth("admin")
    )
    assert status_change.status_code == 409
    assert status_change.json()["error"]["code"] == "ROOM_HAS_ACTIVE_ASSIGNMENT"

    ended = client.delete(f"{API}/students/{seeded.alice_id}/assignment", headers=auth("admin"))
    assert ended.status_code == 200
    assert ended.json()["status"] == "ended"
    assert client.get(f"{API}/students/{seeded.alice_id}/assignment", headers=auth("admin")).json() is None


def test_students_of_other_hostels_are_not_found(client, seeded):
    response = client.get(f"{API}/students/{seeded.outsider_id}", headers=auth("admin"))
    assert response.status_code == 404


def test_delete_student(client, seeded):
    assert client.delete(f"{API}/students/{seeded.bob_id}", headers=auth("admin")).status_code == 204
    names = [s["name"] for s in client.get(f"{API}/students", headers=auth("admin")).json()]
    assert names == ["Alice Namuli"]


def test_notify(client, email_sender):
    response = client.post(
        f"{API}/students/notify",
        json={"subject": "Rent due", "message": "Rent is due on Friday"},
        headers=auth("custodian"),
    )
    assert response.json() == {"requested": 2, "sent": 2}
    assert len(email_sender.sent) == 2


def test_subscription_flow(client, seeded, plans, clock):
    gate = client.get(f"{API}/auth/login-gate", headers=auth("admin")).json()
    assert gate["allow"] is False
    assert gate["code"] == "SUBSCRIPTION_MISSING"

    created = client.post(
        f"{API}/hostels/{seeded.hostel_id}/subscriptions",
        json={"plan_id": str(plans["Semester"].id)},
        headers=auth("root"),
    )
    assert created.status_code == 201

    clock.advance(days=100)
    gate = client.get(f"{API}/auth/login-gate", headers=auth("custodian")).json()
    assert gate["allow"] is True
    assert gate["warning"]["daysLeft"] == 20

    renewed = client.post(
        f"{API}/hostels/{seeded.hostel_id}/subscriptions/renew",
        json={"plan_id": str(plans["Full Year"].id), "payment_method": "mobile_money"},
        headers=auth("admin"),
    )
    assert renewed.status_code == 201
    current = client.get(f"{API}/hostels/{seeded.hostel_id}/subscriptions/current", headers=auth("admin")).json()
    assert current["id"] == renewed.json()["id"]
    assert current["plan_name"] == "Full Year"

    history = client.get(f"{API}/hostels/{seeded.hostel_id}/subscriptions", headers=auth("admin")).json()
    assert len(history) == 2


def test_staff_cannot_reach_other_hostels(client, seeded):
    response = client.get(f"{API}/hostels/{seeded.other_hostel_id}/subscriptions/current", headers=auth("admin"))
    assert response.status_code == 403


def test_only_super_admin_creates_hostels(client, plans):
    payload = {"name": "Nakulabye Lodge", "plan_id": str(plans["Semester"].id)}

    assert client.post(f"{API}/hostels", json=payload, headers=auth("admin")).status_code == 403

    created = client.post(f"{API}/hostels", json=payload, headers=auth("root"))
    assert created.status_code == 201
    assert created.json()["current_subscription_id"] is not None


def test_expired_subscriptions_listing(client, seeded, plans, clock):
    client.post(
        f"{API}/hostels/{seeded.hostel_id}/subscriptions",
        json={"plan_id": str(plans["Semester"].id)},
        headers=auth("root"),
    )
    clock.advance(days=200)

    expired = client.get(f"{API}/subscriptions/expired", headers=auth("root")).json()
    assert [s["hostel_id"] for s in expired] == [str(seeded.hostel_id)]

    gate = client.get(f"{API}/auth/login-gate", headers=auth("admin")).json()
    assert gate["code"] == "SUBSCRIPTION_EXPIRED"


def test_plans_are_listed_for_any_user(client, plans):
    response = client.get(f"{API}/subscription-plans", headers=auth("student"))
    assert [p["name"] for p in response.json()] == ["Semester", "Half Year", "Full Year"]


def test_current_user_dependency_can_be_overridden(app, seeded):
    app.dependency_overrides[deps.get_current_user] = lambda: CurrentUser(
        id=seeded.admin_id, role=UserRole.HOSTEL_ADMIN, hostel_id=seeded.hostel_id
    )
    client = TestClient(app)

    response = client.get(f"{API}/students")

    assert response.status_code == 200
    assert len(response.json()) == 2
