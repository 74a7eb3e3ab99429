"""Shared fixtures: in-memory database, controllable clock and seeded hostel."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from hostel_ledger.config.settings import Settings
from hostel_ledger.core.cache import MemoryBackend
from hostel_ledger.core.container import ServiceContainer
from hostel_ledger.db.base import Base, import_models
from hostel_ledger.db.session import make_session_factory
from hostel_ledger.models.base.enums import RoomStatus, UserRole
from hostel_ledger.models.hostel.hostel import Hostel
from hostel_ledger.models.room.room import Room
from hostel_ledger.models.user.custodian import CustodianProfile
from hostel_ledger.models.user.student_profile import StudentProfile
from hostel_ledger.models.user.user import User
from hostel_ledger.services.subscription.plan_service import PlanService

START = datetime(2025, 1, 15, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self, now: datetime = START) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class RecordingEmailSender:
    def __init__(self) -> None:
        self.sent = []

    def send_email(self, to: str, subject: str, html: str) -> None:
        self.sent.append(SimpleNamespace(to=to, subject=subject, html=html))

    def subjects_for(self, to: str):
        return [m.subject for m in self.sent if m.to == to]


class FailingEmailSender:
    def __init__(self) -> None:
        self.attempts = 0

    def send_email(self, to: str, subject: str, html: str) -> None:
        self.attempts += 1
        raise ConnectionRefusedError("SMTP relay unavailable")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import_models()
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def settings():
    return Settings(DATABASE_URL="sqlite://", CACHE_BACKEND="memory", ENVIRONMENT="testing")


@pytest.fixture
def container(settings, session_factory, clock, email_sender):
    return ServiceContainer.build(
        settings,
        session_factory,
        clock=clock,
        email_sender=email_sender,
        cache_backend=MemoryBackend(),
    )


@pytest.fixture
def plans(session_factory):
    """The default catalog, keyed by plan name."""
    service = PlanService(session_factory)
    service.seed_default_plans().unwrap()
    return {plan.name: plan for plan in service.list_plans().unwrap()}


def _add_hostel(session, name):
    hostel = Hostel(name=name, address="Plot 1, Kampala")
    session.add(hostel)
    session.flush()
    return hostel


def _add_user(session, email, name, role, hostel_id):
    user = User(email=email, name=name, role=role, hostel_id=hostel_id, is_deleted=False)
    session.add(user)
    session.flush()
    return user


def _add_room(session, hostel_id, number, price, room_type="single"):
    room = Room(
        hostel_id=hostel_id,
        room_number=number,
        room_type=room_type,
        price=Decimal(price),
        self_contained=False,
        status=RoomStatus.AVAILABLE,
    )
    session.add(room)
    session.flush()
    return room


@pytest.fixture
def seeded(session_factory):
    """
    Two hostels. The first has an admin, a custodian, two students
    (Alice, Bob) and three rooms; the second has one room and one student.
    """
    session = session_factory()
    try:
        hostel = _add_hostel(session, "Makerere Heights")
        other = _add_hostel(session, "Kikoni View")

        admin = _add_user(session, "admin@heights.example.com", "Hostel Admin", UserRole.HOSTEL_ADMIN, hostel.id)
        custodian = _add_user(session, "custodian@heights.example.com", "Custodian", UserRole.CUSTODIAN, None)
        session.add(CustodianProfile(user_id=custodian.id, hostel_id=hostel.id))
        super_admin = _add_user(session, "root@platform.example.com", "Platform Admin", UserRole.SUPER_ADMIN, None)

        alice = _add_user(session, "alice@students.example.com", "Alice Namuli", UserRole.USER, hostel.id)
        bob = _add_user(session, "bob@students.example.com", "Bob Okello", UserRole.USER, hostel.id)
        session.add(StudentProfile(user_id=alice.id, access_number="A1001", phone="0700000001"))
        session.add(StudentProfile(user_id=bob.id, access_number="A1002", phone="0700000002"))
        outsider = _add_user(session, "carol@students.example.com", "Carol Akello", UserRole.USER, other.id)

        r101 = _add_room(session, hostel.id, "101", "1000")
        r102 = _add_room(session, hostel.id, "102", "1500", room_type="double")
        r103 = _add_room(session, hostel.id, "103", "800")
        other_room = _add_room(session, other.id, "A1", "900")
        session.commit()

        return SimpleNamespace(
            hostel_id=hostel.id,
            other_hostel_id=other.id,
            admin_id=admin.id,
            custodian_id=custodian.id,
            super_admin_id=super_admin.id,
            alice_id=alice.id,
            bob_id=bob.id,
            outsider_id=outsider.id,
            room_101=r101.id,
            room_102=r102.id,
            room_103=r103.id,
            other_room=other_room.id,
        )
    finally:
        session.close()
