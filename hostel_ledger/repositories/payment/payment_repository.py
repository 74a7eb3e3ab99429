"""
Payment Repository.

The ledger is append-only: this repository exposes inserts and reads,
never updates or deletes.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.engine import Row
from sqlalchemy.orm import Session

from hostel_ledger.models.base.enums import AssignmentStatus, PaymentPurpose, UserRole
from hostel_ledger.models.payment.payment import Payment
from hostel_ledger.models.room.room import Room
from hostel_ledger.models.room.room_assignment import RoomAssignment
from hostel_ledger.models.user.student_profile import StudentProfile
from hostel_ledger.models.user.user import User
from hostel_ledger.utils.money import to_decimal


class PaymentRepository:
    """Repository for the payment ledger and balance aggregates."""

    def __init__(self, db: Session):
        """Initialize repository with database session."""
        self.db = db

    # ==================== CREATE OPERATIONS ====================

    def create_payment(
        self,
        student_id: UUID,
        hostel_id: UUID,
        amount: Decimal,
        currency: str,
        purpose: PaymentPurpose,
        created_at: datetime,
    ) -> Payment:
        payment = Payment(
            student_id=student_id,
            hostel_id=hostel_id,
            amount=amount,
            currency=currency,
            purpose=purpose,
            created_at=created_at,
            updated_at=created_at,
        )
        self.db.add(payment)
        self.db.flush()
        return payment

    # ==================== AGGREGATES ====================

    def total_for_student(self, student_id: UUID, hostel_id: UUID) -> Decimal:
        stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.student_id == student_id,
            Payment.hostel_id == hostel_id,
        )
        return to_decimal(self.db.execute(stmt).scalar_one())

    def total_for_hostel(self, hostel_id: UUID) -> Decimal:
        stmt = select(func.coalesce(func.sum(Payment.amount), 0)).where(
            Payment.hostel_id == hostel_id,
        )
        return to_decimal(self.db.execute(stmt).scalar_one())

    def student_balance_rows(self, hostel_id: UUID) -> Sequence[Row]:
        """
        One row per live student of the hostel, ordered by name.

        Columns: user_id, name, email, access_number, phone, whatsapp,
        room_number, room_type, expected, paid. ``expected`` and the
        room columns are null for students without an active assignment.
        """
        paid_sq = (
            select(
                Payment.student_id.label("student_id"),
                func.sum(Payment.amount).label("paid"),
            )
            .where(Payment.hostel_id == hostel_id)
            .group_by(Payment.student_id)
            .subquery()
        )
        active_sq = (
            select(
                RoomAssignment.student_id.label("student_id"),
                Room.room_number.label("room_number"),
                Room.room_type.label("room_type"),
                Room.price.label("expected"),
            )
            .join(Room, Room.id == RoomAssignment.room_id)
            .where(RoomAssignment.status == AssignmentStatus.ACTIVE)
            .subquery()
        )
        stmt = (
            select(
                User.id.label("user_id"),
                User.name,
                User.email,
                StudentProfile.access_number,
                StudentProfile.phone,
                StudentProfile.whatsapp,
                active_sq.c.room_number,
                active_sq.c.room_type,
                active_sq.c.expected,
                paid_sq.c.paid,
            )
            .outerjoin(StudentProfile, StudentProfile.user_id == User.id)
            .outerjoin(active_sq, active_sq.c.student_id == User.id)
            .outerjoin(paid_sq, paid_sq.c.student_id == User.id)
            .where(
                User.hostel_id == hostel_id,
                User.role == UserRole.USER,
                User.is_deleted.is_(False),
            )
            .order_by(User.name.asc(), User.email.asc())
        )
        return self.db.execute(stmt).all()

    # ==================== READ OPERATIONS ====================

    def list_for_hostel(
        self,
        hostel_id: UUID,
        offset: int,
        limit: int,
        student_id: Optional[UUID] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Row], int]:
        """
        Newest payments first, each row carrying the Payment and the
        student's name and email.
        """
        conditions = [Payment.hostel_id == hostel_id]
        if student_id is not None:
            conditions.append(Payment.student_id == student_id)
        if search:
            pattern = f"%{search.strip().lower()}%"
            conditions.append(
                or_(
                    func.lower(User.name).like(pattern),
                    func.lower(User.email).like(pattern),
                    func.lower(Payment.purpose).like(pattern),
                )
            )

        total = self.db.execute(
            select(func.count(Payment.id))
            .join(User, User.id == Payment.student_id)
            .where(*conditions)
        ).scalar_one()

        stmt = (
            select(Payment, User.name.label("student_name"), User.email.label("student_email"))
            .join(User, User.id == Payment.student_id)
            .where(*conditions)
            .order_by(Payment.created_at.desc(), Payment.id.desc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.db.execute(stmt).all()), total
