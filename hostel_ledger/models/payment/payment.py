"""
Payment ledger entry.

Rows are append-only: balances are always derived from the sum of
amounts, never stored.
"""

from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.db.base import Base
from hostel_ledger.models.base.enums import PaymentPurpose
from hostel_ledger.models.base.mixins import TimestampMixin, UUIDMixin
from hostel_ledger.models.base.types import MoneyType, enum_column_type


class Payment(UUIDMixin, TimestampMixin, Base):
    """Money received from a student."""

    __tablename__ = "payments"

    student_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    hostel_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("hostels.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        comment="Hostel the student belonged to when the payment was written",
    )
    amount: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
    )
    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default="UGX",
    )
    purpose: Mapped[PaymentPurpose] = mapped_column(
        enum_column_type(PaymentPurpose, "payment_purpose"),
        nullable=False,
        default=PaymentPurpose.BOOKING,
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_payments_amount_positive"),
        Index("idx_payments_hostel_created", "hostel_id", "created_at"),
        Index("idx_payments_student_hostel", "student_id", "hostel_id"),
    )

    def __repr__(self) -> str:
        return (
            f"<Payment(id={self.id}, student_id={self.student_id}, "
            f"amount={self.amount} {self.currency})>"
        )
