"""
Hostel subscription term.

One row per term; renewals append rows and the hostel's
``current_subscription_id`` selects the governing one. The stored
``status`` may lag behind the calendar, so usability is always
decided together with ``end_date``.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_ledger.db.base import Base
from hostel_ledger.models.base.enums import SubscriptionStatus
from hostel_ledger.models.base.mixins import TimestampMixin, UUIDMixin
from hostel_ledger.models.base.types import MoneyType, enum_column_type


class HostelSubscription(UUIDMixin, TimestampMixin, Base):
    """A subscription term purchased by a hostel."""

    __tablename__ = "hostel_subscriptions"

    hostel_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    plan_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("subscription_plans.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )
    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        index=True,
    )
    amount_paid: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        default=Decimal("0"),
    )
    status: Mapped[SubscriptionStatus] = mapped_column(
        enum_column_type(SubscriptionStatus, "subscription_status"),
        nullable=False,
        default=SubscriptionStatus.ACTIVE,
    )
    payment_method: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    payment_reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    plan = relationship("SubscriptionPlan")

    __table_args__ = (
        CheckConstraint("end_date > start_date", name="ck_hostel_subscriptions_dates"),
        CheckConstraint("amount_paid >= 0", name="ck_hostel_subscriptions_amount_non_negative"),
        Index("idx_hostel_subscriptions_hostel_end", "hostel_id", "end_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<HostelSubscription(id={self.id}, hostel_id={self.hostel_id}, "
            f"status={self.status.value if self.status else None}, end_date={self.end_date})>"
        )
