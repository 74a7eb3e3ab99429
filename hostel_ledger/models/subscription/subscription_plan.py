"""
Subscription plan catalog.

``total_price`` is stored redundantly alongside ``price_per_month``;
the two are not reconciled arithmetically.
"""

from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.db.base import Base
from hostel_ledger.models.base.mixins import TimestampMixin, UUIDMixin
from hostel_ledger.models.base.types import MoneyType


class SubscriptionPlan(UUIDMixin, TimestampMixin, Base):
    """Purchasable subscription term for hostels."""

    __tablename__ = "subscription_plans"

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        comment="Plan display name",
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    duration_months: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Subscription length in calendar months",
    )
    price_per_month: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    total_price: Mapped[Decimal] = mapped_column(MoneyType, nullable=False)
    is_active: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=True,
        index=True,
    )

    __table_args__ = (
        CheckConstraint("duration_months > 0", name="ck_subscription_plans_duration_positive"),
        CheckConstraint("price_per_month >= 0", name="ck_subscription_plans_monthly_non_negative"),
        CheckConstraint("total_price >= 0", name="ck_subscription_plans_total_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<SubscriptionPlan(id={self.id}, name='{self.name}', months={self.duration_months})>"
