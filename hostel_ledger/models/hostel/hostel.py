"""
Hostel model.

A hostel is the tenant boundary: rooms, students, payments and
subscriptions all belong to exactly one hostel.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.db.base import Base
from hostel_ledger.models.base.mixins import TimestampMixin, UUIDMixin


class Hostel(UUIDMixin, TimestampMixin, Base):
    """Tenant hostel with a pointer to its governing subscription."""

    __tablename__ = "hostels"

    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
        comment="Hostel display name",
    )
    address: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
        comment="Free-text postal address",
    )
    contact_email: Mapped[Optional[str]] = mapped_column(
        String(255),
        nullable=True,
    )
    contact_phone: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
    )

    # Pointer designating which subscription row governs access right now
    current_subscription_id: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey(
            "hostel_subscriptions.id",
            ondelete="SET NULL",
            use_alter=True,
            name="fk_hostels_current_subscription_id",
        ),
        nullable=True,
        comment="Subscription that governs login access",
    )

    def __repr__(self) -> str:
        return f"<Hostel(id={self.id}, name='{self.name}')>"
