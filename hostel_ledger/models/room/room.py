"""
Room model.

Status is kept in step with assignments: a room is ``occupied``
exactly when one active assignment references it.
"""

from decimal import Decimal
from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.db.base import Base
from hostel_ledger.models.base.enums import RoomStatus
from hostel_ledger.models.base.mixins import TimestampMixin, UUIDMixin
from hostel_ledger.models.base.types import MoneyType, enum_column_type


class Room(UUIDMixin, TimestampMixin, Base):
    """Bookable room within a hostel."""

    __tablename__ = "rooms"

    hostel_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_number: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        comment="Room number, unique within the hostel",
    )
    room_type: Mapped[Optional[str]] = mapped_column(
        String(50),
        nullable=True,
        comment="Free-text room type (single, double, ...)",
    )
    price: Mapped[Decimal] = mapped_column(
        MoneyType,
        nullable=False,
        comment="Expected price for one occupancy term",
    )
    self_contained: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[RoomStatus] = mapped_column(
        enum_column_type(RoomStatus, "room_status"),
        nullable=False,
        default=RoomStatus.AVAILABLE,
    )

    __table_args__ = (
        UniqueConstraint("hostel_id", "room_number", name="uq_rooms_hostel_room_number"),
        CheckConstraint("price >= 0", name="ck_rooms_price_non_negative"),
        Index("idx_rooms_hostel_status", "hostel_id", "status"),
    )

    def __repr__(self) -> str:
        return (
            f"<Room(id={self.id}, room_number='{self.room_number}', "
            f"status={self.status.value if self.status else None})>"
        )
