"""
Room assignment model.

The partial unique indexes on ``room_id`` and ``student_id`` keep at
most one active assignment per room and per student at the storage
layer, so concurrent assigns cannot both commit.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, text
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from hostel_ledger.db.base import Base
from hostel_ledger.models.base.enums import AssignmentStatus
from hostel_ledger.models.base.mixins import TimestampMixin, UUIDMixin
from hostel_ledger.models.base.types import enum_column_type

_ACTIVE_ONLY = text("status = 'active'")


class RoomAssignment(UUIDMixin, TimestampMixin, Base):
    """Student occupancy of a room."""

    __tablename__ = "room_assignments"

    student_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("rooms.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    hostel_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[AssignmentStatus] = mapped_column(
        enum_column_type(AssignmentStatus, "assignment_status"),
        nullable=False,
        default=AssignmentStatus.ACTIVE,
    )
    ended_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Null while the assignment is active",
    )

    room = relationship("Room")

    __table_args__ = (
        CheckConstraint(
            "(status = 'active' AND ended_at IS NULL) OR (status = 'ended' AND ended_at IS NOT NULL)",
            name="ck_room_assignments_ended_at",
        ),
        Index(
            "uq_room_assignments_active_room",
            "room_id",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
        Index(
            "uq_room_assignments_active_student",
            "student_id",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
    )

    @property
    def is_active(self) -> bool:
        return self.status == AssignmentStatus.ACTIVE

    def end(self, ended_at: datetime) -> None:
        self.status = AssignmentStatus.ENDED
        self.ended_at = ended_at

    def __repr__(self) -> str:
        return (
            f"<RoomAssignment(id={self.id}, student_id={self.student_id}, "
            f"room_id={self.room_id}, status={self.status.value if self.status else None})>"
        )
