"""Custodian profile linking a custodian user to the hostel they manage."""

from uuid import UUID

from sqlalchemy import ForeignKey
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.db.base import Base
from hostel_ledger.models.base.mixins import TimestampMixin, UUIDMixin


class CustodianProfile(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "custodians"

    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    hostel_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("hostels.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<CustodianProfile(user_id={self.user_id}, hostel_id={self.hostel_id})>"
