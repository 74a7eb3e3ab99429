"""
User model.

Students are users with role ``user``; staff are hostel admins and
custodians. Students are soft deleted so their ledger entries keep a
valid owner.
"""

from typing import Optional
from uuid import UUID

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from hostel_ledger.db.base import Base
from hostel_ledger.models.base.enums import UserRole
from hostel_ledger.models.base.mixins import SoftDeleteMixin, TimestampMixin, UUIDMixin
from hostel_ledger.models.base.types import enum_column_type


class User(UUIDMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Platform user of any role."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Login email (lowercase)",
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    role: Mapped[UserRole] = mapped_column(
        enum_column_type(UserRole, "user_role"),
        nullable=False,
        default=UserRole.USER,
    )
    hostel_id: Mapped[Optional[UUID]] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("hostels.id", ondelete="SET NULL"),
        nullable=True,
        comment="Home hostel for admins and students",
    )

    __table_args__ = (
        Index("idx_users_hostel_role", "hostel_id", "role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}', role={self.role.value})>"
