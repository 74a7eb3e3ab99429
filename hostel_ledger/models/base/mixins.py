"""
SQLAlchemy model mixins for reusable functionality.
"""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.sql import func

from hostel_ledger.utils.date_utils import now_utc


class UUIDMixin:
    """
    Mixin for UUID primary key.

    Provides UUID-based primary key with automatic
    generation using uuid4.
    """

    id = Column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
        comment="Unique identifier (UUID v4)"
    )


class TimestampMixin:
    """
    Mixin for automatic timestamp tracking.

    Provides created_at and updated_at fields with
    automatic timezone-aware timestamp management.
    """

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=now_utc,
        server_default=func.now(),
        index=True,
        comment="Record creation timestamp (UTC)"
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=now_utc,
        server_default=func.now(),
        onupdate=now_utc,
        comment="Record last update timestamp (UTC)"
    )


class SoftDeleteMixin:
    """
    Mixin for soft delete capability.

    Provides is_deleted flag and deleted_at timestamp
    for logical deletion without data loss.
    """

    is_deleted = Column(
        Boolean,
        nullable=False,
        default=False,
        index=True,
        comment="Soft delete flag"
    )
    deleted_at = Column(
        DateTime(timezone=True),
        nullable=True,
        comment="Deletion timestamp (UTC)"
    )
