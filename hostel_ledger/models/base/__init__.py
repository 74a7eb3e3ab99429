from hostel_ledger.models.base.enums import (
    AssignmentStatus,
    PaymentPurpose,
    PaymentStatusLabel,
    RoomStatus,
    SubscriptionStatus,
    UserRole,
)
from hostel_ledger.models.base.mixins import SoftDeleteMixin, TimestampMixin, UUIDMixin
from hostel_ledger.models.base.types import MoneyType, enum_column_type

__all__ = [
    "AssignmentStatus",
    "PaymentPurpose",
    "PaymentStatusLabel",
    "RoomStatus",
    "SubscriptionStatus",
    "UserRole",
    "SoftDeleteMixin",
    "TimestampMixin",
    "UUIDMixin",
    "MoneyType",
    "enum_column_type",
]
