"""
Database enums mirroring schema enums.

Stored by value so that partial indexes and raw SQL can refer to
the lowercase literals.
"""

import enum


class UserRole(str, enum.Enum):
    """User role enumeration."""
    SUPER_ADMIN = "super_admin"
    HOSTEL_ADMIN = "hostel_admin"
    CUSTODIAN = "custodian"
    USER = "user"


class RoomStatus(str, enum.Enum):
    """Room availability status."""
    AVAILABLE = "available"
    OCCUPIED = "occupied"
    MAINTENANCE = "maintenance"


class AssignmentStatus(str, enum.Enum):
    """Student to room assignment lifecycle."""
    ACTIVE = "active"
    ENDED = "ended"


class PaymentPurpose(str, enum.Enum):
    """Ledger entry purpose tag."""
    BOOKING = "booking"
    INSTALMENT = "instalment"
    BALANCE_CLEARANCE = "balance_clearance"
    OTHER = "other"


class SubscriptionStatus(str, enum.Enum):
    """Stored hostel subscription status."""
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


class PaymentStatusLabel(str, enum.Enum):
    """Derived balance label for a student."""
    UNASSIGNED = "unassigned"
    UNPAID = "unpaid"
    PARTIAL = "partial"
    PAID = "paid"
