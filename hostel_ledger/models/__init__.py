"""
ORM models. Importing this package registers every table with Base.
"""

from hostel_ledger.models.hostel import Hostel
from hostel_ledger.models.payment import Payment
from hostel_ledger.models.room import Room, RoomAssignment
from hostel_ledger.models.subscription import HostelSubscription, SubscriptionPlan
from hostel_ledger.models.user import CustodianProfile, StudentProfile, User

__all__ = [
    "Hostel",
    "Payment",
    "Room",
    "RoomAssignment",
    "HostelSubscription",
    "SubscriptionPlan",
    "CustodianProfile",
    "StudentProfile",
    "User",
]
