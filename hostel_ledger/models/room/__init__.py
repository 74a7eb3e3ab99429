from hostel_ledger.models.room.room import Room
from hostel_ledger.models.room.room_assignment import RoomAssignment

__all__ = ["Room", "RoomAssignment"]
