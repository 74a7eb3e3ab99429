from hostel_ledger.repositories.room.assignment_repository import AssignmentRepository
from hostel_ledger.repositories.room.room_repository import RoomRepository

__all__ = ["AssignmentRepository", "RoomRepository"]
