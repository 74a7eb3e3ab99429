from hostel_ledger.schemas.room.room import (
    AssignmentResponse,
    AssignRoomRequest,
    CurrentRoom,
    RoomCreate,
    RoomResponse,
    RoomUpdate,
)

__all__ = [
    "AssignmentResponse",
    "AssignRoomRequest",
    "CurrentRoom",
    "RoomCreate",
    "RoomResponse",
    "RoomUpdate",
]
