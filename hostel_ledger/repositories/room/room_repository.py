"""
Room Repository.

Room lookups are always scoped by hostel; the locking variants issue
``SELECT ... FOR UPDATE`` so status changes serialize per room.
"""

from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from hostel_ledger.models.base.enums import RoomStatus
from hostel_ledger.models.room.room import Room


class RoomRepository:
    """Repository for room registry operations."""

    def __init__(self, db: Session):
        """Initialize repository with database session."""
        self.db = db

    # ==================== CREATE OPERATIONS ====================

    def create_room(self, hostel_id: UUID, room_data: Dict[str, Any]) -> Room:
        room = Room(hostel_id=hostel_id, status=RoomStatus.AVAILABLE, **room_data)
        self.db.add(room)
        self.db.flush()
        return room

    # ==================== READ OPERATIONS ====================

    def get_for_hostel(self, room_id: UUID, hostel_id: UUID) -> Optional[Room]:
        stmt = select(Room).where(Room.id == room_id, Room.hostel_id == hostel_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def lock_for_hostel(self, room_id: UUID, hostel_id: UUID) -> Optional[Room]:
        """Fetch the room row and hold a row lock until the transaction ends."""
        stmt = (
            select(Room)
            .where(Room.id == room_id, Room.hostel_id == hostel_id)
            .with_for_update()
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def lock_by_id(self, room_id: UUID) -> Optional[Room]:
        stmt = select(Room).where(Room.id == room_id).with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()

    def get_by_number(self, hostel_id: UUID, room_number: str) -> Optional[Room]:
        stmt = select(Room).where(
            Room.hostel_id == hostel_id,
            Room.room_number == room_number,
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def list_for_hostel(self, hostel_id: UUID, offset: int, limit: int) -> Tuple[List[Room], int]:
        """Newest rooms first, with the total count for pagination."""
        total = self.db.execute(
            select(func.count(Room.id)).where(Room.hostel_id == hostel_id)
        ).scalar_one()
        stmt = (
            select(Room)
            .where(Room.hostel_id == hostel_id)
            .order_by(Room.created_at.desc(), Room.room_number.asc())
            .offset(offset)
            .limit(limit)
        )
        return list(self.db.execute(stmt).scalars().all()), total

    def list_available(self, hostel_id: UUID) -> List[Room]:
        stmt = (
            select(Room)
            .where(Room.hostel_id == hostel_id, Room.status == RoomStatus.AVAILABLE)
            .order_by(Room.room_number.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    # ==================== UPDATE / DELETE OPERATIONS ====================

    def apply_changes(self, room: Room, changes: Dict[str, Any]) -> Room:
        for field, value in changes.items():
            setattr(room, field, value)
        self.db.flush()
        return room

    def set_status(self, room: Room, status: RoomStatus) -> Room:
        room.status = status
        self.db.flush()
        return room

    def delete(self, room: Room) -> None:
        self.db.delete(room)
        self.db.flush()
