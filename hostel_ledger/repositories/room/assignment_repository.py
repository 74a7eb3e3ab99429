"""
Assignment Repository.

Tracks which student holds which room. Only ``active`` rows count
towards occupancy.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.orm import Session, joinedload

from hostel_ledger.models.base.enums import AssignmentStatus
from hostel_ledger.models.room.room_assignment import RoomAssignment


class AssignmentRepository:
    """Repository for student to room assignments."""

    def __init__(self, db: Session):
        """Initialize repository with database session."""
        self.db = db

    # ==================== CREATE OPERATIONS ====================

    def create_assignment(
        self,
        student_id: UUID,
        room_id: UUID,
        hostel_id: UUID,
        created_at: datetime,
    ) -> RoomAssignment:
        assignment = RoomAssignment(
            student_id=student_id,
            room_id=room_id,
            hostel_id=hostel_id,
            status=AssignmentStatus.ACTIVE,
            created_at=created_at,
            updated_at=created_at,
        )
        self.db.add(assignment)
        self.db.flush()
        return assignment

    # ==================== READ OPERATIONS ====================

    def get_active_for_student(self, student_id: UUID) -> Optional[RoomAssignment]:
        stmt = (
            select(RoomAssignment)
            .options(joinedload(RoomAssignment.room))
            .where(
                RoomAssignment.student_id == student_id,
                RoomAssignment.status == AssignmentStatus.ACTIVE,
            )
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def has_active_for_room(self, room_id: UUID) -> bool:
        stmt = select(
            exists().where(
                RoomAssignment.room_id == room_id,
                RoomAssignment.status == AssignmentStatus.ACTIVE,
            )
        )
        return bool(self.db.execute(stmt).scalar())

    def list_for_student(self, student_id: UUID) -> List[RoomAssignment]:
        stmt = (
            select(RoomAssignment)
            .options(joinedload(RoomAssignment.room))
            .where(RoomAssignment.student_id == student_id)
            .order_by(RoomAssignment.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    # ==================== UPDATE OPERATIONS ====================

    def end_assignment(self, assignment: RoomAssignment, ended_at: datetime) -> RoomAssignment:
        assignment.end(ended_at)
        self.db.flush()
        return assignment
