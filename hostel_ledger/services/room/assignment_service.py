"""
Assignment Tracker service.

Room status and the student's assignment always change inside the
same unit of work. ``occupy_room`` and ``release_student_room`` are the
building blocks; they are also used by student registration and
deletion so that those workflows share one transaction.
"""

from datetime import datetime
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hostel_ledger.models.base.enums import RoomStatus
from hostel_ledger.models.room.room_assignment import RoomAssignment
from hostel_ledger.repositories.room.assignment_repository import AssignmentRepository
from hostel_ledger.repositories.room.room_repository import RoomRepository
from hostel_ledger.repositories.user.user_repository import UserRepository
from hostel_ledger.schemas.room.room import AssignmentResponse, CurrentRoom
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.base.service_result import ServiceResult
from hostel_ledger.services.common.errors import (
    NotFoundError,
    RoomUnavailable,
    StudentAlreadyAssigned,
)
from hostel_ledger.services.common.unit_of_work import UnitOfWork
from hostel_ledger.services.payment.summary_cache import BalanceSummaryCache
from hostel_ledger.utils.date_utils import Clock


def occupy_room(
    uow: UnitOfWork,
    student_id: UUID,
    room_id: UUID,
    hostel_id: UUID,
    now: datetime,
) -> RoomAssignment:
    """
    Put the student in the room.

    The room row is locked first, so of two concurrent calls for the
    same room only one sees it ``available``.
    """
    assignments = uow.get_repo(AssignmentRepository)
    if assignments.get_active_for_student(student_id) is not None:
        raise StudentAlreadyAssigned(student_id)

    rooms = uow.get_repo(RoomRepository)
    room = rooms.lock_for_hostel(room_id, hostel_id)
    if room is None or room.status != RoomStatus.AVAILABLE:
        raise RoomUnavailable(room_id)

    rooms.set_status(room, RoomStatus.OCCUPIED)
    try:
        return assignments.create_assignment(student_id, room.id, hostel_id, created_at=now)
    except IntegrityError as e:
        # Partial unique index: another active assignment won the race
        raise RoomUnavailable(room_id) from e


def release_student_room(uow: UnitOfWork, student_id: UUID, now: datetime) -> Optional[RoomAssignment]:
    """
    End the student's active assignment and free its room.

    No other active assignment can hold the room, so freeing is
    unconditional. Returns None when the student had no active assignment.
    """
    assignments = uow.get_repo(AssignmentRepository)
    assignment = assignments.get_active_for_student(student_id)
    if assignment is None:
        return None

    rooms = uow.get_repo(RoomRepository)
    room = rooms.lock_by_id(assignment.room_id)
    assignments.end_assignment(assignment, ended_at=now)
    if room is not None and room.status == RoomStatus.OCCUPIED:
        rooms.set_status(room, RoomStatus.AVAILABLE)
    return assignment


class AssignmentService(BaseService):
    """Student to room assignments."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        summary_cache: Optional[BalanceSummaryCache] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(session_factory, clock)
        self._summary_cache = summary_cache

    def _invalidate(self, hostel_id: UUID) -> None:
        if self._summary_cache is not None:
            self._summary_cache.invalidate(hostel_id)

    # ==================== WRITE OPERATIONS ====================

    def assign(self, student_id: UUID, room_id: UUID, hostel_id: UUID) -> ServiceResult[AssignmentResponse]:
        try:
            with self.unit_of_work() as uow:
                if uow.get_repo(UserRepository).get_student(student_id, hostel_id) is None:
                    raise NotFoundError("Student", student_id)
                assignment = occupy_room(uow, student_id, room_id, hostel_id, self.now())
                response = AssignmentResponse.model_validate(assignment)

            self._invalidate(hostel_id)
            self._logger.info(
                "Assigned student to room",
                extra={"hostel_id": str(hostel_id), "student_id": str(student_id), "room_id": str(room_id)},
            )
            return ServiceResult.success(response, message="Room assigned successfully")
        except Exception as e:
            return self._handle_exception(e, "assign room", student_id)

    def reassign(self, student_id: UUID, room_id: UUID, hostel_id: UUID) -> ServiceResult[AssignmentResponse]:
        """Move the student to another room; the old room is freed in the same transaction."""
        try:
            with self.unit_of_work() as uow:
                if uow.get_repo(UserRepository).get_student(student_id, hostel_id) is None:
                    raise NotFoundError("Student", student_id)
                now = self.now()
                current = uow.get_repo(AssignmentRepository).get_active_for_student(student_id)
                if current is not None and current.room_id == room_id:
                    raise RoomUnavailable(room_id)
                release_student_room(uow, student_id, now)
                assignment = occupy_room(uow, student_id, room_id, hostel_id, now)
                response = AssignmentResponse.model_validate(assignment)

            self._invalidate(hostel_id)
            self._logger.info(
                "Reassigned student",
                extra={"hostel_id": str(hostel_id), "student_id": str(student_id), "room_id": str(room_id)},
            )
            return ServiceResult.success(response, message="Room reassigned successfully")
        except Exception as e:
            return self._handle_exception(e, "reassign room", student_id)

    def end_assignment(
        self,
        student_id: UUID,
        hostel_id: Optional[UUID] = None,
    ) -> ServiceResult[Optional[AssignmentResponse]]:
        """
        Check the student out: end the active assignment, if any, and
        free the room. Succeeds with ``None`` when nothing was active.
        """
        try:
            with self.unit_of_work() as uow:
                if hostel_id is not None and uow.get_repo(UserRepository).get_student(student_id, hostel_id) is None:
                    raise NotFoundError("Student", student_id)
                ended = release_student_room(uow, student_id, self.now())
                response = AssignmentResponse.model_validate(ended) if ended is not None else None

            if response is not None:
                self._invalidate(response.hostel_id)
                self._logger.info(
                    "Ended assignment",
                    extra={"student_id": str(student_id), "room_id": str(response.room_id)},
                )
            return ServiceResult.success(response)
        except Exception as e:
            return self._handle_exception(e, "end assignment", student_id)

    # ==================== READ OPERATIONS ====================

    def current_assignment(
        self,
        student_id: UUID,
        hostel_id: Optional[UUID] = None,
    ) -> ServiceResult[Optional[AssignmentResponse]]:
        try:
            with self.unit_of_work() as uow:
                if hostel_id is not None and uow.get_repo(UserRepository).get_student(student_id, hostel_id) is None:
                    raise NotFoundError("Student", student_id)
                assignment = uow.get_repo(AssignmentRepository).get_active_for_student(student_id)
                if assignment is None:
                    return ServiceResult.success(None)
                return ServiceResult.success(AssignmentResponse.model_validate(assignment))
        except Exception as e:
            return self._handle_exception(e, "get current assignment", student_id)

    def current_room_for(self, student_id: UUID) -> ServiceResult[Optional[CurrentRoom]]:
        try:
            with self.unit_of_work() as uow:
                assignment = uow.get_repo(AssignmentRepository).get_active_for_student(student_id)
                if assignment is None:
                    return ServiceResult.success(None)
                room = assignment.room
                return ServiceResult.success(
                    CurrentRoom(
                        room_id=room.id,
                        room_number=room.room_number,
                        room_type=room.room_type,
                        price=room.price,
                    )
                )
        except Exception as e:
            return self._handle_exception(e, "get current room", student_id)
