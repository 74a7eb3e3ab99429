"""
Room Registry service.

Owns room existence and status. Status changes that would break the
link between ``occupied`` and an active assignment are rejected.
"""

from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from hostel_ledger.core.pagination import normalize_pagination, page_offset
from hostel_ledger.models.base.enums import RoomStatus
from hostel_ledger.repositories.room.assignment_repository import AssignmentRepository
from hostel_ledger.repositories.room.room_repository import RoomRepository
from hostel_ledger.schemas.common.pagination import PaginatedResponse
from hostel_ledger.schemas.room.room import RoomCreate, RoomResponse, RoomUpdate
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.base.service_result import ServiceResult
from hostel_ledger.services.common.errors import (
    AlreadyExistsError,
    NotFoundError,
    RoomHasActiveAssignment,
    ValidationError,
)
from hostel_ledger.services.payment.summary_cache import BalanceSummaryCache
from hostel_ledger.utils.date_utils import Clock


class RoomService(BaseService):
    """Room CRUD scoped to a hostel."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        summary_cache: Optional[BalanceSummaryCache] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(session_factory, clock)
        self._summary_cache = summary_cache

    # ==================== WRITE OPERATIONS ====================

    def create_room(self, hostel_id: UUID, data: RoomCreate) -> ServiceResult[RoomResponse]:
        try:
            room_number = data.room_number.strip()
            if not room_number:
                raise ValidationError("room_number is required", field="room_number")

            with self.unit_of_work() as uow:
                rooms = uow.get_repo(RoomRepository)
                if rooms.get_by_number(hostel_id, room_number) is not None:
                    raise AlreadyExistsError("Room", "room_number", room_number)

                room = rooms.create_room(
                    hostel_id,
                    {
                        "room_number": room_number,
                        "price": data.price,
                        "room_type": data.room_type,
                        "self_contained": data.self_contained,
                        "description": data.description,
                        "created_at": self.now(),
                        "updated_at": self.now(),
                    },
                )
                response = RoomResponse.model_validate(room)

            self._logger.info(
                f"Created room {room_number}",
                extra={"hostel_id": str(hostel_id), "room_id": str(response.id)},
            )
            return ServiceResult.success(response, message="Room created successfully")
        except Exception as e:
            return self._handle_exception(e, "create room", hostel_id)

    def update_room(
        self,
        room_id: UUID,
        hostel_id: UUID,
        patch: RoomUpdate,
    ) -> ServiceResult[RoomResponse]:
        """
        Apply a partial update.

        Rejected with ROOM_HAS_ACTIVE_ASSIGNMENT when the patch would move
        an occupied room to ``available`` or ``maintenance``; occupancy
        itself only comes from assigning a student.
        """
        try:
            changes = patch.model_dump(exclude_unset=True)
            if "room_number" in changes:
                changes["room_number"] = changes["room_number"].strip()
                if not changes["room_number"]:
                    raise ValidationError("room_number cannot be blank", field="room_number")

            with self.unit_of_work() as uow:
                rooms = uow.get_repo(RoomRepository)
                assignments = uow.get_repo(AssignmentRepository)

                room = rooms.lock_for_hostel(room_id, hostel_id)
                if room is None:
                    raise NotFoundError("Room", room_id)

                new_status = changes.get("status")
                if new_status is not None and new_status != room.status:
                    occupied = assignments.has_active_for_room(room.id)
                    if occupied:
                        raise RoomHasActiveAssignment(room.id, f"set room status to {new_status.value}")
                    if new_status == RoomStatus.OCCUPIED:
                        raise ValidationError(
                            "Rooms become occupied only by assigning a student",
                            field="status",
                        )

                new_number = changes.get("room_number")
                if new_number is not None and new_number != room.room_number:
                    if rooms.get_by_number(hostel_id, new_number) is not None:
                        raise AlreadyExistsError("Room", "room_number", new_number)

                price_changed = "price" in changes and changes["price"] != room.price
                number_changed = new_number is not None and new_number != room.room_number
                type_changed = "room_type" in changes and changes["room_type"] != room.room_type

                changes["updated_at"] = self.now()
                room = rooms.apply_changes(room, changes)
                response = RoomResponse.model_validate(room)

            if self._summary_cache is not None and (price_changed or number_changed or type_changed):
                self._summary_cache.invalidate(hostel_id)

            self._logger.info(
                "Updated room",
                extra={"hostel_id": str(hostel_id), "room_id": str(room_id), "fields": sorted(changes)},
            )
            return ServiceResult.success(response, message="Room updated successfully")
        except Exception as e:
            return self._handle_exception(e, "update room", room_id)

    def delete_room(self, room_id: UUID, hostel_id: UUID) -> ServiceResult[bool]:
        try:
            with self.unit_of_work() as uow:
                rooms = uow.get_repo(RoomRepository)
                room = rooms.lock_for_hostel(room_id, hostel_id)
                if room is None:
                    raise NotFoundError("Room", room_id)
                if uow.get_repo(AssignmentRepository).has_active_for_room(room.id):
                    raise RoomHasActiveAssignment(room.id, "delete room")
                rooms.delete(room)

            self._logger.info(
                "Deleted room",
                extra={"hostel_id": str(hostel_id), "room_id": str(room_id)},
            )
            return ServiceResult.success(True, message="Room deleted successfully")
        except Exception as e:
            return self._handle_exception(e, "delete room", room_id)

    # ==================== READ OPERATIONS ====================

    def get_room(self, room_id: UUID, hostel_id: UUID) -> ServiceResult[RoomResponse]:
        try:
            with self.unit_of_work() as uow:
                room = uow.get_repo(RoomRepository).get_for_hostel(room_id, hostel_id)
                if room is None:
                    raise NotFoundError("Room", room_id)
                return ServiceResult.success(RoomResponse.model_validate(room))
        except Exception as e:
            return self._handle_exception(e, "get room", room_id)

    def list_rooms(
        self,
        hostel_id: UUID,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> ServiceResult[PaginatedResponse[RoomResponse]]:
        try:
            page, page_size = normalize_pagination(page, page_size)
            with self.unit_of_work() as uow:
                rooms, total = uow.get_repo(RoomRepository).list_for_hostel(
                    hostel_id, page_offset(page, page_size), page_size
                )
                items = [RoomResponse.model_validate(room) for room in rooms]
            return ServiceResult.success(
                PaginatedResponse[RoomResponse].create(items, total, page, page_size)
            )
        except Exception as e:
            return self._handle_exception(e, "list rooms", hostel_id)

    def list_available_rooms(self, hostel_id: UUID) -> ServiceResult[List[RoomResponse]]:
        try:
            with self.unit_of_work() as uow:
                rooms = uow.get_repo(RoomRepository).list_available(hostel_id)
                items = [RoomResponse.model_validate(room) for room in rooms]
            return ServiceResult.success(items)
        except Exception as e:
            return self._handle_exception(e, "list available rooms", hostel_id)
