"""Room registry routes."""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from hostel_ledger.api import deps
from hostel_ledger.api.errors import result_or_raise
from hostel_ledger.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from hostel_ledger.schemas.common.pagination import PaginatedResponse
from hostel_ledger.schemas.room.room import RoomCreate, RoomResponse, RoomUpdate
from hostel_ledger.services.room.room_service import RoomService

router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.get("", response_model=PaginatedResponse[RoomResponse])
def list_rooms(
    page: Optional[int] = Query(DEFAULT_PAGE, ge=1),
    page_size: Optional[int] = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    hostel_id: UUID = Depends(deps.get_hostel_id),
    rooms: RoomService = Depends(deps.get_room_service),
):
    return result_or_raise(rooms.list_rooms(hostel_id, page=page, page_size=page_size))


@router.get("/available", response_model=List[RoomResponse])
def list_available_rooms(
    hostel_id: UUID = Depends(deps.get_hostel_id),
    rooms: RoomService = Depends(deps.get_room_service),
):
    return result_or_raise(rooms.list_available_rooms(hostel_id))


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    rooms: RoomService = Depends(deps.get_room_service),
):
    return result_or_raise(rooms.create_room(hostel_id, payload))


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(
    room_id: UUID,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    rooms: RoomService = Depends(deps.get_room_service),
):
    return result_or_raise(rooms.get_room(room_id, hostel_id))


@router.patch("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: UUID,
    payload: RoomUpdate,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    rooms: RoomService = Depends(deps.get_room_service),
):
    """Partial update. An occupied room keeps its status until the student leaves."""
    return result_or_raise(rooms.update_room(room_id, hostel_id, payload))


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(
    room_id: UUID,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    rooms: RoomService = Depends(deps.get_room_service),
) -> Response:
    result_or_raise(rooms.delete_room(room_id, hostel_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
