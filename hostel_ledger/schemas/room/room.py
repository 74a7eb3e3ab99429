"""
Room and assignment schemas.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from hostel_ledger.models.base.enums import AssignmentStatus, RoomStatus
from hostel_ledger.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
    BaseUpdateSchema,
)


class RoomCreate(BaseCreateSchema):
    """Payload for registering a room."""

    room_number: str = Field(..., min_length=1, max_length=50)
    price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    room_type: Optional[str] = Field(default=None, max_length=50)
    self_contained: bool = False
    description: Optional[str] = None


class RoomUpdate(BaseUpdateSchema):
    """Partial room update; omitted fields are left untouched."""

    room_number: Optional[str] = Field(default=None, min_length=1, max_length=50)
    price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    room_type: Optional[str] = Field(default=None, max_length=50)
    self_contained: Optional[bool] = None
    description: Optional[str] = None
    status: Optional[RoomStatus] = None

    @field_validator("room_number", "price", "self_contained", "status")
    @classmethod
    def reject_explicit_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class RoomResponse(BaseResponseSchema):
    hostel_id: UUID
    room_number: str
    room_type: Optional[str] = None
    price: Decimal
    self_contained: bool
    description: Optional[str] = None
    status: RoomStatus


class AssignRoomRequest(BaseCreateSchema):
    room_id: UUID


class AssignmentResponse(BaseResponseSchema):
    student_id: UUID
    room_id: UUID
    hostel_id: UUID
    status: AssignmentStatus
    ended_at: Optional[datetime] = None


class CurrentRoom(BaseSchema):
    """Room held by a student's active assignment."""

    room_id: UUID
    room_number: str
    room_type: Optional[str] = None
    price: Decimal
