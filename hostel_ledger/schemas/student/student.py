"""
Student registration and notification schemas.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import EmailStr, Field

from hostel_ledger.schemas.common.base import BaseCreateSchema, BaseSchema
from hostel_ledger.schemas.payment.payment import PaymentResponse
from hostel_ledger.schemas.room.room import AssignmentResponse, CurrentRoom


class StudentCreate(BaseCreateSchema):
    """
    Register a student, optionally placing them in a room and
    recording an initial booking payment in the same transaction.
    """

    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    access_number: Optional[str] = Field(default=None, max_length=50)
    phone: Optional[str] = Field(default=None, max_length=50)
    whatsapp: Optional[str] = Field(default=None, max_length=50)
    course: Optional[str] = Field(default=None, max_length=255)
    emergency_contact: Optional[str] = Field(default=None, max_length=255)
    room_id: Optional[UUID] = None
    initial_payment: Optional[Decimal] = Field(default=None, gt=0, max_digits=12, decimal_places=2)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)


class StudentResponse(BaseSchema):
    user_id: UUID
    name: str
    email: str
    hostel_id: UUID
    access_number: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    course: Optional[str] = None
    room: Optional[CurrentRoom] = None


class StudentRegistration(BaseSchema):
    student: StudentResponse
    assignment: Optional[AssignmentResponse] = None
    payment: Optional[PaymentResponse] = None


class NotifyRequest(BaseCreateSchema):
    """Email one student (``user_id``) or every student of the hostel."""

    subject: str = Field(..., min_length=1, max_length=255)
    message: str = Field(..., min_length=1)
    user_id: Optional[UUID] = None


class NotifyResult(BaseSchema):
    requested: int
    sent: int
