"""Caller identity as resolved by the authentication collaborator."""

from typing import Optional
from uuid import UUID

from hostel_ledger.models.base.enums import UserRole
from hostel_ledger.schemas.common.base import BaseSchema


class CurrentUser(BaseSchema):
    id: UUID
    role: UserRole
    hostel_id: Optional[UUID] = None
