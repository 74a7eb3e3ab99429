"""
Subscription plan, hostel subscription and login gate schemas.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from hostel_ledger.models.base.enums import SubscriptionStatus
from hostel_ledger.schemas.common.base import (
    BaseCreateSchema,
    BaseResponseSchema,
    BaseSchema,
    BaseUpdateSchema,
)


# ==================== PLANS ====================


class PlanCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    duration_months: int = Field(..., gt=0, le=60)
    price_per_month: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    total_price: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    is_active: bool = True


class PlanUpdate(BaseUpdateSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = None
    duration_months: Optional[int] = Field(default=None, gt=0, le=60)
    price_per_month: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    total_price: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)
    is_active: Optional[bool] = None

    @field_validator("name", "duration_months", "price_per_month", "total_price", "is_active")
    @classmethod
    def reject_explicit_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class PlanResponse(BaseResponseSchema):
    name: str
    description: Optional[str] = None
    duration_months: int
    price_per_month: Decimal
    total_price: Decimal
    is_active: bool


# ==================== HOSTEL SUBSCRIPTIONS ====================


class SubscriptionCreate(BaseCreateSchema):
    plan_id: UUID
    payment_method: Optional[str] = Field(default=None, max_length=50)
    payment_reference: Optional[str] = Field(default=None, max_length=255)


class SubscriptionRenew(SubscriptionCreate):
    payment_method: str = Field(..., min_length=1, max_length=50)
    amount_paid: Optional[Decimal] = Field(default=None, ge=0, max_digits=12, decimal_places=2)


class HostelSubscriptionResponse(BaseResponseSchema):
    """
    A subscription term as seen at ``evaluated_at``.

    ``is_usable`` combines the stored status with the calendar, so an
    ``active`` row past its end date reports ``is_usable=False``.
    """

    hostel_id: UUID
    plan_id: UUID
    plan_name: Optional[str] = None
    start_date: datetime
    end_date: datetime
    amount_paid: Decimal
    status: SubscriptionStatus
    payment_method: Optional[str] = None
    payment_reference: Optional[str] = None
    is_current: bool = False
    is_usable: bool
    days_left: int
    evaluated_at: datetime


class HostelCreate(BaseCreateSchema):
    """Create a hostel, optionally starting its first subscription."""

    name: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = None
    contact_email: Optional[str] = Field(default=None, max_length=255)
    contact_phone: Optional[str] = Field(default=None, max_length=50)
    plan_id: Optional[UUID] = None


class HostelResponse(BaseResponseSchema):
    name: str
    address: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    current_subscription_id: Optional[UUID] = None


# ==================== LOGIN GATE ====================


class GateWarning(BaseSchema):
    days_left: int = Field(..., alias="daysLeft")
    message: str


class LoginGateDecision(BaseSchema):
    allow: bool
    code: Optional[str] = None
    message: Optional[str] = None
    warning: Optional[GateWarning] = None
    subscription_end_date: Optional[datetime] = None
