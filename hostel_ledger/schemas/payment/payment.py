"""
Payment ledger and balance summary schemas.

Balances are derived values; none of the balance fields below are
persisted.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import Field, field_validator

from hostel_ledger.models.base.enums import PaymentPurpose, PaymentStatusLabel
from hostel_ledger.schemas.common.base import BaseCreateSchema, BaseResponseSchema, BaseSchema


class PaymentCreate(BaseCreateSchema):
    """Payload for recording a payment against a student."""

    user_id: UUID = Field(..., description="Student receiving the credit")
    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    currency: Optional[str] = Field(default=None, min_length=3, max_length=3)
    purpose: PaymentPurpose = PaymentPurpose.BOOKING

    @field_validator("currency")
    @classmethod
    def normalize_currency(cls, v: Optional[str]) -> Optional[str]:
        return v.upper() if v else v


class PaymentResponse(BaseResponseSchema):
    student_id: UUID
    hostel_id: UUID
    amount: Decimal
    currency: str
    purpose: PaymentPurpose


class PaymentListItem(PaymentResponse):
    student_name: str
    student_email: str


class PaymentReceipt(BaseSchema):
    """The recorded payment plus balances recomputed right after the write."""

    payment: PaymentResponse
    total_paid: Decimal
    expected: Optional[Decimal] = None
    balance_after: Optional[Decimal] = None

    @property
    def is_fully_paid(self) -> bool:
        return self.balance_after is not None and self.balance_after <= 0


class BalanceView(BaseSchema):
    """Derived balance of one student."""

    expected: Optional[Decimal] = None
    paid: Decimal
    balance: Optional[Decimal] = None
    status: PaymentStatusLabel


class StudentBalanceSummary(BalanceView):
    user_id: UUID
    name: str
    email: str
    access_number: Optional[str] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    room_number: Optional[str] = None
    room_type: Optional[str] = None


class HostelPaymentSummary(BaseSchema):
    hostel_id: UUID
    total_collected: Decimal
    total_outstanding: Decimal
    students: List[StudentBalanceSummary] = Field(default_factory=list)
    computed_at: datetime
