"""Payment ledger and balance routes."""
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from hostel_ledger.api import deps
from hostel_ledger.api.errors import result_or_raise
from hostel_ledger.core.constants import DEFAULT_PAGE, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from hostel_ledger.schemas.common.pagination import PaginatedResponse
from hostel_ledger.schemas.payment.payment import (
    BalanceView,
    HostelPaymentSummary,
    PaymentCreate,
    PaymentListItem,
    PaymentReceipt,
)
from hostel_ledger.services.payment.payment_service import PaymentService
from hostel_ledger.services.payment.summary_service import BalanceSummaryService

router = APIRouter(prefix="/payments", tags=["Payments"])

CACHE_STATUS_HEADER = "X-Cache"


@router.post("", response_model=PaymentReceipt, status_code=status.HTTP_201_CREATED)
def record_payment(
    payload: PaymentCreate,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    payments: PaymentService = Depends(deps.get_payment_service),
):
    """Append a payment and return it with the student's recomputed balance."""
    return result_or_raise(payments.record_payment(hostel_id, payload))


@router.get("", response_model=PaginatedResponse[PaymentListItem])
def list_payments(
    user_id: Optional[UUID] = Query(default=None, description="Only this student's payments"),
    search: Optional[str] = Query(default=None, max_length=255),
    page: Optional[int] = Query(DEFAULT_PAGE, ge=1),
    page_size: Optional[int] = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    hostel_id: UUID = Depends(deps.get_hostel_id),
    payments: PaymentService = Depends(deps.get_payment_service),
):
    return result_or_raise(
        payments.list_payments(hostel_id, user_id=user_id, search=search, page=page, page_size=page_size)
    )


@router.get("/summary", response_model=HostelPaymentSummary)
def payment_summary(
    response: Response,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    summaries: BalanceSummaryService = Depends(deps.get_summary_service),
):
    """Hostel totals and per-student balances, served from a short-lived cache."""
    result = summaries.get_summary(hostel_id)
    summary = result_or_raise(result)
    response.headers[CACHE_STATUS_HEADER] = "HIT" if result.metadata.get("cached") else "MISS"
    return summary


@router.get("/students/{student_id}/balance", response_model=BalanceView)
def student_balance(
    student_id: UUID,
    hostel_id: UUID = Depends(deps.get_hostel_id),
    payments: PaymentService = Depends(deps.get_payment_service),
):
    return result_or_raise(payments.student_balance(student_id, hostel_id))
