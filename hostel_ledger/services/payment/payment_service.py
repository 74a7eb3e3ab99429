"""
Payment Ledger service.

Payments are appended inside one transaction together with the
balance recomputation. Cache invalidation and receipt emails happen
only after the commit, and email problems never undo the write.
"""

from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from hostel_ledger.core.pagination import normalize_pagination, page_offset
from hostel_ledger.models.base.enums import PaymentPurpose
from hostel_ledger.models.payment.payment import Payment
from hostel_ledger.repositories.payment.payment_repository import PaymentRepository
from hostel_ledger.repositories.room.assignment_repository import AssignmentRepository
from hostel_ledger.repositories.user.user_repository import UserRepository
from hostel_ledger.schemas.common.pagination import PaginatedResponse
from hostel_ledger.schemas.payment.payment import (
    BalanceView,
    PaymentCreate,
    PaymentListItem,
    PaymentReceipt,
    PaymentResponse,
)
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.base.service_result import ServiceResult
from hostel_ledger.services.common.errors import NotFoundError, ValidationError
from hostel_ledger.services.common.unit_of_work import UnitOfWork
from hostel_ledger.services.communication.email_service import NotificationService
from hostel_ledger.services.payment.balance import compute_balance
from hostel_ledger.services.payment.summary_cache import BalanceSummaryCache
from hostel_ledger.utils.date_utils import Clock

DEFAULT_CURRENCY = "UGX"


def append_payment(
    uow: UnitOfWork,
    student_id: UUID,
    hostel_id: UUID,
    amount: Decimal,
    currency: str,
    purpose: PaymentPurpose,
    now: datetime,
) -> PaymentReceipt:
    """Insert a ledger entry and recompute the student's balance in the same unit."""
    if amount is None or amount <= 0:
        raise ValidationError("Amount must be a positive number", field="amount")

    payments = uow.get_repo(PaymentRepository)
    payment: Payment = payments.create_payment(
        student_id=student_id,
        hostel_id=hostel_id,
        amount=amount,
        currency=currency,
        purpose=purpose,
        created_at=now,
    )

    total_paid = payments.total_for_student(student_id, hostel_id)
    assignment = uow.get_repo(AssignmentRepository).get_active_for_student(student_id)
    expected = assignment.room.price if assignment is not None else None
    view = compute_balance(expected, total_paid)

    return PaymentReceipt(
        payment=PaymentResponse.model_validate(payment),
        total_paid=view.paid,
        expected=view.expected,
        balance_after=view.balance,
    )


class PaymentService(BaseService):
    """Append-only payment ledger scoped to a hostel."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        summary_cache: BalanceSummaryCache,
        notifications: Optional[NotificationService] = None,
        clock: Optional[Clock] = None,
        default_currency: str = DEFAULT_CURRENCY,
    ) -> None:
        super().__init__(session_factory, clock)
        self._summary_cache = summary_cache
        self._notifications = notifications
        self._default_currency = default_currency

    # ==================== WRITE OPERATIONS ====================

    def record_payment(self, hostel_id: UUID, data: PaymentCreate) -> ServiceResult[PaymentReceipt]:
        """
        Record a payment for a student of the hostel.

        Returns the stored payment with ``total_paid``, ``expected`` and
        ``balance_after`` recomputed from the ledger.
        """
        try:
            with self.unit_of_work() as uow:
                student = uow.get_repo(UserRepository).get_student(data.user_id, hostel_id)
                if student is None:
                    raise NotFoundError("Student", data.user_id)
                student_email, student_name = student.email, student.name

                receipt = append_payment(
                    uow,
                    student_id=student.id,
                    hostel_id=hostel_id,
                    amount=data.amount,
                    currency=data.currency or self._default_currency,
                    purpose=data.purpose,
                    now=self.now(),
                )

            self._summary_cache.invalidate(hostel_id)
            self._logger.info(
                f"Recorded payment of {receipt.payment.amount} {receipt.payment.currency}",
                extra={
                    "hostel_id": str(hostel_id),
                    "student_id": str(data.user_id),
                    "payment_id": str(receipt.payment.id),
                },
            )
        except Exception as e:
            return self._handle_exception(e, "record payment", data.user_id)

        self._notify_payment(student_email, student_name, receipt)
        return ServiceResult.success(receipt, message="Payment recorded successfully")

    def _notify_payment(self, email: str, name: str, receipt: PaymentReceipt) -> None:
        if self._notifications is None:
            return
        self._notifications.send_payment_receipt(email, name, receipt)
        if receipt.is_fully_paid:
            self._notifications.send_payment_completed(email, name, receipt)

    # ==================== READ OPERATIONS ====================

    def list_payments(
        self,
        hostel_id: UUID,
        user_id: Optional[UUID] = None,
        search: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> ServiceResult[PaginatedResponse[PaymentListItem]]:
        try:
            page, page_size = normalize_pagination(page, page_size)
            search = search.strip() if search else None
            with self.unit_of_work() as uow:
                rows, total = uow.get_repo(PaymentRepository).list_for_hostel(
                    hostel_id,
                    offset=page_offset(page, page_size),
                    limit=page_size,
                    student_id=user_id,
                    search=search or None,
                )
                items = [
                    PaymentListItem(
                        **PaymentResponse.model_validate(row.Payment).model_dump(),
                        student_name=row.student_name,
                        student_email=row.student_email,
                    )
                    for row in rows
                ]
            return ServiceResult.success(
                PaginatedResponse[PaymentListItem].create(items, total, page, page_size)
            )
        except Exception as e:
            return self._handle_exception(e, "list payments", hostel_id)

    def student_balance(self, student_id: UUID, hostel_id: UUID) -> ServiceResult[BalanceView]:
        try:
            with self.unit_of_work() as uow:
                if uow.get_repo(UserRepository).get_student(student_id, hostel_id) is None:
                    raise NotFoundError("Student", student_id)
                paid = uow.get_repo(PaymentRepository).total_for_student(student_id, hostel_id)
                assignment = uow.get_repo(AssignmentRepository).get_active_for_student(student_id)
                expected = assignment.room.price if assignment is not None else None
                return ServiceResult.success(compute_balance(expected, paid))
        except Exception as e:
            return self._handle_exception(e, "get student balance", student_id)
