"""
Balance summary service.

Reads go through the per-hostel cache; a miss recomputes the whole
summary from the ledger and stores it for the cache TTL.
"""

from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from hostel_ledger.repositories.payment.payment_repository import PaymentRepository
from hostel_ledger.schemas.payment.payment import HostelPaymentSummary, StudentBalanceSummary
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.base.service_result import ServiceResult
from hostel_ledger.services.payment.balance import compute_balance, total_outstanding
from hostel_ledger.services.payment.summary_cache import BalanceSummaryCache
from hostel_ledger.utils.date_utils import Clock


class BalanceSummaryService(BaseService):
    """Hostel-wide collections, outstanding balance and per-student balances."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        summary_cache: BalanceSummaryCache,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(session_factory, clock)
        self._cache = summary_cache

    def get_summary(self, hostel_id: UUID) -> ServiceResult[HostelPaymentSummary]:
        try:
            cached = self._cache.get(hostel_id)
            if cached is not None:
                return ServiceResult.success(cached, metadata={"cached": True})

            generation = self._cache.generation(hostel_id)
            summary = self._compute(hostel_id)
            self._cache.put(hostel_id, summary, generation)
            return ServiceResult.success(summary, metadata={"cached": False})
        except Exception as e:
            return self._handle_exception(e, "compute payment summary", hostel_id)

    def invalidate(self, hostel_id: UUID) -> None:
        self._cache.invalidate(hostel_id)

    def _compute(self, hostel_id: UUID) -> HostelPaymentSummary:
        with self.unit_of_work() as uow:
            payments = uow.get_repo(PaymentRepository)
            total_collected = payments.total_for_hostel(hostel_id)
            rows = payments.student_balance_rows(hostel_id)

        students = []
        for row in rows:
            view = compute_balance(row.expected, row.paid)
            students.append(
                StudentBalanceSummary(
                    user_id=row.user_id,
                    name=row.name,
                    email=row.email,
                    access_number=row.access_number,
                    phone=row.phone,
                    whatsapp=row.whatsapp,
                    room_number=row.room_number,
                    room_type=row.room_type,
                    expected=view.expected,
                    paid=view.paid,
                    balance=view.balance,
                    status=view.status,
                )
            )

        self._logger.debug(
            "Computed payment summary",
            extra={"hostel_id": str(hostel_id), "students": len(students)},
        )
        return HostelPaymentSummary(
            hostel_id=hostel_id,
            total_collected=total_collected,
            total_outstanding=total_outstanding(s.balance for s in students),
            students=students,
            computed_at=self.now(),
        )
