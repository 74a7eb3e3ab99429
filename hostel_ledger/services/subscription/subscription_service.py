"""
Subscription Lifecycle service.

Each term is its own row. Creating or renewing a term inserts the row
with a provisional window, corrects the end date from the plan and
repoints ``hostels.current_subscription_id``, all in one transaction.
"""

from datetime import datetime, timedelta
from decimal import Decimal
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from hostel_ledger.models.base.enums import SubscriptionStatus
from hostel_ledger.models.hostel.hostel import Hostel
from hostel_ledger.models.subscription.hostel_subscription import HostelSubscription
from hostel_ledger.repositories.hostel.hostel_repository import HostelRepository
from hostel_ledger.repositories.subscription.hostel_subscription_repository import (
    HostelSubscriptionRepository,
)
from hostel_ledger.repositories.subscription.plan_repository import PlanRepository
from hostel_ledger.schemas.subscription.subscription import (
    HostelCreate,
    HostelResponse,
    HostelSubscriptionResponse,
    SubscriptionCreate,
    SubscriptionRenew,
)
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.base.service_result import ServiceResult
from hostel_ledger.services.common.errors import BusinessRuleViolation, NotFoundError
from hostel_ledger.services.common.unit_of_work import UnitOfWork
from hostel_ledger.services.subscription.rules import is_usable
from hostel_ledger.utils.date_utils import Clock, add_months, days_left, to_utc

PROVISIONAL_TERM_DAYS = 30


def resolve_current_row(uow: UnitOfWork, hostel: Hostel) -> Optional[HostelSubscription]:
    """
    The row governing access: the hostel pointer when it resolves,
    otherwise the row with the latest end date.
    """
    subscriptions = uow.get_repo(HostelSubscriptionRepository)
    if hostel.current_subscription_id is not None:
        current = subscriptions.get_for_hostel(hostel.current_subscription_id, hostel.id)
        if current is not None:
            return current
    return subscriptions.get_latest_for_hostel(hostel.id)


def to_subscription_response(
    subscription: HostelSubscription,
    now: datetime,
    current_id: Optional[UUID] = None,
) -> HostelSubscriptionResponse:
    return HostelSubscriptionResponse(
        id=subscription.id,
        created_at=subscription.created_at,
        hostel_id=subscription.hostel_id,
        plan_id=subscription.plan_id,
        plan_name=subscription.plan.name if subscription.plan is not None else None,
        start_date=to_utc(subscription.start_date),
        end_date=to_utc(subscription.end_date),
        amount_paid=subscription.amount_paid,
        status=subscription.status,
        payment_method=subscription.payment_method,
        payment_reference=subscription.payment_reference,
        is_current=current_id is not None and subscription.id == current_id,
        is_usable=is_usable(subscription, now),
        days_left=max(days_left(subscription.end_date, now), 0),
        evaluated_at=now,
    )


class SubscriptionService(BaseService):
    """Hostel subscription terms and the current-subscription pointer."""

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Optional[Clock] = None,
        provisional_days: int = PROVISIONAL_TERM_DAYS,
    ) -> None:
        super().__init__(session_factory, clock)
        self._provisional = timedelta(days=provisional_days)

    def _start_term(
        self,
        uow: UnitOfWork,
        hostel: Hostel,
        plan_id: UUID,
        payment_method: Optional[str] = None,
        payment_reference: Optional[str] = None,
        amount_paid: Optional[Decimal] = None,
        use_plan_price: bool = False,
    ) -> HostelSubscription:
        plan = uow.get_repo(PlanRepository).get_by_id(plan_id)
        if plan is None:
            raise NotFoundError("Subscription plan", plan_id)
        if not plan.is_active:
            raise BusinessRuleViolation(
                "active_plan_required",
                "Subscription plan is not active",
                details={"plan_id": str(plan.id)},
            )

        subscriptions = uow.get_repo(HostelSubscriptionRepository)
        now = self.now()
        subscription = subscriptions.create_subscription(
            {
                "hostel_id": hostel.id,
                "plan_id": plan.id,
                "start_date": now,
                "end_date": now + self._provisional,
                "status": SubscriptionStatus.ACTIVE,
                "amount_paid": Decimal("0"),
                "payment_method": payment_method,
                "payment_reference": payment_reference,
                "created_at": now,
                "updated_at": now,
            }
        )

        if amount_paid is None and use_plan_price:
            amount_paid = plan.total_price
        subscriptions.apply_changes(
            subscription,
            {
                "end_date": add_months(now, plan.duration_months),
                "amount_paid": amount_paid if amount_paid is not None else Decimal("0"),
            },
        )
        uow.get_repo(HostelRepository).set_current_subscription(hostel, subscription.id)
        return subscription

    # ==================== WRITE OPERATIONS ====================

    def create(self, hostel_id: UUID, data: SubscriptionCreate) -> ServiceResult[HostelSubscriptionResponse]:
        try:
            with self.unit_of_work() as uow:
                hostel = uow.get_repo(HostelRepository).lock_by_id(hostel_id)
                if hostel is None:
                    raise NotFoundError("Hostel", hostel_id)
                subscription = self._start_term(
                    uow,
                    hostel,
                    data.plan_id,
                    payment_method=data.payment_method,
                    payment_reference=data.payment_reference,
                )
                response = to_subscription_response(subscription, self.now(), hostel.current_subscription_id)

            self._logger.info(
                "Created hostel subscription",
                extra={
                    "hostel_id": str(hostel_id),
                    "subscription_id": str(response.id),
                    "end_date": response.end_date.isoformat(),
                },
            )
            return ServiceResult.success(response, message="Subscription created successfully")
        except Exception as e:
            return self._handle_exception(e, "create subscription", hostel_id)

    def create_hostel(self, data: HostelCreate) -> ServiceResult[HostelResponse]:
        """Create a hostel and, when a plan is given, its first subscription."""
        try:
            with self.unit_of_work() as uow:
                now = self.now()
                hostel = uow.get_repo(HostelRepository).create_hostel(
                    {
                        "name": data.name,
                        "address": data.address,
                        "contact_email": data.contact_email,
                        "contact_phone": data.contact_phone,
                        "created_at": now,
                        "updated_at": now,
                    }
                )
                if data.plan_id is not None:
                    self._start_term(uow, hostel, data.plan_id)
                response = HostelResponse.model_validate(hostel)

            self._logger.info(f"Created hostel '{response.name}'", extra={"hostel_id": str(response.id)})
            return ServiceResult.success(response, message="Hostel created successfully")
        except Exception as e:
            return self._handle_exception(e, "create hostel", data.name)

    def renew(self, hostel_id: UUID, data: SubscriptionRenew) -> ServiceResult[HostelSubscriptionResponse]:
        """
        Start a new term for an existing hostel and repoint the hostel to it.
        Earlier rows are kept as history.
        """
        try:
            with self.unit_of_work() as uow:
                hostel = uow.get_repo(HostelRepository).lock_by_id(hostel_id)
                if hostel is None:
                    raise NotFoundError("Hostel", hostel_id)
                previous_id = hostel.current_subscription_id
                subscription = self._start_term(
                    uow,
                    hostel,
                    data.plan_id,
                    payment_method=data.payment_method,
                    payment_reference=data.payment_reference,
                    amount_paid=data.amount_paid,
                    use_plan_price=True,
                )
                response = to_subscription_response(subscription, self.now(), hostel.current_subscription_id)

            self._logger.info(
                "Renewed hostel subscription",
                extra={
                    "hostel_id": str(hostel_id),
                    "subscription_id": str(response.id),
                    "previous_subscription_id": str(previous_id) if previous_id else None,
                },
            )
            return ServiceResult.success(response, message="Subscription renewed successfully")
        except Exception as e:
            return self._handle_exception(e, "renew subscription", hostel_id)

    def cancel(self, hostel_id: UUID) -> ServiceResult[HostelSubscriptionResponse]:
        try:
            with self.unit_of_work() as uow:
                hostel = uow.get_repo(HostelRepository).lock_by_id(hostel_id)
                if hostel is None:
                    raise NotFoundError("Hostel", hostel_id)
                current = resolve_current_row(uow, hostel)
                if current is None:
                    raise NotFoundError("Subscription", hostel_id)
                now = self.now()
                uow.get_repo(HostelSubscriptionRepository).apply_changes(
                    current,
                    {"status": SubscriptionStatus.CANCELLED, "updated_at": now},
                )
                response = to_subscription_response(current, now, hostel.current_subscription_id)

            self._logger.info(
                "Cancelled hostel subscription",
                extra={"hostel_id": str(hostel_id), "subscription_id": str(response.id)},
            )
            return ServiceResult.success(response, message="Subscription cancelled")
        except Exception as e:
            return self._handle_exception(e, "cancel subscription", hostel_id)

    def expire_lapsed(self) -> ServiceResult[int]:
        """
        Mark stored ``active`` rows whose end date has passed as ``expired``.

        Housekeeping only: access decisions never depend on this having run.
        """
        try:
            with self.unit_of_work() as uow:
                subscriptions = uow.get_repo(HostelSubscriptionRepository)
                now = self.now()
                lapsed = subscriptions.list_active_ended_before(now)
                for subscription in lapsed:
                    subscriptions.apply_changes(
                        subscription,
                        {"status": SubscriptionStatus.EXPIRED, "updated_at": now},
                    )
            if lapsed:
                self._logger.info(f"Marked {len(lapsed)} subscriptions as expired")
            return ServiceResult.success(len(lapsed))
        except Exception as e:
            return self._handle_exception(e, "expire lapsed subscriptions")

    # ==================== READ OPERATIONS ====================

    def resolve_current(self, hostel_id: UUID) -> ServiceResult[Optional[HostelSubscriptionResponse]]:
        """Succeeds with None when the hostel has no subscription rows at all."""
        try:
            with self.unit_of_work() as uow:
                hostel = uow.get_repo(HostelRepository).get_by_id(hostel_id)
                if hostel is None:
                    raise NotFoundError("Hostel", hostel_id)
                current = resolve_current_row(uow, hostel)
                if current is None:
                    return ServiceResult.success(None)
                return ServiceResult.success(
                    to_subscription_response(current, self.now(), hostel.current_subscription_id)
                )
        except Exception as e:
            return self._handle_exception(e, "resolve current subscription", hostel_id)

    def list_history(self, hostel_id: UUID) -> ServiceResult[List[HostelSubscriptionResponse]]:
        try:
            with self.unit_of_work() as uow:
                hostel = uow.get_repo(HostelRepository).get_by_id(hostel_id)
                if hostel is None:
                    raise NotFoundError("Hostel", hostel_id)
                now = self.now()
                rows = uow.get_repo(HostelSubscriptionRepository).list_for_hostel(hostel_id)
                return ServiceResult.success(
                    [to_subscription_response(row, now, hostel.current_subscription_id) for row in rows]
                )
        except Exception as e:
            return self._handle_exception(e, "list subscription history", hostel_id)

    def list_lapsed(self) -> ServiceResult[List[HostelSubscriptionResponse]]:
        """Current subscriptions, one per hostel, that no longer grant access."""
        try:
            with self.unit_of_work() as uow:
                subscriptions = uow.get_repo(HostelSubscriptionRepository)
                now = self.now()
                current_rows = subscriptions.list_current()
                for hostel_id in subscriptions.hostel_ids_without_pointer():
                    latest = subscriptions.get_latest_for_hostel(hostel_id)
                    if latest is not None:
                        current_rows.append(latest)
                lapsed = [
                    to_subscription_response(row, now, row.id)
                    for row in current_rows
                    if not is_usable(row, now)
                ]
            return ServiceResult.success(sorted(lapsed, key=lambda s: s.end_date))
        except Exception as e:
            return self._handle_exception(e, "list lapsed subscriptions")

    def get_hostel(self, hostel_id: UUID) -> ServiceResult[HostelResponse]:
        try:
            with self.unit_of_work() as uow:
                hostel = uow.get_repo(HostelRepository).get_by_id(hostel_id)
                if hostel is None:
                    raise NotFoundError("Hostel", hostel_id)
                return ServiceResult.success(HostelResponse.model_validate(hostel))
        except Exception as e:
            return self._handle_exception(e, "get hostel", hostel_id)

    def list_hostels(self) -> ServiceResult[List[HostelResponse]]:
        try:
            with self.unit_of_work() as uow:
                hostels = uow.get_repo(HostelRepository).list_all()
                return ServiceResult.success([HostelResponse.model_validate(h) for h in hostels])
        except Exception as e:
            return self._handle_exception(e, "list hostels")
