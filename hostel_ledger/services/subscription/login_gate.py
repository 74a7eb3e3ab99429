"""
Login gate.

Called by the authentication collaborator once credentials are
verified. Only hostel staff are gated; the decision itself is the pure
``evaluate_login_gate``.
"""

from typing import Callable, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from hostel_ledger.models.base.enums import UserRole
from hostel_ledger.repositories.hostel.hostel_repository import HostelRepository
from hostel_ledger.schemas.subscription.subscription import LoginGateDecision
from hostel_ledger.services.access.hostel_resolver import resolve_hostel_for
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.base.service_result import ServiceResult
from hostel_ledger.services.subscription.rules import DEFAULT_WARNING_DAYS, evaluate_login_gate
from hostel_ledger.services.subscription.subscription_service import resolve_current_row
from hostel_ledger.utils.date_utils import Clock

GATED_ROLES = frozenset({UserRole.HOSTEL_ADMIN, UserRole.CUSTODIAN})


class LoginGateService(BaseService):
    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Optional[Clock] = None,
        warning_days: int = DEFAULT_WARNING_DAYS,
    ) -> None:
        super().__init__(session_factory, clock)
        self._warning_days = warning_days

    def check(self, hostel_id: UUID) -> ServiceResult[LoginGateDecision]:
        """
        Evaluate the gate for a hostel. An unknown hostel has no
        subscription and is denied with SUBSCRIPTION_MISSING.
        """
        try:
            with self.unit_of_work() as uow:
                hostel = uow.get_repo(HostelRepository).get_by_id(hostel_id)
                subscription = resolve_current_row(uow, hostel) if hostel is not None else None
                decision = evaluate_login_gate(subscription, self.now(), self._warning_days)

            if not decision.allow:
                self._logger.info(
                    f"Login blocked: {decision.code}",
                    extra={"hostel_id": str(hostel_id)},
                )
            return ServiceResult.success(decision)
        except Exception as e:
            return self._handle_exception(e, "evaluate login gate", hostel_id)

    def check_user(
        self,
        user_id: UUID,
        role: UserRole,
        hostel_id: Optional[UUID] = None,
    ) -> ServiceResult[LoginGateDecision]:
        """
        Gate a verified user.

        Students and super admins are not gated. Staff without a known
        hostel (neither passed in nor resolvable from their profile) are
        allowed as well.
        """
        if role not in GATED_ROLES:
            return ServiceResult.success(LoginGateDecision(allow=True))
        if hostel_id is None:
            try:
                with self.unit_of_work() as uow:
                    hostel_id = resolve_hostel_for(uow.session, user_id, role)
            except Exception as e:
                return self._handle_exception(e, "resolve hostel for login gate", user_id)
        if hostel_id is None:
            return ServiceResult.success(LoginGateDecision(allow=True))
        return self.check(hostel_id)
