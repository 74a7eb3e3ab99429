"""
Subscription plan catalog service.
"""

from decimal import Decimal
from typing import Callable, List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from hostel_ledger.core.constants import DEFAULT_SUBSCRIPTION_PLANS
from hostel_ledger.repositories.subscription.plan_repository import PlanRepository
from hostel_ledger.schemas.subscription.subscription import PlanCreate, PlanResponse, PlanUpdate
from hostel_ledger.services.base.base_service import BaseService
from hostel_ledger.services.base.service_result import ServiceResult
from hostel_ledger.services.common.errors import AlreadyExistsError, ConflictError, NotFoundError
from hostel_ledger.utils.date_utils import Clock


class PlanService(BaseService):
    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(session_factory, clock)

    def list_plans(self, active_only: bool = True) -> ServiceResult[List[PlanResponse]]:
        try:
            with self.unit_of_work() as uow:
                plans = uow.get_repo(PlanRepository).list_plans(active_only=active_only)
                return ServiceResult.success([PlanResponse.model_validate(p) for p in plans])
        except Exception as e:
            return self._handle_exception(e, "list subscription plans")

    def get_plan(self, plan_id: UUID) -> ServiceResult[PlanResponse]:
        try:
            with self.unit_of_work() as uow:
                plan = uow.get_repo(PlanRepository).get_by_id(plan_id)
                if plan is None:
                    raise NotFoundError("Subscription plan", plan_id)
                return ServiceResult.success(PlanResponse.model_validate(plan))
        except Exception as e:
            return self._handle_exception(e, "get subscription plan", plan_id)

    def create_plan(self, data: PlanCreate) -> ServiceResult[PlanResponse]:
        try:
            with self.unit_of_work() as uow:
                plans = uow.get_repo(PlanRepository)
                if plans.get_by_name(data.name) is not None:
                    raise AlreadyExistsError("Subscription plan", "name", data.name)
                plan = plans.create_plan(data.model_dump())
                response = PlanResponse.model_validate(plan)

            self._logger.info(f"Created subscription plan '{response.name}'", extra={"plan_id": str(response.id)})
            return ServiceResult.success(response, message="Plan created successfully")
        except Exception as e:
            return self._handle_exception(e, "create subscription plan", data.name)

    def update_plan(self, plan_id: UUID, patch: PlanUpdate) -> ServiceResult[PlanResponse]:
        try:
            changes = patch.model_dump(exclude_unset=True)
            with self.unit_of_work() as uow:
                plans = uow.get_repo(PlanRepository)
                plan = plans.get_by_id(plan_id)
                if plan is None:
                    raise NotFoundError("Subscription plan", plan_id)
                new_name = changes.get("name")
                if new_name is not None and new_name != plan.name and plans.get_by_name(new_name) is not None:
                    raise AlreadyExistsError("Subscription plan", "name", new_name)
                plan = plans.apply_changes(plan, changes)
                response = PlanResponse.model_validate(plan)
            return ServiceResult.success(response, message="Plan updated successfully")
        except Exception as e:
            return self._handle_exception(e, "update subscription plan", plan_id)

    def deactivate_plan(self, plan_id: UUID) -> ServiceResult[PlanResponse]:
        return self.update_plan(plan_id, PlanUpdate(is_active=False))

    def delete_plan(self, plan_id: UUID) -> ServiceResult[bool]:
        """Hard delete; plans referenced by any subscription can only be deactivated."""
        try:
            with self.unit_of_work() as uow:
                plans = uow.get_repo(PlanRepository)
                plan = plans.get_by_id(plan_id)
                if plan is None:
                    raise NotFoundError("Subscription plan", plan_id)
                if plans.is_referenced(plan_id):
                    raise ConflictError(
                        "Plan is used by hostel subscriptions; deactivate it instead",
                        conflicting_field="plan_id",
                    )
                plans.delete(plan)
            return ServiceResult.success(True, message="Plan deleted successfully")
        except Exception as e:
            return self._handle_exception(e, "delete subscription plan", plan_id)

    def seed_default_plans(self) -> ServiceResult[int]:
        """Insert the default catalog entries that are missing; returns how many were added."""
        try:
            created = 0
            with self.unit_of_work() as uow:
                plans = uow.get_repo(PlanRepository)
                for defaults in DEFAULT_SUBSCRIPTION_PLANS:
                    if plans.get_by_name(defaults["name"]) is not None:
                        continue
                    plans.create_plan(
                        {
                            **defaults,
                            "price_per_month": Decimal(defaults["price_per_month"]),
                            "total_price": Decimal(defaults["total_price"]),
                            "is_active": True,
                        }
                    )
                    created += 1
            if created:
                self._logger.info(f"Seeded {created} default subscription plans")
            return ServiceResult.success(created)
        except Exception as e:
            return self._handle_exception(e, "seed subscription plans")
