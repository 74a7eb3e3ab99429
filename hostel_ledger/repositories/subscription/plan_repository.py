"""
Subscription Plan Repository.

Catalog reads and writes for the plans hostels subscribe to.
"""

from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import exists, select
from sqlalchemy.orm import Session

from hostel_ledger.models.subscription.hostel_subscription import HostelSubscription
from hostel_ledger.models.subscription.subscription_plan import SubscriptionPlan


class PlanRepository:
    """Repository for the subscription plan catalog."""

    def __init__(self, db: Session):
        """Initialize repository with database session."""
        self.db = db

    # ==================== CREATE OPERATIONS ====================

    def create_plan(self, plan_data: Dict[str, Any]) -> SubscriptionPlan:
        plan = SubscriptionPlan(**plan_data)
        self.db.add(plan)
        self.db.flush()
        return plan

    # ==================== READ OPERATIONS ====================

    def get_by_id(self, plan_id: UUID) -> Optional[SubscriptionPlan]:
        return self.db.get(SubscriptionPlan, plan_id)

    def get_by_name(self, name: str) -> Optional[SubscriptionPlan]:
        stmt = select(SubscriptionPlan).where(SubscriptionPlan.name == name)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_plans(self, active_only: bool = True) -> List[SubscriptionPlan]:
        stmt = select(SubscriptionPlan)
        if active_only:
            stmt = stmt.where(SubscriptionPlan.is_active.is_(True))
        stmt = stmt.order_by(SubscriptionPlan.duration_months.asc(), SubscriptionPlan.name.asc())
        return list(self.db.execute(stmt).scalars().all())

    def is_referenced(self, plan_id: UUID) -> bool:
        stmt = select(exists().where(HostelSubscription.plan_id == plan_id))
        return bool(self.db.execute(stmt).scalar())

    # ==================== UPDATE / DELETE OPERATIONS ====================

    def apply_changes(self, plan: SubscriptionPlan, changes: Dict[str, Any]) -> SubscriptionPlan:
        for field, value in changes.items():
            setattr(plan, field, value)
        self.db.flush()
        return plan

    def delete(self, plan: SubscriptionPlan) -> None:
        self.db.delete(plan)
        self.db.flush()
