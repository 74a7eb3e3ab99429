"""
Hostel Subscription Repository.

Rows are never deleted; renewals append a row and the hostel pointer
moves to it.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from hostel_ledger.models.base.enums import SubscriptionStatus
from hostel_ledger.models.hostel.hostel import Hostel
from hostel_ledger.models.subscription.hostel_subscription import HostelSubscription


class HostelSubscriptionRepository:
    """Repository for hostel subscription terms."""

    def __init__(self, db: Session):
        """Initialize repository with database session."""
        self.db = db

    # ==================== CREATE OPERATIONS ====================

    def create_subscription(self, subscription_data: Dict[str, Any]) -> HostelSubscription:
        subscription = HostelSubscription(**subscription_data)
        self.db.add(subscription)
        self.db.flush()
        return subscription

    # ==================== READ OPERATIONS ====================

    def get_by_id(self, subscription_id: UUID) -> Optional[HostelSubscription]:
        stmt = (
            select(HostelSubscription)
            .options(joinedload(HostelSubscription.plan))
            .where(HostelSubscription.id == subscription_id)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_for_hostel(self, subscription_id: UUID, hostel_id: UUID) -> Optional[HostelSubscription]:
        subscription = self.get_by_id(subscription_id)
        if subscription is None or subscription.hostel_id != hostel_id:
            return None
        return subscription

    def get_latest_for_hostel(self, hostel_id: UUID) -> Optional[HostelSubscription]:
        """The row with the latest end date, used when the pointer is unset."""
        stmt = (
            select(HostelSubscription)
            .options(joinedload(HostelSubscription.plan))
            .where(HostelSubscription.hostel_id == hostel_id)
            .order_by(HostelSubscription.end_date.desc(), HostelSubscription.created_at.desc())
            .limit(1)
        )
        return self.db.execute(stmt).scalars().first()

    def list_for_hostel(self, hostel_id: UUID) -> List[HostelSubscription]:
        stmt = (
            select(HostelSubscription)
            .options(joinedload(HostelSubscription.plan))
            .where(HostelSubscription.hostel_id == hostel_id)
            .order_by(HostelSubscription.start_date.desc(), HostelSubscription.created_at.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_current(self) -> List[HostelSubscription]:
        """Subscriptions currently referenced by a hostel pointer."""
        stmt = (
            select(HostelSubscription)
            .options(joinedload(HostelSubscription.plan))
            .join(Hostel, Hostel.current_subscription_id == HostelSubscription.id)
            .order_by(HostelSubscription.end_date.asc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def hostel_ids_without_pointer(self) -> List[UUID]:
        stmt = (
            select(Hostel.id)
            .where(Hostel.current_subscription_id.is_(None))
            .where(
                select(func.count(HostelSubscription.id))
                .where(HostelSubscription.hostel_id == Hostel.id)
                .scalar_subquery()
                > 0
            )
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_active_ended_before(self, now: datetime) -> List[HostelSubscription]:
        stmt = select(HostelSubscription).where(
            HostelSubscription.status == SubscriptionStatus.ACTIVE,
            HostelSubscription.end_date < now,
        )
        return list(self.db.execute(stmt).scalars().all())

    # ==================== UPDATE OPERATIONS ====================

    def apply_changes(self, subscription: HostelSubscription, changes: Dict[str, Any]) -> HostelSubscription:
        for field, value in changes.items():
            setattr(subscription, field, value)
        self.db.flush()
        return subscription
