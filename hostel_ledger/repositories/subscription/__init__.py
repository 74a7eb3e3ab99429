from hostel_ledger.repositories.subscription.hostel_subscription_repository import (
    HostelSubscriptionRepository,
)
from hostel_ledger.repositories.subscription.plan_repository import PlanRepository

__all__ = ["HostelSubscriptionRepository", "PlanRepository"]
