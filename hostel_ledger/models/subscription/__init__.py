from hostel_ledger.models.subscription.hostel_subscription import HostelSubscription
from hostel_ledger.models.subscription.subscription_plan import SubscriptionPlan

__all__ = ["HostelSubscription", "SubscriptionPlan"]
