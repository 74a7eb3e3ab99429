from hostel_ledger.schemas.subscription.subscription import (
    GateWarning,
    HostelCreate,
    HostelResponse,
    HostelSubscriptionResponse,
    LoginGateDecision,
    PlanCreate,
    PlanResponse,
    PlanUpdate,
    SubscriptionCreate,
    SubscriptionRenew,
)

__all__ = [
    "GateWarning",
    "HostelCreate",
    "HostelResponse",
    "HostelSubscriptionResponse",
    "LoginGateDecision",
    "PlanCreate",
    "PlanResponse",
    "PlanUpdate",
    "SubscriptionCreate",
    "SubscriptionRenew",
]
