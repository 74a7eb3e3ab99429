"""
Pure subscription rules.

The stored ``status`` can lag behind the calendar (nothing guarantees
a sweep ran), so usability always combines it with ``end_date``.
"""

from datetime import datetime, timedelta
from typing import Optional, Protocol

from hostel_ledger.models.base.enums import SubscriptionStatus
from hostel_ledger.schemas.subscription.subscription import GateWarning, LoginGateDecision
from hostel_ledger.services.base.service_result import ErrorCode
from hostel_ledger.utils.date_utils import days_left, to_utc

DEFAULT_WARNING_DAYS = 30

SUBSCRIPTION_MISSING = ErrorCode.SUBSCRIPTION_MISSING.value
SUBSCRIPTION_EXPIRED = ErrorCode.SUBSCRIPTION_EXPIRED.value


class SubscriptionLike(Protocol):
    status: SubscriptionStatus
    end_date: datetime


def is_usable(subscription: Optional[SubscriptionLike], now: datetime) -> bool:
    """True iff the stored status is active and the end date has not passed."""
    if subscription is None:
        return False
    return subscription.status == SubscriptionStatus.ACTIVE and to_utc(subscription.end_date) >= to_utc(now)


def evaluate_login_gate(
    subscription: Optional[SubscriptionLike],
    now: datetime,
    warning_days: int = DEFAULT_WARNING_DAYS,
) -> LoginGateDecision:
    """
    Decide whether a hostel's staff may log in.

    Deterministic in ``(subscription, now)``: missing subscription and
    unusable subscription deny; a usable one ending within
    ``warning_days`` allows with a days-left warning.
    """
    if subscription is None:
        return LoginGateDecision(
            allow=False,
            code=SUBSCRIPTION_MISSING,
            message="No subscription found for this hostel. Please contact support to subscribe.",
        )

    end_date = to_utc(subscription.end_date)
    if not is_usable(subscription, now):
        return LoginGateDecision(
            allow=False,
            code=SUBSCRIPTION_EXPIRED,
            message="Your hostel subscription has expired. Please renew to continue.",
            subscription_end_date=end_date,
        )

    if end_date - to_utc(now) <= timedelta(days=warning_days):
        remaining = days_left(end_date, now)
        return LoginGateDecision(
            allow=True,
            warning=GateWarning(
                days_left=remaining,
                message=f"Your subscription expires in {remaining} day{'s' if remaining != 1 else ''}.",
            ),
            subscription_end_date=end_date,
        )

    return LoginGateDecision(allow=True, subscription_end_date=end_date)
