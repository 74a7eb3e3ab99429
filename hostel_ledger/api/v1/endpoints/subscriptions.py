"""
Subscription plans, hostels and their subscription terms.

Plan and hostel management is reserved for super admins. Hostel staff
can read and renew the subscription of their own hostel.
"""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from hostel_ledger.api import deps
from hostel_ledger.api.errors import result_or_raise
from hostel_ledger.schemas.auth.current_user import CurrentUser
from hostel_ledger.schemas.subscription.subscription import (
    HostelCreate,
    HostelResponse,
    HostelSubscriptionResponse,
    PlanCreate,
    PlanResponse,
    PlanUpdate,
    SubscriptionCreate,
    SubscriptionRenew,
)
from hostel_ledger.services.subscription.plan_service import PlanService
from hostel_ledger.services.subscription.subscription_service import SubscriptionService

plans_router = APIRouter(prefix="/subscription-plans", tags=["Subscription Plans"])
hostels_router = APIRouter(prefix="/hostels", tags=["Hostels"])
router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


# ------------------------------------------------------------------ #
# Plans
# ------------------------------------------------------------------ #
@plans_router.get("", response_model=List[PlanResponse])
def list_plans(
    include_inactive: bool = Query(False),
    current_user: CurrentUser = Depends(deps.get_current_user),
    plans: PlanService = Depends(deps.get_plan_service),
):
    return result_or_raise(plans.list_plans(active_only=not include_inactive))


@plans_router.post("", response_model=PlanResponse, status_code=status.HTTP_201_CREATED)
def create_plan(
    payload: PlanCreate,
    current_user: CurrentUser = Depends(deps.get_super_admin_user),
    plans: PlanService = Depends(deps.get_plan_service),
):
    return result_or_raise(plans.create_plan(payload))


@plans_router.get("/{plan_id}", response_model=PlanResponse)
def get_plan(
    plan_id: UUID,
    current_user: CurrentUser = Depends(deps.get_current_user),
    plans: PlanService = Depends(deps.get_plan_service),
):
    return result_or_raise(plans.get_plan(plan_id))


@plans_router.patch("/{plan_id}", response_model=PlanResponse)
def update_plan(
    plan_id: UUID,
    payload: PlanUpdate,
    current_user: CurrentUser = Depends(deps.get_super_admin_user),
    plans: PlanService = Depends(deps.get_plan_service),
):
    return result_or_raise(plans.update_plan(plan_id, payload))


@plans_router.delete("/{plan_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_plan(
    plan_id: UUID,
    current_user: CurrentUser = Depends(deps.get_super_admin_user),
    plans: PlanService = Depends(deps.get_plan_service),
) -> Response:
    result_or_raise(plans.delete_plan(plan_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ------------------------------------------------------------------ #
# Hostels
# ------------------------------------------------------------------ #
@hostels_router.get("", response_model=List[HostelResponse])
def list_hostels(
    current_user: CurrentUser = Depends(deps.get_super_admin_user),
    subscriptions: SubscriptionService = Depends(deps.get_subscription_service),
):
    return result_or_raise(subscriptions.list_hostels())


@hostels_router.post("", response_model=HostelResponse, status_code=status.HTTP_201_CREATED)
def create_hostel(
    payload: HostelCreate,
    current_user: CurrentUser = Depends(deps.get_super_admin_user),
    subscriptions: SubscriptionService = Depends(deps.get_subscription_service),
):
    """Create a hostel; with ``plan_id`` its first subscription starts immediately."""
    return result_or_raise(subscriptions.create_hostel(payload))


@hostels_router.get("/{hostel_id}", response_model=HostelResponse)
def get_hostel(
    hostel_id: UUID = Depends(deps.get_path_hostel_id),
    subscriptions: SubscriptionService = Depends(deps.get_subscription_service),
):
    return result_or_raise(subscriptions.get_hostel(hostel_id))


@hostels_router.get("/{hostel_id}/subscriptions", response_model=List[HostelSubscriptionResponse])
def list_subscription_history(
    hostel_id: UUID = Depends(deps.get_path_hostel_id),
    subscriptions: SubscriptionService = Depends(deps.get_subscription_service),
):
    return result_or_raise(subscriptions.list_history(hostel_id))


@hostels_router.post(
    "/{hostel_id}/subscriptions",
    response_model=HostelSubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_subscription(
    payload: SubscriptionCreate,
    hostel_id: UUID = Depends(deps.get_path_hostel_id),
    current_user: CurrentUser = Depends(deps.get_super_admin_user),
    subscriptions: SubscriptionService = Depends(deps.get_subscription_service),
):
    return result_or_raise(subscriptions.create(hostel_id, payload))


@hostels_router.get(
    "/{hostel_id}/subscriptions/current",
    response_model=Optional[HostelSubscriptionResponse],
)
def current_subscription(
    hostel_id: UUID = Depends(deps.get_path_hostel_id),
    subscriptions: SubscriptionService = Depends(deps.get_subscription_service),
):
    return result_or_raise(subscriptions.resolve_current(hostel_id))


@hostels_router.post(
    "/{hostel_id}/subscriptions/renew",
    response_model=HostelSubscriptionResponse,
    status_code=status.HTTP_201_CREATED,
)
def renew_subscription(
    payload: SubscriptionRenew,
    hostel_id: UUID = Depends(deps.get_path_hostel_id),
    subscriptions: SubscriptionService = Depends(deps.get_subscription_service),
):
    return result_or_raise(subscriptions.renew(hostel_id, payload))


@hostels_router.post("/{hostel_id}/subscriptions/cancel", response_model=HostelSubscriptionResponse)
def cancel_subscription(
    hostel_id: UUID = Depends(deps.get_path_hostel_id),
    current_user: CurrentUser = Depends(deps.get_super_admin_user),
    subscriptions: SubscriptionService = Depends(deps.get_subscription_service),
):
    return result_or_raise(subscriptions.cancel(hostel_id))


# ------------------------------------------------------------------ #
# Platform-wide
# ------------------------------------------------------------------ #
@router.get("/expired", response_model=List[HostelSubscriptionResponse])
def list_expired_subscriptions(
    current_user: CurrentUser = Depends(deps.get_super_admin_user),
    subscriptions: SubscriptionService = Depends(deps.get_subscription_service),
):
    """Current subscriptions that no longer grant access, oldest end date first."""
    return result_or_raise(subscriptions.list_lapsed())


@router.post("/expire-lapsed")
def expire_lapsed_subscriptions(
    current_user: CurrentUser = Depends(deps.get_super_admin_user),
    subscriptions: SubscriptionService = Depends(deps.get_subscription_service),
):
    return {"expired": result_or_raise(subscriptions.expire_lapsed())}
