"""
FastAPI dependencies: caller identity, hostel scope and services.

Routes use them as plain callables:

    @router.get("/rooms")
    def list_rooms(
        hostel_id: UUID = Depends(deps.get_hostel_id),
        rooms: RoomService = Depends(deps.get_room_service),
    ):
        ...
"""
from __future__ import annotations

from typing import Callable, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from hostel_ledger.core.container import ServiceContainer
from hostel_ledger.models.base.enums import UserRole
from hostel_ledger.schemas.auth.current_user import CurrentUser
from hostel_ledger.services.access.hostel_resolver import resolve_hostel_for
from hostel_ledger.services.payment.payment_service import PaymentService
from hostel_ledger.services.payment.summary_service import BalanceSummaryService
from hostel_ledger.services.room.assignment_service import AssignmentService
from hostel_ledger.services.room.room_service import RoomService
from hostel_ledger.services.student.student_service import StudentService
from hostel_ledger.services.subscription.login_gate import LoginGateService
from hostel_ledger.services.subscription.plan_service import PlanService
from hostel_ledger.services.subscription.subscription_service import SubscriptionService

bearer_scheme = HTTPBearer(auto_error=False)

STAFF_ROLES = frozenset({UserRole.SUPER_ADMIN, UserRole.HOSTEL_ADMIN, UserRole.CUSTODIAN})


# ------------------------------------------------------------------ #
# Container
# ------------------------------------------------------------------ #
def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_session_factory(container: ServiceContainer = Depends(get_container)):
    return container.session_factory


# ------------------------------------------------------------------ #
# Current user
# ------------------------------------------------------------------ #
def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> CurrentUser:
    """
    Resolve the caller through the token verifier installed on
    ``app.state.token_verifier``. Tokens are never parsed here.

    Raises 401 when the token is missing or cannot be verified.
    """
    verifier = getattr(request.app.state, "token_verifier", None)
    if credentials is None or verifier is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        claims = verifier(credentials.credentials)
    except Exception:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    claims = claims or {}
    user_id = claims.get("user_id") or claims.get("sub")
    role = claims.get("role")
    if not user_id or not role:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
        )

    try:
        return CurrentUser(
            id=UUID(str(user_id)),
            role=UserRole(role),
            hostel_id=UUID(str(claims["hostel_id"])) if claims.get("hostel_id") else None,
        )
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token claims",
        )


def require_roles(*roles: UserRole) -> Callable[..., CurrentUser]:
    """Dependency factory restricting a route to the given roles."""
    allowed = frozenset(roles)

    def checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if current_user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions for this operation",
            )
        return current_user

    return checker


get_staff_user = require_roles(*STAFF_ROLES)
get_super_admin_user = require_roles(UserRole.SUPER_ADMIN)


# ------------------------------------------------------------------ #
# Hostel scope
# ------------------------------------------------------------------ #
def get_hostel_id(
    hostel_id: Optional[UUID] = Query(
        default=None,
        description="Hostel to act on; only honoured for super admins",
    ),
    current_user: CurrentUser = Depends(get_staff_user),
    container: ServiceContainer = Depends(get_container),
) -> UUID:
    """The hostel every ledger route is scoped to, resolved from the caller."""
    session = container.session_factory()
    try:
        resolved = resolve_hostel_for(session, current_user.id, current_user.role, hostel_id)
    finally:
        session.close()

    if resolved is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No hostel associated with this account",
        )
    return resolved


# ------------------------------------------------------------------ #
# Services
# ------------------------------------------------------------------ #
def get_room_service(container: ServiceContainer = Depends(get_container)) -> RoomService:
    return container.rooms


def get_assignment_service(container: ServiceContainer = Depends(get_container)) -> AssignmentService:
    return container.assignments


def get_student_service(container: ServiceContainer = Depends(get_container)) -> StudentService:
    return container.students


def get_payment_service(container: ServiceContainer = Depends(get_container)) -> PaymentService:
    return container.payments


def get_summary_service(container: ServiceContainer = Depends(get_container)) -> BalanceSummaryService:
    return container.summaries


def get_plan_service(container: ServiceContainer = Depends(get_container)) -> PlanService:
    return container.plans


def get_subscription_service(container: ServiceContainer = Depends(get_container)) -> SubscriptionService:
    return container.subscriptions


def get_login_gate_service(container: ServiceContainer = Depends(get_container)) -> LoginGateService:
    return container.login_gate


def get_path_hostel_id(
    hostel_id: UUID,
    current_user: CurrentUser = Depends(get_staff_user),
    container: ServiceContainer = Depends(get_container),
) -> UUID:
    """
    For ``/hostels/{hostel_id}/...`` routes: super admins reach any hostel,
    staff only their own.
    """
    if current_user.role == UserRole.SUPER_ADMIN:
        return hostel_id

    session = container.session_factory()
    try:
        resolved = resolve_hostel_for(session, current_user.id, current_user.role)
    finally:
        session.close()

    if resolved != hostel_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access to this hostel is not allowed",
        )
    return hostel_id
