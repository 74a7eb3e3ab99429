"""
Hostel scoping for callers.

Every ledger operation is scoped to one hostel, derived from the
caller's identity through ``resolve_hostel_for``.
"""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from hostel_ledger.models.base.enums import UserRole
from hostel_ledger.repositories.user.user_repository import UserRepository

logger = logging.getLogger(__name__)


def resolve_hostel_for(
    session: Session,
    user_id: UUID,
    role: UserRole,
    requested_hostel_id: Optional[UUID] = None,
) -> Optional[UUID]:
    """
    Return the hostel the caller may act on, or None.

    - hostel_admin: the user's own hostel
    - custodian: the hostel on the custodian profile, falling back to the
      user's own hostel when no profile exists
    - user (student): the user's own hostel
    - super_admin: whichever hostel the caller explicitly asked for
    """
    if role == UserRole.SUPER_ADMIN:
        return requested_hostel_id

    users = UserRepository(session)

    if role == UserRole.CUSTODIAN:
        profile = users.get_custodian_profile(user_id)
        if profile is not None:
            return profile.hostel_id

    user = users.get_by_id(user_id)
    if user is None or user.is_deleted:
        logger.info("Hostel resolution failed: unknown user", extra={"user_id": str(user_id)})
        return None
    if user.role != role:
        logger.warning(
            "Hostel resolution failed: role mismatch",
            extra={"user_id": str(user_id), "claimed_role": role.value},
        )
        return None
    return user.hostel_id
