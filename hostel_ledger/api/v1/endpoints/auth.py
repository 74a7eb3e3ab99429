"""Login gate, called once the caller's credentials have been verified."""
from fastapi import APIRouter, Depends

from hostel_ledger.api import deps
from hostel_ledger.api.errors import result_or_raise
from hostel_ledger.schemas.auth.current_user import CurrentUser
from hostel_ledger.schemas.subscription.subscription import LoginGateDecision
from hostel_ledger.services.subscription.login_gate import LoginGateService

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.get("/login-gate", response_model=LoginGateDecision, response_model_by_alias=True)
def login_gate(
    current_user: CurrentUser = Depends(deps.get_current_user),
    gate: LoginGateService = Depends(deps.get_login_gate_service),
):
    """
    Decide whether the caller may sign in. A denial is a regular 200
    response with ``allow: false`` and the reason code.
    """
    return result_or_raise(gate.check_user(current_user.id, current_user.role, current_user.hostel_id))
