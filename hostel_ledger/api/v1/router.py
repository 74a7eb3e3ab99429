"""
API v1 router.

Aggregates all v1 endpoints of the ledger.
"""
from fastapi import APIRouter

from hostel_ledger.api.v1.endpoints import auth, payments, rooms, students, subscriptions

router = APIRouter(
    responses={
        400: {"description": "Bad Request"},
        401: {"description": "Unauthorized"},
        403: {"description": "Forbidden"},
        404: {"description": "Not Found"},
        409: {"description": "Conflict"},
        422: {"description": "Validation Error"},
        500: {"description": "Internal Server Error"},
    }
)

router.include_router(auth.router)
router.include_router(rooms.router)
router.include_router(students.router)
router.include_router(payments.router)
router.include_router(subscriptions.plans_router)
router.include_router(subscriptions.hostels_router)
router.include_router(subscriptions.router)
