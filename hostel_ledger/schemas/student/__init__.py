from hostel_ledger.schemas.student.student import (
    NotifyRequest,
    NotifyResult,
    StudentCreate,
    StudentRegistration,
    StudentResponse,
)

__all__ = [
    "NotifyRequest",
    "NotifyResult",
    "StudentCreate",
    "StudentRegistration",
    "StudentResponse",
]
