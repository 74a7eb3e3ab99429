"""
Typed outcomes of service operations.

Services never raise to their callers; they return a ``ServiceResult``
holding either the data or a ``ServiceError`` whose ``ErrorCode`` the
API layer maps to an HTTP status.
"""

import dataclasses
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar


class ErrorCode(str, Enum):
    """Error codes shared by the services and the API."""

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_EXISTS = "ALREADY_EXISTS"

    # Business logic errors
    BUSINESS_RULE_VIOLATION = "BUSINESS_RULE_VIOLATION"
    INVALID_STATE = "INVALID_STATE"
    CONFLICT = "CONFLICT"

    # Occupancy errors
    ROOM_HAS_ACTIVE_ASSIGNMENT = "ROOM_HAS_ACTIVE_ASSIGNMENT"
    ROOM_UNAVAILABLE = "ROOM_UNAVAILABLE"
    STUDENT_ALREADY_ASSIGNED = "STUDENT_ALREADY_ASSIGNED"

    # Subscription gate
    SUBSCRIPTION_MISSING = "SUBSCRIPTION_MISSING"
    SUBSCRIPTION_EXPIRED = "SUBSCRIPTION_EXPIRED"

    # Security errors
    UNAUTHORIZED = "UNAUTHORIZED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # External service errors
    EXTERNAL_SERVICE_ERROR = "EXTERNAL_SERVICE_ERROR"


class ErrorSeverity(str, Enum):
    """WARNING for rejected requests, ERROR for failures of the system itself."""

    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class ServiceError:
    code: ErrorCode
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    details: Optional[Dict[str, Any]] = None
    field: Optional[str] = None
    occurred_at: datetime = dataclasses.field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        """Log-friendly form of the error."""
        return {
            "code": self.code.value,
            "message": self.message,
            "severity": self.severity.value,
            "details": self.details,
            "field": self.field,
            "occurred_at": self.occurred_at.isoformat(),
        }


TData = TypeVar("TData")


@dataclass
class ServiceResult(Generic[TData]):
    """
    Outcome of one service operation.

    Attributes:
        is_success: Whether the operation succeeded
        data: The operation's value on success
        error: What went wrong on failure
        message: Short human-readable status
        metadata: Extra facts about how the result was produced,
            e.g. ``{"cached": True}`` for a summary served from cache
    """

    is_success: bool
    data: Optional[TData] = None
    error: Optional[ServiceError] = None
    message: Optional[str] = None
    metadata: Dict[str, Any] = dataclasses.field(default_factory=dict)

    @classmethod
    def success(
        cls,
        data: Optional[TData] = None,
        message: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[TData]":
        return cls(is_success=True, data=data, message=message, metadata=metadata or {})

    @classmethod
    def failure(cls, error: ServiceError) -> "ServiceResult[TData]":
        return cls(is_success=False, error=error, message=error.message)

    def unwrap(self) -> TData:
        """
        Return the data of a successful result.

        Raises:
            ValueError: If the result is a failure
        """
        if not self.is_success:
            reason = self.error.message if self.error else "unknown error"
            raise ValueError(f"Cannot unwrap failed result: {reason}")
        return self.data

    @property
    def error_code(self) -> Optional[ErrorCode]:
        return self.error.code if self.error else None

    def __repr__(self) -> str:
        if self.is_success:
            return f"ServiceResult(success, message={self.message!r})"
        return f"ServiceResult(failure, code={self.error_code})"


__all__ = [
    "ErrorCode",
    "ErrorSeverity",
    "ServiceError",
    "ServiceResult",
]
