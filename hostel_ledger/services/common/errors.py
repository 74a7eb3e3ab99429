"""
Service-layer exceptions.

Raised inside service operations and converted to a failed
``ServiceResult`` at the operation boundary. Each exception carries
the ``ErrorCode`` it maps to.
"""
from __future__ import annotations

from typing import Any, Optional
from uuid import UUID

from hostel_ledger.services.base.service_result import ErrorCode


class DomainError(Exception):
    """Base exception for all service-layer errors."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(DomainError):
    """Raised when a requested resource does not exist or is not owned by the caller's hostel."""

    code = ErrorCode.NOT_FOUND

    def __init__(
        self,
        resource_type: str,
        identifier: UUID | str | int,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} with identifier '{identifier}' not found"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.identifier = identifier


class AlreadyExistsError(DomainError):
    """Raised when attempting to create a resource that already exists."""

    code = ErrorCode.ALREADY_EXISTS

    def __init__(
        self,
        resource_type: str,
        field: str,
        value: Any,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        message = f"{resource_type} with {field}='{value}' already exists"
        super().__init__(message, details)
        self.resource_type = resource_type
        self.field = field
        self.value = value


class ValidationError(DomainError):
    """Raised when business logic validation fails."""

    code = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.field = field


class ConflictError(DomainError):
    """Raised when an operation conflicts with current state."""

    code = ErrorCode.CONFLICT

    def __init__(
        self,
        message: str,
        conflicting_field: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.conflicting_field = conflicting_field


class RoomHasActiveAssignment(ConflictError):
    """The room is occupied by an active assignment."""

    code = ErrorCode.ROOM_HAS_ACTIVE_ASSIGNMENT

    def __init__(self, room_id: UUID, action: str) -> None:
        super().__init__(
            f"Cannot {action}: room has an active student assignment",
            conflicting_field="status",
            details={"room_id": str(room_id)},
        )
        self.room_id = room_id


class RoomUnavailable(ConflictError):
    """The room is not in this hostel or is not available."""

    code = ErrorCode.ROOM_UNAVAILABLE

    def __init__(self, room_id: UUID) -> None:
        super().__init__(
            "Invalid or unavailable room",
            conflicting_field="room_id",
            details={"room_id": str(room_id)},
        )
        self.room_id = room_id


class StudentAlreadyAssigned(ConflictError):
    code = ErrorCode.STUDENT_ALREADY_ASSIGNED

    def __init__(self, student_id: UUID) -> None:
        super().__init__(
            "Student already has an active room assignment",
            conflicting_field="student_id",
            details={"student_id": str(student_id)},
        )
        self.student_id = student_id


class BusinessRuleViolation(DomainError):
    """Raised when a business rule is violated."""

    code = ErrorCode.BUSINESS_RULE_VIOLATION

    def __init__(
        self,
        rule_name: str,
        message: str,
        details: Optional[dict[str, Any]] = None,
    ) -> None:
        super().__init__(message, details)
        self.rule_name = rule_name


class TransactionError(DomainError):
    """Raised when a database transaction fails."""

    code = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, original_error: Optional[Exception] = None) -> None:
        super().__init__(message, details={"error_type": type(original_error).__name__})
        self.original_error = original_error
