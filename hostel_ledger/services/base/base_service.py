"""
Base service with transaction handling and exception mapping.

Every public service operation runs inside ``try`` and returns a
``ServiceResult``; domain exceptions raised by the operation become
typed failures here.
"""

import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from hostel_ledger.services.base.service_result import (
    ErrorCode,
    ErrorSeverity,
    ServiceError,
    ServiceResult,
)
from hostel_ledger.services.common.errors import DomainError, TransactionError
from hostel_ledger.services.common.unit_of_work import UnitOfWork
from hostel_ledger.utils.date_utils import Clock, now_utc


class BaseService:
    """
    Shared plumbing for ledger services.

    Args:
        session_factory: Callable returning a new SQLAlchemy ``Session``
        clock: Callable returning the current aware UTC datetime
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Optional[Clock] = None,
    ) -> None:
        self._session_factory = session_factory
        self._clock: Clock = clock or now_utc
        self._logger = logging.getLogger(f"{self.__class__.__module__}.{self.__class__.__name__}")

    def unit_of_work(self) -> UnitOfWork:
        return UnitOfWork(self._session_factory)

    def now(self) -> datetime:
        return self._clock()

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Convert exception to a ServiceResult failure with logging.

        Domain errors are expected outcomes and are logged at warning
        level; anything else is logged with its traceback.
        """
        context = {
            "operation": operation,
            "entity_ref": str(entity_ref) if entity_ref is not None else None,
            "exception_type": type(exception).__name__,
        }
        if additional_context:
            context.update(additional_context)

        if isinstance(exception, DomainError) and not isinstance(exception, TransactionError):
            self._logger.warning(f"{operation} rejected: {exception.message}", extra=context)
            return ServiceResult.failure(
                ServiceError(
                    code=exception.code,
                    message=exception.message,
                    severity=ErrorSeverity.WARNING,
                    field=getattr(exception, "field", None) or getattr(exception, "conflicting_field", None),
                    details=exception.details or None,
                )
            )

        self._logger.error(
            f"Error during {operation}: {exception}",
            exc_info=True,
            extra=context,
        )
        return ServiceResult.failure(
            ServiceError(
                code=self._map_exception_to_error_code(exception),
                message=f"Failed to {operation}",
                severity=ErrorSeverity.ERROR,
                details={
                    "entity_ref": context["entity_ref"],
                    "exception_type": context["exception_type"],
                },
            )
        )

    def _map_exception_to_error_code(self, exception: Exception) -> ErrorCode:
        """Map infrastructure exceptions to error codes."""
        original = getattr(exception, "original_error", None)
        if isinstance(exception, IntegrityError) or isinstance(original, IntegrityError):
            return ErrorCode.CONFLICT
        return ErrorCode.INTERNAL_ERROR
