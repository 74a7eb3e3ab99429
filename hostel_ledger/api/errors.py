"""
Translation of service outcomes into HTTP responses.

Every error leaves the API as ``{"error": {"code", "message", "details"}}``.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional, TypeVar

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hostel_ledger.services.base.service_result import ErrorCode, ServiceResult

logger = logging.getLogger(__name__)

T = TypeVar("T")

ERROR_STATUS_MAP: Dict[ErrorCode, int] = {
    ErrorCode.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCode.BUSINESS_RULE_VIOLATION: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_STATE: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCode.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.ROOM_HAS_ACTIVE_ASSIGNMENT: status.HTTP_409_CONFLICT,
    ErrorCode.ROOM_UNAVAILABLE: status.HTTP_409_CONFLICT,
    ErrorCode.STUDENT_ALREADY_ASSIGNED: status.HTTP_409_CONFLICT,
    ErrorCode.SUBSCRIPTION_MISSING: status.HTTP_403_FORBIDDEN,
    ErrorCode.SUBSCRIPTION_EXPIRED: status.HTTP_403_FORBIDDEN,
    ErrorCode.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorCode.INSUFFICIENT_PERMISSIONS: status.HTTP_403_FORBIDDEN,
    ErrorCode.EXTERNAL_SERVICE_ERROR: status.HTTP_502_BAD_GATEWAY,
    ErrorCode.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


class ApiError(Exception):
    """Raised by routes; rendered by the handler registered in ``register_exception_handlers``."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.code = code
        self.message = message
        self.details = details or {}


def error_body(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    return {"error": {"code": code, "message": message, "details": details or {}}}


def result_or_raise(result: ServiceResult[T]) -> T:
    """Return the data of a successful result, otherwise raise ``ApiError``."""
    if result.is_success:
        return result.data

    error = result.error
    if error is None:
        raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, ErrorCode.INTERNAL_ERROR.value, "Unknown error")

    details = dict(error.details or {})
    if error.field:
        details.setdefault("field", error.field)
    raise ApiError(
        ERROR_STATUS_MAP.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        error.code.value,
        error.message,
        details,
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message, exc.details))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = {
        status.HTTP_401_UNAUTHORIZED: ErrorCode.UNAUTHORIZED.value,
        status.HTTP_403_FORBIDDEN: ErrorCode.INSUFFICIENT_PERMISSIONS.value,
        status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND.value,
    }.get(exc.status_code, "HTTP_ERROR")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_body(ErrorCode.VALIDATION_ERROR.value, "Request validation failed", {"errors": errors}),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
