from hostel_ledger.schemas.common.base import BaseCreateSchema, BaseResponseSchema, BaseSchema, BaseUpdateSchema
from hostel_ledger.schemas.common.pagination import PaginatedResponse, PaginationMeta, PaginationParams

__all__ = [
    "BaseCreateSchema",
    "BaseResponseSchema",
    "BaseSchema",
    "BaseUpdateSchema",
    "PaginatedResponse",
    "PaginationMeta",
    "PaginationParams",
]
