"""
Base schema classes with common fields and configurations.
"""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class BaseSchema(BaseModel):
    """
    Base schema with common Pydantic configuration.

    All application-facing schemas inherit from this to ensure
    consistent behaviour.
    """

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        # Keep enums as Enum instances; JSON output still uses the values.
        use_enum_values=False,
        str_strip_whitespace=True,
        validate_assignment=True,
    )


class BaseCreateSchema(BaseSchema):
    """Base schema for create payloads; unknown fields are rejected."""

    model_config = ConfigDict(extra="forbid")


class BaseUpdateSchema(BaseSchema):
    """
    Base schema for partial updates.

    Only fields explicitly present in the payload are applied, see
    ``model_dump(exclude_unset=True)``.
    """

    model_config = ConfigDict(extra="forbid")


class BaseResponseSchema(BaseSchema):
    """Base schema for database entities with ID and creation time."""

    id: UUID = Field(..., description="Unique identifier")
    created_at: datetime = Field(..., description="Creation timestamp")
