"""
Base DTOs for the application layer.
Provides common patterns for request/response data transfer objects.
"""

from typing import Any, Dict, Optional
from datetime import date

from pydantic import BaseModel, Field, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class BaseDTO(BaseModel):
    """Base DTO with common configuration. Fields travel as camelCase on the wire."""

    model_config = ConfigDict(
        # Allow population by field name or alias
        populate_by_name=True,
        # camelCase aliases (organizationId, lastLoginAt, ...)
        alias_generator=to_camel,
        # Build responses straight from ORM rows
        from_attributes=True,
        # Validate assignment
        validate_assignment=True,
    )

    def to_json_dict(self) -> Dict[str, Any]:
        """JSON-compatible dict using wire (camelCase) names."""
        return self.model_dump(mode="json", by_alias=True)


class RequestDTO(BaseDTO):
    """Base class for request DTOs."""

    model_config = ConfigDict(extra="forbid")


class ResponseDTO(BaseDTO):
    """Base class for response DTOs."""
    pass


class ListRequestDTO(RequestDTO):
    """Base class for list request DTOs with pagination."""

    page: int = Field(default=1, ge=1, description="Page number")
    limit: int = Field(default=20, ge=1, le=100, description="Items per page")

    @property
    def offset(self) -> int:
        """Calculate offset for database queries."""
        return (self.page - 1) * self.limit


class DateRangeMixin(BaseModel):
    """Optional date window with an ordering check."""

    date_from: Optional[date] = Field(default=None, description="Filter from date")
    date_to: Optional[date] = Field(default=None, description="Filter to date")

    @model_validator(mode="after")
    def validate_date_range(self):
        """Validate that date_to is not before date_from."""
        if self.date_from and self.date_to and self.date_to < self.date_from:
            raise ValueError('dateTo must be on or after dateFrom')
        return self


class PaginationMetaDTO(ResponseDTO):
    """Pagination metadata returned next to list data."""

    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def create(cls, total: int, page: int, limit: int) -> "PaginationMetaDTO":
        total_pages = (total + limit - 1) // limit if limit else 0  # Ceiling division
        return cls(total=total, page=page, limit=limit, total_pages=total_pages)
