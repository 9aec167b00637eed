"""
Base Pydantic Schemas
Common schemas and base classes for payload and read models
"""

from datetime import datetime
from typing import Any, List
from pydantic import BaseModel, Field, ConfigDict


class BaseSchema(BaseModel):
    """Base schema with common configuration"""
    model_config = ConfigDict(
        from_attributes=True,
        validate_assignment=True,
        arbitrary_types_allowed=True,
        str_strip_whitespace=True,
    )


class BaseCreateSchema(BaseSchema):
    """Base schema for creation payloads"""
    pass


class BaseUpdateSchema(BaseSchema):
    """Base schema for partial updates"""
    pass


class BaseReadSchema(BaseSchema):
    """Base schema for rows read back from storage"""
    id: int = Field(..., description="Storage-assigned identifier")
    created_at: datetime = Field(..., description="Creation timestamp")
    updated_at: datetime = Field(..., description="Last update timestamp")


class PaginatedResult(BaseModel):
    """Page of items with the unpaginated total"""
    items: List[Any] = Field(..., description="List of items")
    total: int = Field(..., description="Total number of items")
    page: int = Field(..., description="Current page")
    limit: int = Field(..., description="Page size")
    has_next: bool = Field(..., description="Whether there are more items")
    has_prev: bool = Field(..., description="Whether there are previous items")

    @classmethod
    def create(cls, items: List[Any], total: int, page: int, limit: int) -> "PaginatedResult":
        """
        Create paginated result

        Args:
            items: List of items
            total: Total number of items before pagination
            page: Current page, starting at 1
            limit: Page size

        Returns:
            Paginated result
        """
        offset = (page - 1) * limit
        return cls(
            items=items,
            total=total,
            page=page,
            limit=limit,
            has_next=offset + len(items) < total,
            has_prev=page > 1,
        )
