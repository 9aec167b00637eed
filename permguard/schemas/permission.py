"""
Permission Schemas
"""

from typing import Optional
from pydantic import Field

from permguard.schemas.base import BaseCreateSchema, BaseReadSchema, BaseUpdateSchema


class PermissionCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    description: Optional[str] = Field(None, max_length=255, description="Permission description")


class PermissionUpdate(BaseUpdateSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Display name")
    description: Optional[str] = Field(None, max_length=255, description="Permission description")


class PermissionRead(BaseReadSchema):
    name: str
    guard_name: str
    description: Optional[str] = None
