"""
Role Schemas
"""

from typing import List, Optional
from pydantic import Field

from permguard.schemas.base import BaseCreateSchema, BaseReadSchema, BaseUpdateSchema
from permguard.schemas.permission import PermissionRead


class RoleCreate(BaseCreateSchema):
    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    description: Optional[str] = Field(None, max_length=255, description="Role description")


class RoleUpdate(BaseUpdateSchema):
    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Display name")
    description: Optional[str] = Field(None, max_length=255, description="Role description")


class RoleRead(BaseReadSchema):
    name: str
    guard_name: str
    description: Optional[str] = None


class RoleWithPermissionsRead(RoleRead):
    permissions: List[PermissionRead] = Field(default_factory=list)
