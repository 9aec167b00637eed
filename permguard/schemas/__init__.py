"""
Pydantic schemas
"""

from permguard.schemas.base import PaginatedResult
from permguard.schemas.options import PermissionOption, RoleOption, make_pagination
from permguard.schemas.permission import PermissionCreate, PermissionRead, PermissionUpdate
from permguard.schemas.role import RoleCreate, RoleRead, RoleUpdate, RoleWithPermissionsRead

__all__ = [
    "PaginatedResult",
    "PermissionOption",
    "RoleOption",
    "make_pagination",
    "PermissionCreate",
    "PermissionRead",
    "PermissionUpdate",
    "RoleCreate",
    "RoleRead",
    "RoleUpdate",
    "RoleWithPermissionsRead",
]
