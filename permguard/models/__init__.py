"""
SQLAlchemy Models Package
"""

from permguard.models.permission import Permission
from permguard.models.role import Role, role_permissions, user_permissions, user_roles

__all__ = [
    "Permission",
    "Role",
    "role_permissions",
    "user_permissions",
    "user_roles",
]
