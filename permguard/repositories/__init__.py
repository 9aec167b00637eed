"""
Repositories
"""

from permguard.repositories.permission import PermissionRepository, permission_repository
from permguard.repositories.role import RoleRepository, role_repository
from permguard.repositories.user import UserRelation, UserRepository, user_repository

__all__ = [
    "PermissionRepository",
    "permission_repository",
    "RoleRepository",
    "role_repository",
    "UserRelation",
    "UserRepository",
    "user_repository",
]
