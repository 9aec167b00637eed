"""
Typed lists of roles and permissions with id/name projections.
"""

from __future__ import annotations


class PermissionCollection(list):
    """List of Permission rows"""

    def ids(self) -> list[int]:
        return [permission.id for permission in self]

    def names(self) -> list[str]:
        return [permission.name for permission in self]

    def guard_names(self) -> list[str]:
        return [permission.guard_name for permission in self]


class RoleCollection(list):
    """List of Role rows"""

    def ids(self) -> list[int]:
        return [role.id for role in self]

    def names(self) -> list[str]:
        return [role.name for role in self]

    def guard_names(self) -> list[str]:
        return [role.guard_name for role in self]

    def permissions(self) -> PermissionCollection:
        """Unique permissions of the roles; requires roles loaded with their permissions."""
        seen: set[int] = set()
        permissions = PermissionCollection()
        for role in self:
            for permission in role.permissions or []:
                if permission.id not in seen:
                    seen.add(permission.id)
                    permissions.append(permission)
        return permissions


__all__ = ["PermissionCollection", "RoleCollection"]
