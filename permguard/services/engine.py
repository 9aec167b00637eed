"""
Permguard Service
Role/permission resolution and relationship management

Every operation takes the session first. Roles and permissions may be
referenced by guard name or id, one or many (see ``permguard.core.refs``).
Singular operations given a list use the first entity found.
"""

from __future__ import annotations

from typing import Any, Optional, Union

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from permguard.collections import PermissionCollection, RoleCollection
from permguard.core.exceptions import NotFoundError
from permguard.core.guard import canonicalize
from permguard.core.refs import IDList, NameList, Ref, SingleID, SingleName, as_ref, is_plural
from permguard.models import Permission, Role
from permguard.repositories.base import GuardedRepository
from permguard.repositories.permission import PermissionRepository, permission_repository
from permguard.repositories.role import RoleRepository, role_repository
from permguard.repositories.user import UserRepository, user_repository
from permguard.schemas.options import PermissionOption, RoleOption
from permguard.schemas.permission import PermissionCreate, PermissionUpdate
from permguard.schemas.role import RoleCreate, RoleUpdate

logger = structlog.get_logger()


class Permguard:
    """Resolution engine over the role, permission and user repositories"""

    def __init__(
        self,
        role_repository: RoleRepository = role_repository,
        permission_repository: PermissionRepository = permission_repository,
        user_repository: UserRepository = user_repository,
    ):
        self.roles = role_repository
        self.permissions = permission_repository
        self.users = user_repository

    # ==================== Resolution ====================

    async def _fetch(
        self,
        db: AsyncSession,
        repository: GuardedRepository,
        ref: Ref,
        with_relations: bool = False,
    ) -> list:
        if isinstance(ref, SingleName):
            return [await repository.get_by_guard_name(db, ref.guard_name, with_relations)]
        if isinstance(ref, SingleID):
            return [await repository.get_by_id(db, ref.id, with_relations)]
        if isinstance(ref, NameList):
            return await repository.get_many_by_guard_names(db, ref.guard_names, with_relations)
        if isinstance(ref, IDList):
            return await repository.get_many(db, list(ref.ids), with_relations)
        raise TypeError(f"unknown reference variant {type(ref).__name__}")

    async def _fetch_one(
        self,
        db: AsyncSession,
        repository: GuardedRepository,
        ref: Ref,
        with_relations: bool = False,
    ):
        found = await self._fetch(db, repository, ref, with_relations)
        if not found:
            raise NotFoundError(repository.entity, ref)
        if is_plural(ref) and len(found) > 1:
            logger.debug("Using first match of plural reference", model=repository.entity, matched=len(found))
        return found[0]

    # ==================== Roles ====================

    async def get_role(self, db: AsyncSession, r: Any, with_permissions: bool = False) -> Role:
        """
        Fetch a role by guard name or id

        Args:
            db: Database session
            r: Role reference; for a list, the first role found is returned
            with_permissions: Eager-load the role's permissions

        Raises:
            NotFoundError: If no role matches
        """
        return await self._fetch_one(db, self.roles, as_ref(r), with_permissions)

    async def get_roles(self, db: AsyncSession, r: Any, with_permissions: bool = False) -> RoleCollection:
        """Fetch roles by guard names or ids; unknown ones are skipped"""
        return RoleCollection(await self._fetch(db, self.roles, as_ref(r), with_permissions))

    async def get_all_roles(
        self,
        db: AsyncSession,
        option: Optional[RoleOption] = None,
    ) -> tuple[RoleCollection, int]:
        """All roles, optionally paginated, with the unpaginated total"""
        option = option or RoleOption()
        role_ids, total = await self.roles.get_ids(db, option.pagination)
        roles = await self.roles.get_many(db, role_ids, option.with_permissions)
        return RoleCollection(roles), total

    async def get_roles_of_user(
        self,
        db: AsyncSession,
        user_id: int,
        option: Optional[RoleOption] = None,
    ) -> tuple[RoleCollection, int]:
        option = option or RoleOption()
        role_ids, total = await self.roles.get_role_ids_of_user(db, user_id, option.pagination)
        roles = await self.roles.get_many(db, role_ids, option.with_permissions)
        return RoleCollection(roles), total

    async def get_roles_of_permission(
        self,
        db: AsyncSession,
        p: Any,
        option: Optional[RoleOption] = None,
    ) -> tuple[RoleCollection, int]:
        option = option or RoleOption()
        permission = await self.get_permission(db, p)
        role_ids, total = await self.roles.get_role_ids_of_permission(db, permission.id, option.pagination)
        roles = await self.roles.get_many(db, role_ids, option.with_permissions)
        return RoleCollection(roles), total

    async def create_role(self, db: AsyncSession, name: str, description: Optional[str] = None) -> Role:
        """
        Create a role, or return the existing one with the same guard name

        'Senior $#% Associate' is stored under the guard name 'senior-associate'.
        """
        data = RoleCreate(name=name, description=description)
        guard_name = canonicalize(data.name)
        if not guard_name:
            raise ValueError(f"Role name {name!r} has no usable characters")
        return await self.roles.find_or_create(db, {
            "name": data.name,
            "guard_name": guard_name,
            "description": data.description,
        })

    async def update_role(self, db: AsyncSession, r: Any, data: Union[RoleUpdate, dict]) -> Role:
        if isinstance(data, dict):
            data = RoleUpdate(**data)
        role = await self.get_role(db, r)
        return await self.roles.update(db, role, self._update_fields(data))

    async def delete_role(self, db: AsyncSession, r: Any) -> None:
        """Delete a role along with its user and permission assignments"""
        role = await self.get_role(db, r)
        await self.roles.delete(db, role)

    async def add_permissions_to_role(self, db: AsyncSession, r: Any, p: Any) -> None:
        role = await self.get_role(db, r)
        permissions = await self.get_permissions(db, p)
        if permissions:
            await self.roles.add_permissions(db, role, permissions.ids())

    async def replace_permissions_to_role(self, db: AsyncSession, r: Any, p: Any) -> None:
        """Overwrite the role's permissions; an empty result clears them"""
        role = await self.get_role(db, r)
        permissions = await self.get_permissions(db, p)
        if permissions:
            await self.roles.replace_permissions(db, role, permissions.ids())
        else:
            await self.roles.clear_permissions(db, role)

    async def remove_permissions_from_role(self, db: AsyncSession, r: Any, p: Any) -> None:
        role = await self.get_role(db, r)
        permissions = await self.get_permissions(db, p)
        if permissions:
            await self.roles.remove_permissions(db, role, permissions.ids())

    async def clear_permissions_of_role(self, db: AsyncSession, r: Any) -> None:
        role = await self.get_role(db, r)
        await self.roles.clear_permissions(db, role)

    # ==================== Permissions ====================

    async def get_permission(self, db: AsyncSession, p: Any) -> Permission:
        """
        Fetch a permission by guard name or id

        Raises:
            NotFoundError: If no permission matches
        """
        return await self._fetch_one(db, self.permissions, as_ref(p))

    async def get_permissions(self, db: AsyncSession, p: Any) -> PermissionCollection:
        return PermissionCollection(await self._fetch(db, self.permissions, as_ref(p)))

    async def get_all_permissions(
        self,
        db: AsyncSession,
        option: Optional[PermissionOption] = None,
    ) -> tuple[PermissionCollection, int]:
        option = option or PermissionOption()
        permission_ids, total = await self.permissions.get_ids(db, option.pagination)
        return PermissionCollection(await self.permissions.get_many(db, permission_ids)), total

    async def get_direct_permissions_of_user(
        self,
        db: AsyncSession,
        user_id: int,
        option: Optional[PermissionOption] = None,
    ) -> tuple[PermissionCollection, int]:
        """Permissions granted to the user itself, not through roles"""
        option = option or PermissionOption()
        permission_ids, total = await self.permissions.get_direct_permission_ids_of_user(
            db, user_id, option.pagination
        )
        return PermissionCollection(await self.permissions.get_many(db, permission_ids)), total

    async def get_permissions_of_roles(
        self,
        db: AsyncSession,
        r: Any,
        option: Optional[PermissionOption] = None,
    ) -> tuple[PermissionCollection, int]:
        """Distinct permissions granted by any of the roles"""
        option = option or PermissionOption()
        roles = await self.get_roles(db, r)
        permission_ids, total = await self.roles.get_permission_ids_of_roles(db, roles.ids(), option.pagination)
        return PermissionCollection(await self.permissions.get_many(db, permission_ids)), total

    async def _effective_permission_ids(self, db: AsyncSession, user_id: int) -> set[int]:
        role_ids, _ = await self.roles.get_role_ids_of_user(db, user_id)
        role_permission_ids, _ = await self.roles.get_permission_ids_of_roles(db, role_ids)
        direct_permission_ids, _ = await self.permissions.get_direct_permission_ids_of_user(db, user_id)
        return set(role_permission_ids) | set(direct_permission_ids)

    async def get_all_permissions_of_user(self, db: AsyncSession, user_id: int) -> PermissionCollection:
        """Effective permissions: direct grants plus those of the user's roles, each once"""
        permission_ids = await self._effective_permission_ids(db, user_id)
        return PermissionCollection(await self.permissions.get_many(db, sorted(permission_ids)))

    async def create_permission(
        self,
        db: AsyncSession,
        name: str,
        description: Optional[str] = None,
    ) -> Permission:
        """
        Create a permission, or return the existing one with the same guard name

        'Create $#% Contact' is stored under the guard name 'create-contact'.
        """
        data = PermissionCreate(name=name, description=description)
        guard_name = canonicalize(data.name)
        if not guard_name:
            raise ValueError(f"Permission name {name!r} has no usable characters")
        return await self.permissions.find_or_create(db, {
            "name": data.name,
            "guard_name": guard_name,
            "description": data.description,
        })

    async def update_permission(
        self,
        db: AsyncSession,
        p: Any,
        data: Union[PermissionUpdate, dict],
    ) -> Permission:
        if isinstance(data, dict):
            data = PermissionUpdate(**data)
        permission = await self.get_permission(db, p)
        return await self.permissions.update(db, permission, self._update_fields(data))

    async def delete_permission(self, db: AsyncSession, p: Any) -> None:
        """Delete a permission along with every role and user grant of it"""
        permission = await self.get_permission(db, p)
        await self.permissions.delete(db, permission)

    @staticmethod
    def _update_fields(data: Union[RoleUpdate, PermissionUpdate]) -> dict:
        fields = data.model_dump(exclude_unset=True)
        if fields.get("name") is not None:
            guard_name = canonicalize(fields["name"])
            if not guard_name:
                raise ValueError(f"Name {fields['name']!r} has no usable characters")
            fields["guard_name"] = guard_name
        else:
            fields.pop("name", None)
        return fields

    # ==================== Users ====================

    async def add_permissions_to_user(self, db: AsyncSession, user_id: int, p: Any) -> None:
        permissions = await self.get_permissions(db, p)
        if permissions:
            await self.users.add_permissions(db, user_id, permissions.ids())

    async def replace_permissions_to_user(self, db: AsyncSession, user_id: int, p: Any) -> None:
        """Overwrite the user's direct permissions; an empty result clears them"""
        permissions = await self.get_permissions(db, p)
        if permissions:
            await self.users.replace_permissions(db, user_id, permissions.ids())
        else:
            await self.users.clear_permissions(db, user_id)

    async def remove_permissions_from_user(self, db: AsyncSession, user_id: int, p: Any) -> None:
        permissions = await self.get_permissions(db, p)
        if permissions:
            await self.users.remove_permissions(db, user_id, permissions.ids())

    async def clear_permissions_of_user(self, db: AsyncSession, user_id: int) -> None:
        await self.users.clear_permissions(db, user_id)

    async def add_roles_to_user(self, db: AsyncSession, user_id: int, r: Any) -> None:
        roles = await self.get_roles(db, r)
        if roles:
            await self.users.add_roles(db, user_id, roles.ids())

    async def replace_roles_to_user(self, db: AsyncSession, user_id: int, r: Any) -> None:
        """Overwrite the user's roles; an empty result clears them"""
        roles = await self.get_roles(db, r)
        if roles:
            await self.users.replace_roles(db, user_id, roles.ids())
        else:
            await self.users.clear_roles(db, user_id)

    async def remove_roles_from_user(self, db: AsyncSession, user_id: int, r: Any) -> None:
        roles = await self.get_roles(db, r)
        if roles:
            await self.users.remove_roles(db, user_id, roles.ids())

    async def clear_roles_of_user(self, db: AsyncSession, user_id: int) -> None:
        await self.users.clear_roles(db, user_id)

    # ==================== Role controls ====================

    async def role_has_permission(self, db: AsyncSession, r: Any, p: Any) -> bool:
        """Does the role, or any of the roles, have the permission?"""
        roles = await self.get_roles(db, r)
        permission = await self.get_permission(db, p)
        return await self.roles.has_permission(db, roles.ids(), permission.id)

    async def role_has_all_permissions(self, db: AsyncSession, r: Any, p: Any) -> bool:
        """Does every given role have every given permission?"""
        roles = await self.get_roles(db, r)
        permissions = await self.get_permissions(db, p)
        return await self.roles.has_all_permissions(db, roles.ids(), permissions.ids())

    async def role_has_any_permissions(self, db: AsyncSession, r: Any, p: Any) -> bool:
        roles = await self.get_roles(db, r)
        permissions = await self.get_permissions(db, p)
        return await self.roles.has_any_permissions(db, roles.ids(), permissions.ids())

    # ==================== User controls ====================

    async def user_has_role(self, db: AsyncSession, user_id: int, r: Any) -> bool:
        role = await self.get_role(db, r)
        return await self.users.has_role(db, user_id, role.id)

    async def user_has_all_roles(self, db: AsyncSession, user_id: int, r: Any) -> bool:
        roles = await self.get_roles(db, r)
        return await self.users.has_all_roles(db, user_id, roles.ids())

    async def user_has_any_roles(self, db: AsyncSession, user_id: int, r: Any) -> bool:
        roles = await self.get_roles(db, r)
        return await self.users.has_any_roles(db, user_id, roles.ids())

    async def user_has_direct_permission(self, db: AsyncSession, user_id: int, p: Any) -> bool:
        permission = await self.get_permission(db, p)
        return await self.users.has_direct_permission(db, user_id, permission.id)

    async def user_has_all_direct_permissions(self, db: AsyncSession, user_id: int, p: Any) -> bool:
        permissions = await self.get_permissions(db, p)
        return await self.users.has_all_direct_permissions(db, user_id, permissions.ids())

    async def user_has_any_direct_permissions(self, db: AsyncSession, user_id: int, p: Any) -> bool:
        permissions = await self.get_permissions(db, p)
        return await self.users.has_any_direct_permissions(db, user_id, permissions.ids())

    async def user_has_permission(self, db: AsyncSession, user_id: int, p: Any) -> bool:
        """
        Does the user have the permission, directly or through a role?

        A direct grant answers without looking at roles.
        """
        permission = await self.get_permission(db, p)

        if await self.users.has_direct_permission(db, user_id, permission.id):
            logger.debug("Permission granted directly", user_id=user_id, permission_id=permission.id)
            return True

        role_ids, _ = await self.roles.get_role_ids_of_user(db, user_id)
        if not role_ids:
            return False

        granted = await self.roles.has_permission(db, role_ids, permission.id)
        logger.debug("Permission checked through roles", user_id=user_id, permission_id=permission.id, granted=granted)
        return granted

    async def user_has_all_permissions(self, db: AsyncSession, user_id: int, p: Any) -> bool:
        permissions = await self.get_permissions(db, p)
        effective = await self._effective_permission_ids(db, user_id)
        return all(pid in effective for pid in permissions.ids())

    async def user_has_any_permissions(self, db: AsyncSession, user_id: int, p: Any) -> bool:
        permissions = await self.get_permissions(db, p)
        effective = await self._effective_permission_ids(db, user_id)
        return any(pid in effective for pid in permissions.ids())


permguard = Permguard()
