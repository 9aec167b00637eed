"""
Role Repository
Role rows, the role <-> permission pivot, and role id projections
"""

from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from sqlalchemy.sql import Select
import structlog

from permguard.core.pagination import Pagination
from permguard.models import Role, role_permissions, user_roles
from permguard.repositories.base import (
    GuardedRepository,
    count_pairs,
    delete_pairs,
    insert_pairs,
    pluck_ids,
    unit_of_work,
)

logger = structlog.get_logger()


class RoleRepository(GuardedRepository[Role]):
    """Repository for role database operations"""

    pivot_columns = (user_roles.c.role_id, role_permissions.c.role_id)

    def _select(self, with_relations: bool = False) -> Select:
        query = select(Role)
        if with_relations:
            # Rows already in the session were loaded without permissions
            query = query.options(selectinload(Role.permissions)).execution_options(populate_existing=True)
        return query

    # ==================== Id projections ====================

    async def get_role_ids_of_user(
        self,
        db: AsyncSession,
        user_id: int,
        pagination: Optional[Pagination] = None,
    ) -> Tuple[List[int], int]:
        query = (
            select(user_roles.c.role_id)
            .where(user_roles.c.user_id == user_id)
            .order_by(user_roles.c.role_id)
        )
        return await pluck_ids(db, query, pagination, "get role ids of user")

    async def get_role_ids_of_permission(
        self,
        db: AsyncSession,
        permission_id: int,
        pagination: Optional[Pagination] = None,
    ) -> Tuple[List[int], int]:
        query = (
            select(role_permissions.c.role_id)
            .where(role_permissions.c.permission_id == permission_id)
            .order_by(role_permissions.c.role_id)
        )
        return await pluck_ids(db, query, pagination, "get role ids of permission")

    async def get_permission_ids_of_roles(
        self,
        db: AsyncSession,
        role_ids: Sequence[int],
        pagination: Optional[Pagination] = None,
    ) -> Tuple[List[int], int]:
        """Distinct permission ids attached to any of the roles"""
        if not role_ids:
            return [], 0
        query = (
            select(role_permissions.c.permission_id)
            .where(role_permissions.c.role_id.in_(list(role_ids)))
            .distinct()
            .order_by(role_permissions.c.permission_id)
        )
        return await pluck_ids(db, query, pagination, "get permission ids of roles")

    # ==================== Actions ====================

    async def add_permissions(self, db: AsyncSession, role: Role, permission_ids: Sequence[int]) -> None:
        role_id = role.id
        rows = [{"role_id": role_id, "permission_id": pid} for pid in dict.fromkeys(permission_ids)]
        async with unit_of_work(db, "add permissions to role", role_id=role_id):
            await insert_pairs(db, role_permissions, rows)
        logger.info("Permissions added to role", role_id=role_id, permission_ids=list(permission_ids))

    async def replace_permissions(self, db: AsyncSession, role: Role, permission_ids: Sequence[int]) -> None:
        role_id = role.id
        rows = [{"role_id": role_id, "permission_id": pid} for pid in dict.fromkeys(permission_ids)]
        async with unit_of_work(db, "replace permissions of role", role_id=role_id):
            await delete_pairs(db, role_permissions, role_permissions.c.role_id, role_id,
                               role_permissions.c.permission_id)
            await insert_pairs(db, role_permissions, rows)
        logger.info("Permissions of role replaced", role_id=role_id, permission_ids=list(permission_ids))

    async def remove_permissions(self, db: AsyncSession, role: Role, permission_ids: Sequence[int]) -> None:
        role_id = role.id
        async with unit_of_work(db, "remove permissions from role", role_id=role_id):
            await delete_pairs(db, role_permissions, role_permissions.c.role_id, role_id,
                               role_permissions.c.permission_id, permission_ids)
        logger.info("Permissions removed from role", role_id=role_id, permission_ids=list(permission_ids))

    async def clear_permissions(self, db: AsyncSession, role: Role) -> None:
        role_id = role.id
        async with unit_of_work(db, "clear permissions of role", role_id=role_id):
            await delete_pairs(db, role_permissions, role_permissions.c.role_id, role_id,
                               role_permissions.c.permission_id)
        logger.info("Permissions of role cleared", role_id=role_id)

    # ==================== Controls ====================

    async def has_permission(self, db: AsyncSession, role_ids: Sequence[int], permission_id: int) -> bool:
        """Does any of the roles have the permission?"""
        matched = await count_pairs(
            db, role_permissions,
            role_permissions.c.role_id, role_ids,
            role_permissions.c.permission_id, [permission_id],
            "role has permission",
        )
        return matched > 0

    async def has_all_permissions(
        self,
        db: AsyncSession,
        role_ids: Sequence[int],
        permission_ids: Sequence[int],
    ) -> bool:
        """
        Does every role have every permission?

        Pairs are unique, so the matched count reaches
        len(roles) * len(permissions) only when all pairs are present.
        """
        role_ids, permission_ids = set(role_ids), set(permission_ids)
        matched = await count_pairs(
            db, role_permissions,
            role_permissions.c.role_id, role_ids,
            role_permissions.c.permission_id, permission_ids,
            "role has all permissions",
        )
        return matched == len(role_ids) * len(permission_ids)

    async def has_any_permissions(
        self,
        db: AsyncSession,
        role_ids: Sequence[int],
        permission_ids: Sequence[int],
    ) -> bool:
        matched = await count_pairs(
            db, role_permissions,
            role_permissions.c.role_id, role_ids,
            role_permissions.c.permission_id, permission_ids,
            "role has any permissions",
        )
        return matched > 0


# Singleton instance
role_repository = RoleRepository(Role)
