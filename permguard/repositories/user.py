"""
User Repository
The user <-> role and user <-> permission pivots. Users themselves live
outside permguard and are known only by id.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import Column, Table
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from permguard.models import user_permissions, user_roles
from permguard.repositories.base import count_pairs, delete_pairs, insert_pairs, unit_of_work

logger = structlog.get_logger()


class UserRelation:
    """Mutation verbs and count predicates over one user pivot table"""

    def __init__(self, table: Table, related_key: str, label: str):
        self.table = table
        self.related_key = related_key
        self.label = label

    @property
    def user_column(self) -> Column:
        return self.table.c.user_id

    @property
    def related_column(self) -> Column:
        return self.table.c[self.related_key]

    def _rows(self, user_id: int, related_ids: Sequence[int]) -> list[dict[str, int]]:
        return [{"user_id": user_id, self.related_key: rid} for rid in dict.fromkeys(related_ids)]

    async def add(self, db: AsyncSession, user_id: int, related_ids: Sequence[int]) -> None:
        async with unit_of_work(db, f"add {self.label} to user", user_id=user_id):
            await insert_pairs(db, self.table, self._rows(user_id, related_ids))
        logger.info("Relations added to user", relation=self.label, user_id=user_id, ids=list(related_ids))

    async def replace(self, db: AsyncSession, user_id: int, related_ids: Sequence[int]) -> None:
        async with unit_of_work(db, f"replace {self.label} of user", user_id=user_id):
            await delete_pairs(db, self.table, self.user_column, user_id, self.related_column)
            await insert_pairs(db, self.table, self._rows(user_id, related_ids))
        logger.info("Relations of user replaced", relation=self.label, user_id=user_id, ids=list(related_ids))

    async def remove(self, db: AsyncSession, user_id: int, related_ids: Sequence[int]) -> None:
        async with unit_of_work(db, f"remove {self.label} from user", user_id=user_id):
            await delete_pairs(db, self.table, self.user_column, user_id, self.related_column, related_ids)
        logger.info("Relations removed from user", relation=self.label, user_id=user_id, ids=list(related_ids))

    async def clear(self, db: AsyncSession, user_id: int) -> None:
        async with unit_of_work(db, f"clear {self.label} of user", user_id=user_id):
            await delete_pairs(db, self.table, self.user_column, user_id, self.related_column)
        logger.info("Relations of user cleared", relation=self.label, user_id=user_id)

    async def _count(self, db: AsyncSession, user_id: int, related_ids: Sequence[int]) -> int:
        return await count_pairs(
            db, self.table,
            self.user_column, [user_id],
            self.related_column, related_ids,
            f"user has {self.label}",
        )

    async def has_one(self, db: AsyncSession, user_id: int, related_id: int) -> bool:
        return await self._count(db, user_id, [related_id]) > 0

    async def has_all(self, db: AsyncSession, user_id: int, related_ids: Sequence[int]) -> bool:
        # Pairs are unique: the count equals the set size only if every id is present
        related_ids = set(related_ids)
        return await self._count(db, user_id, related_ids) == len(related_ids)

    async def has_any(self, db: AsyncSession, user_id: int, related_ids: Sequence[int]) -> bool:
        return await self._count(db, user_id, related_ids) > 0


class UserRepository:
    """Repository for the relations owned by the user side"""

    def __init__(self):
        self.roles = UserRelation(user_roles, "role_id", "roles")
        self.permissions = UserRelation(user_permissions, "permission_id", "permissions")

    # ==================== Actions ====================

    async def add_permissions(self, db: AsyncSession, user_id: int, permission_ids: Sequence[int]) -> None:
        await self.permissions.add(db, user_id, permission_ids)

    async def replace_permissions(self, db: AsyncSession, user_id: int, permission_ids: Sequence[int]) -> None:
        await self.permissions.replace(db, user_id, permission_ids)

    async def remove_permissions(self, db: AsyncSession, user_id: int, permission_ids: Sequence[int]) -> None:
        await self.permissions.remove(db, user_id, permission_ids)

    async def clear_permissions(self, db: AsyncSession, user_id: int) -> None:
        await self.permissions.clear(db, user_id)

    async def add_roles(self, db: AsyncSession, user_id: int, role_ids: Sequence[int]) -> None:
        await self.roles.add(db, user_id, role_ids)

    async def replace_roles(self, db: AsyncSession, user_id: int, role_ids: Sequence[int]) -> None:
        await self.roles.replace(db, user_id, role_ids)

    async def remove_roles(self, db: AsyncSession, user_id: int, role_ids: Sequence[int]) -> None:
        await self.roles.remove(db, user_id, role_ids)

    async def clear_roles(self, db: AsyncSession, user_id: int) -> None:
        await self.roles.clear(db, user_id)

    # ==================== Controls ====================

    async def has_role(self, db: AsyncSession, user_id: int, role_id: int) -> bool:
        return await self.roles.has_one(db, user_id, role_id)

    async def has_all_roles(self, db: AsyncSession, user_id: int, role_ids: Sequence[int]) -> bool:
        return await self.roles.has_all(db, user_id, role_ids)

    async def has_any_roles(self, db: AsyncSession, user_id: int, role_ids: Sequence[int]) -> bool:
        return await self.roles.has_any(db, user_id, role_ids)

    async def has_direct_permission(self, db: AsyncSession, user_id: int, permission_id: int) -> bool:
        return await self.permissions.has_one(db, user_id, permission_id)

    async def has_all_direct_permissions(self, db: AsyncSession, user_id: int, permission_ids: Sequence[int]) -> bool:
        return await self.permissions.has_all(db, user_id, permission_ids)

    async def has_any_direct_permissions(self, db: AsyncSession, user_id: int, permission_ids: Sequence[int]) -> bool:
        return await self.permissions.has_any(db, user_id, permission_ids)


# Singleton instance
user_repository = UserRepository()
