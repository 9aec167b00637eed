"""
Permission Repository
Permission rows and direct-permission id projections
"""

from typing import List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from permguard.core.pagination import Pagination
from permguard.models import Permission, role_permissions, user_permissions
from permguard.repositories.base import GuardedRepository, pluck_ids

logger = structlog.get_logger()


class PermissionRepository(GuardedRepository[Permission]):
    """Repository for permission database operations"""

    pivot_columns = (user_permissions.c.permission_id, role_permissions.c.permission_id)

    async def get_direct_permission_ids_of_user(
        self,
        db: AsyncSession,
        user_id: int,
        pagination: Optional[Pagination] = None,
    ) -> Tuple[List[int], int]:
        query = (
            select(user_permissions.c.permission_id)
            .where(user_permissions.c.user_id == user_id)
            .order_by(user_permissions.c.permission_id)
        )
        return await pluck_ids(db, query, pagination, "get direct permission ids of user")


# Singleton instance
permission_repository = PermissionRepository(Permission)
