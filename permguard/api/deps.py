"""
FastAPI Dependencies
Role and permission guards for route handlers
"""

from typing import Iterable

from fastapi import Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from permguard.core.database import get_db
from permguard.core.exceptions import NotFoundError
from permguard.core.guard import canonicalize_all
from permguard.core.refs import IDList, NameList
from permguard.services.engine import permguard

logger = structlog.get_logger()


async def get_current_user_id() -> int:
    """
    Principal id of the current request

    Applications override this with their own authentication, e.g.
    ``app.dependency_overrides[get_current_user_id] = current_user_id``.
    """
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Not authenticated",
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _required_ids(resolve, entity: str, db: AsyncSession, required: list[str], require_all: bool) -> IDList:
    """
    Resolve required names to ids

    Raises:
        NotFoundError: If nothing resolves, or any name is unknown when all are required
    """
    found = await resolve(db, NameList(required))
    missing = sorted(set(required) - set(found.guard_names()))
    if not found or (require_all and missing):
        raise NotFoundError(entity, missing)
    return IDList(found.ids())


def check_permissions(required_permissions: Iterable[str], *, require_all: bool = True):
    """
    Dependency factory for checking user permissions

    Args:
        required_permissions: Permission names, matched by guard name
        require_all: Require every permission instead of at least one

    Returns:
        Dependency function
    """
    required = canonicalize_all(required_permissions)

    async def permission_checker(
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> int:
        """
        Check the user's effective permissions

        Raises:
            HTTPException: If user lacks required permissions
        """
        try:
            permission_ids = await _required_ids(permguard.get_permissions, "Permission", db, required, require_all)
            if require_all:
                granted = await permguard.user_has_all_permissions(db, user_id, permission_ids)
            else:
                granted = await permguard.user_has_any_permissions(db, user_id, permission_ids)
        except NotFoundError as e:
            logger.warning("Required permission does not exist", user_id=user_id, missing=e.reference)
            granted = False

        if not granted:
            logger.warning(
                "User lacks required permission",
                user_id=user_id,
                required=required,
                require_all=require_all,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission required: {'all' if require_all else 'one'} of {required}",
            )

        logger.debug("Permission check passed", user_id=user_id, permissions=required)
        return user_id

    return permission_checker


def check_roles(required_roles: Iterable[str], *, require_all: bool = False):
    """
    Dependency factory for checking user roles

    Args:
        required_roles: Role names, matched by guard name
        require_all: Require every role instead of at least one

    Returns:
        Dependency function
    """
    required = canonicalize_all(required_roles)

    async def role_checker(
        user_id: int = Depends(get_current_user_id),
        db: AsyncSession = Depends(get_db),
    ) -> int:
        try:
            role_ids = await _required_ids(permguard.get_roles, "Role", db, required, require_all)
            if require_all:
                granted = await permguard.user_has_all_roles(db, user_id, role_ids)
            else:
                granted = await permguard.user_has_any_roles(db, user_id, role_ids)
        except NotFoundError as e:
            logger.warning("Required role does not exist", user_id=user_id, missing=e.reference)
            granted = False

        if not granted:
            logger.warning(
                "User lacks required role",
                user_id=user_id,
                required_roles=required,
                require_all=require_all,
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Role required: {'all' if require_all else 'one'} of {required}",
            )

        logger.debug("Role check passed", user_id=user_id, roles=required)
        return user_id

    return role_checker


__all__ = ["check_permissions", "check_roles", "get_current_user_id", "get_db"]
