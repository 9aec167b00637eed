"""
Fetch options for list operations
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict

from permguard.core.config import PAGINATION_DEFAULTS
from permguard.core.pagination import Pagination


def make_pagination(page: Optional[int] = None, limit: Optional[int] = None) -> Pagination:
    """Pagination that falls back to the configured defaults"""
    return Pagination(page=page, limit=limit, defaults=PAGINATION_DEFAULTS)


class PermissionOption(BaseModel):
    """Options when fetching permissions"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    pagination: Optional[Pagination] = None

    @classmethod
    def paginated(cls, page: Optional[int] = None, limit: Optional[int] = None) -> "PermissionOption":
        return cls(pagination=make_pagination(page, limit))


class RoleOption(BaseModel):
    """Options when fetching roles"""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    with_permissions: bool = False
    pagination: Optional[Pagination] = None

    @classmethod
    def paginated(
        cls,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        with_permissions: bool = False,
    ) -> "RoleOption":
        return cls(pagination=make_pagination(page, limit), with_permissions=with_permissions)
