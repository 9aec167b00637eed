"""
Pagination helpers

Page numbers start at 1. A page or limit that is missing or not positive
falls back to the configured defaults.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import Select


@dataclass(frozen=True)
class PaginationDefaults:
    page: int = 1
    limit: int = 20


@dataclass(frozen=True)
class Pagination:
    """Requested page of an id projection."""
    page: Optional[int] = None
    limit: Optional[int] = None
    defaults: PaginationDefaults = field(default_factory=PaginationDefaults)

    def get_page(self) -> int:
        if self.page is None or self.page <= 0:
            return self.defaults.page
        return self.page

    def get_limit(self) -> int:
        if self.limit is None or self.limit <= 0:
            return self.defaults.limit
        return self.limit

    @property
    def offset(self) -> int:
        return (self.get_page() - 1) * self.get_limit()

    def total_pages(self, count: int) -> int:
        return math.ceil(count / self.get_limit())

    def next_page(self, count: int) -> int:
        page = self.get_page()
        if page >= self.total_pages(count):
            return page
        return page + 1

    def prev_page(self) -> int:
        page = self.get_page()
        if page > 1:
            return page - 1
        return page


def paginate(query: Select, pagination: Optional[Pagination]) -> Select:
    """Apply offset/limit when a pagination is given."""
    if pagination is None:
        return query
    return query.offset(pagination.offset).limit(pagination.get_limit())
