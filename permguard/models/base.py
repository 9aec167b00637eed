"""
Base Model Classes
Common fields for roles and permissions
"""

from sqlalchemy import Column, DateTime, Integer
from sqlalchemy.sql import func

from permguard.core.database import Base


class TimestampMixin:
    """Mixin for created_at and updated_at timestamps"""
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )


class IntegerIDMixin:
    """Mixin for a storage-assigned integer primary key"""
    id = Column(Integer, primary_key=True, autoincrement=True)


class BaseModel(Base, IntegerIDMixin, TimestampMixin):
    """Base model with common fields"""
    __abstract__ = True
