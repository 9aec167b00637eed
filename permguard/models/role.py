"""
Role Model & pivot tables

The three pivot tables hold foreign-key pairs only. Each pair is the
composite primary key, so a pair exists at most once. Users are external:
``user_id`` carries no foreign key.
"""

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import relationship

from permguard.core.database import Base
from permguard.models.base import BaseModel

user_roles = Table(
    "user_roles",
    Base.metadata,
    Column("user_id", Integer, primary_key=True, index=True),
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True, index=True),
)

user_permissions = Table(
    "user_permissions",
    Base.metadata,
    Column("user_id", Integer, primary_key=True, index=True),
    Column("permission_id", Integer, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True, index=True),
)

role_permissions = Table(
    "role_permissions",
    Base.metadata,
    Column("role_id", Integer, ForeignKey("roles.id", ondelete="CASCADE"), primary_key=True, index=True),
    Column("permission_id", Integer, ForeignKey("permissions.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Role(BaseModel):
    """Named, flat group of permissions"""
    __tablename__ = "roles"

    name = Column(String(255), nullable=False)
    guard_name = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(String(255), nullable=True)

    # Loaded only on request (with_permissions); pivot rows are written
    # through the repositories, never through this collection
    permissions = relationship(
        "Permission",
        secondary=role_permissions,
        back_populates="roles",
        lazy="noload",
        passive_deletes=True,
    )

    def __repr__(self):
        return f"<Role(id={self.id}, guard_name='{self.guard_name}')>"
