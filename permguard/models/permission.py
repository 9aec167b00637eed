"""
Permission Model
A named action that can be granted to roles or directly to users
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from permguard.models.base import BaseModel


class Permission(BaseModel):
    """Permission identified by its unique guard name"""
    __tablename__ = "permissions"

    name = Column(String(255), nullable=False)
    guard_name = Column(String(255), nullable=False, unique=True, index=True)
    description = Column(String(255), nullable=True)

    roles = relationship(
        "Role",
        secondary="role_permissions",
        back_populates="permissions",
        lazy="noload",
    )

    def __repr__(self):
        return f"<Permission(id={self.id}, guard_name='{self.guard_name}')>"
