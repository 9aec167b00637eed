"""
permguard
Role and permission resolution on SQLAlchemy
"""

from permguard.collections import PermissionCollection, RoleCollection
from permguard.core.exceptions import (
    NotFoundError,
    PermguardError,
    StorageFailureError,
    TransactionAbortedError,
    UnsupportedInputKindError,
)
from permguard.core.guard import canonicalize
from permguard.core.refs import IDList, NameList, Ref, SingleID, SingleName, as_ref
from permguard.models import Permission, Role
from permguard.schemas.options import PermissionOption, RoleOption
from permguard.services.engine import Permguard, permguard

__version__ = "1.0.0"

__all__ = [
    "IDList",
    "NameList",
    "NotFoundError",
    "Permguard",
    "PermguardError",
    "Permission",
    "PermissionCollection",
    "PermissionOption",
    "Ref",
    "Role",
    "RoleCollection",
    "RoleOption",
    "SingleID",
    "SingleName",
    "StorageFailureError",
    "TransactionAbortedError",
    "UnsupportedInputKindError",
    "as_ref",
    "canonicalize",
    "permguard",
]
