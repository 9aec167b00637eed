"""
Identifier references

Public operations accept a role or permission by guard name or by id,
one or many. A reference is one of four variants:

    SingleName("create-contact")
    SingleID(3)
    NameList(("create-contact", "delete-contact"))
    IDList((3, 4))

Lists are homogeneous; a mixed list cannot be constructed. ``as_ref``
turns plain Python values into a variant at the public boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Union

from permguard.core.exceptions import UnsupportedInputKindError
from permguard.core.guard import canonicalize, canonicalize_all


def _is_id(value: Any) -> bool:
    # bool is an int subclass but never an id
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class SingleName:
    name: str

    def __post_init__(self):
        if not isinstance(self.name, str):
            raise UnsupportedInputKindError(self.name, "name must be a string")

    @property
    def guard_name(self) -> str:
        return canonicalize(self.name)


@dataclass(frozen=True)
class SingleID:
    id: int

    def __post_init__(self):
        if not _is_id(self.id):
            raise UnsupportedInputKindError(self.id, "id must be an integer")


@dataclass(frozen=True)
class NameList:
    names: tuple[str, ...]

    def __init__(self, names: Iterable[str]):
        names = tuple(names)
        for name in names:
            if not isinstance(name, str):
                raise UnsupportedInputKindError(names, "name list holds a non-string element")
        object.__setattr__(self, "names", names)

    @property
    def guard_names(self) -> list[str]:
        return canonicalize_all(self.names)


@dataclass(frozen=True)
class IDList:
    ids: tuple[int, ...]

    def __init__(self, ids: Iterable[int]):
        ids = tuple(ids)
        for value in ids:
            if not _is_id(value):
                raise UnsupportedInputKindError(ids, "id list holds a non-integer element")
        object.__setattr__(self, "ids", ids)


Ref = Union[SingleName, SingleID, NameList, IDList]

_VARIANTS = (SingleName, SingleID, NameList, IDList)


def is_plural(ref: Ref) -> bool:
    return isinstance(ref, (NameList, IDList))


def as_ref(value: Any) -> Ref:
    """Convert a name, an id, or a homogeneous collection of either into a Ref."""
    if isinstance(value, _VARIANTS):
        return value
    if isinstance(value, str):
        return SingleName(value)
    if _is_id(value):
        return SingleID(value)
    if isinstance(value, (list, tuple, set, frozenset)):
        items = list(value)
        if not items:
            return IDList(())
        ordered = isinstance(value, (list, tuple))
        if all(isinstance(item, str) for item in items):
            return NameList(items if ordered else sorted(items))
        if all(_is_id(item) for item in items):
            return IDList(items if ordered else sorted(items))
        raise UnsupportedInputKindError(value, "collections must hold only names or only ids")
    raise UnsupportedInputKindError(value)
