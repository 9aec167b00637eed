"""
Guard names: canonical keys for roles and permissions.

'Create $#% Contact!' -> 'create-contact'
"""

from __future__ import annotations

import re
import unicodedata
from typing import Iterable

SEPARATOR = "-"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def canonicalize(name: str) -> str:
    """Lowercase, fold accents to ASCII, collapse every other run to one separator."""
    folded = unicodedata.normalize("NFKD", name).encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub(SEPARATOR, folded.lower()).strip(SEPARATOR)


def canonicalize_all(names: Iterable[str]) -> list[str]:
    return [canonicalize(name) for name in names]
