"""
Permguard error types.

Callers get one of these or a result, never both. Storage errors keep the
driver exception on ``__cause__``.
"""

from __future__ import annotations

from typing import Any


class PermguardError(Exception):
    """Base class for every error raised by permguard"""
    pass


class NotFoundError(PermguardError):
    """A single-entity lookup matched no row"""

    def __init__(self, entity: str, reference: Any):
        self.entity = entity
        self.reference = reference
        super().__init__(f"{entity} not found: {reference!r}")


class UnsupportedInputKindError(PermguardError, TypeError):
    """An identifier was neither a name, an id, nor a homogeneous list of one of them"""

    def __init__(self, value: Any, reason: str | None = None):
        self.value = value
        message = f"unsupported identifier {value!r} of type {type(value).__name__}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StorageFailureError(PermguardError):
    """The storage layer failed while running a statement"""

    def __init__(self, operation: str, message: str | None = None):
        self.operation = operation
        super().__init__(message or f"storage failure during {operation}")


class TransactionAbortedError(StorageFailureError):
    """A multi-step mutation failed and was rolled back"""

    def __init__(self, operation: str):
        super().__init__(operation, f"transaction aborted and rolled back during {operation}")
