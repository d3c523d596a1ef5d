"""
backend/errors.py

Error taxonomy for the project/task data-access layer.

Stores raise these; services let them pass through untouched; the HTTP layer
(backend/main.py) is the single place that turns an ErrorKind into a status
code.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Failure categories surfaced to callers."""
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    UNEXPECTED = "unexpected"


# HTTP status for each kind
STATUS_BY_KIND = {
    ErrorKind.UNAUTHENTICATED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNEXPECTED: 500,
}


class TaskManagerError(Exception):
    """Base error carrying its ErrorKind and a client-safe message."""
    kind: ErrorKind = ErrorKind.UNEXPECTED

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class UnauthenticatedError(TaskManagerError):
    """Identity claim missing or empty."""
    kind = ErrorKind.UNAUTHENTICATED


class ForbiddenError(TaskManagerError):
    """Authenticated, but neither the owner nor an admin."""
    kind = ErrorKind.FORBIDDEN


class NotFoundError(TaskManagerError):
    """Entity (or its parent project) does not exist."""
    kind = ErrorKind.NOT_FOUND
