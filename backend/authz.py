"""
backend/authz.py

Ownership-based authorization for projects and tasks.

Single source of truth for the "admin sees all, owner sees own" rule.
Every mutating store operation must go through require_access().

Pure Python logic - no FastAPI imports, no database access.
"""

from __future__ import annotations

try:
    from backend.config import IS_DEV
    from backend.errors import ForbiddenError
except ModuleNotFoundError:
    from config import IS_DEV
    from errors import ForbiddenError


def can_access(is_admin: bool, resource_owner: str, requester_id: str) -> bool:
    """
    Check if a requester may read or mutate a resource.

    Args:
        is_admin: Requester belongs to the admin group
        resource_owner: Owner user id of the project (tasks pass their
            parent project's owner)
        requester_id: Resolved user id of the requester

    Returns:
        True for admins and for the owner, False otherwise.

    Example:
        can_access(False, "u1", "u1") -> True
        can_access(False, "u1", "u2") -> False
        can_access(True, "u1", "u2") -> True
    """
    return is_admin or resource_owner == requester_id


def require_access(
    is_admin: bool,
    resource_owner: str,
    requester_id: str,
    message: str = "You are not authorized to access this resource.",
) -> None:
    """
    Guard: raise ForbiddenError unless can_access() holds.

    Raises:
        ForbiddenError: Requester is neither the owner nor an admin
    """
    if not can_access(is_admin, resource_owner, requester_id):
        if IS_DEV:
            print(f"[AUTHZ] Access denied: requester={requester_id}, owner={resource_owner}")
        raise ForbiddenError(message)
