"""
backend/identity.py

Identity resolution: turns a verified token's claim set into an
AuthenticatedIdentity (user id + admin flag).

Pure Python logic - no FastAPI imports, no database access. Services take
any IdentityResolver, so the core never depends on a particular token or
claims library.
"""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Protocol

from pydantic import BaseModel, ConfigDict

try:
    from backend.config import ADMIN_GROUP, GROUPS_CLAIM, USER_ID_CLAIM
    from backend.errors import UnauthenticatedError
except ModuleNotFoundError:
    from config import ADMIN_GROUP, GROUPS_CLAIM, USER_ID_CLAIM
    from errors import UnauthenticatedError


Principal = Mapping[str, Any]


class AuthenticatedIdentity(BaseModel):
    """
    Immutable per-request identity.

    Fields:
        user_id: Owner id used for every ownership comparison
        is_admin: True when the requester belongs to the admin group
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    is_admin: bool = False


class IdentityResolver(Protocol):
    def resolve(self, principal: Principal) -> AuthenticatedIdentity:
        ...


def _claim_values(value: Any) -> List[str]:
    """A claim may hold one value or several; normalize to a list of strings."""
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Iterable):
        return [str(v) for v in value]
    return [str(value)]


class ClaimsIdentityResolver:
    """
    Resolve identity from JWT-style claims.

    - user_id comes from the user id claim ("username" by default)
    - is_admin is true if ANY group claim value equals the admin group
    """

    def __init__(
        self,
        user_id_claim: str = USER_ID_CLAIM,
        groups_claim: str = GROUPS_CLAIM,
        admin_group: str = ADMIN_GROUP,
    ):
        self.user_id_claim = user_id_claim
        self.groups_claim = groups_claim
        self.admin_group = admin_group

    def resolve(self, principal: Optional[Principal]) -> AuthenticatedIdentity:
        """
        Raises:
            UnauthenticatedError: If the user id claim is absent or empty
        """
        principal = principal or {}
        user_id = principal.get(self.user_id_claim)
        if user_id is None or not str(user_id).strip():
            raise UnauthenticatedError("User ID is missing.")

        groups = _claim_values(principal.get(self.groups_claim))
        return AuthenticatedIdentity(
            user_id=str(user_id),
            is_admin=self.admin_group in groups,
        )


default_resolver = ClaimsIdentityResolver()


def resolve_identity(
    principal: Optional[Principal],
    resolver: Optional[IdentityResolver] = None,
) -> AuthenticatedIdentity:
    """Resolve with the given resolver, or the configured default."""
    return (resolver or default_resolver).resolve(principal)
