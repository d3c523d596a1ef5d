"""
backend/auth_context.py

Shared authentication primitives for FastAPI dependency injection.

Contains:
- verify_token: JWT verification (HS256 shared secret in dev, Cognito JWKS
  in staging/prod)
- require_principal: FastAPI dependency returning the verified claim set
- get_db: per-request database connection dependency

The claim set is handed to the services untouched; turning it into a user
id and admin flag is backend.identity's job.
"""

from __future__ import annotations

from typing import Any, Dict, Generator, Optional

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

try:
    from backend.config import (
        COGNITO_ISSUER,
        DEV_SECRET_KEY,
        IS_DEV,
        JWT_ALGORITHM,
        JWT_LEEWAY_SECONDS,
        SECRET_KEY,
        USE_COGNITO,
    )
    from backend.db import DbConnection, get_db_connection
    from backend.errors import UnauthenticatedError
except ModuleNotFoundError:
    from config import (
        COGNITO_ISSUER,
        DEV_SECRET_KEY,
        IS_DEV,
        JWT_ALGORITHM,
        JWT_LEEWAY_SECONDS,
        SECRET_KEY,
        USE_COGNITO,
    )
    from db import DbConnection, get_db_connection
    from errors import UnauthenticatedError

# Missing credentials are reported as 401 by require_principal, not 403
security = HTTPBearer(auto_error=False)

_jwks_client: Optional[jwt.PyJWKClient] = None


def _get_jwks_client() -> jwt.PyJWKClient:
    global _jwks_client
    if _jwks_client is None:
        _jwks_client = jwt.PyJWKClient(f"{COGNITO_ISSUER}/.well-known/jwks.json")
    return _jwks_client


# ---------------------------------------------------------
# JWT Token Verification
# ---------------------------------------------------------
def verify_token(token: str) -> Dict[str, Any]:
    """
    Verify a bearer token and return its decoded claims.

    Cognito mode: RS256, signing key from the user pool JWKS, issuer checked,
    audience not checked (Cognito access tokens carry client_id instead).

    Outside dev, tokens signed with the built-in dev SECRET_KEY are never
    accepted.

    Raises:
        UnauthenticatedError: If token is expired or invalid
    """
    if not USE_COGNITO and not IS_DEV and SECRET_KEY == DEV_SECRET_KEY:
        print("[AUTH] Rejecting token: dev SECRET_KEY outside dev")
        raise UnauthenticatedError("Invalid token")

    try:
        if USE_COGNITO:
            signing_key = _get_jwks_client().get_signing_key_from_jwt(token)
            return jwt.decode(
                token,
                signing_key.key,
                algorithms=["RS256"],
                issuer=COGNITO_ISSUER,
                leeway=JWT_LEEWAY_SECONDS,
                options={"verify_aud": False},
            )
        return jwt.decode(
            token,
            SECRET_KEY,
            algorithms=[JWT_ALGORITHM],
            leeway=JWT_LEEWAY_SECONDS,
            options={"verify_aud": False},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Token expired")
    except jwt.PyJWKClientError as e:
        print(f"[AUTH] JWKS lookup failed: {e}")
        raise UnauthenticatedError("Invalid token")
    except jwt.InvalidTokenError as e:
        if IS_DEV:
            print(f"[AUTH] JWT auth failed: {e}")
        raise UnauthenticatedError("Invalid token")


def require_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> Dict[str, Any]:
    """
    Auth dependency for every project/task route.

    Usage:
        @router.get("")
        def list_things(principal: dict = Depends(require_principal)):
            ...

    Raises:
        UnauthenticatedError: No bearer token, or token fails verification
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Missing bearer token")
    return verify_token(credentials.credentials)


# ---------------------------------------------------------
# DB Helper
# ---------------------------------------------------------
def get_db() -> Generator[DbConnection, None, None]:
    """One connection per request, closed when the response is done."""
    with get_db_connection() as conn:
        yield conn
