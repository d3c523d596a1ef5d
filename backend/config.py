# backend/config.py
# Environment-aware configuration for the Task Manager backend

import os
from typing import List, Literal

# Environment detection
ENV: Literal["dev", "staging", "prod"] = os.environ.get("ENV", "dev")  # type: ignore
IS_DEV = (ENV == "dev")
IS_STAGING = (ENV == "staging")
IS_PROD = (ENV == "prod")

# JWT verification
# Dev tokens are HS256 signed with SECRET_KEY. When a Cognito user pool is
# configured, tokens are RS256 and verified against the pool's JWKS instead.
DEV_SECRET_KEY = "dev-secret-key-change-me-before-deploying"
SECRET_KEY = os.environ.get("SECRET_KEY", DEV_SECRET_KEY)
JWT_ALGORITHM = os.environ.get("JWT_ALGORITHM", "HS256")
HMAC_ALGORITHMS = ("HS256", "HS384", "HS512")
JWT_LEEWAY_SECONDS = int(os.environ.get("JWT_LEEWAY_SECONDS", "300"))

COGNITO_REGION = os.environ.get("COGNITO_REGION", "").strip()
COGNITO_USER_POOL_ID = os.environ.get("COGNITO_USER_POOL_ID", "").strip()
USE_COGNITO = bool(COGNITO_REGION and COGNITO_USER_POOL_ID)
COGNITO_ISSUER = (
    f"https://cognito-idp.{COGNITO_REGION}.amazonaws.com/{COGNITO_USER_POOL_ID}"
    if USE_COGNITO
    else ""
)

# Identity claims
USER_ID_CLAIM = os.environ.get("USER_ID_CLAIM", "username")
GROUPS_CLAIM = os.environ.get("GROUPS_CLAIM", "cognito:groups")
ADMIN_GROUP = os.environ.get("ADMIN_GROUP", "admin")

# Database configuration
# DATABASE_URL takes precedence (managed Postgres in staging/prod)
# Falls back to SQLite for local development
DATABASE_URL = os.environ.get("DATABASE_URL", "").strip()
DATABASE_PATH = os.environ.get("DATABASE_PATH", "taskmanager.db")

# Listing defaults
DEFAULT_PAGE_SIZE = int(os.environ.get("DEFAULT_PAGE_SIZE", "10"))

# CORS origins ("*" allows any origin)
CORS_ORIGINS: List[str] = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

# Database type detection
IS_POSTGRES = DATABASE_URL.startswith(("postgres://", "postgresql://"))
IS_SQLITE = not IS_POSTGRES



def check_token_settings() -> None:
    """
    Refuse to serve with token settings anyone could forge against.

    Raises:
        RuntimeError: JWT_ALGORITHM is not an HMAC algorithm, or staging/prod
            would verify tokens with the built-in dev SECRET_KEY
    """
    if JWT_ALGORITHM not in HMAC_ALGORITHMS:
        raise RuntimeError(
            f"JWT_ALGORITHM must be one of {', '.join(HMAC_ALGORITHMS)} (got {JWT_ALGORITHM!r})"
        )
    if not IS_DEV and not USE_COGNITO and SECRET_KEY == DEV_SECRET_KEY:
        raise RuntimeError(
            f"ENV={ENV} needs COGNITO_REGION/COGNITO_USER_POOL_ID or a SECRET_KEY of its own"
        )


if IS_DEV:
    print(f"[CONFIG] Environment: {ENV}")
    print(f"[CONFIG] Database: {'PostgreSQL' if IS_POSTGRES else 'SQLite (local dev)'}")
    print(f"[CONFIG] Token verification: {'Cognito JWKS (RS256)' if USE_COGNITO else JWT_ALGORITHM + ' shared secret'}")
