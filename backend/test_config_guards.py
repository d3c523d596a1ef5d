"""
Test suite for production token guards.

Verifies that staging/prod never trust the built-in dev SECRET_KEY and that
JWT_ALGORITHM is limited to HMAC algorithms.
"""

import jwt
import pytest
from unittest.mock import patch
from fastapi.testclient import TestClient

from backend.config import DEV_SECRET_KEY, check_token_settings
from backend.main import app


client = TestClient(app)

PROD_SECRET = "prod-secret-key-from-the-deployment-environment"


def _bearer(secret, groups=None):
    claims = {"username": "mallory"}
    if groups:
        claims["cognito:groups"] = groups
    return {"Authorization": f"Bearer {jwt.encode(claims, secret, algorithm='HS256')}"}


class TestStartupGuard:
    """check_token_settings() runs when backend.main is imported."""

    def test_dev_default_key_allowed_in_dev(self):
        with patch("backend.config.IS_DEV", True), \
             patch("backend.config.SECRET_KEY", DEV_SECRET_KEY):
            check_token_settings()

    def test_dev_default_key_refused_outside_dev(self):
        with patch("backend.config.IS_DEV", False), \
             patch("backend.config.USE_COGNITO", False), \
             patch("backend.config.SECRET_KEY", DEV_SECRET_KEY):
            with pytest.raises(RuntimeError, match="SECRET_KEY"):
                check_token_settings()

    def test_own_key_accepted_outside_dev(self):
        with patch("backend.config.IS_DEV", False), \
             patch("backend.config.USE_COGNITO", False), \
             patch("backend.config.SECRET_KEY", PROD_SECRET):
            check_token_settings()

    def test_cognito_does_not_need_secret_key(self):
        with patch("backend.config.IS_DEV", False), \
             patch("backend.config.USE_COGNITO", True), \
             patch("backend.config.SECRET_KEY", DEV_SECRET_KEY):
            check_token_settings()

    @pytest.mark.parametrize("algorithm", ["none", "RS256", "hs256", ""])
    def test_non_hmac_algorithm_refused(self, algorithm):
        with patch("backend.config.JWT_ALGORITHM", algorithm):
            with pytest.raises(RuntimeError, match="JWT_ALGORITHM"):
                check_token_settings()


class TestRequestGuard:
    """verify_token rejects dev-key tokens when not running in dev."""

    def test_forged_admin_token_is_401_when_not_dev(self):
        with patch("backend.auth_context.IS_DEV", False), \
             patch("backend.auth_context.USE_COGNITO", False), \
             patch("backend.auth_context.SECRET_KEY", DEV_SECRET_KEY):
            response = client.get("/projects", headers=_bearer(DEV_SECRET_KEY, ["admin"]))

            assert response.status_code == 401, "Expected 401 for a dev-key token outside dev"
            assert response.json()["detail"] == "Invalid token"

    def test_own_key_token_accepted_when_not_dev(self):
        with patch("backend.auth_context.IS_DEV", False), \
             patch("backend.auth_context.USE_COGNITO", False), \
             patch("backend.auth_context.SECRET_KEY", PROD_SECRET):
            response = client.get("/projects", headers=_bearer(PROD_SECRET))

            assert response.status_code == 200
            assert response.json() == []

    def test_dev_key_still_works_in_dev(self):
        with patch("backend.auth_context.IS_DEV", True), \
             patch("backend.auth_context.USE_COGNITO", False), \
             patch("backend.auth_context.SECRET_KEY", DEV_SECRET_KEY):
            response = client.get("/projects", headers=_bearer(DEV_SECRET_KEY))

            assert response.status_code == 200
