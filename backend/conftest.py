"""
Shared pytest fixtures for the backend test suite.

Every test gets its own SQLite file; migrations run before the test body.
"""

import os
import tempfile
from pathlib import Path

# Point the app at a scratch database BEFORE anything imports backend.main,
# which runs migrations at import time.
os.environ.setdefault("DATABASE_PATH", str(Path(tempfile.mkdtemp()) / "import.db"))

import jwt
import pytest

from backend import db
from backend.config import JWT_ALGORITHM, SECRET_KEY
from backend.migrate import run_migrations


@pytest.fixture(autouse=True)
def test_database(tmp_path, monkeypatch):
    """Fresh, migrated SQLite database per test."""
    db_file = tmp_path / "test.db"
    monkeypatch.setattr(db, "DATABASE_PATH", str(db_file))
    run_migrations()
    yield db_file


@pytest.fixture
def conn(test_database):
    """Open connection to the per-test database."""
    with db.get_db_connection() as connection:
        yield connection


def make_token(username=None, groups=None, **extra) -> str:
    """Mint a dev (HS256) access token with Cognito-style claims."""
    payload = dict(extra)
    if username is not None:
        payload["username"] = username
    if groups is not None:
        payload["cognito:groups"] = groups
    return jwt.encode(payload, SECRET_KEY, algorithm=JWT_ALGORITHM)


def auth_headers(username=None, groups=None, **extra) -> dict:
    return {"Authorization": f"Bearer {make_token(username, groups, **extra)}"}
