# backend/db.py
# Database abstraction layer supporting PostgreSQL (production) and SQLite (dev)

import sqlite3
from contextlib import contextmanager
from pathlib import Path as FsPath
from typing import Any, Dict, Generator, List, Optional, Union
from urllib.parse import urlparse

from sqlalchemy import create_engine, pool, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError as SqlAlchemyIntegrityError

try:
    from backend.config import DATABASE_PATH, DATABASE_URL, IS_DEV, IS_POSTGRES
except ModuleNotFoundError:
    from config import DATABASE_PATH, DATABASE_URL, IS_DEV, IS_POSTGRES

DbConnection = Union[sqlite3.Connection, Connection]

# Raised by either backend when a constraint (e.g. a foreign key) is violated
INTEGRITY_ERRORS = (sqlite3.IntegrityError, SqlAlchemyIntegrityError)

# Largest value a SQLite INTEGER / PostgreSQL BIGINT can hold
MAX_ROW_ID = 2**63 - 1

# Global engine (SQLAlchemy) or None for SQLite
_engine: Optional[Engine] = None


def init_engine() -> None:
    """Initialize SQLAlchemy engine for PostgreSQL if DATABASE_URL is set."""
    global _engine

    if not IS_POSTGRES:
        # SQLite mode - no engine needed
        _engine = None
        print("[DB] Using SQLite (local dev mode)")
        return

    # Parse and validate URL
    parsed = urlparse(DATABASE_URL)
    if not parsed.scheme or not parsed.netloc:
        raise ValueError(f"Invalid DATABASE_URL: {DATABASE_URL[:20]}...")

    # SQLAlchemy only accepts the "postgresql" scheme
    url = DATABASE_URL
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]

    # Create engine with connection pooling
    _engine = create_engine(
        url,
        poolclass=pool.QueuePool,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,  # Verify connections before use
        echo=False,  # Set True for SQL debugging
    )

    print(f"[DB] Using PostgreSQL ({parsed.hostname})")


def sqlite_path() -> str:
    """Resolve DATABASE_PATH relative to the backend directory."""
    return str(FsPath(__file__).resolve().parent / DATABASE_PATH)


@contextmanager
def get_db_connection() -> Generator[DbConnection, None, None]:
    """
    Context manager for database connections.
    Returns sqlite3.Connection for SQLite or sqlalchemy.Connection for Postgres.

    Any uncommitted work is rolled back if the body raises.
    """
    if IS_POSTGRES:
        if _engine is None:
            init_engine()

        with _engine.connect() as conn:
            try:
                yield conn
            except Exception:
                conn.rollback()
                raise
    else:
        conn = sqlite3.connect(sqlite_path(), check_same_thread=False)
        conn.row_factory = sqlite3.Row
        # Cascade deletes depend on foreign key enforcement (off by default)
        conn.execute("PRAGMA foreign_keys = ON")
        try:
            yield conn
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()


def execute_query(
    conn: DbConnection,
    query: str,
    params: Optional[Dict[str, Any]] = None,
) -> Any:
    """
    Execute a query with named parameters.

    Both sqlite3 and SQLAlchemy's text() accept the ":name" placeholder
    style, so queries are written once for both backends.

    Returns:
        Cursor (SQLite) or CursorResult (PostgreSQL)
    """
    if IS_POSTGRES:
        return conn.execute(text(query), params or {})

    cur = conn.cursor()
    return cur.execute(query, params or {})


def insert_returning_id(
    conn: DbConnection,
    query: str,
    params: Dict[str, Any],
) -> int:
    """Execute an INSERT and return the generated primary key."""
    if IS_POSTGRES:
        result = conn.execute(text(f"{query} RETURNING id"), params)
        return int(result.scalar_one())

    cur = conn.cursor()
    cur.execute(query, params)
    return int(cur.lastrowid)


def row_to_dict(row: Any) -> Dict[str, Any]:
    """
    Convert a sqlite3.Row or SQLAlchemy Row to a plain dict.

    Returns {} for None.
    """
    if row is None:
        return {}
    if hasattr(row, "_mapping"):
        return dict(row._mapping)
    return dict(row)


def fetch_one(
    conn: DbConnection,
    query: str,
    params: Optional[Dict[str, Any]] = None,
) -> Optional[Dict[str, Any]]:
    """Run a query and return the first row as a dict (or None)."""
    row = execute_query(conn, query, params).fetchone()
    return row_to_dict(row) if row is not None else None


def fetch_all(
    conn: DbConnection,
    query: str,
    params: Optional[Dict[str, Any]] = None,
) -> List[Dict[str, Any]]:
    """Run a query and return every row as a dict."""
    return [row_to_dict(row) for row in execute_query(conn, query, params).fetchall()]


def page_params(page: int, page_size: int) -> Dict[str, int]:
    """
    Translate 1-based page/page_size into LIMIT/OFFSET parameters.

    page < 1 is treated as page 1. Callers short-circuit page_size <= 0
    (empty result) before querying, since SQLite reads a negative LIMIT as
    "no limit". Both values are capped at MAX_ROW_ID so arbitrarily large
    pages still bind as 64-bit integers.
    """
    page = max(page, 1)
    return {
        "limit": min(page_size, MAX_ROW_ID),
        "offset": min((page - 1) * page_size, MAX_ROW_ID),
    }


def is_row_id(value: int) -> bool:
    """True if value fits an id column; anything else cannot match a row."""
    return 0 < value <= MAX_ROW_ID


def commit(conn: DbConnection) -> None:
    """Commit the current transaction."""
    conn.commit()


def rollback(conn: DbConnection) -> None:
    """Roll back the current transaction."""
    conn.rollback()


# Initialize engine on module import if Postgres mode
if IS_POSTGRES and _engine is None:
    init_engine()
elif IS_DEV:
    print("[DB] Using SQLite (local dev mode)")
