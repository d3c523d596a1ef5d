# backend/migrate.py
# Database migration module for PostgreSQL and SQLite
# Run: python -m backend.migrate

try:
    from backend.db import IS_POSTGRES, commit, get_db_connection
except ModuleNotFoundError:
    from db import IS_POSTGRES, commit, get_db_connection


def run_migrations() -> None:
    """
    Run all database migrations (idempotent).
    Creates tables and indexes if missing.
    Safe to run multiple times.
    """
    print("[MIGRATE] Starting database migrations...")

    with get_db_connection() as conn:
        if IS_POSTGRES:
            _run_postgres_migrations(conn)
        else:
            _run_sqlite_migrations(conn)

        commit(conn)

    print("[MIGRATE] All migrations complete!")


def _run_postgres_migrations(conn) -> None:
    """PostgreSQL-specific migrations using SQLAlchemy."""
    from sqlalchemy import text

    print("[MIGRATE] Running PostgreSQL migrations...")

    # Projects table
    conn.execute(text("""
        CREATE TABLE IF NOT EXISTS projects (
            id SERIAL PRIMARY KEY,
            name VARCHAR(100) NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            user_id TEXT NOT NULL
        )
    """))
    conn.execute(text("CREATE INDEX IF NOT EXISTS idx_projects_user_id ON projects(user_id)"))

    # Tasks table (removed together with their project)
    conn.execute(text("""
        CREATE TABLE IF NOT EXISTS tasks (
            id SERIAL PRIMARY KEY,
            name VARCHAR(100) NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL DEFAULT 'Todo',
            project_id INTEGER NOT NULL REFERENCES projects(id) ON DELETE CASCADE
        )
    """))
    conn.execute(text("CREATE INDEX IF NOT EXISTS idx_tasks_project_id ON tasks(project_id)"))

    print("[MIGRATE] PostgreSQL migrations complete")


def _run_sqlite_migrations(conn) -> None:
    """SQLite-specific migrations."""
    print("[MIGRATE] Running SQLite migrations...")

    cur = conn.cursor()

    cur.execute("""
        CREATE TABLE IF NOT EXISTS projects (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            user_id TEXT NOT NULL
        )
    """)
    cur.execute("CREATE INDEX IF NOT EXISTS idx_projects_user_id ON projects(user_id)")

    cur.execute("""
        CREATE TABLE IF NOT EXISTS tasks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL DEFAULT 'Todo',
            project_id INTEGER NOT NULL,
            FOREIGN KEY (project_id) REFERENCES projects (id) ON DELETE CASCADE
        )
    """)
    cur.execute("CREATE INDEX IF NOT EXISTS idx_tasks_project_id ON tasks(project_id)")

    print("[MIGRATE] SQLite migrations complete")


if __name__ == "__main__":
    run_migrations()
