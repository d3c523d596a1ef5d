"""
backend/project_store.py

Data access for projects.

Every function takes an open connection (see backend.db.get_db_connection)
and commits its own writes. Ownership checks for mutations go through
backend.authz.require_access against the PERSISTED owner, never against the
owner carried by the caller's draft entity.

Listings are ordered by id (insertion order) so paging is stable.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

try:
    from backend.authz import require_access
    from backend.config import IS_DEV
    from backend.db import commit, execute_query, fetch_all, fetch_one, insert_returning_id, is_row_id, page_params
    from backend.errors import NotFoundError
    from backend.models import Project
    from backend.task_store import TASK_COLUMNS, task_from_row
except ModuleNotFoundError:
    from authz import require_access
    from config import IS_DEV
    from db import commit, execute_query, fetch_all, fetch_one, insert_returning_id, is_row_id, page_params
    from errors import NotFoundError
    from models import Project
    from task_store import TASK_COLUMNS, task_from_row


PROJECT_COLUMNS = "id, name, description, user_id"


def project_from_row(row: Dict[str, Any]) -> Project:
    return Project(
        id=row["id"],
        name=row["name"] or "",
        description=row["description"] or "",
        user_id=row["user_id"],
    )


def _attach_tasks(conn, projects: List[Project]) -> List[Project]:
    """Load the tasks of every project in one query."""
    if not projects:
        return projects

    params = {f"p{i}": project.id for i, project in enumerate(projects)}
    placeholders = ", ".join(f":{key}" for key in params)
    rows = fetch_all(
        conn,
        f"SELECT {TASK_COLUMNS} FROM tasks WHERE project_id IN ({placeholders}) ORDER BY id",
        params,
    )

    by_project: Dict[int, list] = {project.id: [] for project in projects}
    for row in rows:
        by_project[row["project_id"]].append(task_from_row(row))
    for project in projects:
        project.tasks = by_project[project.id]
    return projects


def list_all(conn, page: int, page_size: int) -> List[Project]:
    """All projects (admin view), paged."""
    if page_size <= 0:
        return []

    rows = fetch_all(
        conn,
        f"""
        SELECT {PROJECT_COLUMNS}
        FROM projects
        ORDER BY id
        LIMIT :limit OFFSET :offset
        """,
        page_params(page, page_size),
    )
    return _attach_tasks(conn, [project_from_row(row) for row in rows])


def list_for_user(conn, user_id: str, page: int, page_size: int) -> List[Project]:
    """Projects owned by user_id, paged."""
    if page_size <= 0:
        return []

    rows = fetch_all(
        conn,
        f"""
        SELECT {PROJECT_COLUMNS}
        FROM projects
        WHERE user_id = :user_id
        ORDER BY id
        LIMIT :limit OFFSET :offset
        """,
        {"user_id": user_id, **page_params(page, page_size)},
    )
    return _attach_tasks(conn, [project_from_row(row) for row in rows])


def get(conn, project_id: int) -> Optional[Project]:
    """Fetch a single project with its tasks, or None."""
    if not is_row_id(project_id):
        return None

    row = fetch_one(
        conn,
        f"SELECT {PROJECT_COLUMNS} FROM projects WHERE id = :id",
        {"id": project_id},
    )
    if row is None:
        return None
    return _attach_tasks(conn, [project_from_row(row)])[0]


def create(conn, project: Project) -> Project:
    """Persist a new project and return it with its assigned id."""
    project_id = insert_returning_id(
        conn,
        "INSERT INTO projects (name, description, user_id) VALUES (:name, :description, :user_id)",
        {"name": project.name, "description": project.description or "", "user_id": project.user_id},
    )
    commit(conn)

    if IS_DEV:
        print(f"[PROJECTS] Created project_id={project_id}, user_id={project.user_id}")

    return Project(
        id=project_id,
        name=project.name,
        description=project.description or "",
        user_id=project.user_id,
    )


def update(
    conn,
    updated: Project,
    project_id: int,
    requesting_user_id: str,
    is_admin: bool = False,
) -> Project:
    """
    Overwrite name and description of an existing project.

    The owner is never changed; updated.user_id is ignored.

    Raises:
        NotFoundError: No project with project_id
        ForbiddenError: Requester is neither the owner nor an admin
    """
    existing = get(conn, project_id)
    if existing is None:
        raise NotFoundError("Project not found.")

    require_access(
        is_admin,
        existing.user_id,
        requesting_user_id,
        "You are not authorized to update this project.",
    )

    execute_query(
        conn,
        "UPDATE projects SET name = :name, description = :description WHERE id = :id",
        {"name": updated.name, "description": updated.description or "", "id": project_id},
    )
    commit(conn)

    if IS_DEV:
        print(f"[PROJECTS] Updated project_id={project_id}, by={requesting_user_id}, admin={is_admin}")

    existing.name = updated.name
    existing.description = updated.description or ""
    return existing


def delete(conn, project_id: int, requesting_user_id: str, is_admin: bool = False) -> bool:
    """
    Hard-delete a project and all of its tasks.

    Returns:
        False if the project does not exist, True once deleted

    Raises:
        ForbiddenError: Requester is neither the owner nor an admin
    """
    if not is_row_id(project_id):
        return False

    row = fetch_one(conn, "SELECT user_id FROM projects WHERE id = :id", {"id": project_id})
    if row is None:
        return False

    require_access(
        is_admin,
        row["user_id"],
        requesting_user_id,
        "You do not have permission to delete this project.",
    )

    # Explicit cascade; the FK's ON DELETE CASCADE covers the same ground
    execute_query(conn, "DELETE FROM tasks WHERE project_id = :id", {"id": project_id})
    execute_query(conn, "DELETE FROM projects WHERE id = :id", {"id": project_id})
    commit(conn)

    if IS_DEV:
        print(f"[PROJECTS] Deleted project_id={project_id}, by={requesting_user_id}, admin={is_admin}")

    return True
