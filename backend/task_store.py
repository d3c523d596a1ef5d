"""
backend/task_store.py

Data access for tasks.

Tasks are always addressed by (task_id, project_id): a task id paired with
the wrong project does not resolve, so a caller authorized on one project
cannot reach tasks of another through it.

A task has no owner column; authorization uses the parent project's owner.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

try:
    from backend.authz import require_access
    from backend.config import IS_DEV
    from backend.db import (
        INTEGRITY_ERRORS,
        commit,
        execute_query,
        fetch_all,
        fetch_one,
        insert_returning_id,
        is_row_id,
        page_params,
        rollback,
    )
    from backend.errors import NotFoundError
    from backend.models import TaskItem, TaskItemStatus
except ModuleNotFoundError:
    from authz import require_access
    from config import IS_DEV
    from db import (
        INTEGRITY_ERRORS,
        commit,
        execute_query,
        fetch_all,
        fetch_one,
        insert_returning_id,
        is_row_id,
        page_params,
        rollback,
    )
    from errors import NotFoundError
    from models import TaskItem, TaskItemStatus


TASK_COLUMNS = "id, name, description, status, project_id"


def task_from_row(row: Dict[str, Any]) -> TaskItem:
    return TaskItem(
        id=row["id"],
        name=row["name"] or "",
        description=row["description"] or "",
        status=TaskItemStatus(row["status"]),
        project_id=row["project_id"],
    )


def list_all_for_project(conn, project_id: int, page: int, page_size: int) -> List[TaskItem]:
    """All tasks of a project (admin view), paged."""
    if page_size <= 0 or not is_row_id(project_id):
        return []

    rows = fetch_all(
        conn,
        f"""
        SELECT {TASK_COLUMNS}
        FROM tasks
        WHERE project_id = :project_id
        ORDER BY id
        LIMIT :limit OFFSET :offset
        """,
        {"project_id": project_id, **page_params(page, page_size)},
    )
    return [task_from_row(row) for row in rows]


def list_for_user_in_project(
    conn,
    project_id: int,
    user_id: str,
    page: int,
    page_size: int,
) -> List[TaskItem]:
    """Tasks of a project, only if the project is owned by user_id."""
    if page_size <= 0 or not is_row_id(project_id):
        return []

    rows = fetch_all(
        conn,
        """
        SELECT t.id, t.name, t.description, t.status, t.project_id
        FROM tasks t
        JOIN projects p ON p.id = t.project_id
        WHERE t.project_id = :project_id
          AND p.user_id = :user_id
        ORDER BY t.id
        LIMIT :limit OFFSET :offset
        """,
        {"project_id": project_id, "user_id": user_id, **page_params(page, page_size)},
    )
    return [task_from_row(row) for row in rows]


def get(conn, task_id: int, project_id: int) -> Optional[Tuple[TaskItem, str]]:
    """
    Fetch a task joined with its parent project.

    Returns:
        (task, owner of the parent project), or None if the pair does not
        resolve
    """
    if not (is_row_id(task_id) and is_row_id(project_id)):
        return None

    row = fetch_one(
        conn,
        """
        SELECT t.id, t.name, t.description, t.status, t.project_id, p.user_id AS owner
        FROM tasks t
        JOIN projects p ON p.id = t.project_id
        WHERE t.id = :task_id AND t.project_id = :project_id
        """,
        {"task_id": task_id, "project_id": project_id},
    )
    if row is None:
        return None
    return task_from_row(row), row["owner"]


def _require_task(conn, task_id: int, project_id: int) -> Tuple[TaskItem, str]:
    found = get(conn, task_id, project_id)
    if found is None:
        raise NotFoundError("Task not found.")
    return found


def create(conn, task: TaskItem, requesting_user_id: str, is_admin: bool = False) -> TaskItem:
    """
    Insert a task after checking access to its parent project.

    The parent check and the insert run on one connection, and the foreign
    key is the authoritative guard: if the parent is deleted in between, the
    insert is rejected and the caller sees NotFoundError.

    Raises:
        NotFoundError: Parent project does not exist
        ForbiddenError: Requester is neither the project owner nor an admin
    """
    project = None
    if is_row_id(task.project_id):
        project = fetch_one(conn, "SELECT user_id FROM projects WHERE id = :id", {"id": task.project_id})
    if project is None:
        raise NotFoundError("Project not found.")

    require_access(
        is_admin,
        project["user_id"],
        requesting_user_id,
        "You are not authorized to add a task to this project.",
    )

    try:
        task_id = insert_returning_id(
            conn,
            """
            INSERT INTO tasks (name, description, status, project_id)
            VALUES (:name, :description, :status, :project_id)
            """,
            {
                "name": task.name,
                "description": task.description or "",
                "status": task.status.value,
                "project_id": task.project_id,
            },
        )
        commit(conn)
    except INTEGRITY_ERRORS as e:
        rollback(conn)
        print(f"[TASKS] Insert rejected for project_id={task.project_id}: {e}")
        raise NotFoundError("Project not found.")

    if IS_DEV:
        print(f"[TASKS] Created task_id={task_id}, project_id={task.project_id}, by={requesting_user_id}")

    return TaskItem(
        id=task_id,
        name=task.name,
        description=task.description or "",
        status=task.status,
        project_id=task.project_id,
    )


def update(
    conn,
    updated: TaskItem,
    task_id: int,
    project_id: int,
    requesting_user_id: str,
    is_admin: bool = False,
) -> TaskItem:
    """
    Overwrite name, description and status of a task.

    Raises:
        NotFoundError: (task_id, project_id) does not resolve
        ForbiddenError: Requester is neither the project owner nor an admin
    """
    task, owner = _require_task(conn, task_id, project_id)
    require_access(is_admin, owner, requesting_user_id, "You are not authorized to update this task.")

    execute_query(
        conn,
        """
        UPDATE tasks
        SET name = :name, description = :description, status = :status
        WHERE id = :id AND project_id = :project_id
        """,
        {
            "name": updated.name,
            "description": updated.description or "",
            "status": updated.status.value,
            "id": task_id,
            "project_id": project_id,
        },
    )
    commit(conn)

    if IS_DEV:
        print(f"[TASKS] Updated task_id={task_id}, project_id={project_id}, by={requesting_user_id}")

    task.name = updated.name
    task.description = updated.description or ""
    task.status = updated.status
    return task


def update_status(
    conn,
    status: TaskItemStatus,
    task_id: int,
    project_id: int,
    requesting_user_id: str,
    is_admin: bool = False,
) -> TaskItem:
    """
    Overwrite only the status of a task. Any status may follow any other.

    Raises:
        NotFoundError: (task_id, project_id) does not resolve
        ForbiddenError: Requester is neither the project owner nor an admin
    """
    task, owner = _require_task(conn, task_id, project_id)
    require_access(is_admin, owner, requesting_user_id, "You are not authorized to update this task.")

    execute_query(
        conn,
        "UPDATE tasks SET status = :status WHERE id = :id AND project_id = :project_id",
        {"status": status.value, "id": task_id, "project_id": project_id},
    )
    commit(conn)

    if IS_DEV:
        print(f"[TASKS] Status task_id={task_id} {task.status.value} -> {status.value}")

    task.status = status
    return task


def delete(conn, task_id: int, project_id: int, requesting_user_id: str, is_admin: bool = False) -> bool:
    """
    Hard-delete a task.

    Returns:
        False if (task_id, project_id) does not resolve, True once deleted

    Raises:
        ForbiddenError: Requester is neither the project owner nor an admin
    """
    found = get(conn, task_id, project_id)
    if found is None:
        return False

    _, owner = found
    require_access(is_admin, owner, requesting_user_id, "You do not have permission to delete this task.")

    execute_query(
        conn,
        "DELETE FROM tasks WHERE id = :id AND project_id = :project_id",
        {"id": task_id, "project_id": project_id},
    )
    commit(conn)

    if IS_DEV:
        print(f"[TASKS] Deleted task_id={task_id}, project_id={project_id}, by={requesting_user_id}")

    return True
