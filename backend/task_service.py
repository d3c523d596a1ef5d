"""
backend/task_service.py

Task orchestration. Same shape as project_service: identity first, then the
store, with errors passed through.
"""

from __future__ import annotations

from typing import List, Optional

try:
    from backend import task_store
    from backend.identity import IdentityResolver, Principal, resolve_identity
    from backend.models import TaskItem, TaskItemStatus
    from backend.schemas import TaskDto
except ModuleNotFoundError:
    import task_store
    from identity import IdentityResolver, Principal, resolve_identity
    from models import TaskItem, TaskItemStatus
    from schemas import TaskDto


def _to_entity(dto: TaskDto, project_id: int) -> TaskItem:
    return TaskItem(
        name=dto.name,
        description=dto.description or "",
        status=dto.status,
        project_id=project_id,
    )


def get_tasks(
    conn,
    principal: Principal,
    project_id: int,
    page: int,
    page_size: int,
    resolver: Optional[IdentityResolver] = None,
) -> List[TaskItem]:
    """Admins see every task of the project; others only if they own it."""
    identity = resolve_identity(principal, resolver)

    if identity.is_admin:
        return task_store.list_all_for_project(conn, project_id, page, page_size)
    return task_store.list_for_user_in_project(conn, project_id, identity.user_id, page, page_size)


def add_task(
    conn,
    dto: TaskDto,
    project_id: int,
    principal: Principal,
    resolver: Optional[IdentityResolver] = None,
) -> TaskItem:
    identity = resolve_identity(principal, resolver)
    return task_store.create(conn, _to_entity(dto, project_id), identity.user_id, identity.is_admin)


def update_task(
    conn,
    dto: TaskDto,
    task_id: int,
    project_id: int,
    principal: Principal,
    resolver: Optional[IdentityResolver] = None,
) -> TaskItem:
    identity = resolve_identity(principal, resolver)
    return task_store.update(
        conn,
        _to_entity(dto, project_id),
        task_id,
        project_id,
        identity.user_id,
        identity.is_admin,
    )


def update_task_status(
    conn,
    status: TaskItemStatus,
    task_id: int,
    project_id: int,
    principal: Principal,
    resolver: Optional[IdentityResolver] = None,
) -> TaskItem:
    identity = resolve_identity(principal, resolver)
    return task_store.update_status(conn, status, task_id, project_id, identity.user_id, identity.is_admin)


def delete_task(
    conn,
    task_id: int,
    project_id: int,
    principal: Principal,
    resolver: Optional[IdentityResolver] = None,
) -> bool:
    identity = resolve_identity(principal, resolver)
    return task_store.delete(conn, task_id, project_id, identity.user_id, identity.is_admin)
