"""
backend/routes_tasks.py

Task endpoints, nested under a project.

Security guarantees:
- All endpoints require a verified bearer token (require_principal)
- A task is only reachable through the project it belongs to
- Access is decided by the parent project's owner (or admin)
"""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Path, Query
from fastapi.responses import PlainTextResponse

try:
    from backend import task_service
    from backend.auth_context import get_db, require_principal
    from backend.config import DEFAULT_PAGE_SIZE
    from backend.errors import NotFoundError
    from backend.models import TaskItem, TaskItemStatus
    from backend.schemas import TaskDto
except ModuleNotFoundError:
    import task_service
    from auth_context import get_db, require_principal
    from config import DEFAULT_PAGE_SIZE
    from errors import NotFoundError
    from models import TaskItem, TaskItemStatus
    from schemas import TaskDto


router = APIRouter(
    prefix="/projects/{project_id}/tasks",
    tags=["tasks"],
)


@router.get("", response_model=List[TaskItem])
def get_tasks(
    project_id: int = Path(..., description="Parent project ID"),
    page: int = Query(1, description="1-based page number"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize", description="Items per page"),
    principal: Dict[str, Any] = Depends(require_principal),
    conn=Depends(get_db),
) -> List[TaskItem]:
    """List tasks of a project (empty for non-owners)."""
    return task_service.get_tasks(conn, principal, project_id, page, page_size)


@router.post("", response_model=TaskItem)
def add_task(
    request: TaskDto,
    project_id: int = Path(..., description="Parent project ID"),
    principal: Dict[str, Any] = Depends(require_principal),
    conn=Depends(get_db),
) -> TaskItem:
    """
    Add a task to a project.

    Raises:
        403: Caller is neither the project owner nor an admin
        404: Project not found
    """
    return task_service.add_task(conn, request, project_id, principal)


@router.put("/{task_id}", response_model=TaskItem)
def update_task(
    request: TaskDto,
    project_id: int = Path(..., description="Parent project ID"),
    task_id: int = Path(..., description="Task ID"),
    principal: Dict[str, Any] = Depends(require_principal),
    conn=Depends(get_db),
) -> TaskItem:
    """Replace name, description and status of a task."""
    return task_service.update_task(conn, request, task_id, project_id, principal)


@router.patch("/{task_id}/status", response_model=TaskItem)
def update_task_status(
    project_id: int = Path(..., description="Parent project ID"),
    task_id: int = Path(..., description="Task ID"),
    status: TaskItemStatus = Query(..., description="Todo, InProgress or Done"),
    principal: Dict[str, Any] = Depends(require_principal),
    conn=Depends(get_db),
) -> TaskItem:
    """Set only the status of a task."""
    return task_service.update_task_status(conn, status, task_id, project_id, principal)


@router.delete("/{task_id}", response_class=PlainTextResponse)
def delete_task(
    project_id: int = Path(..., description="Parent project ID"),
    task_id: int = Path(..., description="Task ID to delete"),
    principal: Dict[str, Any] = Depends(require_principal),
    conn=Depends(get_db),
) -> str:
    """Delete a task; replies with a confirmation message."""
    if not task_service.delete_task(conn, task_id, project_id, principal):
        raise NotFoundError("Task not found")
    return "Task deleted successfully"
