"""
backend/routes_projects.py

Project CRUD endpoints.

Security guarantees:
- All endpoints require a verified bearer token (require_principal)
- Owner is always taken from the token, never from the request body
- Non-admins only list and mutate their own projects
- Typed errors from the services are mapped to 401/403/404 by the
  handlers registered in backend/main.py
"""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Path, Query, Response

try:
    from backend import project_service
    from backend.auth_context import get_db, require_principal
    from backend.config import DEFAULT_PAGE_SIZE
    from backend.errors import NotFoundError
    from backend.models import Project
    from backend.schemas import ProjectDto
except ModuleNotFoundError:
    import project_service
    from auth_context import get_db, require_principal
    from config import DEFAULT_PAGE_SIZE
    from errors import NotFoundError
    from models import Project
    from schemas import ProjectDto


router = APIRouter(
    prefix="/projects",
    tags=["projects"],
)


@router.get("", response_model=List[Project])
def get_projects(
    page: int = Query(1, description="1-based page number"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, alias="pageSize", description="Items per page"),
    principal: Dict[str, Any] = Depends(require_principal),
    conn=Depends(get_db),
) -> List[Project]:
    """
    List projects with their tasks.

    Admins see every project; other users see the projects they own.
    """
    return project_service.get_projects(conn, principal, page, page_size)


@router.post("", response_model=Project, status_code=201)
def create_project(
    request: ProjectDto,
    principal: Dict[str, Any] = Depends(require_principal),
    conn=Depends(get_db),
) -> Project:
    """Create a project owned by the caller."""
    return project_service.add_project(conn, request, principal)


@router.put("/{project_id}", response_model=Project)
def update_project(
    request: ProjectDto,
    project_id: int = Path(..., description="Project ID"),
    principal: Dict[str, Any] = Depends(require_principal),
    conn=Depends(get_db),
) -> Project:
    """
    Replace name and description of a project.

    Raises:
        403: Caller is neither the owner nor an admin
        404: Project not found
    """
    return project_service.update_project(conn, request, project_id, principal)


@router.delete("/{project_id}", status_code=204)
def delete_project(
    project_id: int = Path(..., description="Project ID to delete"),
    principal: Dict[str, Any] = Depends(require_principal),
    conn=Depends(get_db),
) -> Response:
    """
    Delete a project and all of its tasks.

    Returns:
        204 No Content on success
    """
    if not project_service.delete_project(conn, project_id, principal):
        raise NotFoundError("Project not found")
    return Response(status_code=204)
