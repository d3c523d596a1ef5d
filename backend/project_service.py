"""
backend/project_service.py

Project orchestration: resolve the requester, map the DTO, delegate to the
store. Errors from the resolver and the store pass through unchanged.
"""

from __future__ import annotations

from typing import List, Optional

try:
    from backend import project_store
    from backend.identity import IdentityResolver, Principal, resolve_identity
    from backend.models import Project
    from backend.schemas import ProjectDto
except ModuleNotFoundError:
    import project_store
    from identity import IdentityResolver, Principal, resolve_identity
    from models import Project
    from schemas import ProjectDto


def get_projects(
    conn,
    principal: Principal,
    page: int,
    page_size: int,
    resolver: Optional[IdentityResolver] = None,
) -> List[Project]:
    """Admins get every project; everyone else gets their own."""
    identity = resolve_identity(principal, resolver)

    if identity.is_admin:
        return project_store.list_all(conn, page, page_size)
    return project_store.list_for_user(conn, identity.user_id, page, page_size)


def add_project(
    conn,
    dto: ProjectDto,
    principal: Principal,
    resolver: Optional[IdentityResolver] = None,
) -> Project:
    """Create a project owned by the requester."""
    identity = resolve_identity(principal, resolver)

    new_project = Project(
        name=dto.name,
        description=dto.description or "",
        user_id=identity.user_id,
    )
    return project_store.create(conn, new_project)


def update_project(
    conn,
    dto: ProjectDto,
    project_id: int,
    principal: Principal,
    resolver: Optional[IdentityResolver] = None,
) -> Project:
    identity = resolve_identity(principal, resolver)

    # Draft carries the requester as owner; the store authorizes against the
    # persisted owner and never writes this field.
    updated_project = Project(
        name=dto.name,
        description=dto.description or "",
        user_id=identity.user_id,
    )
    return project_store.update(conn, updated_project, project_id, identity.user_id, identity.is_admin)


def delete_project(
    conn,
    project_id: int,
    principal: Principal,
    resolver: Optional[IdentityResolver] = None,
) -> bool:
    identity = resolve_identity(principal, resolver)
    return project_store.delete(conn, project_id, identity.user_id, identity.is_admin)
