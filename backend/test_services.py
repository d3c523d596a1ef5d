"""
backend/test_services.py

Service-layer tests: identity is resolved before any storage access, the
admin/owner listing branch, and pass-through of store errors.

Run:
    pytest backend/test_services.py -v
"""

import pytest

from backend import project_service, task_service
from backend.errors import ForbiddenError, NotFoundError, UnauthenticatedError
from backend.identity import AuthenticatedIdentity
from backend.models import TaskItemStatus
from backend.schemas import ProjectDto, TaskDto

U1 = {"username": "u1"}
U2 = {"username": "u2"}
ADMIN = {"username": "root", "cognito:groups": ["admin"]}


class ExplodingConnection:
    """Fails the test if a service touches storage."""

    def __getattr__(self, name):
        raise AssertionError(f"storage accessed: {name}")


class StaticResolver:
    """Resolver that ignores claims; shows services accept any resolver."""

    def __init__(self, identity):
        self.identity = identity

    def resolve(self, principal):
        return self.identity


class TestIdentityFirst:

    @pytest.mark.parametrize(
        "call",
        [
            lambda c: project_service.get_projects(c, {}, 1, 10),
            lambda c: project_service.add_project(c, ProjectDto(name="P"), {}),
            lambda c: project_service.update_project(c, ProjectDto(name="P"), 1, {"username": ""}),
            lambda c: project_service.delete_project(c, 1, {}),
            lambda c: task_service.get_tasks(c, {}, 1, 1, 10),
            lambda c: task_service.add_task(c, TaskDto(name="T", status="Todo"), 1, {}),
            lambda c: task_service.update_task(c, TaskDto(name="T", status="Done"), 1, 1, {}),
            lambda c: task_service.update_task_status(c, TaskItemStatus.Done, 1, 1, {}),
            lambda c: task_service.delete_task(c, 1, 1, {}),
        ],
    )
    def test_unauthenticated_before_storage(self, call):
        with pytest.raises(UnauthenticatedError):
            call(ExplodingConnection())


class TestProjectService:

    def test_owner_stamped_from_identity(self, conn):
        created = project_service.add_project(conn, ProjectDto(name="P1", description="d"), U1)
        assert created.user_id == "u1"

    def test_listing_branches_on_admin(self, conn):
        project_service.add_project(conn, ProjectDto(name="P1"), U1)
        project_service.add_project(conn, ProjectDto(name="P2"), U2)

        assert [p.name for p in project_service.get_projects(conn, U1, 1, 10)] == ["P1"]
        assert [p.name for p in project_service.get_projects(conn, ADMIN, 1, 10)] == ["P1", "P2"]

    def test_update_keeps_persisted_owner(self, conn):
        created = project_service.add_project(conn, ProjectDto(name="P1"), U1)
        updated = project_service.update_project(conn, ProjectDto(name="P1 v2"), created.id, ADMIN)
        assert updated.user_id == "u1"
        assert updated.name == "P1 v2"

    def test_store_errors_pass_through(self, conn):
        created = project_service.add_project(conn, ProjectDto(name="P1"), U1)
        with pytest.raises(ForbiddenError):
            project_service.update_project(conn, ProjectDto(name="x"), created.id, U2)
        with pytest.raises(NotFoundError):
            project_service.update_project(conn, ProjectDto(name="x"), 999, U1)
        assert project_service.delete_project(conn, 999, U1) is False

    def test_custom_resolver(self, conn):
        resolver = StaticResolver(AuthenticatedIdentity(user_id="svc", is_admin=False))
        created = project_service.add_project(conn, ProjectDto(name="P"), {}, resolver=resolver)
        assert created.user_id == "svc"


class TestTaskService:

    def test_scenario_owner_other_user_admin(self, conn):
        p1 = project_service.add_project(conn, ProjectDto(name="P1"), U1)
        dto = TaskDto(name="T1", status="Todo")

        created = task_service.add_task(conn, dto, p1.id, U1)
        assert created.project_id == p1.id

        with pytest.raises(ForbiddenError):
            task_service.add_task(conn, dto, p1.id, U2)

        assert task_service.add_task(conn, dto, p1.id, ADMIN).id is not None

    def test_update_status_done(self, conn):
        p1 = project_service.add_project(conn, ProjectDto(name="P1"), U1)
        created = task_service.add_task(conn, TaskDto(name="T1", description="keep", status="Todo"), p1.id, U1)

        updated = task_service.update_task_status(conn, TaskItemStatus.Done, created.id, p1.id, U1)
        assert updated.status == TaskItemStatus.Done
        assert updated.name == "T1"
        assert updated.description == "keep"

    def test_listing_branches_on_admin(self, conn):
        p1 = project_service.add_project(conn, ProjectDto(name="P1"), U1)
        task_service.add_task(conn, TaskDto(name="T1", status="Todo"), p1.id, U1)

        assert len(task_service.get_tasks(conn, U1, p1.id, 1, 10)) == 1
        assert task_service.get_tasks(conn, U2, p1.id, 1, 10) == []
        assert len(task_service.get_tasks(conn, ADMIN, p1.id, 1, 10)) == 1

    def test_update_and_delete(self, conn):
        p1 = project_service.add_project(conn, ProjectDto(name="P1"), U1)
        created = task_service.add_task(conn, TaskDto(name="T1", status="Todo"), p1.id, U1)

        updated = task_service.update_task(conn, TaskDto(name="T1b", status="InProgress"), created.id, p1.id, U1)
        assert updated.status == TaskItemStatus.InProgress

        assert task_service.delete_task(conn, created.id, p1.id, U2 | {"cognito:groups": "admin"}) is True
        assert task_service.delete_task(conn, created.id, p1.id, U1) is False
