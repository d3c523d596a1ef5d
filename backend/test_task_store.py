"""
backend/test_task_store.py

Task store tests: composite (task_id, project_id) addressing, access via the
parent project's owner, status-only updates.

Run:
    pytest backend/test_task_store.py -v
"""

import pytest

from backend import project_store, task_store
from backend.errors import ForbiddenError, NotFoundError
from backend.models import Project, TaskItem, TaskItemStatus


@pytest.fixture
def projects(conn):
    p1 = project_store.create(conn, Project(name="P1", user_id="u1"))
    p2 = project_store.create(conn, Project(name="P2", user_id="u2"))
    return p1, p2


@pytest.fixture
def task(conn, projects):
    p1 = projects[0]
    return task_store.create(
        conn,
        TaskItem(name="T1", description="write docs", status=TaskItemStatus.Todo, project_id=p1.id),
        "u1",
    )


class TestCreate:

    def test_owner_can_add_task(self, conn, projects, task):
        assert task.id is not None
        assert task.project_id == projects[0].id
        assert task.status == TaskItemStatus.Todo

    def test_non_owner_forbidden(self, conn, projects):
        p1 = projects[0]
        with pytest.raises(ForbiddenError):
            task_store.create(conn, TaskItem(name="T1", project_id=p1.id), "u2", False)
        assert task_store.list_all_for_project(conn, p1.id, 1, 10) == []

    def test_admin_can_add_to_any_project(self, conn, projects):
        p1 = projects[0]
        created = task_store.create(conn, TaskItem(name="T1", project_id=p1.id), "root", True)
        assert created.id is not None

    def test_missing_project_not_found(self, conn):
        with pytest.raises(NotFoundError):
            task_store.create(conn, TaskItem(name="T", project_id=404), "u1", True)

    def test_foreign_key_rejects_orphan_insert(self, conn, monkeypatch, projects):
        """Parent vanishing between the check and the insert surfaces as not found."""
        real_fetch_one = task_store.fetch_one

        def check_then_delete(c, query, params=None):
            row = real_fetch_one(c, query, params)
            c.execute("DELETE FROM projects WHERE id = ?", (params["id"],))
            c.commit()
            return row

        monkeypatch.setattr(task_store, "fetch_one", check_then_delete)
        with pytest.raises(NotFoundError):
            task_store.create(conn, TaskItem(name="T", project_id=projects[0].id), "u1")


class TestListing:

    def test_owner_lists_tasks_of_own_project(self, conn, projects, task):
        tasks = task_store.list_for_user_in_project(conn, projects[0].id, "u1", 1, 10)
        assert [t.id for t in tasks] == [task.id]

    def test_non_owner_sees_nothing(self, conn, projects, task):
        assert task_store.list_for_user_in_project(conn, projects[0].id, "u2", 1, 10) == []

    def test_admin_lists_any_project(self, conn, projects, task):
        assert len(task_store.list_all_for_project(conn, projects[0].id, 1, 10)) == 1

    def test_paging(self, conn, projects):
        p1 = projects[0]
        for name in ("A", "B", "C"):
            task_store.create(conn, TaskItem(name=name, project_id=p1.id), "u1")
        assert [t.name for t in task_store.list_all_for_project(conn, p1.id, 2, 2)] == ["C"]
        assert task_store.list_for_user_in_project(conn, p1.id, "u1", 1, 0) == []


class TestUpdate:

    def test_update_overwrites_all_fields(self, conn, projects, task):
        p1 = projects[0]
        updated = task_store.update(
            conn,
            TaskItem(name="T1b", description="", status=TaskItemStatus.InProgress, project_id=p1.id),
            task.id,
            p1.id,
            "u1",
        )
        assert (updated.name, updated.description, updated.status) == ("T1b", "", TaskItemStatus.InProgress)

    def test_update_status_changes_only_status(self, conn, projects, task):
        p1 = projects[0]
        updated = task_store.update_status(conn, TaskItemStatus.Done, task.id, p1.id, "u1")
        assert updated.status == TaskItemStatus.Done

        stored, owner = task_store.get(conn, task.id, p1.id)
        assert stored.status == TaskItemStatus.Done
        assert stored.name == "T1"
        assert stored.description == "write docs"
        assert owner == "u1"

    def test_any_status_reachable_from_any_other(self, conn, projects, task):
        p1 = projects[0]
        for status in (TaskItemStatus.Done, TaskItemStatus.Todo, TaskItemStatus.InProgress, TaskItemStatus.Done):
            assert task_store.update_status(conn, status, task.id, p1.id, "u1").status == status

    def test_mismatched_project_is_not_found(self, conn, projects, task):
        p2 = projects[1]
        with pytest.raises(NotFoundError):
            task_store.update_status(conn, TaskItemStatus.Done, task.id, p2.id, "u2")
        with pytest.raises(NotFoundError):
            task_store.update(conn, TaskItem(name="x", project_id=p2.id), task.id, p2.id, "root", True)

    def test_non_owner_forbidden_and_unchanged(self, conn, projects, task):
        p1 = projects[0]
        with pytest.raises(ForbiddenError):
            task_store.update_status(conn, TaskItemStatus.Done, task.id, p1.id, "u2", False)
        with pytest.raises(ForbiddenError):
            task_store.update(conn, TaskItem(name="hijack", project_id=p1.id), task.id, p1.id, "u2", False)

        stored, _ = task_store.get(conn, task.id, p1.id)
        assert stored.status == TaskItemStatus.Todo
        assert stored.name == "T1"

    def test_admin_may_update(self, conn, projects, task):
        p1 = projects[0]
        assert task_store.update_status(conn, TaskItemStatus.InProgress, task.id, p1.id, "root", True).status == TaskItemStatus.InProgress


class TestDelete:

    def test_missing_task_returns_false(self, conn, projects):
        assert task_store.delete(conn, 999, projects[0].id, "u1") is False

    def test_mismatched_project_returns_false(self, conn, projects, task):
        assert task_store.delete(conn, task.id, projects[1].id, "root", True) is False
        assert task_store.get(conn, task.id, projects[0].id) is not None

    def test_non_owner_forbidden(self, conn, projects, task):
        with pytest.raises(ForbiddenError):
            task_store.delete(conn, task.id, projects[0].id, "u2", False)
        assert task_store.get(conn, task.id, projects[0].id) is not None

    def test_owner_deletes(self, conn, projects, task):
        assert task_store.delete(conn, task.id, projects[0].id, "u1") is True
        assert task_store.get(conn, task.id, projects[0].id) is None

    def test_ids_past_64_bits_do_not_resolve(self, conn, projects, task):
        p1 = projects[0]
        assert task_store.delete(conn, 2**64, p1.id, "u1") is False
        assert task_store.get(conn, task.id, 2**64) is None
        assert task_store.list_all_for_project(conn, 2**64, 1, 10) == []
        with pytest.raises(NotFoundError):
            task_store.create(conn, TaskItem(name="T", project_id=2**64), "root", True)
