"""Tests for the typed document models and business-rule checks."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from taskdn.domain.documents import Area, DocumentKind, Project, Task
from taskdn.domain.status import TaskStatus
from taskdn.domain.validation import MissingCompletedAt, MultipleProjects, check_task
from taskdn.domain.values import CalendarDate, Timestamp, WikiLink


def _task(**overrides: object) -> Task:
    fields: dict[str, object] = {
        "title": "Buy milk",
        "status": "ready",
        "created_at": "2025-01-10",
        "updated_at": "2025-01-10T09:30:00",
    }
    fields.update(overrides)
    return Task(**fields)


class TestTaskModel:
    def test_coerces_text_values(self) -> None:
        task = _task(status="In_Progress", area="[[Home]]")
        assert task.status is TaskStatus.IN_PROGRESS
        assert isinstance(task.created_at, CalendarDate)
        assert isinstance(task.updated_at, Timestamp)
        assert task.area == WikiLink("Home")

    def test_frozen(self) -> None:
        with pytest.raises(ValidationError):
            _task().title = "Other"  # type: ignore[misc]

    def test_model_copy(self) -> None:
        original = _task()
        changed = original.model_copy(update={"status": TaskStatus.DONE})
        assert original.status is TaskStatus.READY
        assert changed.status is TaskStatus.DONE

    def test_equality_ignores_projects_count(self) -> None:
        assert _task(projects_count=1) == _task()

    def test_path_helpers(self) -> None:
        task = _task(path=Path("/vault/tasks/buy-milk.md"))
        assert task.filename == "buy-milk.md"
        assert task.stem == "buy-milk"
        assert _task().filename == ""

    def test_archived_by_directory(self) -> None:
        assert _task(path=Path("/vault/tasks/archive/x.md")).is_archived
        assert not _task(path=Path("/vault/tasks/x.md")).is_archived
        assert not _task().is_archived

    def test_kinds(self) -> None:
        assert Task.KIND is DocumentKind.TASK
        assert Project.KIND is DocumentKind.PROJECT
        assert Area.KIND is DocumentKind.AREA


class TestContainerModels:
    def test_project_active(self) -> None:
        assert Project(title="p", status="ready").is_active
        assert not Project(title="p").is_active

    def test_project_blocked_by_coerced(self) -> None:
        project = Project(title="p", blocked_by=["[[A]]", "b.md"])
        assert [str(ref) for ref in project.blocked_by] == ["[[A]]", "b.md"]

    def test_area_active_without_status(self) -> None:
        assert Area(title="Home").is_active

    def test_area_archived_by_status(self) -> None:
        assert Area(title="Old", status="archived").is_archived
        assert not Area(title="Home").is_archived


class TestCheckTask:
    def test_clean(self) -> None:
        assert check_task(_task()) == []

    def test_multiple_projects_is_advisory(self) -> None:
        warnings = check_task(_task(project="[[A]]", projects_count=3))
        assert warnings == [MultipleProjects(3)]
        assert not warnings[0].is_error
        assert "3 elements" in warnings[0].message

    def test_single_project_list_is_fine(self) -> None:
        assert check_task(_task(project="[[A]]", projects_count=1)) == []

    @pytest.mark.parametrize("status", ["done", "dropped"])
    def test_completed_without_completed_at(self, status: str) -> None:
        warnings = check_task(_task(status=status))
        assert warnings == [MissingCompletedAt()]
        assert warnings[0].is_error

    def test_completed_with_completed_at(self) -> None:
        assert check_task(_task(status="done", completed_at="2025-01-11")) == []

    def test_message_with_path(self) -> None:
        warning = MissingCompletedAt()
        assert warning.message_with_path(Path("t.md")).startswith("t.md: completed task")
