"""Tests for TaskService."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from pathlib import Path

import pytest

from taskdn.domain.documents import Task
from taskdn.domain.filters import TaskFilter
from taskdn.domain.frontmatter import parse_task
from taskdn.domain.status import TaskStatus
from taskdn.domain.values import CalendarDate, WikiLink
from taskdn.errors import NotFoundError, ValidationFailedError
from taskdn.infrastructure.vault import Vault
from taskdn.services.tasks import NewTask, TaskService, TaskUpdates

WriteFile = Callable[..., Path]


class TestGet:
    def test_relative_and_absolute(self, vault: Vault, write_task: WriteFile) -> None:
        path = write_task("buy-milk.md", "Buy milk")
        svc = TaskService(vault)
        assert svc.get("buy-milk.md").title == "Buy milk"
        assert svc.get(path).path == path

    def test_missing(self, vault: Vault) -> None:
        with pytest.raises(NotFoundError):
            TaskService(vault).get("nope.md")


class TestList:
    def test_malformed_files_are_skipped(self, vault: Vault, write_task: WriteFile) -> None:
        for i in range(3):
            write_task(f"t{i}.md", f"Task {i}")
        (vault.tasks_dir / "broken.md").write_text("---\ntitle: Broken\n---\n")
        assert len(TaskService(vault).list()) == 3

    def test_archive_only_with_flag(self, vault: Vault, write_task: WriteFile) -> None:
        write_task("a.md", "Active")
        write_task("b.md", "Archived", archived=True)
        svc = TaskService(vault)
        assert [t.title for t in svc.list()] == ["Active"]
        titles = sorted(t.title for t in svc.list(TaskFilter().with_archive()))
        assert titles == ["Active", "Archived"]

    def test_missing_directory(self, tmp_path: Path) -> None:
        vault = Vault(tmp_path / "t", tmp_path / "p", tmp_path / "a")
        assert TaskService(vault).list() == []

    def test_filter_applied(self, vault: Vault, write_task: WriteFile) -> None:
        write_task("a.md", "A", "inbox")
        write_task("b.md", "B", "ready")
        svc = TaskService(vault)
        assert [t.title for t in svc.list(TaskFilter.inbox())] == ["A"]
        assert svc.count(TaskFilter.inbox()) == 1

    def test_area_via_project(self, sample_vault: Vault) -> None:
        svc = TaskService(sample_vault)
        direct = svc.list(TaskFilter().with_area("[[Work]]"))
        assert sorted(t.title for t in direct) == ["Ghost task", "Standup notes"]

        via = svc.list(TaskFilter().with_area("[[Work]]", via_project=True))
        assert sorted(t.title for t in via) == ["Ghost task", "Ship it", "Standup notes"]

    def test_area_via_project_ignores_reference_shape(self, sample_vault: Vault) -> None:
        criteria = TaskFilter().with_area("work.md", via_project=True).with_archive()
        titles = sorted(t.title for t in TaskService(sample_vault).list(criteria))
        assert titles == ["Ghost task", "Old launch prep", "Ship it", "Standup notes"]


class TestCreate:
    def test_creates_file(self, vault: Vault) -> None:
        task = TaskService(vault).create(
            NewTask(title="Buy milk", due="2025-01-15", project="[[Groceries]]")
        )
        assert task.path == vault.tasks_dir / "buy-milk.md"
        assert task.status is TaskStatus.INBOX
        assert task.created_at == task.updated_at
        reread = parse_task(task.path.read_text())
        assert reread.due == CalendarDate(date(2025, 1, 15))
        assert reread.project == WikiLink("Groceries")

    def test_filename_override(self, vault: Vault) -> None:
        task = TaskService(vault).create(NewTask(title="Buy milk", filename="milk.md"))
        assert task.path == vault.tasks_dir / "milk.md"

    def test_existing_file_is_an_error(self, vault: Vault, write_task: WriteFile) -> None:
        write_task("buy-milk.md", "Buy milk")
        with pytest.raises(ValidationFailedError, match="already exists"):
            TaskService(vault).create_inbox("Buy milk")

    def test_creates_missing_directory(self, tmp_path: Path) -> None:
        vault = Vault(tmp_path / "t", tmp_path / "p", tmp_path / "a")
        task = TaskService(vault).create_inbox("First")
        assert task.path is not None and task.path.exists()

    def test_extra_and_body(self, vault: Vault) -> None:
        svc = TaskService(vault)
        svc.create(NewTask(title="X", body="Notes\n", extra={"priority": "high"}))
        task = svc.get("x.md")
        assert task.extra == {"priority": "high"}
        assert task.body == "Notes\n"


class TestUpdate:
    def test_sets_and_bumps_updated_at(self, vault: Vault, write_task: WriteFile) -> None:
        write_task("a.md", "A", priority="high", body="Keep me\n")
        svc = TaskService(vault)
        updated = svc.update("a.md", TaskUpdates(due="2025-02-01"))
        assert updated.due == CalendarDate(date(2025, 2, 1))
        assert updated.updated_at.has_time

        reread = svc.get("a.md")
        assert reread.due == updated.due
        assert reread.extra == {"priority": "high"}
        assert reread.body == "Keep me\n"

    def test_none_clears_and_omission_keeps(self, vault: Vault, write_task: WriteFile) -> None:
        write_task("a.md", "A", due="2025-01-20", area='"[[Work]]"')
        updated = TaskService(vault).update("a.md", TaskUpdates(due=None))
        assert updated.due is None
        assert updated.area == WikiLink("Work")

    def test_required_fields_cannot_be_cleared(
        self, vault: Vault, write_task: WriteFile
    ) -> None:
        write_task("a.md", "A")
        updated = TaskService(vault).update("a.md", TaskUpdates(title=None, status=None))
        assert updated.title == "A"
        assert updated.status is TaskStatus.READY

    def test_completion_stamps_completed_at(self, vault: Vault, write_task: WriteFile) -> None:
        write_task("a.md", "A")
        svc = TaskService(vault)
        done = svc.complete("a.md")
        assert done.status is TaskStatus.DONE
        assert done.completed_at == done.updated_at
        assert svc.get("a.md").completed_at == done.completed_at

    def test_already_completed_keeps_completed_at(
        self, vault: Vault, write_task: WriteFile
    ) -> None:
        write_task("a.md", "A", "done", completed_at="2025-01-05")
        dropped = TaskService(vault).drop("a.md")
        assert dropped.status is TaskStatus.DROPPED
        assert str(dropped.completed_at) == "2025-01-05"

    def test_status_shortcuts(self, vault: Vault, write_task: WriteFile) -> None:
        write_task("a.md", "A", "inbox")
        svc = TaskService(vault)
        assert svc.start("a.md").status is TaskStatus.IN_PROGRESS
        assert svc.block("a.md").status is TaskStatus.BLOCKED
        assert svc.set_status("a.md", TaskStatus.ICEBOX).status is TaskStatus.ICEBOX
        assert svc.get("a.md").completed_at is None

    def test_legacy_project_rewritten_as_list(self, vault: Vault, write_task: WriteFile) -> None:
        path = write_task("a.md", "A", project='"[[Launch]]"')
        TaskService(vault).start("a.md")
        assert 'projects:\n  - "[[Launch]]"\n' in path.read_text()


class TestUpdateMatching:
    def test_batch(self, vault: Vault, write_task: WriteFile) -> None:
        write_task("a.md", "A", "inbox")
        write_task("b.md", "B", "inbox")
        write_task("c.md", "C", "ready")
        result = TaskService(vault).update_matching(
            TaskFilter.inbox(), TaskUpdates(status=TaskStatus.READY)
        )
        assert result.ok
        assert sorted(p.name for p in result.succeeded) == ["a.md", "b.md"]
        assert TaskService(vault).count(TaskFilter().with_status(TaskStatus.READY)) == 3

    def test_failures_do_not_stop_batch(
        self, vault: Vault, write_task: WriteFile, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        write_task("a.md", "A", "inbox")
        write_task("b.md", "B", "inbox")
        svc = TaskService(vault)
        original = svc.update

        def flaky(path: Path | str, updates: TaskUpdates) -> Task:
            if Path(path).name == "a.md":
                raise ValidationFailedError("boom", path=Path(path))
            return original(path, updates)

        monkeypatch.setattr(svc, "update", flaky)
        result = svc.update_matching(TaskFilter.inbox(), TaskUpdates(status="ready"))
        assert not result.ok
        assert [p.name for p in result.succeeded] == ["b.md"]
        assert [p.name for p, _ in result.failed] == ["a.md"]

    def test_tasks_without_path_are_skipped(
        self, vault: Vault, write_task: WriteFile, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        write_task("a.md", "A", "inbox")
        svc = TaskService(vault)
        detached = parse_task(
            "---\ntitle: B\nstatus: inbox\ncreated-at: 2025-01-10\nupdated-at: 2025-01-10\n---\n"
        )
        original = svc.list
        monkeypatch.setattr(svc, "list", lambda criteria=None: [*original(criteria), detached])
        result = svc.update_matching(TaskFilter.inbox(), TaskUpdates(status="ready"))
        assert [p.name for p in result.succeeded] == ["a.md"]
        assert result.failed == []


class TestArchive:
    def test_archive_and_unarchive(self, vault: Vault, write_task: WriteFile) -> None:
        write_task("a.md", "A")
        svc = TaskService(vault)

        target = svc.archive("a.md")
        assert target == vault.archive_dir / "a.md"
        assert not (vault.tasks_dir / "a.md").exists()
        assert svc.get(target).is_archived
        assert svc.list() == []

        back = svc.unarchive("a.md")
        assert back == vault.tasks_dir / "a.md"
        assert not target.exists()

    def test_archive_already_archived(self, vault: Vault, write_task: WriteFile) -> None:
        write_task("a.md", "A", archived=True)
        with pytest.raises(ValidationFailedError, match="already archived"):
            TaskService(vault).archive("archive/a.md")

    def test_archive_collision(self, vault: Vault, write_task: WriteFile) -> None:
        write_task("a.md", "A")
        write_task("a.md", "A old", archived=True)
        with pytest.raises(ValidationFailedError, match="already exists in archive"):
            TaskService(vault).archive("a.md")
        assert (vault.tasks_dir / "a.md").exists()

    def test_unarchive_not_archived(self, vault: Vault, write_task: WriteFile) -> None:
        write_task("a.md", "A")
        with pytest.raises(ValidationFailedError, match="not in archive"):
            TaskService(vault).unarchive("a.md")

    def test_unarchive_missing(self, vault: Vault) -> None:
        with pytest.raises(NotFoundError):
            TaskService(vault).unarchive("nope.md")


class TestDelete:
    def test_delete(self, vault: Vault, write_task: WriteFile) -> None:
        path = write_task("a.md", "A")
        TaskService(vault).delete("a.md")
        assert not path.exists()

    def test_delete_missing(self, vault: Vault) -> None:
        with pytest.raises(NotFoundError):
            TaskService(vault).delete("a.md")
