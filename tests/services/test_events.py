"""Tests for file-change -> vault event processing."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from taskdn.domain.documents import Area, DocumentKind, Project, Task
from taskdn.errors import ParseError
from taskdn.infrastructure.vault import Vault
from taskdn.services.events import FileChangeKind, VaultEvent, process_file_change, watched_paths

WriteFile = Callable[..., Path]


class TestProcessFileChange:
    def test_task_created(self, vault: Vault, write_task: WriteFile) -> None:
        path = write_task("a.md", "A")
        event = process_file_change(vault, path, FileChangeKind.CREATED)
        assert event is not None
        assert event.entity is DocumentKind.TASK
        assert event.name == "task.created"
        assert isinstance(event.document, Task)
        assert event.document.path == path

    def test_archived_task_is_a_task(self, vault: Vault, write_task: WriteFile) -> None:
        path = write_task("a.md", "A", archived=True)
        event = process_file_change(vault, path, FileChangeKind.MODIFIED)
        assert event is not None and event.name == "task.modified"

    def test_project_and_area(
        self, vault: Vault, write_project: WriteFile, write_area: WriteFile
    ) -> None:
        project = process_file_change(vault, write_project("p.md", "P"), FileChangeKind.MODIFIED)
        area = process_file_change(vault, write_area("a.md", "A"), FileChangeKind.CREATED)
        assert project is not None and isinstance(project.document, Project)
        assert area is not None and isinstance(area.document, Area)
        assert area.name == "area.created"

    def test_deleted_has_no_document(self, vault: Vault) -> None:
        path = vault.projects_dir / "gone.md"
        event = process_file_change(vault, path, FileChangeKind.DELETED)
        assert event == VaultEvent(
            kind=FileChangeKind.DELETED, entity=DocumentKind.PROJECT, path=path
        )
        assert event.name == "project.deleted"

    def test_non_markdown_is_ignored(self, vault: Vault) -> None:
        path = vault.tasks_dir / "notes.txt"
        path.write_text("x")
        assert process_file_change(vault, path, FileChangeKind.CREATED) is None

    def test_uppercase_suffix_counts(self, vault: Vault) -> None:
        path = vault.tasks_dir / "GONE.MD"
        event = process_file_change(vault, path, FileChangeKind.DELETED)
        assert event is not None and event.entity is DocumentKind.TASK

    def test_outside_vault_is_ignored(self, vault: Vault, vault_root: Path) -> None:
        stray = vault_root / "README.md"
        stray.write_text("# readme\n")
        assert process_file_change(vault, stray, FileChangeKind.MODIFIED) is None

    def test_unparseable_file_raises(self, vault: Vault) -> None:
        path = vault.tasks_dir / "bad.md"
        path.write_text("not a document\n")
        with pytest.raises(ParseError):
            process_file_change(vault, path, FileChangeKind.CREATED)


def test_watched_paths(vault: Vault) -> None:
    assert watched_paths(vault) == [vault.tasks_dir, vault.projects_dir, vault.areas_dir]
