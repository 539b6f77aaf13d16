"""Task operations: read, list, create, update, archive and delete.

Every mutation is a parse -> mutate -> write cycle on one file. Fields
the model does not know about ride along in ``extra`` untouched.
"""

from __future__ import annotations

import logging
import shutil
from datetime import date
from pathlib import Path
from typing import Any, ClassVar

from pydantic import BaseModel, Field, field_validator

from taskdn.domain.documents import Task, coerce_date_value, coerce_reference
from taskdn.domain.filenames import generate_filename
from taskdn.domain.filters import TaskFilter
from taskdn.domain.status import TaskStatus
from taskdn.domain.values import DateValue, Reference
from taskdn.errors import TaskdnError, ValidationFailedError
from taskdn.infrastructure.filesystem import (
    list_markdown_files,
    read_task,
    scan_files,
    write_document,
)
from taskdn.services.base import BaseService, PartialUpdate

logger = logging.getLogger(__name__)


class NewTask(BaseModel):
    """Input for :meth:`TaskService.create`."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    title: str
    status: TaskStatus = TaskStatus.INBOX
    due: DateValue | None = None
    scheduled: date | None = None
    defer_until: date | None = None
    project: Reference | None = None
    area: Reference | None = None
    body: str = ""
    extra: dict[str, Any] = Field(default_factory=dict)
    # Overrides the filename generated from the title.
    filename: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> Any:
        return TaskStatus.parse(value) if isinstance(value, str) else value

    @field_validator("due", mode="before")
    @classmethod
    def parse_due(cls, value: Any) -> Any:
        return coerce_date_value(value)

    @field_validator("project", "area", mode="before")
    @classmethod
    def parse_reference(cls, value: Any) -> Any:
        return coerce_reference(value)


class TaskUpdates(PartialUpdate):
    """Partial update for a task.

    Only fields passed explicitly are applied. Passing ``None`` for an
    optional field clears it; omitting the field leaves it alone::

        TaskUpdates(due="2025-03-01")   # set due
        TaskUpdates(due=None)           # clear due
        TaskUpdates(status="done")      # due untouched
    """

    REQUIRED: ClassVar[frozenset[str]] = frozenset({"title", "status"})

    title: str | None = None
    status: TaskStatus | None = None
    due: DateValue | None = None
    scheduled: date | None = None
    defer_until: date | None = None
    project: Reference | None = None
    area: Reference | None = None

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> Any:
        return TaskStatus.parse(value) if isinstance(value, str) else value

    @field_validator("due", mode="before")
    @classmethod
    def parse_due(cls, value: Any) -> Any:
        return coerce_date_value(value)

    @field_validator("project", "area", mode="before")
    @classmethod
    def parse_reference(cls, value: Any) -> Any:
        return coerce_reference(value)


class BatchResult(BaseModel):
    """Outcome of a multi-file update. Files are not rolled back on failure."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    succeeded: list[Path] = Field(default_factory=list)
    failed: list[tuple[Path, TaskdnError]] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failed


def apply_task_changes(task: Task, changes: dict[str, Any]) -> Task:
    """Apply *changes*, bump ``updated-at``, and stamp ``completed-at``.

    ``completed-at`` is set only on a transition into done or dropped.
    """
    now = DateValue.now()
    updated = task.model_copy(update={**changes, "updated_at": now})
    if updated.status.is_completed and not task.status.is_completed:
        updated = updated.model_copy(update={"completed_at": now})
    return updated


class TaskService(BaseService):
    """Read and mutate task files in the vault's tasks directory."""

    # --- reads ---

    def get(self, path: Path | str) -> Task:
        """Read one task. *path* is absolute or relative to the tasks dir.

        Raises:
            NotFoundError: If the file does not exist.
        """
        return read_task(self._existing(self._vault.task_path(path)))

    def list(self, criteria: TaskFilter | None = None) -> list[Task]:
        """Every parseable task matching *criteria*, in no particular order."""
        criteria = criteria or TaskFilter()
        paths = list_markdown_files(
            self._vault.tasks_dir, include_archive=criteria.include_archive
        )
        tasks = scan_files(paths, read_task, max_workers=self._vault.scan_workers)
        matched = [task for task in tasks if criteria.matches(task)]
        if criteria.area is not None and criteria.area_via_project:
            matched = self._in_area_via_project(matched, criteria.area)
        return matched

    def count(self, criteria: TaskFilter | None = None) -> int:
        return len(self.list(criteria))

    def _in_area_via_project(self, tasks: list[Task], area: Reference) -> list[Task]:
        from taskdn.services.projects import ProjectService
        from taskdn.services.references import reference_matches, same_target

        area_projects = [
            project
            for project in ProjectService(self._vault).list()
            if project.area is not None and same_target(project.area, area)
        ]

        def belongs(task: Task) -> bool:
            if task.area is not None and same_target(task.area, area):
                return True
            project = task.project
            return project is not None and any(
                reference_matches(project, candidate) for candidate in area_projects
            )

        return [task for task in tasks if belongs(task)]

    # --- creation ---

    def create(self, new: NewTask) -> Task:
        """Write a new task file and return the created task.

        Raises:
            ValidationFailedError: If the target file already exists.
            WriteError: If the file cannot be written.
        """
        filename = new.filename or generate_filename(new.title)
        path = self._vault.tasks_dir / filename
        if path.exists():
            raise ValidationFailedError(f"file already exists: {filename}", path=path)

        now = DateValue.now()
        task = Task(
            path=path,
            title=new.title,
            status=new.status,
            created_at=now,
            updated_at=now,
            due=new.due,
            scheduled=new.scheduled,
            defer_until=new.defer_until,
            project=new.project,
            area=new.area,
            body=new.body,
            extra=dict(new.extra),
        )
        path.parent.mkdir(parents=True, exist_ok=True)
        write_document(task)
        logger.info("Created task %s", path)
        return task

    def create_inbox(self, title: str) -> Task:
        return self.create(NewTask(title=title))

    # --- updates ---

    def update(self, path: Path | str, updates: TaskUpdates) -> Task:
        """Apply *updates* to one task and write it back."""
        task = self.get(path)
        updated = apply_task_changes(task, updates.changes())
        write_document(updated)
        return updated

    def update_matching(self, criteria: TaskFilter, updates: TaskUpdates) -> BatchResult:
        """Apply *updates* to every task matching *criteria*.

        Each file is independent: a failure is recorded and the batch
        continues. Already-written files stay written.
        """
        succeeded: list[Path] = []
        failed: list[tuple[Path, TaskdnError]] = []
        for task in self.list(criteria):
            if task.path is None:
                continue
            try:
                self.update(task.path, updates)
            except TaskdnError as exc:
                logger.warning("Update failed for %s: %s", task.path, exc)
                failed.append((task.path, exc))
            else:
                succeeded.append(task.path)
        return BatchResult(succeeded=succeeded, failed=failed)

    def set_status(self, path: Path | str, status: TaskStatus) -> Task:
        return self.update(path, TaskUpdates(status=status))

    def complete(self, path: Path | str) -> Task:
        return self.set_status(path, TaskStatus.DONE)

    def drop(self, path: Path | str) -> Task:
        return self.set_status(path, TaskStatus.DROPPED)

    def start(self, path: Path | str) -> Task:
        return self.set_status(path, TaskStatus.IN_PROGRESS)

    def block(self, path: Path | str) -> Task:
        return self.set_status(path, TaskStatus.BLOCKED)

    # --- archive / delete ---

    def archive(self, path: Path | str) -> Path:
        """Move a task into ``tasks/archive/``. Returns the new path.

        Raises:
            ValidationFailedError: If the task is already archived or the
                archive already holds a file with the same name.
        """
        source = self._existing(self._vault.task_path(path))
        archive_dir = self._vault.archive_dir
        if source.parent.resolve() == archive_dir.resolve():
            raise ValidationFailedError("task is already archived", path=source)
        target = archive_dir / source.name
        if target.exists():
            raise ValidationFailedError("file already exists in archive", path=target)
        archive_dir.mkdir(parents=True, exist_ok=True)
        shutil.move(source, target)
        logger.info("Archived %s", source.name)
        return target

    def unarchive(self, path: Path | str) -> Path:
        """Move an archived task back into the tasks directory."""
        source = self._existing(self._resolve_archived(path))
        if source.parent.resolve() != self._vault.archive_dir.resolve():
            raise ValidationFailedError("task is not in archive", path=source)
        target = self._vault.tasks_dir / source.name
        if target.exists():
            raise ValidationFailedError("file already exists in tasks directory", path=target)
        shutil.move(source, target)
        logger.info("Unarchived %s", source.name)
        return target

    def _resolve_archived(self, path: Path | str) -> Path:
        # A bare filename refers to the archive copy when only that exists.
        candidate = self._vault.task_path(path)
        archived = self._vault.archive_dir / Path(path)
        if not candidate.exists() and not Path(path).is_absolute() and archived.exists():
            return archived
        return candidate

    def delete(self, path: Path | str) -> None:
        target = self._existing(self._vault.task_path(path))
        target.unlink()
        logger.info("Deleted %s", target)
