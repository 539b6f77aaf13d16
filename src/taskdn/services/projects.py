"""Project operations and the project -> tasks relationship."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from taskdn.domain.documents import Project, Task, coerce_reference
from taskdn.domain.filenames import generate_filename
from taskdn.domain.filters import ProjectFilter, TaskFilter
from taskdn.domain.status import ProjectStatus
from taskdn.domain.values import Reference
from taskdn.errors import ValidationFailedError
from taskdn.infrastructure.filesystem import (
    list_markdown_files,
    read_project,
    scan_files,
    write_document,
)
from taskdn.services.base import BaseService, PartialUpdate, apply_opt_in_typing

logger = logging.getLogger(__name__)


def _parse_status(value: Any) -> Any:
    return ProjectStatus.parse(value) if isinstance(value, str) else value


def _parse_references(value: Any) -> Any:
    if isinstance(value, list):
        return [coerce_reference(item) for item in value]
    return value


class NewProject(BaseModel):
    """Input for :meth:`ProjectService.create`."""

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    title: str
    status: ProjectStatus | None = ProjectStatus.PLANNING
    unique_id: str | None = None
    description: str | None = None
    area: Reference | None = None
    start_date: date | None = None
    end_date: date | None = None
    blocked_by: list[Reference] = Field(default_factory=list)
    body: str = ""
    extra: dict[str, Any] = Field(default_factory=dict)
    filename: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> Any:
        return _parse_status(value)

    @field_validator("area", mode="before")
    @classmethod
    def parse_reference(cls, value: Any) -> Any:
        return coerce_reference(value)

    @field_validator("blocked_by", mode="before")
    @classmethod
    def parse_references(cls, value: Any) -> Any:
        return _parse_references(value)


class ProjectUpdates(PartialUpdate):
    """Partial update for a project; ``None`` clears, omission keeps."""

    title: str | None = None
    status: ProjectStatus | None = None
    unique_id: str | None = None
    description: str | None = None
    area: Reference | None = None
    start_date: date | None = None
    end_date: date | None = None
    blocked_by: list[Reference] | None = None

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> Any:
        return _parse_status(value)

    @field_validator("area", mode="before")
    @classmethod
    def parse_reference(cls, value: Any) -> Any:
        return coerce_reference(value)

    @field_validator("blocked_by", mode="before")
    @classmethod
    def parse_references(cls, value: Any) -> Any:
        return _parse_references(value)

    def changes(self) -> dict[str, Any]:
        changed = super().changes()
        if "blocked_by" in changed and changed["blocked_by"] is None:
            changed["blocked_by"] = []
        return changed


class ProjectService(BaseService):
    """Read and mutate project files in the vault's projects directory."""

    def get(self, path: Path | str) -> Project:
        """Read one project.

        Raises:
            NotFoundError: If the file does not exist.
        """
        return read_project(self._existing(self._vault.project_path(path)))

    def list(self, criteria: ProjectFilter | None = None) -> list[Project]:
        """Every parseable project matching *criteria*.

        When any project carries ``taskdn-type: project``, untagged files
        in the directory are ignored.
        """
        paths = list_markdown_files(self._vault.projects_dir)
        projects = scan_files(paths, read_project, max_workers=self._vault.scan_workers)
        projects = apply_opt_in_typing(projects, "project")
        if criteria is None:
            return projects
        return [project for project in projects if criteria.matches(project)]

    def create(self, new: NewProject) -> Project:
        """Write a new project file.

        Raises:
            ValidationFailedError: If the target file already exists.
        """
        filename = new.filename or generate_filename(new.title)
        path = self._vault.projects_dir / filename
        if path.exists():
            raise ValidationFailedError(f"file already exists: {filename}", path=path)
        project = Project(
            path=path,
            title=new.title,
            status=new.status,
            unique_id=new.unique_id,
            description=new.description,
            area=new.area,
            start_date=new.start_date,
            end_date=new.end_date,
            blocked_by=list(new.blocked_by),
            body=new.body,
            extra=dict(new.extra),
        )
        path.parent.mkdir(parents=True, exist_ok=True)
        write_document(project)
        logger.info("Created project %s", path)
        return project

    def update(self, path: Path | str, updates: ProjectUpdates) -> Project:
        project = self.get(path)
        updated = project.model_copy(update=updates.changes())
        write_document(updated)
        return updated

    def delete(self, path: Path | str) -> None:
        target = self._existing(self._vault.project_path(path))
        target.unlink()
        logger.info("Deleted %s", target)

    def tasks_for_project(self, path: Path | str) -> list[Task]:
        """Tasks (archive included) whose ``project`` names this project."""
        from taskdn.services.references import reference_matches
        from taskdn.services.tasks import TaskService

        project = self.get(path)
        tasks = TaskService(self._vault).list(TaskFilter(include_archive=True))
        return [
            task
            for task in tasks
            if task.project is not None and reference_matches(task.project, project)
        ]
