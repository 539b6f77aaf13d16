"""Area operations and the area -> projects/tasks relationships."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from taskdn.domain.documents import Area, Project, Task
from taskdn.domain.filenames import generate_filename
from taskdn.domain.filters import AreaFilter, TaskFilter
from taskdn.domain.status import AreaStatus
from taskdn.errors import ValidationFailedError
from taskdn.infrastructure.filesystem import (
    list_markdown_files,
    read_area,
    scan_files,
    write_document,
)
from taskdn.services.base import BaseService, PartialUpdate, apply_opt_in_typing
from taskdn.services.references import reference_matches

logger = logging.getLogger(__name__)


def _parse_status(value: Any) -> Any:
    return AreaStatus.parse(value) if isinstance(value, str) else value


class NewArea(BaseModel):
    """Input for :meth:`AreaService.create`."""

    model_config = {"frozen": True}

    title: str
    status: AreaStatus | None = AreaStatus.ACTIVE
    area_type: str | None = None
    description: str | None = None
    body: str = ""
    extra: dict[str, Any] = Field(default_factory=dict)
    filename: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> Any:
        return _parse_status(value)


class AreaUpdates(PartialUpdate):
    title: str | None = None
    status: AreaStatus | None = None
    area_type: str | None = None
    description: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> Any:
        return _parse_status(value)


class AreaService(BaseService):
    """Read and mutate area files in the vault's areas directory."""

    def get(self, path: Path | str) -> Area:
        return read_area(self._existing(self._vault.area_path(path)))

    def list(self, criteria: AreaFilter | None = None) -> list[Area]:
        """Every parseable area matching *criteria*.

        When any area carries ``taskdn-type: area``, untagged files in the
        directory are ignored.
        """
        paths = list_markdown_files(self._vault.areas_dir)
        areas = scan_files(paths, read_area, max_workers=self._vault.scan_workers)
        areas = apply_opt_in_typing(areas, "area")
        if criteria is None:
            return areas
        return [area for area in areas if criteria.matches(area)]

    def create(self, new: NewArea) -> Area:
        """Write a new area file.

        Raises:
            ValidationFailedError: If the target file already exists.
        """
        filename = new.filename or generate_filename(new.title)
        path = self._vault.areas_dir / filename
        if path.exists():
            raise ValidationFailedError(f"file already exists: {filename}", path=path)
        area = Area(
            path=path,
            title=new.title,
            status=new.status,
            area_type=new.area_type,
            description=new.description,
            body=new.body,
            extra=dict(new.extra),
        )
        path.parent.mkdir(parents=True, exist_ok=True)
        write_document(area)
        logger.info("Created area %s", path)
        return area

    def update(self, path: Path | str, updates: AreaUpdates) -> Area:
        area = self.get(path)
        updated = area.model_copy(update=updates.changes())
        write_document(updated)
        return updated

    def delete(self, path: Path | str) -> None:
        target = self._existing(self._vault.area_path(path))
        target.unlink()
        logger.info("Deleted %s", target)

    # --- relationships ---

    def projects_for_area(self, path: Path | str) -> list[Project]:
        """Projects whose ``area`` names this area."""
        from taskdn.services.projects import ProjectService

        area = self.get(path)
        return [
            project
            for project in ProjectService(self._vault).list()
            if project.area is not None and reference_matches(project.area, area)
        ]

    def tasks_for_area(self, path: Path | str) -> list[Task]:
        """Tasks (archive included) in this area directly or via a project.

        A task counts as in the area when its own ``area`` names it, or
        when its ``project`` names one of :meth:`projects_for_area`.
        """
        from taskdn.services.tasks import TaskService

        area = self.get(path)
        projects = self.projects_for_area(path)
        tasks = TaskService(self._vault).list(TaskFilter(include_archive=True))

        def belongs(task: Task) -> bool:
            if task.area is not None and reference_matches(task.area, area):
                return True
            return task.project is not None and any(
                reference_matches(task.project, project) for project in projects
            )

        return [task for task in tasks if belongs(task)]
