"""Relationship index: a read-only snapshot of containment across the vault.

The index is built once from a full scan and never updated. Queries use
name-based matching (see :func:`taskdn.services.references.reference_matches`)
and never raise for bad data: broken or ambiguous references become
warning strings on the result.

Usage::

    session = VaultSession(vault)
    result = session.index.area_context("Work")
    for warning in result.warnings:
        ...
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from pathlib import Path
from typing import TypeVar

from pydantic import BaseModel, Field

from taskdn.domain.documents import Area, Project, Task
from taskdn.domain.filters import TaskFilter
from taskdn.domain.values import Reference
from taskdn.infrastructure.vault import Vault
from taskdn.services.references import name_to_reference, reference_matches, reference_name

logger = logging.getLogger(__name__)

_D = TypeVar("_D", Task, Project, Area)


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


class _Result(BaseModel):
    model_config = {"frozen": True}

    warnings: list[str] = Field(default_factory=list)


class TasksInProjectResult(_Result):
    tasks: list[Task] = Field(default_factory=list)


class TasksInAreaResult(_Result):
    tasks: list[Task] = Field(default_factory=list)


class ProjectsInAreaResult(_Result):
    projects: list[Project] = Field(default_factory=list)


class AreaContextResult(_Result):
    area: Area | None = None
    projects: list[Project] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)


class ProjectContextResult(_Result):
    project: Project | None = None
    area: Area | None = None
    tasks: list[Task] = Field(default_factory=list)


class TaskContextResult(_Result):
    """Context for one task.

    ``task`` is None when nothing matched or when a title matched several
    tasks; in the latter case the candidates are in ``ambiguous_matches``.
    """

    task: Task | None = None
    project: Project | None = None
    area: Area | None = None
    ambiguous_matches: list[Task] = Field(default_factory=list)


class EntitySearchResult(BaseModel):
    model_config = {"frozen": True}

    tasks: list[Task] = Field(default_factory=list)
    projects: list[Project] = Field(default_factory=list)
    areas: list[Area] = Field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.tasks) + len(self.projects) + len(self.areas)


# ---------------------------------------------------------------------------
# Index
# ---------------------------------------------------------------------------


def _by_path(docs: Sequence[_D]) -> tuple[_D, ...]:
    return tuple(sorted(docs, key=lambda doc: str(doc.path or "")))


def _matching(ref: Reference, candidates: Sequence[_D]) -> list[_D]:
    return [doc for doc in candidates if reference_matches(ref, doc)]


def _title_contains(query: str, docs: Sequence[_D]) -> list[_D]:
    needle = query.casefold()
    return [doc for doc in docs if needle in doc.title.casefold()]


class RelationshipIndex:
    """Containment lookups over one snapshot of tasks, projects and areas.

    Documents are kept in path order, so when a name matches several
    containers the first by path wins and a warning says so.
    """

    def __init__(
        self,
        tasks: Sequence[Task],
        projects: Sequence[Project],
        areas: Sequence[Area],
    ) -> None:
        self._tasks = _by_path(tasks)
        self._projects = _by_path(projects)
        self._areas = _by_path(areas)

        # Keyed by id(): documents are unhashable snapshots held for the
        # index's lifetime.
        self._area_of_project: dict[int, Area | None] = {
            id(project): self._first(project.area, self._areas) for project in self._projects
        }
        self._project_of_task: dict[int, Project | None] = {
            id(task): self._first(task.project, self._projects) for task in self._tasks
        }
        self._area_of_task: dict[int, Area | None] = {
            id(task): self._first(task.area, self._areas) for task in self._tasks
        }
        logger.debug(
            "Indexed %d tasks, %d projects, %d areas",
            len(self._tasks),
            len(self._projects),
            len(self._areas),
        )

    @classmethod
    def build(cls, vault: Vault, *, include_archive: bool = True) -> RelationshipIndex:
        """Scan all three directories and index the result."""
        from taskdn.services.areas import AreaService
        from taskdn.services.projects import ProjectService
        from taskdn.services.tasks import TaskService

        tasks = TaskService(vault).list(TaskFilter(include_archive=include_archive))
        projects = ProjectService(vault).list()
        areas = AreaService(vault).list()
        return cls(tasks, projects, areas)

    @staticmethod
    def _first(ref: Reference | None, candidates: Sequence[_D]) -> _D | None:
        if ref is None:
            return None
        matches = _matching(ref, candidates)
        return matches[0] if matches else None

    # --- accessors ---

    @property
    def tasks(self) -> tuple[Task, ...]:
        return self._tasks

    @property
    def projects(self) -> tuple[Project, ...]:
        return self._projects

    @property
    def areas(self) -> tuple[Area, ...]:
        return self._areas

    # --- lookups ---

    def _find(self, name: str, docs: Sequence[_D], kind: str) -> tuple[_D | None, list[str]]:
        matches = _matching(name_to_reference(name), docs)
        if not matches:
            return None, [f"No {kind} named '{name}'"]
        warnings = []
        if len(matches) > 1:
            warnings.append(
                f"'{name}' matches {len(matches)} {kind}s; using '{matches[0].title}'"
            )
        return matches[0], warnings

    def find_task(self, name: str) -> Task | None:
        return self._find(name, self._tasks, "task")[0]

    def find_project(self, name: str) -> Project | None:
        return self._find(name, self._projects, "project")[0]

    def find_area(self, name: str) -> Area | None:
        return self._find(name, self._areas, "area")[0]

    def find_by_title(self, query: str) -> EntitySearchResult:
        """Case-insensitive substring search over every title."""
        return EntitySearchResult(
            tasks=_title_contains(query, self._tasks),
            projects=_title_contains(query, self._projects),
            areas=_title_contains(query, self._areas),
        )

    # --- membership ---

    def _projects_of(self, area: Area) -> list[Project]:
        return [p for p in self._projects if self._area_of_project[id(p)] is area]

    def _tasks_of_project(self, project: Project) -> list[Task]:
        return [t for t in self._tasks if self._project_of_task[id(t)] is project]

    def _tasks_of_area(self, area: Area) -> list[Task]:
        projects = self._projects_of(area)
        return [
            task
            for task in self._tasks
            if self._area_of_task[id(task)] is area
            or any(self._project_of_task[id(task)] is project for project in projects)
        ]

    def _unknown_project_warnings(self, tasks: Sequence[Task]) -> list[str]:
        return [
            f"Task '{task.title}' references unknown project '{reference_name(task.project)}'"
            for task in tasks
            if task.project is not None and self._project_of_task[id(task)] is None
        ]

    def projects_in_area(self, name: str) -> ProjectsInAreaResult:
        area, warnings = self._find(name, self._areas, "area")
        if area is None:
            return ProjectsInAreaResult(warnings=warnings)
        return ProjectsInAreaResult(projects=self._projects_of(area), warnings=warnings)

    def tasks_in_project(self, name: str) -> TasksInProjectResult:
        project, warnings = self._find(name, self._projects, "project")
        if project is None:
            return TasksInProjectResult(warnings=warnings)
        return TasksInProjectResult(tasks=self._tasks_of_project(project), warnings=warnings)

    def tasks_in_area(self, name: str) -> TasksInAreaResult:
        """Tasks assigned to the area directly or through one of its projects."""
        area, warnings = self._find(name, self._areas, "area")
        if area is None:
            return TasksInAreaResult(warnings=warnings)
        tasks = self._tasks_of_area(area)
        warnings.extend(self._unknown_project_warnings(tasks))
        return TasksInAreaResult(tasks=tasks, warnings=warnings)

    # --- context ---

    def area_context(self, name: str) -> AreaContextResult:
        area, warnings = self._find(name, self._areas, "area")
        if area is None:
            return AreaContextResult(warnings=warnings)
        tasks = self._tasks_of_area(area)
        warnings.extend(self._unknown_project_warnings(tasks))
        return AreaContextResult(
            area=area,
            projects=self._projects_of(area),
            tasks=tasks,
            warnings=warnings,
        )

    def project_context(self, name: str) -> ProjectContextResult:
        project, warnings = self._find(name, self._projects, "project")
        if project is None:
            return ProjectContextResult(warnings=warnings)
        area = self._area_of_project[id(project)]
        if project.area is not None and area is None:
            warnings.append(
                f"Project '{project.title}' references unknown area "
                f"'{reference_name(project.area)}'"
            )
        return ProjectContextResult(
            project=project,
            area=area,
            tasks=self._tasks_of_project(project),
            warnings=warnings,
        )

    def task_context(self, path_or_title: str) -> TaskContextResult:
        """Context for a task named by file path, filename, or exact title.

        The area is the task's own ``area`` if set, otherwise its project's.
        """
        candidates = self._tasks_for(path_or_title)
        if not candidates:
            return TaskContextResult(warnings=[f"No task named '{path_or_title}'"])
        if len(candidates) > 1:
            return TaskContextResult(
                ambiguous_matches=candidates,
                warnings=[f"'{path_or_title}' matches {len(candidates)} tasks"],
            )

        task = candidates[0]
        warnings: list[str] = []
        project = self._project_of_task[id(task)]
        if task.project is not None and project is None:
            warnings.append(
                f"Task '{task.title}' references unknown project '{reference_name(task.project)}'"
            )
        area = self._area_of_task[id(task)]
        if task.area is not None and area is None:
            warnings.append(
                f"Task '{task.title}' references unknown area '{reference_name(task.area)}'"
            )
        if area is None and project is not None:
            area = self._area_of_project[id(project)]
        return TaskContextResult(task=task, project=project, area=area, warnings=warnings)

    def _tasks_for(self, path_or_title: str) -> list[Task]:
        wanted = Path(path_or_title)
        by_path = [
            task
            for task in self._tasks
            if task.path is not None
            and (task.path == wanted or (not wanted.is_absolute() and task.path.name == str(wanted)))
        ]
        if by_path:
            return by_path
        title = path_or_title.casefold()
        return [task for task in self._tasks if task.title.casefold() == title]


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class VaultSession:
    """Owns one lazily built :class:`RelationshipIndex`.

    The first access to :attr:`index` scans the vault; later accesses
    return the same instance. Nothing invalidates it, so create one
    session per command invocation.
    """

    def __init__(self, vault: Vault, *, include_archive: bool = True) -> None:
        self._vault = vault
        self._include_archive = include_archive
        self._index: RelationshipIndex | None = None
        self._lock = threading.Lock()

    @property
    def vault(self) -> Vault:
        return self._vault

    @property
    def is_built(self) -> bool:
        return self._index is not None

    @property
    def index(self) -> RelationshipIndex:
        if self._index is None:
            with self._lock:
                if self._index is None:
                    self._index = RelationshipIndex.build(
                        self._vault, include_archive=self._include_archive
                    )
        return self._index

