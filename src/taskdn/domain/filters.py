"""Filter engine: pure predicates over typed documents.

Distinct criteria combine with AND; the allowed values of one criterion
combine with OR. Unset criteria impose no constraint. Filters are frozen
values; every ``with_*`` method returns a new filter.

Container criteria (``project``, ``area``) compare the stored reference
value only. Resolving a reference to a document is the relationship
index's job, so nothing here touches the filesystem.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta
from typing import Self, TypeVar

from taskdn.domain.documents import Area, Project, Task
from taskdn.domain.status import AreaStatus, ProjectStatus, TaskStatus
from taskdn.domain.values import Reference

_COMPLETED = (TaskStatus.DONE, TaskStatus.DROPPED)
_END_OF_DAY = time(23, 59, 59)

_F = TypeVar("_F")


def _as_reference(value: Reference | str) -> Reference:
    return Reference.parse(value) if isinstance(value, str) else value


def _presence_ok(expected: bool | None, value: object) -> bool:
    if expected is None:
        return True
    return (value is not None) == expected


def _with_bounds(criteria: _F, **bounds: date | None) -> _F:
    """Replace only the bounds that were given."""
    given = {name: value for name, value in bounds.items() if value is not None}
    return replace(criteria, **given)  # type: ignore[type-var]


# ---------------------------------------------------------------------------
# Tasks
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TaskFilter:
    """Criteria for selecting tasks.

    Date criteria compare the date portion only, with strict ``<``/``>``
    for the ``*_before``/``*_after`` bounds. ``created_before`` and
    ``created_after`` compare full datetimes; a date-only ``created-at``
    counts as the start of its day for "before" and the end of its day
    for "after".

    ``area_via_project`` is carried for the vault layer, which needs the
    relationship index to evaluate it; :meth:`matches` ignores it.
    """

    statuses: tuple[TaskStatus, ...] | None = None
    excluded_statuses: tuple[TaskStatus, ...] | None = None
    project: Reference | None = None
    has_project: bool | None = None
    area: Reference | None = None
    has_area: bool | None = None
    area_via_project: bool = False
    due_before: date | None = None
    due_after: date | None = None
    due_on: date | None = None
    scheduled_before: date | None = None
    scheduled_after: date | None = None
    scheduled_on: date | None = None
    created_before: datetime | None = None
    created_after: datetime | None = None
    visible_as_of: date | None = None
    include_archive: bool = False

    # --- builders ---

    def with_status(self, *statuses: TaskStatus) -> Self:
        return replace(self, statuses=tuple(statuses))

    def excluding_status(self, *statuses: TaskStatus) -> Self:
        return replace(self, excluded_statuses=(*(self.excluded_statuses or ()), *statuses))

    def with_project(self, project: Reference | str) -> Self:
        return replace(self, project=_as_reference(project))

    def with_area(self, area: Reference | str, *, via_project: bool = False) -> Self:
        return replace(self, area=_as_reference(area), area_via_project=via_project)

    def with_has_project(self, value: bool = True) -> Self:
        return replace(self, has_project=value)

    def with_has_area(self, value: bool = True) -> Self:
        return replace(self, has_area=value)

    def with_due(
        self,
        *,
        before: date | None = None,
        after: date | None = None,
        on: date | None = None,
    ) -> Self:
        """Set due-date bounds. Bounds not given keep their current value."""
        return _with_bounds(self, due_before=before, due_after=after, due_on=on)

    def with_scheduled(
        self,
        *,
        before: date | None = None,
        after: date | None = None,
        on: date | None = None,
    ) -> Self:
        return _with_bounds(
            self, scheduled_before=before, scheduled_after=after, scheduled_on=on
        )

    def with_created(
        self,
        *,
        before: datetime | None = None,
        after: datetime | None = None,
    ) -> Self:
        return _with_bounds(self, created_before=before, created_after=after)

    def visible_on(self, day: date) -> Self:
        return replace(self, visible_as_of=day)

    def with_archive(self, include: bool = True) -> Self:
        return replace(self, include_archive=include)

    # --- presets ---

    @classmethod
    def inbox(cls) -> TaskFilter:
        return cls().with_status(TaskStatus.INBOX)

    @classmethod
    def today(cls, day: date) -> TaskFilter:
        """Tasks visible on *day* that are not done or dropped."""
        return cls().visible_on(day).excluding_status(*_COMPLETED)

    @classmethod
    def overdue(cls, day: date) -> TaskFilter:
        return cls().with_due(before=day).excluding_status(*_COMPLETED)

    @classmethod
    def upcoming(cls, day: date, days: int) -> TaskFilter:
        """Open tasks due between *day* and *day* + *days*, inclusive."""
        return cls(
            due_after=day - timedelta(days=1),
            due_before=day + timedelta(days=days + 1),
        ).excluding_status(*_COMPLETED)

    @classmethod
    def available(cls, day: date) -> TaskFilter:
        """Ready or in-progress tasks that are not deferred past *day*."""
        return cls().visible_on(day).with_status(TaskStatus.READY, TaskStatus.IN_PROGRESS)

    # --- evaluation ---

    def matches(self, task: Task) -> bool:
        return (
            self._matches_archive(task)
            and self._matches_status(task)
            and self._matches_containers(task)
            and self._matches_dates(task)
        )

    def _matches_archive(self, task: Task) -> bool:
        return self.include_archive or not task.is_archived

    def _matches_status(self, task: Task) -> bool:
        if self.statuses is not None and task.status not in self.statuses:
            return False
        return self.excluded_statuses is None or task.status not in self.excluded_statuses

    def _matches_containers(self, task: Task) -> bool:
        if self.project is not None and task.project != self.project:
            return False
        if not _presence_ok(self.has_project, task.project):
            return False
        if self.area is not None and not self.area_via_project and task.area != self.area:
            return False
        return _presence_ok(self.has_area, task.area)

    def _matches_dates(self, task: Task) -> bool:
        due = task.due.date() if task.due is not None else None
        if not _date_ok(due, self.due_before, self.due_after, self.due_on):
            return False
        scheduled_bounds = (self.scheduled_before, self.scheduled_after, self.scheduled_on)
        if not _date_ok(task.scheduled, *scheduled_bounds):
            return False

        created = task.created_at
        if self.created_before is not None:
            start = created.as_datetime()
            if start >= self.created_before:
                return False
        if self.created_after is not None:
            if created.has_time:
                end = created.as_datetime()
            else:
                end = datetime.combine(created.date(), _END_OF_DAY)
            if end <= self.created_after:
                return False

        if self.visible_as_of is not None and task.defer_until is not None:
            return task.defer_until <= self.visible_as_of
        return True


def _date_ok(
    value: date | None,
    before: date | None,
    after: date | None,
    on: date | None,
) -> bool:
    """Check one date against strict before/after bounds and an exact day.

    A missing date fails any bound that is set.
    """
    if before is None and after is None and on is None:
        return True
    if value is None:
        return False
    if before is not None and not value < before:
        return False
    if after is not None and not value > after:
        return False
    return on is None or value == on


# ---------------------------------------------------------------------------
# Projects and areas
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProjectFilter:
    """Criteria for selecting projects.

    A project without a status only passes a status criterion when the
    allowed list is empty.
    """

    statuses: tuple[ProjectStatus, ...] | None = None
    area: Reference | None = None
    has_area: bool | None = None

    def with_status(self, *statuses: ProjectStatus) -> Self:
        return replace(self, statuses=tuple(statuses))

    def with_area(self, area: Reference | str) -> Self:
        return replace(self, area=_as_reference(area))

    def with_has_area(self, value: bool = True) -> Self:
        return replace(self, has_area=value)

    @classmethod
    def active(cls) -> ProjectFilter:
        return cls().with_status(
            ProjectStatus.PLANNING,
            ProjectStatus.READY,
            ProjectStatus.IN_PROGRESS,
            ProjectStatus.BLOCKED,
        )

    def matches(self, project: Project) -> bool:
        if self.statuses is not None:
            if project.status is None:
                if self.statuses:
                    return False
            elif project.status not in self.statuses:
                return False
        if self.area is not None and project.area != self.area:
            return False
        return _presence_ok(self.has_area, project.area)


@dataclass(frozen=True)
class AreaFilter:
    """Criteria for selecting areas. A missing status counts as active."""

    statuses: tuple[AreaStatus, ...] | None = None

    def with_status(self, *statuses: AreaStatus) -> Self:
        return replace(self, statuses=tuple(statuses))

    @classmethod
    def active(cls) -> AreaFilter:
        return cls().with_status(AreaStatus.ACTIVE)

    def matches(self, area: Area) -> bool:
        if self.statuses is None:
            return True
        return (area.status or AreaStatus.ACTIVE) in self.statuses


def matches(criteria: TaskFilter | ProjectFilter | AreaFilter, doc: Task | Project | Area) -> bool:
    """Evaluate *criteria* against *doc*."""
    return criteria.matches(doc)  # type: ignore[arg-type]
