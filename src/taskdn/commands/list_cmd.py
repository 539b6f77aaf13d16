"""Command group: list tasks, projects and areas with filters."""

from __future__ import annotations

from datetime import date, datetime
from typing import TYPE_CHECKING

import click

from taskdn.commands._base import DATE, TdnGroup
from taskdn.domain.filters import AreaFilter, ProjectFilter, TaskFilter
from taskdn.domain.status import AreaStatus, ProjectStatus, TaskStatus
from taskdn.output.formatters import documents_data
from taskdn.output.result import CommandResult
from taskdn.services.references import name_to_reference

if TYPE_CHECKING:
    from taskdn.commands._context import AppContext

_PRESETS = ("inbox", "today", "overdue", "upcoming", "available")


def _day(value: datetime | None) -> date | None:
    return value.date() if value is not None else None


def preset_filter(name: str, today: date, upcoming_days: int) -> TaskFilter:
    """Build one of the named task presets for *today*."""
    if name == "inbox":
        return TaskFilter.inbox()
    if name == "today":
        return TaskFilter.today(today)
    if name == "overdue":
        return TaskFilter.overdue(today)
    if name == "upcoming":
        return TaskFilter.upcoming(today, upcoming_days)
    if name == "available":
        return TaskFilter.available(today)
    msg = f"unknown preset: {name}"
    raise click.BadParameter(msg, param_hint="--preset")


@click.group(
    name="list",
    cls=TdnGroup,
    examples="""\
        tdn list tasks
        tdn list tasks --preset overdue
        tdn list projects --status in-progress
        tdn list areas --active""",
)
def list_group() -> None:
    """List documents of one kind."""


@list_group.command(
    examples="""\
        tdn list tasks --status ready --status in-progress
        tdn list tasks --project "Launch" --due-before 2025-03-01
        tdn list tasks --area Work --via-project
        tdn list tasks --preset upcoming --archive
        tdn --json list tasks --exclude-status done"""
)
@click.option(
    "--status",
    "statuses",
    multiple=True,
    type=click.Choice([s.value for s in TaskStatus]),
    help="Allowed status (repeatable, OR).",
)
@click.option(
    "--exclude-status",
    "excluded",
    multiple=True,
    type=click.Choice([s.value for s in TaskStatus]),
    help="Excluded status (repeatable).",
)
@click.option("--project", default=None, help="Tasks whose project reference names this.")
@click.option("--area", default=None, help="Tasks whose area reference names this.")
@click.option("--via-project", is_flag=True, help="With --area, also match through projects.")
@click.option("--due-before", type=DATE, default=None, help="Due strictly before this day.")
@click.option("--due-after", type=DATE, default=None, help="Due strictly after this day.")
@click.option("--due-on", type=DATE, default=None, help="Due on this day.")
@click.option("--preset", type=click.Choice(_PRESETS), default=None, help="Named filter.")
@click.option("--archive", "include_archive", is_flag=True, help="Include archived tasks.")
@click.pass_obj
def tasks(
    app: AppContext,
    statuses: tuple[str, ...],
    excluded: tuple[str, ...],
    project: str | None,
    area: str | None,
    via_project: bool,
    due_before: datetime | None,
    due_after: datetime | None,
    due_on: datetime | None,
    preset: str | None,
    include_archive: bool,
) -> None:
    """List tasks matching every given option."""
    from taskdn.services.tasks import TaskService

    if preset:
        criteria = preset_filter(preset, date.today(), app.settings.query.upcoming_days)
    else:
        criteria = TaskFilter()
    if statuses:
        criteria = criteria.with_status(*(TaskStatus(s) for s in statuses))
    if excluded:
        criteria = criteria.excluding_status(*(TaskStatus(s) for s in excluded))
    if project:
        criteria = criteria.with_project(name_to_reference(project))
    if area:
        criteria = criteria.with_area(name_to_reference(area), via_project=via_project)
    criteria = criteria.with_due(before=_day(due_before), after=_day(due_after), on=_day(due_on))
    if include_archive:
        criteria = criteria.with_archive()

    def action() -> CommandResult:
        items = documents_data(TaskService(app.vault).list(criteria))
        return CommandResult.success("list_tasks", {"items": items, "count": len(items)})

    app.run("list_tasks", action)


@list_group.command(
    examples="""\
        tdn list projects
        tdn list projects --active
        tdn list projects --area Work"""
)
@click.option(
    "--status",
    "statuses",
    multiple=True,
    type=click.Choice([s.value for s in ProjectStatus]),
    help="Allowed status (repeatable, OR).",
)
@click.option("--active", is_flag=True, help="Planning, ready, in-progress or blocked.")
@click.option("--area", default=None, help="Projects whose area reference names this.")
@click.pass_obj
def projects(
    app: AppContext,
    statuses: tuple[str, ...],
    active: bool,
    area: str | None,
) -> None:
    """List projects."""
    from taskdn.services.projects import ProjectService

    criteria = ProjectFilter.active() if active else ProjectFilter()
    if statuses:
        criteria = criteria.with_status(*(ProjectStatus(s) for s in statuses))
    if area:
        criteria = criteria.with_area(name_to_reference(area))

    def action() -> CommandResult:
        items = documents_data(ProjectService(app.vault).list(criteria))
        return CommandResult.success("list_projects", {"items": items, "count": len(items)})

    app.run("list_projects", action)


@list_group.command(
    examples="""\
        tdn list areas
        tdn list areas --active"""
)
@click.option("--active", is_flag=True, help="Only active areas (missing status counts).")
@click.option(
    "--status",
    "statuses",
    multiple=True,
    type=click.Choice([s.value for s in AreaStatus]),
    help="Allowed status (repeatable, OR).",
)
@click.pass_obj
def areas(app: AppContext, active: bool, statuses: tuple[str, ...]) -> None:
    """List areas."""
    from taskdn.services.areas import AreaService

    criteria = AreaFilter.active() if active else AreaFilter()
    if statuses:
        criteria = criteria.with_status(*(AreaStatus(s) for s in statuses))

    def action() -> CommandResult:
        items = documents_data(AreaService(app.vault).list(criteria))
        return CommandResult.success("list_areas", {"items": items, "count": len(items)})

    app.run("list_areas", action)
