"""Command group: create tasks, projects and areas."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

import click

from taskdn.commands._base import DATE, TdnGroup
from taskdn.domain.status import AreaStatus, ProjectStatus, TaskStatus
from taskdn.output.formatters import document_data
from taskdn.output.result import CommandResult
from taskdn.services.references import name_to_reference

if TYPE_CHECKING:
    from taskdn.commands._context import AppContext


@click.group(
    cls=TdnGroup,
    examples="""\
        tdn new task "Buy milk"
        tdn new project "Q1 Launch" --area Work
        tdn new area Home""",
)
def new() -> None:
    """Create a new document from a title."""


@new.command(
    name="task",
    examples="""\
        tdn new task "Buy milk"
        tdn new task "Write report" --status ready --due 2025-03-01
        tdn new task "Ship it" --project "Q1 Launch" --filename ship.md""",
)
@click.argument("title")
@click.option(
    "--status",
    type=click.Choice([s.value for s in TaskStatus]),
    default=TaskStatus.INBOX.value,
    show_default=True,
)
@click.option("--due", type=DATE, default=None, help="Due date (YYYY-MM-DD).")
@click.option("--scheduled", type=DATE, default=None, help="Scheduled date.")
@click.option("--defer-until", type=DATE, default=None, help="Hidden until this date.")
@click.option("--project", default=None, help="Project name or reference.")
@click.option("--area", default=None, help="Area name or reference.")
@click.option("--filename", default=None, help="Override the generated file name.")
@click.pass_obj
def new_task(
    app: AppContext,
    title: str,
    status: str,
    due: datetime | None,
    scheduled: datetime | None,
    defer_until: datetime | None,
    project: str | None,
    area: str | None,
    filename: str | None,
) -> None:
    """Create a task in the tasks directory."""
    from taskdn.services.tasks import NewTask, TaskService

    def action() -> CommandResult:
        created = TaskService(app.vault).create(
            NewTask(
                title=title,
                status=TaskStatus(status),
                due=due.date() if due else None,
                scheduled=scheduled.date() if scheduled else None,
                defer_until=defer_until.date() if defer_until else None,
                project=name_to_reference(project) if project else None,
                area=name_to_reference(area) if area else None,
                filename=filename,
            )
        )
        return CommandResult.success("create_task", document_data(created))

    app.run("create_task", action)


@new.command(
    name="project",
    examples="""\
        tdn new project "Q1 Launch"
        tdn new project "Q1 Launch" --area Work --status ready""",
)
@click.argument("title")
@click.option(
    "--status",
    type=click.Choice([s.value for s in ProjectStatus]),
    default=ProjectStatus.PLANNING.value,
    show_default=True,
)
@click.option("--area", default=None, help="Area name or reference.")
@click.option("--description", default=None)
@click.option("--filename", default=None, help="Override the generated file name.")
@click.pass_obj
def new_project(
    app: AppContext,
    title: str,
    status: str,
    area: str | None,
    description: str | None,
    filename: str | None,
) -> None:
    """Create a project in the projects directory."""
    from taskdn.services.projects import NewProject, ProjectService

    def action() -> CommandResult:
        created = ProjectService(app.vault).create(
            NewProject(
                title=title,
                status=ProjectStatus(status),
                area=name_to_reference(area) if area else None,
                description=description,
                filename=filename,
            )
        )
        return CommandResult.success("create_project", document_data(created))

    app.run("create_project", action)


@new.command(
    name="area",
    examples="""\
        tdn new area Home
        tdn new area Work --type work --description 'Day job'""",
)
@click.argument("title")
@click.option(
    "--status",
    type=click.Choice([s.value for s in AreaStatus]),
    default=AreaStatus.ACTIVE.value,
    show_default=True,
)
@click.option("--type", "area_type", default=None, help="Free-form area type.")
@click.option("--description", default=None)
@click.option("--filename", default=None, help="Override the generated file name.")
@click.pass_obj
def new_area(
    app: AppContext,
    title: str,
    status: str,
    area_type: str | None,
    description: str | None,
    filename: str | None,
) -> None:
    """Create an area in the areas directory."""
    from taskdn.services.areas import AreaService, NewArea

    def action() -> CommandResult:
        created = AreaService(app.vault).create(
            NewArea(
                title=title,
                status=AreaStatus(status),
                area_type=area_type,
                description=description,
                filename=filename,
            )
        )
        return CommandResult.success("create_area", document_data(created))

    app.run("create_area", action)
