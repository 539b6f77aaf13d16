"""Commands: change a task's status."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taskdn.commands._base import TdnCommand
from taskdn.domain.status import TaskStatus
from taskdn.output.formatters import document_data
from taskdn.output.result import CommandResult

if TYPE_CHECKING:
    from taskdn.commands._context import AppContext


def _set_status(app: AppContext, op: str, path: str, status: TaskStatus) -> None:
    from taskdn.services.tasks import TaskService

    def action() -> CommandResult:
        updated = TaskService(app.vault).set_status(path, status)
        return CommandResult.success(op, document_data(updated))

    app.run(op, action)


@click.command(
    "set-status",
    cls=TdnCommand,
    examples="""\
        tdn set-status buy-milk.md in-progress
        tdn set-status /abs/path/tasks/report.md blocked""",
)
@click.argument("path")
@click.argument("status", type=click.Choice([s.value for s in TaskStatus]))
@click.pass_obj
def set_status(app: AppContext, path: str, status: str) -> None:
    """Set a task's status. Moving into done or dropped stamps completed-at."""
    _set_status(app, "set_status", path, TaskStatus(status))


@click.command(
    cls=TdnCommand,
    examples="""\
        tdn complete buy-milk.md
        tdn -q complete buy-milk.md""",
)
@click.argument("path")
@click.pass_obj
def complete(app: AppContext, path: str) -> None:
    """Mark a task done."""
    _set_status(app, "complete", path, TaskStatus.DONE)


@click.command(
    cls=TdnCommand,
    examples="""\
        tdn drop old-idea.md""",
)
@click.argument("path")
@click.pass_obj
def drop(app: AppContext, path: str) -> None:
    """Mark a task dropped."""
    _set_status(app, "drop", path, TaskStatus.DROPPED)
