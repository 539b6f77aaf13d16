"""Commands: move tasks into and out of the archive directory."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taskdn.commands._base import TdnCommand
from taskdn.output.result import CommandResult

if TYPE_CHECKING:
    from taskdn.commands._context import AppContext


@click.command(
    cls=TdnCommand,
    examples="""\
        tdn archive buy-milk.md
        tdn --json archive /abs/path/tasks/buy-milk.md""",
)
@click.argument("path")
@click.pass_obj
def archive(app: AppContext, path: str) -> None:
    """Move a task into tasks/archive/."""
    from taskdn.services.tasks import TaskService

    def action() -> CommandResult:
        target = TaskService(app.vault).archive(path)
        return CommandResult.success("archive", {"path": path, "moved_to": str(target)})

    app.run("archive", action)


@click.command(
    cls=TdnCommand,
    examples="""\
        tdn unarchive buy-milk.md""",
)
@click.argument("path")
@click.pass_obj
def unarchive(app: AppContext, path: str) -> None:
    """Move an archived task back into the tasks directory."""
    from taskdn.services.tasks import TaskService

    def action() -> CommandResult:
        target = TaskService(app.vault).unarchive(path)
        return CommandResult.success("unarchive", {"path": path, "moved_to": str(target)})

    app.run("unarchive", action)
