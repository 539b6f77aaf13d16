"""Command: show one document with its body."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taskdn.commands._base import TdnCommand
from taskdn.infrastructure.filesystem import read_document
from taskdn.output.formatters import document_data
from taskdn.output.result import CommandResult

if TYPE_CHECKING:
    from taskdn.commands._context import AppContext


@click.command(
    cls=TdnCommand,
    examples="""\
        tdn show buy-milk.md
        tdn show projects/launch.md
        tdn --json show /abs/path/to/areas/work.md""",
)
@click.argument("path")
@click.pass_obj
def show(app: AppContext, path: str) -> None:
    """Show a task, project or area.

    PATH may be absolute, relative to the working directory, or a file
    name inside any document directory.
    """

    def action() -> CommandResult:
        kind, located = app.vault.locate(path)
        doc = read_document(located, kind)
        return CommandResult.success("show", document_data(doc, include_body=True))

    app.run("show", action)
