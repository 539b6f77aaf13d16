"""Command group: relationship context for an area, project or task."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from taskdn.commands._base import TdnGroup
from taskdn.output.formatters import document_data, documents_data
from taskdn.output.result import CommandResult

if TYPE_CHECKING:
    from taskdn.commands._context import AppContext
    from taskdn.domain.documents import Document


def _one(doc: Document | None) -> dict | None:
    return document_data(doc) if doc is not None else None


@click.group(
    cls=TdnGroup,
    examples="""\
        tdn context area Work
        tdn context project "Q1 Launch"
        tdn context task buy-milk.md""",
)
def context() -> None:
    """Show a document together with its related documents.

    Broken references never fail the command; they are reported as
    warnings on stderr (or in the JSON payload).
    """


@context.command(
    examples="""\
        tdn context area Work
        tdn --json context area '[[Home]]'"""
)
@click.argument("name")
@click.pass_obj
def area(app: AppContext, name: str) -> None:
    """An area, its projects, and its tasks (direct or via projects)."""

    def action() -> CommandResult:
        result = app.session.index.area_context(name)
        data = {
            "area": _one(result.area),
            "projects": documents_data(result.projects),
            "tasks": documents_data(result.tasks),
        }
        return CommandResult.success("context_area", data, warnings=result.warnings)

    app.run("context_area", action)


@context.command(
    examples="""\
        tdn context project "Q1 Launch"
        tdn context project q1-launch.md"""
)
@click.argument("name")
@click.pass_obj
def project(app: AppContext, name: str) -> None:
    """A project, its parent area, and its tasks."""

    def action() -> CommandResult:
        result = app.session.index.project_context(name)
        data = {
            "project": _one(result.project),
            "area": _one(result.area),
            "tasks": documents_data(result.tasks),
        }
        return CommandResult.success("context_project", data, warnings=result.warnings)

    app.run("context_project", action)


@context.command(
    examples="""\
        tdn context task buy-milk.md
        tdn context task 'Buy milk'"""
)
@click.argument("path_or_title")
@click.pass_obj
def task(app: AppContext, path_or_title: str) -> None:
    """A task with its project and area (its own, or its project's)."""

    def action() -> CommandResult:
        result = app.session.index.task_context(path_or_title)
        data = {
            "task": _one(result.task),
            "project": _one(result.project),
            "area": _one(result.area),
            "ambiguous_matches": documents_data(result.ambiguous_matches),
        }
        return CommandResult.success("context_task", data, warnings=result.warnings)

    app.run("context_task", action)
