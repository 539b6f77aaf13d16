"""Command: validate task files against business rules."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from taskdn.commands._base import TdnCommand
from taskdn.output.result import CommandResult

if TYPE_CHECKING:
    from taskdn.commands._context import AppContext


@click.command(
    cls=TdnCommand,
    examples="""\
        tdn check
        tdn check --errors-only
        tdn --json check""",
)
@click.option("--errors-only", is_flag=True, help="Hide advisory warnings.")
@click.pass_obj
def check(app: AppContext, errors_only: bool) -> None:
    """Check every task (archive included) and report problems.

    Errors are files that fail to parse or break a hard rule, such as a
    done task without completed-at. Warnings are advisory, such as a
    legacy projects list with several entries.
    """
    from taskdn.errors import TaskdnError
    from taskdn.infrastructure.filesystem import list_markdown_files
    from taskdn.services.validation import ValidationService

    def action() -> CommandResult:
        svc = ValidationService(app.vault)
        issues: list[dict[str, Any]] = [
            {"path": str(path), "severity": "error", "code": exc.code, "message": exc.message}
            for path, exc in svc.validate_all_tasks()
        ]
        if not errors_only:
            for path in list_markdown_files(app.vault.tasks_dir, include_archive=True):
                try:
                    warnings = svc.task_warnings(path)
                except TaskdnError:
                    # Already reported by validate_all_tasks.
                    continue
                issues.extend(
                    {
                        "path": str(path),
                        "severity": "warning",
                        "code": type(warning).__name__,
                        "message": warning.message,
                    }
                    for warning in warnings
                    if not warning.is_error
                )
        issues.sort(key=lambda issue: (issue["path"], issue["severity"]))
        return CommandResult.success("check", {"issues": issues, "count": len(issues)})

    app.run("check", action)
