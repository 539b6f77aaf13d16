"""Operation-specific Rich renderers for CommandResult.

Each renderer writes to a Rich Console (backed by StringIO). Renderers
are dispatched by ``result.op`` in :func:`render_result`; unknown ops
fall through to a generic key-value renderer.
"""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Any

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from taskdn.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from taskdn.output.result import CommandResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: CommandResult, *, verbose: bool = False) -> str:
    """Render a CommandResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: CommandResult) -> str:
    """Minimal output for ``--quiet``: one path per line for listings."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item.get("path", "")) for item in items)
    path = result.data.get("path")
    return str(path) if path else f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: CommandResult) -> None:
    label = Text("OK", style="tdn.ok")
    op = Text(f"  {result.op}", style="tdn.op")
    console.print(label, op)


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="tdn.key")
    if key == "path":
        v = Text(str(value), style="tdn.path")
    elif key == "title":
        v = Text(str(value), style="tdn.title")
    elif key == "status":
        v = Text(str(value), style=style_for_status(str(value)))
    else:
        v = Text(str(value))
    console.print(k + v)


def _name(item: dict[str, Any]) -> str:
    path = item.get("path")
    return Path(path).name if path else ""


def _status_text(item: dict[str, Any]) -> Text:
    status = item.get("status")
    return Text(status or "", style=style_for_status(status))


def _cell(item: dict[str, Any], column: str) -> Text:
    value = str(item.get(column) or "")
    # Due values start with YYYY-MM-DD, so text order is date order.
    if column == "due" and value and item.get("status") not in ("done", "dropped"):
        if value[:10] < date.today().isoformat():
            return Text(value, style="tdn.overdue")
    return Text(value)


def _document_table(items: list[dict[str, Any]], kind: str, *, verbose: bool = False) -> Table:
    table = Table(show_header=True, show_lines=False, pad_edge=False, expand=False)
    table.add_column("Title", style="tdn.title")
    table.add_column("Status")
    if kind == "task":
        columns = ("due", "project", "area")
    elif kind == "project":
        columns = ("area", "start-date", "end-date")
    else:
        columns = ("type",)
    for column in columns:
        table.add_column(column.replace("-", " ").title())
    table.add_column("File", style="tdn.path", no_wrap=True)
    if verbose and kind == "task":
        table.add_column("Updated", style="dim")

    for item in items:
        row: list[Text] = [Text(str(item.get("title", ""))), _status_text(item)]
        row.extend(_cell(item, column) for column in columns)
        row.append(Text(_name(item)))
        if verbose and kind == "task":
            row.append(Text(str(item.get("updated-at", ""))))
        table.add_row(*row)
    return table


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: CommandResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="tdn.error")
    op = Text(f"  {result.op}", style="tdn.op")
    console.print(label, op, Text(": "), Text(msg))

    if verbose and err:
        _field(console, "code", err.code)
        for k, v in err.detail.items():
            _field(console, k, v)


# ── Mutation renderers ────────────────────────────────────────────────


def _render_mutation(result: CommandResult, console: Console, *, verbose: bool = False) -> None:
    """Render create/update/archive results."""
    _status_line(console, result)
    for key in ("path", "title", "status", "completed-at", "moved_to"):
        if result.data.get(key) is not None:
            _field(console, key, result.data[key])


# ── Query renderers ───────────────────────────────────────────────────


def _render_list(result: CommandResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    kind = result.op.removeprefix("list_").removesuffix("s")
    if items:
        console.print(_document_table(items, kind, verbose=verbose))
    noun = kind if len(items) == 1 else f"{kind}s"
    console.print(f"\n{result.data.get('count', len(items))} {noun}")


def _render_show(result: CommandResult, console: Console, *, verbose: bool = False) -> None:
    """Render one document as a panel: metadata, then the body."""
    d = result.data
    skip = {"path", "title", "kind", "extra", "body"}
    lines = [
        f"{key}: {', '.join(value) if isinstance(value, list) else value}"
        for key, value in d.items()
        if key not in skip and value not in (None, [], False)
    ]
    for key, value in sorted(d.get("extra", {}).items()):
        lines.append(f"{key}: {value}")

    content = "\n".join(lines)
    body = d.get("body", "")
    if body.strip():
        content += f"\n\n{body.strip()}"

    title = f"{d.get('kind', '?')}: {d.get('title', 'Untitled')}"
    style = style_for_status(d.get("status"))
    console.print(Panel(Text(content), title=Text(title), border_style=style or "dim", expand=False))
    if verbose:
        _field(console, "path", d.get("path"))


def _section(console: Console, heading: str, items: list[dict[str, Any]], kind: str) -> None:
    console.print(f"\n[bold]{heading}[/bold] ({len(items)})")
    if items:
        console.print(_document_table(items, kind))


def _header(console: Console, kind: str, doc: dict[str, Any] | None) -> None:
    if doc is None:
        return
    console.print(Text(f"{kind}: ", style="tdn.key"), Text(doc["title"], style="tdn.title"))
    if doc.get("status"):
        _field(console, "status", doc["status"])
    _field(console, "path", doc.get("path"))


def _render_area_context(result: CommandResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    _header(console, "Area", d.get("area"))
    _section(console, "Projects", d.get("projects", []), "project")
    _section(console, "Tasks", d.get("tasks", []), "task")


def _render_project_context(
    result: CommandResult, console: Console, *, verbose: bool = False
) -> None:
    d = result.data
    _header(console, "Project", d.get("project"))
    area = d.get("area")
    if area is not None:
        _field(console, "area", area["title"])
    _section(console, "Tasks", d.get("tasks", []), "task")


def _render_task_context(result: CommandResult, console: Console, *, verbose: bool = False) -> None:
    d = result.data
    ambiguous = d.get("ambiguous_matches", [])
    if ambiguous:
        console.print("[tdn.warning]Several tasks match; pass a path instead:[/tdn.warning]")
        console.print(_document_table(ambiguous, "task"))
        return
    _header(console, "Task", d.get("task"))
    for key in ("project", "area"):
        doc = d.get(key)
        if doc is not None:
            _field(console, key, doc["title"])


# ── Check renderer ────────────────────────────────────────────────────


def _render_check(result: CommandResult, console: Console, *, verbose: bool = False) -> None:
    issues = result.data.get("issues", [])
    if not issues:
        console.print("[tdn.ok]OK[/tdn.ok]  No issues found.")
        return

    severity_styles = {"error": "tdn.error", "warning": "tdn.warning"}
    for issue in issues:
        severity = str(issue.get("severity", "warning"))
        style = severity_styles.get(severity, "")
        console.print(
            Text("  "),
            Text(severity, style=style),
            Text(f"{issue.get('path')}: {issue.get('message')}"),
        )

    errors = sum(1 for issue in issues if issue.get("severity") == "error")
    console.print(f"\n{errors} errors, {len(issues) - errors} warnings")


def _render_generic(result: CommandResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)


_OP_RENDERERS = {
    # Mutations
    "create_task": _render_mutation,
    "create_project": _render_mutation,
    "create_area": _render_mutation,
    "set_status": _render_mutation,
    "complete": _render_mutation,
    "drop": _render_mutation,
    "archive": _render_mutation,
    "unarchive": _render_mutation,
    # Queries
    "list_tasks": _render_list,
    "list_projects": _render_list,
    "list_areas": _render_list,
    "show": _render_show,
    "context_area": _render_area_context,
    "context_project": _render_project_context,
    "context_task": _render_task_context,
    # Validation
    "check": _render_check,
}
