"""Rich Console factory and theme for tdn output.

Consoles render to a StringIO buffer so renderers can return plain
strings. Rich drops color codes on its own when the output is not a
terminal (tests, pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

TDN_THEME = Theme(
    {
        "tdn.ok": "bold green",
        "tdn.error": "bold red",
        "tdn.warning": "bold yellow",
        "tdn.op": "bold cyan",
        "tdn.key": "dim",
        "tdn.path": "dim",
        "tdn.title": "bold",
        "tdn.status.active": "green",
        "tdn.status.waiting": "yellow",
        "tdn.status.closed": "dim",
        "tdn.overdue": "red",
    }
)

_STATUS_STYLES: dict[str, str] = {
    "ready": "tdn.status.active",
    "in-progress": "tdn.status.active",
    "active": "tdn.status.active",
    "planning": "tdn.status.waiting",
    "inbox": "tdn.status.waiting",
    "blocked": "tdn.status.waiting",
    "paused": "tdn.status.waiting",
    "icebox": "tdn.status.closed",
    "done": "tdn.status.closed",
    "dropped": "tdn.status.closed",
    "archived": "tdn.status.closed",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer.

    Args:
        no_color: Disable ANSI escape codes.
        width: Override terminal width for stable test output.
    """
    return Console(
        file=StringIO(),
        theme=TDN_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str | None) -> str:
    return _STATUS_STYLES.get(status or "", "")
