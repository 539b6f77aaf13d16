"""Subcommand modules for tdn.

:func:`register_commands` imports each module only when the root group
is built, keeping imports out of the package namespace.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach every command group and standalone command to *cli*."""
    # --- Groups ---
    from taskdn.commands.context import context
    from taskdn.commands.list_cmd import list_group
    from taskdn.commands.new import new

    cli.add_command(list_group)
    cli.add_command(context)
    cli.add_command(new)

    # --- Standalone commands ---
    from taskdn.commands.archive import archive, unarchive
    from taskdn.commands.check import check
    from taskdn.commands.show import show
    from taskdn.commands.status import complete, drop, set_status

    for command in (show, set_status, complete, drop, archive, unarchive, check):
        cli.add_command(command)
