"""The ``tdn`` entry point: global flags, then one subcommand per operation."""

from __future__ import annotations

import click

from taskdn import __version__
from taskdn.commands import register_commands
from taskdn.commands._base import TdnGroup
from taskdn.commands._context import AppContext
from taskdn.config.settings import TdnSettings


@click.group(
    "tdn",
    cls=TdnGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    examples="""\
        tdn list tasks --preset today
        tdn new task "Buy milk" --due 2025-03-01
        tdn context area Work
        tdn complete buy-milk.md
        tdn --json check""",
)
@click.version_option(version=__version__, prog_name="tdn")
@click.option("--json", "json_output", is_flag=True, help="Print results as JSON.")
@click.option("-q", "--quiet", is_flag=True, help="Print paths only.")
@click.option("-v", "--verbose", is_flag=True, help="Show extra columns and debug logs.")
@click.option("--log-json", is_flag=True, help="Write logs to stderr as JSON lines.")
@click.option("-c", "--config", "config_path", default=None, help="Use this taskdn.toml.")
@click.pass_context
def cli(
    ctx: click.Context,
    json_output: bool,
    quiet: bool,
    verbose: bool,
    log_json: bool,
    config_path: str | None,
) -> None:
    """Manage markdown tasks, projects and areas."""
    ctx.obj = AppContext(
        TdnSettings.from_cli(
            config_path=config_path,
            json_output=json_output,
            quiet=quiet,
            verbose=verbose,
            log_json=log_json,
        )
    )
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


register_commands(cli)
