"""Click base classes that add an ``--examples`` flag.

``--help`` stays short; ``--examples`` prints a block of sample
invocations and exits.
"""

from __future__ import annotations

import textwrap
from typing import Any

import click


class _ExamplesMixin:
    """Register an eager ``--examples`` option when examples are given."""

    params: list[click.Parameter]

    def _init_examples(self, examples: str | None) -> None:
        self.examples = textwrap.dedent(examples).strip("\n") if examples else None
        if self.examples is None:
            return
        self.params.append(
            click.Option(
                ["--examples"],
                is_flag=True,
                expose_value=False,
                is_eager=True,
                callback=self._print_examples,
                help="Show usage examples.",
            )
        )

    def _print_examples(self, ctx: click.Context, _param: click.Parameter, value: bool) -> None:
        if not value or ctx.resilient_parsing:
            return
        click.echo(f"Examples for '{ctx.command_path}':\n")
        click.echo(textwrap.indent(self.examples or "", "  "))
        ctx.exit(0)


class TdnCommand(_ExamplesMixin, click.Command):
    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


class TdnGroup(_ExamplesMixin, click.Group):
    """Group whose subcommands are :class:`TdnCommand` by default."""

    command_class = TdnCommand

    def __init__(self, *args: Any, examples: str | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._init_examples(examples)


# Date options take ``YYYY-MM-DD``; callers use ``.date()`` on the value.
DATE = click.DateTime(formats=["%Y-%m-%d"])
