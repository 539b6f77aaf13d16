"""AppContext: shared Click context for all commands.

Created once by the root CLI group and passed to subcommands through
``@click.pass_obj``. Owns the settings, the lazily built Vault and
VaultSession, and result emission (stdout/stderr routing and exit codes).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import click

from taskdn.errors import TaskdnError
from taskdn.output.formatters import OutputSettings, format_result
from taskdn.output.result import CommandResult

if TYPE_CHECKING:
    from taskdn.config.settings import TdnSettings
    from taskdn.infrastructure.vault import Vault
    from taskdn.services.index import VaultSession

logger = logging.getLogger(__name__)


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Nothing touches the filesystem until a command asks for :attr:`vault`,
    so ``--help`` and ``--version`` stay cheap.
    """

    def __init__(self, settings: TdnSettings) -> None:
        self.settings = settings
        self._vault: Vault | None = None
        self._session: VaultSession | None = None

        from taskdn.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def vault(self) -> Vault:
        """The vault (created lazily on first access)."""
        if self._vault is None:
            from taskdn.infrastructure.vault import Vault

            self._vault = Vault.from_settings(self.settings)
            logger.debug("Using %r", self._vault)
        return self._vault

    @property
    def session(self) -> VaultSession:
        """One relationship-index session per invocation."""
        if self._session is None:
            from taskdn.services.index import VaultSession

            self._session = VaultSession(self.vault)
        return self._session

    def run(self, op: str, action: Callable[[], CommandResult]) -> None:
        """Run *action* and emit its result, turning domain errors into failures."""
        try:
            result = action()
        except TaskdnError as exc:
            logger.debug("%s failed: %s", op, exc)
            result = CommandResult.failure(op, exc)
        self.emit(result)

    def emit(self, result: CommandResult) -> None:
        """Format and output a CommandResult with correct exit semantics.

        * Success: writes to stdout. Warnings go to stderr so they do not
          pollute piped output.
        * Failure: writes to stderr and exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            # JSON output already carries the warnings.
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
