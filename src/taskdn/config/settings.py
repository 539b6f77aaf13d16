"""TdnSettings: CLI flags, ``TASKDN_*`` env vars and ``taskdn.toml`` merged.

Sources, highest first:

1. keyword arguments (the global CLI flags)
2. environment variables, nested with ``__`` (``TASKDN_QUERY__UPCOMING_DAYS=3``)
3. the ``[vault]`` and ``[query]`` tables of ``taskdn.toml``
4. defaults from :mod:`taskdn.config.models`
"""

from __future__ import annotations

import logging
import tomllib
from contextvars import ContextVar
from pathlib import Path
from typing import Any

import click
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from taskdn.config.discovery import find_config
from taskdn.config.models import QueryConfig, VaultConfig

logger = logging.getLogger(__name__)

TOML_SECTIONS = frozenset({"vault", "query"})

# Config file picked by from_cli(), read while the model is being built.
_active_config: ContextVar[Path | None] = ContextVar("taskdn_active_config", default=None)


def load_config_file(path: Path) -> dict[str, Any]:
    """Parse *path* and keep only the tables taskdn understands.

    Raises:
        click.ClickException: If the file is not valid TOML.
    """
    try:
        with path.open("rb") as fh:
            data = tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {path}: {exc}"
        raise click.ClickException(msg) from exc

    ignored = sorted(set(data) - TOML_SECTIONS)
    if ignored:
        logger.warning("Ignoring unknown keys in %s: %s", path, ", ".join(ignored))
    return {key: value for key, value in data.items() if key in TOML_SECTIONS}


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Settings source backed by an already parsed ``taskdn.toml``."""

    def __init__(self, settings_cls: type[BaseSettings], data: dict[str, Any]) -> None:
        super().__init__(settings_cls)
        self._data = data

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> dict[str, Any]:
        return dict(self._data)


class TdnSettings(BaseSettings):
    """Everything one ``tdn`` invocation needs to know.

    Attributes:
        vault_root: Directory that relative vault paths resolve against.
            This is the parent of ``taskdn.toml``, or the working directory
            when no config file was found.
        config_path: The TOML file that was loaded, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "TASKDN_",
        "env_nested_delimiter": "__",
    }

    vault_root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    json_output: bool = False
    quiet: bool = False
    verbose: bool = False
    log_json: bool = False

    vault: VaultConfig = Field(default_factory=VaultConfig)
    query: QueryConfig = Field(default_factory=QueryConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        path = _active_config.get()
        data = load_config_file(path) if path is not None else {}
        return init_settings, env_settings, TomlSettingsSource(settings_cls, data)

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        vault_root: Path | None = None,
        **cli_flags: Any,
    ) -> TdnSettings:
        """Build settings for one CLI invocation.

        An explicit *config_path* must exist. Otherwise ``taskdn.toml`` is
        searched upward from *vault_root* (or the working directory).

        Raises:
            click.ClickException: If *config_path* is missing or any
                config file is not valid TOML.
        """
        if config_path:
            toml_path: Path | None = Path(config_path)
            if not toml_path.is_file():
                msg = f"Config file not found: {config_path}"
                raise click.ClickException(msg)
        else:
            toml_path = find_config(vault_root)

        if vault_root is None:
            vault_root = toml_path.parent if toml_path is not None else Path.cwd()

        token = _active_config.set(toml_path)
        try:
            return cls(vault_root=vault_root, config_path=toml_path, **cli_flags)
        finally:
            _active_config.reset(token)

    def resolve_dir(self, directory: Path) -> Path:
        """Absolute form of a configured directory."""
        return directory if directory.is_absolute() else self.vault_root / directory
