"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, ``taskdn.toml`` only holds
overrides. A vault that keeps the default ``tasks/``, ``projects/`` and
``areas/`` directories needs no config file at all.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel


class VaultConfig(BaseModel):
    """[vault] section. Relative directories resolve against the vault root."""

    model_config = {"frozen": True}

    tasks_dir: Path = Path("tasks")
    projects_dir: Path = Path("projects")
    areas_dir: Path = Path("areas")


class QueryConfig(BaseModel):
    """[query] section."""

    model_config = {"frozen": True}

    upcoming_days: int = 7
    scan_workers: int | None = None
