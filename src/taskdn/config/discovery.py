"""Locate ``taskdn.toml``.

``TASKDN_CONFIG`` names the file directly. Without it the search starts in
a directory (the working directory by default) and climbs to the
filesystem root, so ``tdn`` run from inside ``tasks/`` still finds the
vault's config.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "taskdn.toml"
CONFIG_ENV_VAR = "TASKDN_CONFIG"


def _upward(start: Path) -> Iterator[Path]:
    here = start.resolve()
    yield here
    yield from here.parents


def find_config(start: Path | None = None) -> Path | None:
    """Path of the config file that applies to *start*, or None."""
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        path = Path(override)
        if not path.is_file():
            logger.warning("%s points at a missing file: %s", CONFIG_ENV_VAR, path)
            return None
        return path

    for directory in _upward(start or Path.cwd()):
        candidate = directory / CONFIG_FILENAME
        if candidate.is_file():
            logger.debug("Using config %s", candidate)
            return candidate
    return None
