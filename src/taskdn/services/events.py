"""Turn raw file-change notifications into typed vault events.

A file watcher (not part of this package) reports a path and a change
kind; :func:`process_file_change` decides whether the path belongs to the
vault and, for creations and modifications, parses the document.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from pathlib import Path

from pydantic import BaseModel

from taskdn.domain.documents import Area, DocumentKind, Project, Task
from taskdn.domain.filenames import DOCUMENT_SUFFIX
from taskdn.infrastructure.filesystem import read_document
from taskdn.infrastructure.vault import Vault

logger = logging.getLogger(__name__)


class FileChangeKind(StrEnum):
    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


class VaultEvent(BaseModel):
    """A change to one vault document.

    ``document`` holds the freshly parsed document for creations and
    modifications and is None for deletions.
    """

    model_config = {"frozen": True}

    kind: FileChangeKind
    entity: DocumentKind
    path: Path
    document: Task | Project | Area | None = None

    @property
    def name(self) -> str:
        """Dotted event name such as ``task.created``."""
        return f"{self.entity}.{self.kind}"


def watched_paths(vault: Vault) -> list[Path]:
    """Directories a watcher should observe (recursively) for this vault."""
    return [directory for _kind, directory in vault.directories()]


def process_file_change(vault: Vault, path: Path, kind: FileChangeKind) -> VaultEvent | None:
    """Build the event for one file change, or None if the path is irrelevant.

    Irrelevant means the file is not ``.md`` or sits outside every
    document directory.

    Raises:
        TaskdnError: If a created or modified file cannot be read or parsed.
    """
    if path.suffix.lower() != DOCUMENT_SUFFIX:
        return None
    entity = vault.classify(path)
    if entity is None:
        logger.debug("Ignoring change outside the vault: %s", path)
        return None

    if kind == FileChangeKind.DELETED:
        return VaultEvent(kind=kind, entity=entity, path=path)
    document = read_document(path, entity)
    return VaultEvent(kind=kind, entity=entity, path=path, document=document)
