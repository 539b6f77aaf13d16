"""BaseService: shared foundation for vault services.

Every service receives a :class:`Vault` at construction time and reads
or writes documents through :mod:`taskdn.infrastructure.filesystem`.
Services raise :class:`taskdn.errors.TaskdnError` subclasses; the CLI
turns those into structured results.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from pydantic import BaseModel

from taskdn.domain.documents import Area, Project
from taskdn.errors import NotFoundError

if TYPE_CHECKING:
    from taskdn.infrastructure.vault import Vault

_C = TypeVar("_C", Project, Area)


class BaseService:
    """Base for all service-layer classes.

    Usage::

        class TaskService(BaseService):
            def get(self, path: Path | str) -> Task:
                return read_task(self._existing(self._vault.task_path(path)))
    """

    def __init__(self, vault: Vault) -> None:
        self._vault = vault

    @property
    def vault(self) -> Vault:
        return self._vault

    @staticmethod
    def _existing(path: Path) -> Path:
        if not path.exists():
            raise NotFoundError(path)
        return path


# On-disk key that opts a container document into typed listings.
TYPE_TAG = "taskdn-type"


def apply_opt_in_typing(docs: list[_C], type_name: str) -> list[_C]:
    """Keep only documents tagged ``taskdn-type: <type_name>``, if any are.

    When no document in the listing carries a matching tag, every
    document is kept.
    """
    tagged = [doc for doc in docs if _type_tag(doc) == type_name]
    return tagged if tagged else docs


def _type_tag(doc: Project | Area) -> str | None:
    value = doc.extra.get(TYPE_TAG)
    return value.strip().casefold() if isinstance(value, str) else None


class PartialUpdate(BaseModel):
    """Base for update models where omission and ``None`` differ.

    A field passed as ``None`` clears the stored value; a field not passed
    at all is left alone. Fields named in ``REQUIRED`` are never cleared.
    """

    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    REQUIRED: ClassVar[frozenset[str]] = frozenset({"title"})

    def changes(self) -> dict[str, Any]:
        changed = {name: getattr(self, name) for name in self.model_fields_set}
        return {
            name: value
            for name, value in changed.items()
            if not (value is None and name in self.REQUIRED)
        }
