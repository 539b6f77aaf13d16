"""Reference resolution: strict path joins and loose name matching.

Two rules live here and are deliberately different:

- :class:`ReferenceResolver` joins a reference onto a base directory and
  requires the file to exist. It is the only place an unresolved
  reference is an error.
- :func:`reference_matches` decides whether a reference *names* a given
  document. Relationship queries use it and never fail on a miss.
"""

from __future__ import annotations

from pathlib import Path

from taskdn.domain.documents import Area, Document, Project, Task
from taskdn.domain.filenames import DOCUMENT_SUFFIX
from taskdn.domain.values import Filename, Reference, RelativePath, WikiLink
from taskdn.errors import UnresolvedReferenceError
from taskdn.infrastructure.filesystem import read_area, read_project, read_task
from taskdn.services.base import BaseService


def reference_matches(ref: Reference, doc: Document) -> bool:
    """True when *ref* names *doc*.

    Link targets (without ``#heading``) match the file stem or the title.
    Filenames match the file name, and relative paths match when they end
    with it. All comparisons ignore case.
    """
    if isinstance(ref, WikiLink):
        page = ref.page.casefold()
        return page in (doc.stem.casefold(), doc.title.casefold())
    filename = doc.filename.casefold()
    if not filename:
        return False
    if isinstance(ref, Filename):
        return ref.name.casefold() == filename
    if isinstance(ref, RelativePath):
        return ref.path.casefold().endswith(f"/{filename}")
    return False


def reference_name(ref: Reference) -> str:
    """Short human name for *ref*, used in warnings."""
    if isinstance(ref, WikiLink):
        return ref.page
    return ref.display_name()


def same_target(left: Reference, right: Reference) -> bool:
    """True when two references name the same document, ignoring shape and case."""
    return _target_key(left) == _target_key(right)


def _target_key(ref: Reference) -> str:
    if isinstance(ref, WikiLink):
        return ref.page.casefold()
    if isinstance(ref, RelativePath):
        return ref.filename.removesuffix(DOCUMENT_SUFFIX).casefold()
    if isinstance(ref, Filename):
        return ref.name.removesuffix(DOCUMENT_SUFFIX).casefold()
    return str(ref).casefold()


def name_to_reference(name: str) -> Reference:
    """Interpret a user-typed name as a reference.

    ``"Work"`` becomes ``[[Work]]``; text already shaped as a link, a
    relative path, or an ``.md`` filename keeps its shape.
    """
    ref = Reference.parse(name)
    if isinstance(ref, Filename) and not ref.name.lower().endswith(DOCUMENT_SUFFIX):
        return WikiLink(ref.name)
    return ref


class ReferenceResolver(BaseService):
    """Resolve a single reference to an existing file or document."""

    @staticmethod
    def resolve_path(ref: Reference, base_dir: Path) -> Path:
        """Join *ref* onto *base_dir* and require the result to exist.

        Raises:
            UnresolvedReferenceError: If the joined path does not exist.
        """
        if isinstance(ref, WikiLink):
            candidate = base_dir / f"{ref.target}{DOCUMENT_SUFFIX}"
        elif isinstance(ref, RelativePath):
            candidate = base_dir / ref.path
        elif isinstance(ref, Filename):
            candidate = base_dir / ref.name
        else:
            raise UnresolvedReferenceError(str(ref))
        if not candidate.exists():
            raise UnresolvedReferenceError(str(ref))
        return candidate

    def resolve_project_reference(self, ref: Reference) -> Path:
        return self.resolve_path(ref, self._vault.projects_dir)

    def resolve_area_reference(self, ref: Reference) -> Path:
        return self.resolve_path(ref, self._vault.areas_dir)

    def resolve_task_reference(self, ref: Reference) -> Path:
        return self.resolve_path(ref, self._vault.tasks_dir)

    # --- document loaders ---

    def project_for(self, ref: Reference) -> Project:
        """Read the project *ref* points at."""
        return read_project(self.resolve_project_reference(ref))

    def area_for(self, ref: Reference) -> Area:
        return read_area(self.resolve_area_reference(ref))

    def task_for(self, ref: Reference) -> Task:
        return read_task(self.resolve_task_reference(ref))
