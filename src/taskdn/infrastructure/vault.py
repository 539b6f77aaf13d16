"""Vault: the three document directories every service works against.

The Vault is the single dependency injected into every service. It
knows where tasks, projects and areas live and how user-supplied paths
map onto those directories. It holds no documents and no open handles.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from taskdn.domain.documents import ARCHIVE_DIR, DocumentKind
from taskdn.errors import NotFoundError

if TYPE_CHECKING:
    from taskdn.config.settings import TdnSettings


class Vault:
    """Directory layout for one collection of documents."""

    def __init__(
        self,
        tasks_dir: Path,
        projects_dir: Path,
        areas_dir: Path,
        *,
        scan_workers: int | None = None,
    ) -> None:
        self.tasks_dir = tasks_dir
        self.projects_dir = projects_dir
        self.areas_dir = areas_dir
        self.scan_workers = scan_workers

    @classmethod
    def from_settings(cls, settings: TdnSettings) -> Vault:
        return cls(
            tasks_dir=settings.resolve_dir(settings.vault.tasks_dir),
            projects_dir=settings.resolve_dir(settings.vault.projects_dir),
            areas_dir=settings.resolve_dir(settings.vault.areas_dir),
            scan_workers=settings.query.scan_workers,
        )

    @property
    def archive_dir(self) -> Path:
        return self.tasks_dir / ARCHIVE_DIR

    def task_path(self, path: Path | str) -> Path:
        """Absolute *path*, or *path* joined onto the tasks directory."""
        return _under(self.tasks_dir, path)

    def project_path(self, path: Path | str) -> Path:
        return _under(self.projects_dir, path)

    def area_path(self, path: Path | str) -> Path:
        return _under(self.areas_dir, path)

    def directories(self) -> list[tuple[DocumentKind, Path]]:
        """Each document kind with its directory, tasks first."""
        return [
            (DocumentKind.TASK, self.tasks_dir),
            (DocumentKind.PROJECT, self.projects_dir),
            (DocumentKind.AREA, self.areas_dir),
        ]

    def classify(self, path: Path) -> DocumentKind | None:
        """Which document directory contains *path*, if any.

        Tasks are checked first, so the archive counts as tasks. Paths
        are compared both resolved and as given, so a deleted file (which
        cannot be resolved through symlinks) still classifies.
        """
        resolved = path.resolve()
        for kind, directory in self.directories():
            if resolved.is_relative_to(directory.resolve()) or path.is_relative_to(directory):
                return kind
        return None

    def locate(self, path: Path | str) -> tuple[DocumentKind, Path]:
        """Find an existing document file from a user-supplied path.

        *path* may be absolute, relative to the working directory, or
        relative to any document directory (archive included).

        Raises:
            NotFoundError: If no candidate exists inside the vault.
        """
        given = Path(path)
        candidates = [given]
        if not given.is_absolute():
            candidates += [
                self.tasks_dir / given,
                self.archive_dir / given,
                self.projects_dir / given,
                self.areas_dir / given,
            ]
        for candidate in candidates:
            if candidate.is_file():
                kind = self.classify(candidate)
                if kind is not None:
                    return kind, candidate
        raise NotFoundError(given)

    def ensure_dirs(self) -> None:
        """Create the document directories if they are missing."""
        for directory in (self.tasks_dir, self.projects_dir, self.areas_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def __repr__(self) -> str:
        return (
            f"Vault(tasks_dir={self.tasks_dir!r}, projects_dir={self.projects_dir!r}, "
            f"areas_dir={self.areas_dir!r})"
        )


def _under(base: Path, path: Path | str) -> Path:
    candidate = Path(path)
    return candidate if candidate.is_absolute() else base / candidate
