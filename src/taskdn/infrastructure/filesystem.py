"""Filesystem operations for vault documents.

INVARIANT: Files are truth. Nothing is cached between calls except the
relationship index, which callers rebuild explicitly.

Pure parsing/rendering lives in :mod:`taskdn.domain` (dependency
direction: infrastructure -> domain). This module handles file I/O,
directory listing, and parallel scans.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import TypeVar

from taskdn.domain.documents import ARCHIVE_DIR, Area, Document, DocumentKind, Project, Task
from taskdn.domain.filenames import DOCUMENT_SUFFIX
from taskdn.domain.frontmatter import parse_area, parse_project, parse_task
from taskdn.domain.writer import render_document
from taskdn.errors import NotFoundError, ParseError, TaskdnError, WriteError

logger = logging.getLogger(__name__)

_T = TypeVar("_T")
_D = TypeVar("_D", Task, Project, Area)


# ---------------------------------------------------------------------------
# File I/O
# ---------------------------------------------------------------------------


def read_text(path: Path) -> str:
    """Read a UTF-8 document.

    Raises:
        NotFoundError: If *path* does not exist.
        ParseError: If the file is not valid UTF-8.
    """
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise NotFoundError(path) from None
    except UnicodeDecodeError as exc:
        raise ParseError(f"file is not valid UTF-8: {exc}", path=path) from exc


def _read(path: Path, parse: Callable[[str], _D]) -> _D:
    text = read_text(path)
    try:
        doc = parse(text)
    except TaskdnError as exc:
        raise exc.at(path)
    return doc.model_copy(update={"path": path})


def read_task(path: Path) -> Task:
    return _read(path, parse_task)


def read_project(path: Path) -> Project:
    return _read(path, parse_project)


def read_area(path: Path) -> Area:
    return _read(path, parse_area)


def read_document(path: Path, kind: DocumentKind) -> Document:
    """Read *path* as the given kind of document."""
    readers: dict[DocumentKind, Callable[[Path], Document]] = {
        DocumentKind.TASK: read_task,
        DocumentKind.PROJECT: read_project,
        DocumentKind.AREA: read_area,
    }
    return readers[kind](path)


def write_document(doc: Document, path: Path | None = None) -> Path:
    """Write *doc* to *path* (default: ``doc.path``) as a whole-file replace.

    Returns the path written.

    Raises:
        WriteError: On any I/O failure.
    """
    target = path if path is not None else doc.path
    if target is None:
        msg = "document has no path to write to"
        raise WriteError(msg)
    try:
        target.write_text(render_document(doc), encoding="utf-8")
    except OSError as exc:
        raise WriteError(f"could not write file: {exc}", path=target) from exc
    logger.debug("Wrote %s", target)
    return target


# ---------------------------------------------------------------------------
# Directory listing
# ---------------------------------------------------------------------------


def list_markdown_files(directory: Path, *, include_archive: bool = False) -> list[Path]:
    """List ``*.md`` files directly inside *directory*.

    With *include_archive*, files directly inside ``directory/archive``
    are listed too. A missing directory yields an empty list.
    """
    roots = [directory]
    if include_archive:
        roots.append(directory / ARCHIVE_DIR)

    found: list[Path] = []
    for root in roots:
        if not root.is_dir():
            logger.debug("Directory %s does not exist; nothing to list", root)
            continue
        found.extend(
            entry
            for entry in root.iterdir()
            if entry.suffix == DOCUMENT_SUFFIX and entry.is_file()
        )
    return sorted(found)


def scan_files(
    paths: Iterable[Path],
    load: Callable[[Path], _T],
    *,
    max_workers: int | None = None,
) -> list[_T]:
    """Load every path in parallel, dropping the ones that fail.

    Result order is not defined. Failures are logged at debug level and
    excluded; they never abort the scan.
    """
    candidates = list(paths)
    if not candidates:
        return []

    results: list[_T] = []
    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = {pool.submit(load, path): path for path in candidates}
        for future in as_completed(futures):
            try:
                results.append(future.result())
            except (TaskdnError, OSError) as exc:
                logger.debug("Skipping %s: %s", futures[future], exc)
    return results
