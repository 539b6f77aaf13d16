"""Rich/JSON output helpers.

Commands build a :class:`CommandResult` whose ``data`` holds plain,
JSON-ready values. This module converts documents into that shape and
picks the output mode (JSON, quiet, or Rich) for a result.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from taskdn.domain.documents import Area, Project, Task

if TYPE_CHECKING:
    from taskdn.domain.documents import Document
    from taskdn.output.result import CommandResult


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def _text(value: object | None) -> str | None:
    return None if value is None else str(value)


def document_data(doc: Document, *, include_body: bool = False) -> dict[str, Any]:
    """Flatten *doc* into JSON-ready values keyed by their on-disk names.

    Dates and references keep their textual form, so ``2025-01-01`` and
    ``[[Work]]`` come out exactly as written in the file.
    """
    data: dict[str, Any] = {
        "kind": str(doc.KIND),
        "path": _text(doc.path),
        "title": doc.title,
    }
    if isinstance(doc, Task):
        data.update(
            {
                "status": str(doc.status),
                "created-at": str(doc.created_at),
                "updated-at": str(doc.updated_at),
                "completed-at": _text(doc.completed_at),
                "due": _text(doc.due),
                "scheduled": _text(doc.scheduled),
                "defer-until": _text(doc.defer_until),
                "project": _text(doc.project),
                "area": _text(doc.area),
                "archived": doc.is_archived,
            }
        )
    elif isinstance(doc, Project):
        data.update(
            {
                "status": _text(doc.status),
                "unique-id": doc.unique_id,
                "description": doc.description,
                "area": _text(doc.area),
                "start-date": _text(doc.start_date),
                "end-date": _text(doc.end_date),
                "blocked-by": [str(ref) for ref in doc.blocked_by],
            }
        )
    elif isinstance(doc, Area):
        data.update(
            {
                "status": _text(doc.status),
                "type": doc.area_type,
                "description": doc.description,
            }
        )
    data["extra"] = dict(doc.extra)
    if include_body:
        data["body"] = doc.body
    return data


def documents_data(docs: list[Any]) -> list[dict[str, Any]]:
    """Serialize *docs* sorted by path, since scans return them unordered."""
    ordered = sorted(docs, key=lambda doc: str(doc.path or ""))
    return [document_data(doc) for doc in ordered]


def format_result(result: CommandResult, *, settings: OutputSettings | None = None) -> str:
    """Format a CommandResult for display.

    Args:
        result: The result to format.
        settings: Output mode flags; defaults to human output.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)

    from taskdn.output.renderers import render_quiet, render_result

    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
