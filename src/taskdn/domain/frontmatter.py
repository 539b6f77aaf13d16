"""Document parser: metadata block + body -> typed document.

The file starts with a ``---`` line, holds a YAML mapping, and closes
with another ``---`` line. Everything after the closing line is the body,
kept byte-for-byte. Known keys are converted into typed fields; every
other key is copied into ``extra``, with numbers keeping their spelling.

Failures:

- no metadata block, bad YAML, or a non-mapping block: :class:`ParseError`
- required key absent or null: :class:`MissingFieldError`
- value present but unusable: :class:`InvalidFieldError`

Unknown keys never cause a failure.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from datetime import date, datetime
from typing import Any, TypeVar

from ruamel.yaml import YAML
from ruamel.yaml.constructor import RoundTripConstructor
from ruamel.yaml.error import YAMLError
from ruamel.yaml.nodes import MappingNode, ScalarNode
from ruamel.yaml.scalarbool import ScalarBoolean

from taskdn.domain.documents import Area, Project, Task
from taskdn.domain.status import AreaStatus, ProjectStatus, TaskStatus
from taskdn.domain.values import DateValue, Reference
from taskdn.errors import InvalidFieldError, MissingFieldError, ParseError

_T = TypeVar("_T")

_DELIMITER = "---"
_DATE_FORMAT = "%Y-%m-%d"


# ---------------------------------------------------------------------------
# YAML loader
# ---------------------------------------------------------------------------


class _TextTimestampConstructor(RoundTripConstructor):
    """Round-trip constructor that leaves YAML timestamps as source text.

    Date fields are parsed by :class:`DateValue`, which must see the
    original spelling to know whether a time of day was present.
    """

    def construct_text_timestamp(self, node: Any, values: Any = None) -> str:
        return str(self.construct_scalar(node))


_TextTimestampConstructor.add_constructor(
    "tag:yaml.org,2002:timestamp",
    _TextTimestampConstructor.construct_text_timestamp,
)


def _new_yaml() -> YAML:
    """Create a fresh round-trip YAML loader.

    ruamel.yaml's YAML object is stateful; one instance per call keeps a
    failed load from leaking state into the next.
    """
    y = YAML()
    y.Constructor = _TextTimestampConstructor
    return y


def _plain(value: Any) -> Any:
    """Convert ruamel.yaml round-trip containers into dicts and lists.

    Numbers keep their ruamel types (``ScalarInt``, ``OctalInt``,
    ``ScalarFloat`` and the rest). They compare equal to plain numbers but
    remember their spelling, so ``1.10`` or ``0o17`` is written back as is.
    """
    if value is None:
        return None
    if isinstance(value, (bool, ScalarBoolean)):
        return bool(value)
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        return str(value)
    if isinstance(value, Mapping):
        return {str(key): _plain(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(item) for item in value]
    return str(value)


# ---------------------------------------------------------------------------
# Block splitting and decoding
# ---------------------------------------------------------------------------


def split_frontmatter(text: str) -> tuple[str, str]:
    """Split *text* into ``(yaml_block, body)``.

    The body is returned exactly as written after the closing delimiter.

    Raises:
        ParseError: If the text does not open with a ``---`` block or the
            block is never closed.
    """
    lines = text.removeprefix("\ufeff").split("\n")
    if lines[0].rstrip("\r") != _DELIMITER:
        raise ParseError("no frontmatter found")
    for index, line in enumerate(lines[1:], start=1):
        if line.rstrip("\r") == _DELIMITER:
            return "\n".join(lines[1:index]), "\n".join(lines[index + 1 :])
    raise ParseError("frontmatter is not closed with '---'")


def _source_text(node: MappingNode) -> dict[str, str]:
    """Map each top-level key to the raw text of its plain scalar value."""
    return {
        str(key.value): value.value
        for key, value in node.value
        if isinstance(key, ScalarNode) and isinstance(value, ScalarNode) and value.style is None
    }


def _decode(block: str) -> tuple[dict[str, Any], dict[str, str]]:
    y = _new_yaml()
    try:
        node = y.compose(block)
        loaded = None if node is None else y.constructor.construct_document(node)
    except YAMLError as exc:
        raise ParseError(f"invalid YAML in frontmatter: {exc}") from exc
    if loaded is None:
        return {}, {}
    if not isinstance(loaded, Mapping):
        raise ParseError("frontmatter must be a mapping of field names to values")
    return _plain(loaded), _source_text(node)


def decode_frontmatter(block: str) -> dict[str, Any]:
    """Decode a YAML block into a ``dict`` of plain containers.

    Raises:
        ParseError: On invalid YAML or when the block is not a mapping.
    """
    return _decode(block)[0]


def _load_document(text: str) -> tuple[dict[str, Any], dict[str, Any], str]:
    """Split and decode *text* into ``(fields, typed, body)``.

    ``typed`` is ``fields`` with every top-level number or boolean replaced
    by its source text. Typed fields are converted from ``typed`` so that
    ``title: 007`` stays ``"007"``; ``extra`` is built from ``fields``.
    """
    block, body = split_frontmatter(text)
    fields, source = _decode(block)
    typed = dict(fields)
    for key, value in fields.items():
        if isinstance(value, (bool, int, float)) and key in source:
            typed[key] = source[key]
    return fields, typed, body


# ---------------------------------------------------------------------------
# Field conversion
# ---------------------------------------------------------------------------


def _is_bare_wikilink(value: Any) -> bool:
    # ``area: [[Work]]`` decodes as a one-element list nested in another.
    return (
        isinstance(value, list)
        and len(value) == 1
        and isinstance(value[0], list)
        and len(value[0]) == 1
        and isinstance(value[0][0], str)
    )


def _scalar_text(field: str, value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    if _is_bare_wikilink(value):
        return f"[[{value[0][0]}]]"
    raise InvalidFieldError(field, f"expected a single value, got {type(value).__name__}")


def _convert(field: str, value: Any, convert: Callable[[str], _T]) -> _T:
    text = _scalar_text(field, value)
    try:
        return convert(text)
    except ValueError as exc:
        raise InvalidFieldError(field, str(exc)) from exc


def _required(fields: dict[str, Any], field: str, convert: Callable[[str], _T]) -> _T:
    value = fields.get(field)
    if value is None:
        raise MissingFieldError(field)
    return _convert(field, value, convert)


def _optional(fields: dict[str, Any], field: str, convert: Callable[[str], _T]) -> _T | None:
    value = fields.get(field)
    if value is None:
        return None
    return _convert(field, value, convert)


def _text(value: str) -> str:
    return value


def _calendar_date(text: str) -> date:
    try:
        return datetime.strptime(text.strip(), _DATE_FORMAT).date()
    except ValueError:
        msg = f"expected YYYY-MM-DD, got {text!r}"
        raise ValueError(msg) from None


def _project_reference(fields: dict[str, Any]) -> tuple[Reference | None, int | None]:
    """Resolve the task's project from ``projects`` or legacy ``project``.

    A ``projects`` list wins when present: its first entry becomes the
    project and its length is kept so validation can flag extras.
    """
    raw = fields.get("projects")
    if raw is not None:
        entries = [raw] if not isinstance(raw, list) or _is_bare_wikilink(raw) else raw
        if not entries:
            return None, 0
        return Reference.parse(_scalar_text("projects", entries[0])), len(entries)
    return _optional(fields, "project", Reference.parse), None


def _extras(fields: dict[str, Any], known: frozenset[str]) -> dict[str, Any]:
    return {key: value for key, value in fields.items() if key not in known}


# ---------------------------------------------------------------------------
# Public parsers
# ---------------------------------------------------------------------------


def parse_task(text: str) -> Task:
    """Parse a task document. The returned task has no ``path``."""
    fields, typed, body = _load_document(text)
    project, projects_count = _project_reference(typed)
    return Task(
        title=_required(typed, "title", _text),
        status=_required(typed, "status", TaskStatus.parse),
        created_at=_required(typed, "created-at", DateValue.parse),
        updated_at=_required(typed, "updated-at", DateValue.parse),
        completed_at=_optional(typed, "completed-at", DateValue.parse),
        due=_optional(typed, "due", DateValue.parse),
        scheduled=_optional(typed, "scheduled", _calendar_date),
        defer_until=_optional(typed, "defer-until", _calendar_date),
        project=project,
        area=_optional(typed, "area", Reference.parse),
        projects_count=projects_count,
        body=body,
        extra=_extras(fields, Task.KNOWN_FIELDS),
    )


def parse_project(text: str) -> Project:
    """Parse a project document. The returned project has no ``path``."""
    fields, typed, body = _load_document(text)
    blocked_raw = typed.get("blocked-by")
    if blocked_raw is None:
        blocked_by: list[Reference] = []
    elif isinstance(blocked_raw, list) and not _is_bare_wikilink(blocked_raw):
        blocked_by = [Reference.parse(_scalar_text("blocked-by", item)) for item in blocked_raw]
    else:
        blocked_by = [Reference.parse(_scalar_text("blocked-by", blocked_raw))]
    return Project(
        title=_required(typed, "title", _text),
        unique_id=_optional(typed, "unique-id", _text),
        status=_optional(typed, "status", ProjectStatus.parse),
        description=_optional(typed, "description", _text),
        area=_optional(typed, "area", Reference.parse),
        start_date=_optional(typed, "start-date", _calendar_date),
        end_date=_optional(typed, "end-date", _calendar_date),
        blocked_by=blocked_by,
        body=body,
        extra=_extras(fields, Project.KNOWN_FIELDS),
    )


def parse_area(text: str) -> Area:
    """Parse an area document. The returned area has no ``path``."""
    fields, typed, body = _load_document(text)
    return Area(
        title=_required(typed, "title", _text),
        status=_optional(typed, "status", AreaStatus.parse),
        area_type=_optional(typed, "type", _text),
        description=_optional(typed, "description", _text),
        body=body,
        extra=_extras(fields, Area.KNOWN_FIELDS),
    )
