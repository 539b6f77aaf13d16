"""Document writer: typed document -> file text.

Output is deterministic. Typed fields come first in a fixed order per
document type and are emitted only when set. Unknown keys from ``extra``
follow, sorted by name, then the closing ``---`` and the body verbatim.

Typed scalars are emitted by hand so the quoting rules stay exact.
Extras can hold arbitrary nested values and go through ruamel.yaml.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from datetime import date
from io import StringIO
from typing import Any

from ruamel.yaml import YAML

from taskdn.domain.documents import Area, Document, Project, Task
from taskdn.domain.values import DateValue, Reference

logger = logging.getLogger(__name__)

_DELIMITER = "---"

# Line breaks and non-printable characters, written as double-quoted escapes.
_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\x85": "\\N",
    "\u2028": "\\L",
    "\u2029": "\\P",
}
for _code in (*range(0x20), *range(0x7F, 0xA0)):
    _ESCAPES.setdefault(chr(_code), f"\\x{_code:02x}")
_ESCAPE_TABLE = str.maketrans(_ESCAPES)

# Characters that make a plain YAML scalar ambiguous or invalid.
_SPECIAL_CHARS = frozenset(":#\"'[]{}|>*&!%@`").union(set(_ESCAPES) - {"\\"})
_SPECIAL_LEADING = frozenset("-?,")
_RESERVED_WORDS = frozenset({"true", "false", "null", "yes", "no", "on", "off", "~"})
_NUMBER_LIKE = re.compile(
    r"""^[-+]?(
        \.(inf|nan)
      | 0x[0-9a-f_]+
      | 0o[0-7_]+
      | 0b[01_]+
      | (\d[\d_]*)?\.?\d[\d_]*(e[-+]?\d+)?
      | \d[\d_]*\.
    )$""",
    re.IGNORECASE | re.VERBOSE,
)


def _new_yaml() -> YAML:
    """Create a fresh round-trip YAML dumper for extra fields."""
    y = YAML()
    y.default_flow_style = False
    y.width = 4096
    y.indent(mapping=2, sequence=4, offset=2)
    return y


# ---------------------------------------------------------------------------
# Scalar emission
# ---------------------------------------------------------------------------


def needs_quotes(value: str) -> bool:
    """True when *value* cannot be written as a plain YAML scalar."""
    if not value or value != value.strip():
        return True
    if value[0] in _SPECIAL_LEADING:
        return True
    if any(char in _SPECIAL_CHARS for char in value):
        return True
    if value.lower() in _RESERVED_WORDS:
        return True
    return _NUMBER_LIKE.match(value) is not None


def quote_scalar(value: str) -> str:
    """Return *value* as a YAML scalar, double-quoted only when required."""
    if not needs_quotes(value):
        return value
    return f'"{value.translate(_ESCAPE_TABLE)}"'


def _line(key: str, value: str) -> str:
    return f"{key}: {value}\n"


def _date_line(key: str, value: DateValue | date | None) -> Iterator[str]:
    if value is None:
        return
    text = value.isoformat() if isinstance(value, date) else str(value)
    yield _line(key, text)


def _text_line(key: str, value: str | None) -> Iterator[str]:
    if value is not None:
        yield _line(key, quote_scalar(value))


def _reference_line(key: str, value: Reference | None) -> Iterator[str]:
    if value is not None:
        yield _line(key, quote_scalar(str(value)))


def _reference_list(key: str, values: list[Reference]) -> Iterator[str]:
    if not values:
        return
    yield f"{key}:\n"
    for ref in values:
        yield f"  - {quote_scalar(str(ref))}\n"


# ---------------------------------------------------------------------------
# Per-type field order
# ---------------------------------------------------------------------------


def _task_fields(task: Task) -> Iterator[str]:
    yield _line("title", quote_scalar(task.title))
    yield _line("status", task.status.value)
    yield from _date_line("created-at", task.created_at)
    yield from _date_line("updated-at", task.updated_at)
    yield from _date_line("completed-at", task.completed_at)
    yield from _date_line("due", task.due)
    yield from _date_line("scheduled", task.scheduled)
    yield from _date_line("defer-until", task.defer_until)
    # Always the list form, even when the file used legacy ``project``.
    yield from _reference_list("projects", [task.project] if task.project is not None else [])
    yield from _reference_line("area", task.area)


def _project_fields(project: Project) -> Iterator[str]:
    yield _line("title", quote_scalar(project.title))
    yield from _text_line("unique-id", project.unique_id)
    if project.status is not None:
        yield _line("status", project.status.value)
    yield from _text_line("description", project.description)
    yield from _reference_line("area", project.area)
    yield from _date_line("start-date", project.start_date)
    yield from _date_line("end-date", project.end_date)
    yield from _reference_list("blocked-by", project.blocked_by)


def _area_fields(area: Area) -> Iterator[str]:
    yield _line("title", quote_scalar(area.title))
    if area.status is not None:
        yield _line("status", area.status.value)
    yield from _text_line("type", area.area_type)
    yield from _text_line("description", area.description)


def _extra_fields(doc: Document) -> str:
    kept: dict[str, Any] = {}
    for key in sorted(doc.extra):
        if key in doc.KNOWN_FIELDS:
            logger.warning("Skipping extra field %r: it shadows a typed field", key)
            continue
        kept[key] = doc.extra[key]
    if not kept:
        return ""
    buf = StringIO()
    _new_yaml().dump(kept, buf)
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def render_document(doc: Document) -> str:
    """Serialize *doc* to file text."""
    if isinstance(doc, Task):
        fields = _task_fields(doc)
    elif isinstance(doc, Project):
        fields = _project_fields(doc)
    elif isinstance(doc, Area):
        fields = _area_fields(doc)
    else:
        msg = f"Cannot render {type(doc).__name__}"
        raise TypeError(msg)

    parts = [f"{_DELIMITER}\n", *fields, _extra_fields(doc), f"{_DELIMITER}\n"]
    if doc.body:
        parts.append(doc.body)
    return "".join(parts)
