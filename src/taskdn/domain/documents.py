"""Typed document models: Task, Project and Area.

Models are frozen. Derive modified copies with ``model_copy(update=...)``.
Every metadata key the model does not recognize lives in ``extra`` and is
written back untouched. ``path`` is identity only; it is assigned when a
file is read or created and is never part of the file's text.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar

from pydantic import BaseModel, Field, field_validator

from taskdn.domain.status import AreaStatus, ProjectStatus, TaskStatus
from taskdn.domain.values import DateValue, Reference

ARCHIVE_DIR = "archive"


class DocumentKind(StrEnum):
    TASK = "task"
    PROJECT = "project"
    AREA = "area"


def coerce_date_value(value: Any) -> Any:
    if isinstance(value, str):
        return DateValue.parse(value)
    if isinstance(value, (date, datetime)):
        return DateValue.of(value)
    return value


def coerce_reference(value: Any) -> Any:
    if isinstance(value, str):
        return Reference.parse(value)
    return value


class _Document(BaseModel):
    model_config = {"frozen": True, "arbitrary_types_allowed": True}

    # On-disk keys consumed by typed fields; everything else goes to ``extra``.
    KNOWN_FIELDS: ClassVar[frozenset[str]] = frozenset()

    path: Path | None = None
    title: str
    body: str = ""
    extra: dict[str, Any] = Field(default_factory=dict)

    @property
    def filename(self) -> str:
        return self.path.name if self.path is not None else ""

    @property
    def stem(self) -> str:
        return self.path.stem if self.path is not None else ""


class Task(_Document):
    """A single actionable item."""

    KIND: ClassVar[DocumentKind] = DocumentKind.TASK

    KNOWN_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {
            "title",
            "status",
            "created-at",
            "updated-at",
            "completed-at",
            "due",
            "scheduled",
            "defer-until",
            "project",
            "projects",
            "area",
        }
    )

    status: TaskStatus
    created_at: DateValue
    updated_at: DateValue
    completed_at: DateValue | None = None
    due: DateValue | None = None
    scheduled: date | None = None
    defer_until: date | None = None
    project: Reference | None = None
    area: Reference | None = None
    # Length of a legacy ``projects`` list, or None when ``project`` was used.
    projects_count: int | None = Field(default=None, exclude=True)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> Any:
        return TaskStatus.parse(value) if isinstance(value, str) else value

    @field_validator("created_at", "updated_at", "completed_at", "due", mode="before")
    @classmethod
    def parse_date_value(cls, value: Any) -> Any:
        return coerce_date_value(value)

    @field_validator("project", "area", mode="before")
    @classmethod
    def parse_reference(cls, value: Any) -> Any:
        return coerce_reference(value)

    @property
    def is_archived(self) -> bool:
        """True when the file sits under an ``archive`` directory."""
        return self.path is not None and ARCHIVE_DIR in self.path.parts

    @property
    def is_active(self) -> bool:
        return self.status.is_active

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Task):
            return NotImplemented
        mine = {k: v for k, v in self.__dict__.items() if k != "projects_count"}
        theirs = {k: v for k, v in other.__dict__.items() if k != "projects_count"}
        return mine == theirs

    __hash__ = None  # type: ignore[assignment]


class Project(_Document):
    """A group of tasks working toward one outcome."""

    KIND: ClassVar[DocumentKind] = DocumentKind.PROJECT

    KNOWN_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {
            "title",
            "unique-id",
            "status",
            "description",
            "area",
            "start-date",
            "end-date",
            "blocked-by",
        }
    )

    unique_id: str | None = None
    status: ProjectStatus | None = None
    description: str | None = None
    area: Reference | None = None
    start_date: date | None = None
    end_date: date | None = None
    blocked_by: list[Reference] = Field(default_factory=list)

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> Any:
        return ProjectStatus.parse(value) if isinstance(value, str) else value

    @field_validator("area", mode="before")
    @classmethod
    def parse_reference(cls, value: Any) -> Any:
        return coerce_reference(value)

    @field_validator("blocked_by", mode="before")
    @classmethod
    def parse_references(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [coerce_reference(item) for item in value]
        return value

    @property
    def is_active(self) -> bool:
        return self.status is not None and self.status.is_active


class Area(_Document):
    """An ongoing sphere of responsibility."""

    KIND: ClassVar[DocumentKind] = DocumentKind.AREA

    KNOWN_FIELDS: ClassVar[frozenset[str]] = frozenset({"title", "status", "type", "description"})

    status: AreaStatus | None = None
    area_type: str | None = None
    description: str | None = None

    @field_validator("status", mode="before")
    @classmethod
    def parse_status(cls, value: Any) -> Any:
        return AreaStatus.parse(value) if isinstance(value, str) else value

    @property
    def is_active(self) -> bool:
        """Areas without a status count as active."""
        return self.status is None or self.status == AreaStatus.ACTIVE

    @property
    def is_archived(self) -> bool:
        return self.status == AreaStatus.ARCHIVED


Document = Task | Project | Area
