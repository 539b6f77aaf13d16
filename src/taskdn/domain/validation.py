"""Business-rule checks for tasks.

These never run during read or write. Callers invoke them explicitly,
typically through :class:`taskdn.services.validation.ValidationService`.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from taskdn.domain.documents import Task


@dataclass(frozen=True)
class ValidationWarning:
    """Base class for advisory findings about a document."""

    # Warnings flagged as errors fail ``validate_task``.
    is_error = False

    @property
    def message(self) -> str:
        raise NotImplementedError

    def message_with_path(self, path: Path) -> str:
        return f"{path}: {self.message}"

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class MultipleProjects(ValidationWarning):
    """The legacy ``projects`` list held more than one entry."""

    count: int

    @property
    def message(self) -> str:
        return (
            f"projects array has {self.count} elements; "
            "a task must belong to exactly one project"
        )


@dataclass(frozen=True)
class MissingCompletedAt(ValidationWarning):
    """A done or dropped task has no ``completed-at``."""

    is_error = True

    @property
    def message(self) -> str:
        return "completed task is missing 'completed-at' field"


def check_task(task: Task) -> list[ValidationWarning]:
    """Return every rule violation found on *task*."""
    warnings: list[ValidationWarning] = []
    if task.projects_count is not None and task.projects_count > 1:
        warnings.append(MultipleProjects(task.projects_count))
    if task.status.is_completed and task.completed_at is None:
        warnings.append(MissingCompletedAt())
    return warnings
