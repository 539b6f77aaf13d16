"""Status enums for tasks, projects and areas.

On disk statuses are lowercase and hyphenated (``in-progress``). Parsing
is lenient about case and accepts underscores for hyphens.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Self


def _normalize(text: str) -> str:
    return text.strip().lower().replace("_", "-")


class _ParsableStatus(StrEnum):
    @classmethod
    def parse(cls, text: str) -> Self:
        """Parse a status spelling, raising ``ValueError`` when unknown."""
        try:
            return cls(_normalize(text))
        except ValueError:
            allowed = ", ".join(member.value for member in cls)
            msg = f"unknown status {text!r} (expected one of: {allowed})"
            raise ValueError(msg) from None


class TaskStatus(_ParsableStatus):
    INBOX = "inbox"
    ICEBOX = "icebox"
    READY = "ready"
    IN_PROGRESS = "in-progress"
    BLOCKED = "blocked"
    DROPPED = "dropped"
    DONE = "done"

    @property
    def is_completed(self) -> bool:
        """Done or dropped; such tasks should carry ``completed-at``."""
        return self in (TaskStatus.DONE, TaskStatus.DROPPED)

    @property
    def is_active(self) -> bool:
        return self in (TaskStatus.READY, TaskStatus.IN_PROGRESS, TaskStatus.BLOCKED)


class ProjectStatus(_ParsableStatus):
    PLANNING = "planning"
    READY = "ready"
    BLOCKED = "blocked"
    IN_PROGRESS = "in-progress"
    PAUSED = "paused"
    DONE = "done"

    @property
    def is_active(self) -> bool:
        return self in (
            ProjectStatus.PLANNING,
            ProjectStatus.READY,
            ProjectStatus.IN_PROGRESS,
            ProjectStatus.BLOCKED,
        )


class AreaStatus(_ParsableStatus):
    ACTIVE = "active"
    ARCHIVED = "archived"
