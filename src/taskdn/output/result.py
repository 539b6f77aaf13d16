"""CommandResult and CommandError: what every CLI command emits.

Services return documents or raise :class:`taskdn.errors.TaskdnError`;
commands wrap either outcome in a CommandResult so human and JSON
output share one shape.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from taskdn.errors import TaskdnError


class CommandError(BaseModel):
    """Structured error payload within a CommandResult."""

    model_config = {"frozen": True}

    code: str
    message: str
    detail: dict[str, Any] = Field(default_factory=dict)


class CommandResult(BaseModel):
    """Outcome of one CLI operation.

    Attributes:
        ok: Whether the operation succeeded.
        op: Name of the operation (e.g. ``"list_tasks"``).
        data: Operation-specific payload on success.
        warnings: Non-fatal issues, such as broken references.
        error: Structured error if ``ok`` is False.
    """

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: dict[str, Any] = Field(default_factory=dict)
    warnings: list[str] = Field(default_factory=list)
    error: CommandError | None = None

    @classmethod
    def success(
        cls,
        op: str,
        data: dict[str, Any] | None = None,
        *,
        warnings: list[str] | None = None,
    ) -> CommandResult:
        return cls(ok=True, op=op, data=data or {}, warnings=warnings or [])

    @classmethod
    def failure(cls, op: str, exc: TaskdnError) -> CommandResult:
        """Wrap a domain error, keeping its code and path."""
        detail: dict[str, Any] = {}
        if exc.path is not None:
            detail["path"] = str(exc.path)
        return cls(
            ok=False,
            op=op,
            error=CommandError(code=exc.code, message=str(exc), detail=detail),
        )
