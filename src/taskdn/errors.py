"""Error taxonomy shared by every fallible taskdn operation.

Single-document reads and writes raise these directly. Bulk scans catch
:class:`TaskdnError` per file and drop the file from the result, and
relationship queries turn dangling references into warnings instead.
Each class carries a stable ``code`` used by the CLI's JSON output.
"""

from __future__ import annotations

from pathlib import Path
from typing import ClassVar, Self


class TaskdnError(Exception):
    """Base class for all taskdn errors."""

    code: ClassVar[str] = "ERROR"

    def __init__(self, message: str, *, path: Path | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def at(self, path: Path) -> Self:
        """Attach *path* unless the error already names a file."""
        if self.path is None:
            self.path = path
        return self

    def __str__(self) -> str:
        if self.path is None:
            return self.message
        return f"{self.path}: {self.message}"


class NotFoundError(TaskdnError):
    """The requested file does not exist."""

    code = "NOT_FOUND"

    def __init__(self, path: Path) -> None:
        super().__init__("file not found", path=path)


class ParseError(TaskdnError):
    """The metadata block is missing or is not valid YAML."""

    code = "PARSE"


class MissingFieldError(TaskdnError):
    code = "MISSING_FIELD"

    def __init__(self, field: str, *, path: Path | None = None) -> None:
        super().__init__(f"missing required field: {field}", path=path)
        self.field = field


class InvalidFieldError(TaskdnError):
    code = "INVALID_FIELD"

    def __init__(self, field: str, reason: str, *, path: Path | None = None) -> None:
        super().__init__(f"invalid value for field '{field}': {reason}", path=path)
        self.field = field
        self.reason = reason


class UnresolvedReferenceError(TaskdnError):
    """A single reference could not be resolved to an existing file."""

    code = "UNRESOLVED_REFERENCE"

    def __init__(self, reference: str) -> None:
        super().__init__(f"could not resolve reference: {reference}")
        self.reference = reference


class ValidationFailedError(TaskdnError):
    """A business rule was violated (duplicate file, missing completed-at)."""

    code = "VALIDATION"


class WriteError(TaskdnError):
    code = "WRITE_FAILURE"
