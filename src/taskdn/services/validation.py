"""Explicit business-rule checks over task files."""

from __future__ import annotations

import logging
from pathlib import Path

from taskdn.domain.validation import ValidationWarning, check_task
from taskdn.errors import TaskdnError, ValidationFailedError
from taskdn.infrastructure.filesystem import list_markdown_files, read_task
from taskdn.services.base import BaseService

logger = logging.getLogger(__name__)


class ValidationService(BaseService):
    """Run :func:`taskdn.domain.validation.check_task` against the vault."""

    def task_warnings(self, path: Path | str) -> list[ValidationWarning]:
        """Every finding for one task, errors and advisories alike."""
        return check_task(read_task(self._existing(self._vault.task_path(path))))

    def validate_task(self, path: Path | str) -> None:
        """Raise if the task breaks an error-level rule.

        Advisory findings such as a multi-entry ``projects`` list do not
        fail validation.

        Raises:
            ValidationFailedError: Listing every error-level finding.
            NotFoundError: If the file does not exist.
            ParseError: If the file cannot be parsed.
        """
        target = self._vault.task_path(path)
        errors = [warning for warning in self.task_warnings(target) if warning.is_error]
        if errors:
            raise ValidationFailedError("; ".join(e.message for e in errors), path=target)

    def validate_all_tasks(self) -> list[tuple[Path, TaskdnError]]:
        """Validate every task file, archive included.

        Unlike listings, files that fail to parse are reported here
        rather than skipped.
        """
        failures: list[tuple[Path, TaskdnError]] = []
        for path in list_markdown_files(self._vault.tasks_dir, include_archive=True):
            try:
                self.validate_task(path)
            except TaskdnError as exc:
                failures.append((path, exc))
        logger.debug("Validated tasks with %d failure(s)", len(failures))
        return failures
