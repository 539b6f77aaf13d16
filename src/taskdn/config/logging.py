"""Route taskdn's log records through structlog.

Library modules only call ``logging.getLogger(__name__)``. The CLI calls
:func:`configure_logging` once per invocation. After that every record
goes to stderr, either as a console line or (``--log-json``) as one JSON
object per line with an ISO timestamp.
"""

from __future__ import annotations

import logging
import sys

import structlog
from structlog.types import Processor

LOGGER_NAME = "taskdn"


def _pre_chain(*, log_json: bool) -> list[Processor]:
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
    ]
    if log_json:
        chain += [
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
        ]
    return chain


def _renderer(*, log_json: bool) -> Processor:
    if log_json:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        verbose: Let ``taskdn`` loggers emit DEBUG records. Otherwise
            only warnings and errors are shown.
        log_json: Render JSON lines instead of console output.
    """
    pre_chain = _pre_chain(log_json=log_json)

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_json=log_json),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.WARNING)
    logging.getLogger(LOGGER_NAME).setLevel(logging.DEBUG if verbose else logging.WARNING)
