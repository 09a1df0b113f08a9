"""Structured logging for the tracking runtime.

Library modules log through ``logging.getLogger(__name__)``.  This module
routes those records through structlog's ``ProcessorFormatter`` so the
host gets JSON or console lines with a timestamp, the logger name and any
bound context (``session_id``, ``measurement_id``).  Records still
propagate to the root logger.
"""

from __future__ import annotations

import logging
import sys
import uuid
from typing import IO, Any

import structlog

_HANDLER_NAME = "ga4_tracker"


def bind_session(session_id: str | None = None, **context: Any) -> str:
    """Bind a session id (and extra context) to subsequent log entries."""
    sid = session_id or uuid.uuid4().hex
    structlog.contextvars.bind_contextvars(session_id=sid, **context)
    return sid


def clear_session() -> None:
    structlog.contextvars.clear_contextvars()


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    *,
    stream: IO[str] | None = None,
) -> None:
    """Attach a structlog-rendered handler to the ``ga4_tracker`` logger.

    Calling again replaces the handler instead of stacking a second one.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR).
        format: "json" for collectors, "console" for a terminal.
        stream: Destination, stderr by default.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if format == "json":
        render: list[Any] = [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        render = [structlog.dev.ConsoleRenderer(colors=False)]

    structlog.configure(
        processors=shared + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=shared,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *render],
        )
    )

    package_logger = logging.getLogger("ga4_tracker")
    for existing in list(package_logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            package_logger.removeHandler(existing)
    package_logger.addHandler(handler)
    package_logger.setLevel(log_level)
