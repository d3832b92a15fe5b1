"""Structured logging configuration -- structlog + stdlib integration.

Provides a single :func:`setup_logging` entry-point that configures
**structlog** and Python's built-in :mod:`logging` so that every log
statement flows through one processor pipeline and renderer on stderr.

Processors added to every log event:

* **timestamp** -- UTC ISO-8601
* **log level** -- ``debug`` / ``info`` / ``warning`` / ``error``
* **logger name** -- the name the logger was created with
* **app** -- always ``kawatte``, so the lines are easy to grep in CI output

With ``json_output=True`` events are rendered as single-line JSON objects.
Otherwise they use :class:`structlog.dev.ConsoleRenderer`.

Stdout is left alone: it carries the dry-run report only.
"""
from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

APP_NAME = "kawatte"


def _add_app_name(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Structlog processor that tags every event with the application name."""
    event_dict.setdefault("app", APP_NAME)
    return event_dict


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def setup_logging(
    level: str = "warning",
    json_output: bool = False,
    stream: Any = None,
) -> None:
    """Configure structlog with stdlib logging integration.

    Args:
        level: Log level string (``debug``, ``info``, ``warning``, ``error``).
            Unknown values fall back to ``warning``.
        json_output: If ``True``, output JSON lines; otherwise human-readable
            output.
        stream: Destination stream, ``sys.stderr`` when omitted.
    """
    log_level = getattr(logging, level.upper(), None)
    if not isinstance(log_level, int):
        log_level = logging.WARNING
    stream = stream if stream is not None else sys.stderr

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        _add_app_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: Any = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=hasattr(stream, "isatty") and stream.isatty(),
            pad_event=30,
        )

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(log_level)

    structlog.get_logger(__name__).debug(
        "logging_configured",
        level=logging.getLevelName(log_level).lower(),
        json_output=json_output,
    )


def get_logger(name: str | None = None) -> Any:
    """Return a structlog bound logger.

    Thin wrapper so callers do not need to import structlog directly::

        from kawatte.infrastructure.logging import get_logger
        logger = get_logger(__name__)
    """
    return structlog.get_logger(name)


__all__ = ["APP_NAME", "get_logger", "setup_logging"]
