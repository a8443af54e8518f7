# Copyright (C) 2025-2026 Retio AI
# SPDX-License-Identifier: AGPL-3.0-only

"""Log output for the fieldguide CLI and library users.

Every module logs through ``logging.getLogger(__name__)``; configure() routes
those records through structlog so one stderr handler renders them all:

    fieldguide search sheep                      coloured console lines on a TTY
    fieldguide --log-json search sheep           one JSON object per line
    FIELDGUIDE_LOG_LEVEL=DEBUG fieldguide page mechanics/crops

The CLI binds ``command`` and ``lang`` with structlog.contextvars; both appear
on every line of that run. Imports nothing from fieldguide, so it can run
before the first fetch.
"""

from __future__ import annotations

import logging
import sys

import structlog

# Transport libraries that log every request at INFO.
_NOISY_LOGGERS = ("httpx", "httpcore")


def configure(
    *,
    json_output: bool = False,
    level: str = "INFO",
    quiet: tuple[str, ...] = _NOISY_LOGGERS,
) -> None:
    """Install the single stderr handler; safe to call repeatedly.

    Args:
        json_output: JSON lines (``--log-json``) instead of console output.
        level: Root logger level name; unknown names mean INFO.
        quiet: Logger names pinned to WARNING so per-request transport logs
            (httpx, httpcore) never drown out cache and search messages.
    """
    shared_processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)
