"""structlog setup for containerlog.

Configured once at import from the ``LOG_LEVEL`` environment variable so the
decoder can log before any config.toml is read. Output goes to stderr; stdout
belongs to the decoded messages the CLI prints.
"""

from __future__ import annotations

import logging
import os
import sys

import structlog


def _resolve_level(name: str | None) -> int:
    return getattr(logging, (name or "INFO").upper(), logging.INFO)


def _configure() -> structlog.stdlib.BoundLogger:
    # stdlib root logger carries the level; filter_by_level reads it
    logging.basicConfig(
        level=_resolve_level(os.environ.get("LOG_LEVEL")),
        format="%(message)s",
        stream=sys.stderr,
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger("containerlog")


logger = _configure()


def set_level(level_name: str) -> None:
    """Switch the log level after startup, e.g. to ``[logging] level`` from config."""
    logging.getLogger().setLevel(_resolve_level(level_name))
