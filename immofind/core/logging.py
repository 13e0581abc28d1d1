"""Logging configuration for immofind.

structlog on top of the standard library: plain console output while
developing, JSON lines when ``IMMOFIND_JSON_LOGS`` is set.
"""

from __future__ import annotations

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

LOG_DIR = Path(__file__).resolve().parents[2] / "logs"
LOG_FILE = LOG_DIR / "immofind.log"

_configured: bool = False


def _build_handlers() -> list[logging.Handler]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    # No log files from test runs
    if os.environ.get("PYTEST_CURRENT_TEST"):
        return handlers

    try:
        LOG_DIR.mkdir(exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                str(LOG_FILE), maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
            )
        )
    except OSError:
        # Read-only checkout: console logging only
        pass
    return handlers


def configure_logging(
    level: str | None = None,
    json_output: bool | None = None,
) -> structlog.stdlib.BoundLogger:
    """Configure structured logging for the application.

    Safe to call more than once; only the first call has an effect.

    Args:
        level: Log level name. Defaults to ``LOGLEVEL`` or the app settings.
        json_output: Render JSON instead of console lines. Defaults to the
            ``json_logs`` app setting.

    Returns:
        Configured logger instance.
    """
    global _configured

    if _configured:
        return structlog.get_logger()

    from immofind.core.settings import get_settings

    app_settings = get_settings()
    log_level = (level or os.environ.get("LOGLEVEL") or app_settings.log_level).upper()
    numeric_level = getattr(logging, log_level, logging.INFO)
    if json_output is None:
        json_output = app_settings.json_logs

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        handlers=_build_handlers(),
        force=True,
    )

    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    _configured = True
    return structlog.get_logger()


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a logger, configuring logging lazily on first use.

    Args:
        name: Optional logger name (usually ``__name__``).
    """
    if not _configured:
        configure_logging()

    logger = structlog.get_logger()
    if name:
        return logger.bind(logger_name=name)
    return logger
