"""Logging configuration for the command line entry point."""

import logging
import os
import sys
from typing import Optional

LOG_HANDLER_NAME = "syllabus2cal-console"
LOG_LEVEL_ENV_VAR = "SYLLABUS2CAL_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_configured_log_level(default: int = logging.WARNING) -> int:
    """Resolve the log level from the environment (name or number)."""
    value = os.getenv(LOG_LEVEL_ENV_VAR, "").strip()
    if not value:
        return default

    try:
        return int(value)
    except ValueError:
        resolved = getattr(logging, value.upper(), None)
        if isinstance(resolved, int):
            return resolved
        return default


def configure_logging(level: Optional[int] = None) -> int:
    """Send log records to stderr, installing the handler only once.

    Args:
        level: Explicit level; the environment decides when omitted.

    Returns:
        The level that was applied.
    """
    resolved = level if level is not None else get_configured_log_level()

    root_logger = logging.getLogger()
    handler = next(
        (h for h in root_logger.handlers if h.get_name() == LOG_HANDLER_NAME),
        None,
    )
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(LOG_HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root_logger.addHandler(handler)

    handler.setLevel(resolved)
    if root_logger.level == logging.NOTSET or root_logger.level > resolved:
        root_logger.setLevel(resolved)
    return resolved
