"""Logging configuration for the CLI and the API server.

Console output goes through rich; the level comes from the ``--log-level``
option or the ``FIGMA_SYNC_LOG_LEVEL`` environment variable.
"""

import logging
import os

from rich.logging import RichHandler

DEFAULT_LOG_LEVEL = "INFO"

_NOISY_LOGGERS = ("httpx", "httpcore", "sqlalchemy.engine")


def resolve_level(level: str | None = None) -> int:
    """Map a level name to its numeric value, falling back to INFO for unknown names."""
    name = (level or os.getenv("FIGMA_SYNC_LOG_LEVEL") or DEFAULT_LOG_LEVEL).upper()
    value = logging.getLevelName(name)
    return value if isinstance(value, int) else logging.INFO


def setup_logging(level: str | None = None) -> None:
    """Install a single ``RichHandler`` on the root logger, replacing one from an earlier call."""
    numeric = resolve_level(level)
    handler = RichHandler(rich_tracebacks=True, show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if isinstance(existing, RichHandler):
            root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric)

    # Third-party request logs only show up in debug runs
    if numeric > logging.DEBUG:
        for name in _NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
