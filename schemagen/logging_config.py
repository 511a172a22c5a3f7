"""Logging setup for schemagen.

Every module gets its logger through get_logger(__name__). Nothing is
printed until setup_logging() attaches handlers to the package logger.
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "schemagen"

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_configured = False

# Library code stays silent unless the application configures logging.
logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def get_logger(name: str) -> logging.Logger:
    """Return a logger below the package logger.

    Args:
        name: Module name, typically __name__.

    Returns:
        The logger instance.
    """
    if not name.startswith(PACKAGE_LOGGER):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: int | str = logging.WARNING,
    log_file: str | Path | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Configure console (rich) and optional file logging.

    Args:
        level: Log level for the package logger.
        log_file: Optional path of a file receiving every record.
        console: Console used by the rich handler (stderr by default).

    Returns:
        The configured package logger.
    """
    global _configured

    logger = logging.getLogger(PACKAGE_LOGGER)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    if _configured:
        for handler in list(logger.handlers):
            if not isinstance(handler, logging.NullHandler):
                logger.removeHandler(handler)
                handler.close()

    rich_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(level)
    logger.addHandler(rich_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        file_handler.setLevel(logging.DEBUG)
        logger.addHandler(file_handler)
        logger.setLevel(min(level, logging.DEBUG))

    logger.propagate = False
    _configured = True
    return logger
