"""Logging bootstrap for gsoc2-cli.

All modules log through ``logging.getLogger(__name__)`` under the
``gsoc2_cli`` namespace.  :func:`bind_logger` attaches one Rich handler
writing to stderr; it is called once per process by the CLI entry point.
"""

from __future__ import annotations

import logging
import threading

from rich.console import Console
from rich.logging import RichHandler

from gsoc2_cli.core.models import TRACE, LogLevel
from gsoc2_cli.exceptions import LoggerBindError

ROOT_LOGGER_NAME: str = "gsoc2_cli"
DEFAULT_LEVEL: int = logging.WARNING

logging.addLevelName(TRACE, "TRACE")

_lock = threading.Lock()
_handler: logging.Handler | None = None


def bind_logger(level: int = DEFAULT_LEVEL) -> logging.Logger:
    """Attach the stderr handler to the ``gsoc2_cli`` logger.

    Raises
    ------
    LoggerBindError
        When the handler was already bound in this process.
    """
    global _handler
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    with _lock:
        if _handler is not None:
            raise LoggerBindError("The logger is already bound to this process.")
        _handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=False,
            markup=False,
        )
        logger.addHandler(_handler)
    logger.propagate = False
    logger.setLevel(level)
    return logger


def set_max_level(level: LogLevel) -> None:
    """Change the effective verbosity of all gsoc2-cli loggers."""
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level.numeric)


def effective_level() -> int:
    return logging.getLogger(ROOT_LOGGER_NAME).getEffectiveLevel()


def unbind_logger() -> None:
    """Detach the handler installed by :func:`bind_logger`, if any."""
    global _handler
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    with _lock:
        if _handler is not None:
            logger.removeHandler(_handler)
            _handler = None
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
