"""Centralized logging configuration for junit2_reporter."""

import logging

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "junit2_reporter"

# Flag to track if we've already set up the package logger
_ROOT_LOGGER_CONFIGURED = False


def setup_root_logger(
    level: int = logging.INFO,
    handler: logging.Handler | None = None,
    console: Console | None = None,
) -> None:
    """Set up the package logger with a single handler.

    Calling it again is a no-op until ``reset_logging()`` is called.

    Args:
        level: Logging level (default: INFO).
        handler: Custom handler (defaults to a RichHandler on stderr).
        console: Rich console for the default handler.
    """
    global _ROOT_LOGGER_CONFIGURED

    if _ROOT_LOGGER_CONFIGURED:
        return

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    if handler is None:
        handler = RichHandler(
            console=console or Console(stderr=True),
            show_path=False,
            markup=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root_logger.addHandler(handler)

    # Keep propagating so pytest's caplog sees our records
    root_logger.propagate = True

    _ROOT_LOGGER_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package root.

    Args:
        name: Logger name; prefixed with ``junit2_reporter.`` when it is not
            already part of the package hierarchy.

    Returns:
        Logger inheriting the package handler and level.
    """
    setup_root_logger()

    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: int) -> None:
    """Set the log level for all package loggers."""
    setup_root_logger()

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)


def reset_logging() -> None:
    """Reset logging configuration (mainly for testing)."""
    global _ROOT_LOGGER_CONFIGURED
    _ROOT_LOGGER_CONFIGURED = False

    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)
