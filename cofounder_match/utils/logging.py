"""Logging setup for the matching engine.

Modules log through ``logging.getLogger(__name__)``. Everything under the
``cofounder_match`` namespace goes to one stderr handler, which leaves stdout
to the CLI's JSON output.
"""

import logging
import sys

LOGGER_NAME = "cofounder_match"
HANDLER_NAME = f"{LOGGER_NAME}.stderr"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _resolve_level(level: str | None) -> int:
    if level is None:
        from cofounder_match.config.settings import get_settings

        level = get_settings().log_level
    return getattr(logging, level.upper(), logging.INFO)


def _find_handler(logger: logging.Logger) -> logging.Handler | None:
    for handler in logger.handlers:
        if handler.get_name() == HANDLER_NAME:
            return handler
    return None


def configure_logging(level: str | None = None) -> logging.Logger:
    """Install the stderr handler on the package logger.

    Calling it again only changes the level.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to
            ``Settings.log_level``; unknown names fall back to INFO.

    Returns:
        The ``cofounder_match`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    log_level = _resolve_level(level)
    logger.setLevel(log_level)

    handler = _find_handler(logger)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler.set_name(HANDLER_NAME)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
        logger.addHandler(handler)
        logger.propagate = False
    handler.setLevel(log_level)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger, e.g. ``get_logger("cli")`` -> ``cofounder_match.cli``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


def reset_logging() -> None:
    """Remove the package handler and restore propagation (used by tests)."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
