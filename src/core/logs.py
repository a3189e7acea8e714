"""Opt-in logging setup. The library itself only creates module level loggers and never installs handlers."""

import logging

from src.core.config import DEFAULT_LOG_LEVEL, LOG_FORMAT


def configure_logging(level: int | str = DEFAULT_LOG_LEVEL) -> logging.Logger:
    """Attach a stream handler to the package's root logger ('src'). Calling it again only changes the level."""
    logger = logging.getLogger("src")
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    logger.setLevel(level)
    return logger
