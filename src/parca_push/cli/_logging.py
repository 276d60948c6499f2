from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
LOG_LEVELS = ("debug", "info", "warning", "error")


def setup_logging(level: str = "warning") -> None:
    """Send ``parca_push`` log records to stderr at ``level``."""
    logger = logging.getLogger("parca_push")

    # Avoid duplicate handlers when the command is invoked more than once in-process.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(level.upper())
    logger.propagate = False


__all__ = ["LOG_FORMAT", "LOG_LEVELS", "setup_logging"]
