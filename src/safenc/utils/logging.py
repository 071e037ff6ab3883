"""Logging utilities."""

from __future__ import annotations

import logging
import sys


def setup_logging(
    level: int = logging.INFO,
    log_file: str | None = None,
) -> None:
    """Configure logging for safenc.

    Args:
        level: Logging level.
        log_file: Optional file path for logging.
    """
    handlers: list[logging.Handler] = [
        logging.StreamHandler(sys.stderr),
    ]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logger = logging.getLogger("safenc")
    logger.setLevel(level)
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    for handler in handlers:
        handler.setFormatter(formatter)
        logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger for a module.

    Args:
        name: Module name, without the package prefix.

    Returns:
        Logger under the ``safenc`` namespace.
    """
    return logging.getLogger(f"safenc.{name}")
