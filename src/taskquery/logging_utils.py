"""Configure loguru output for tools embedding the resolver."""

from __future__ import annotations

import sys

from loguru import logger

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{module}</cyan>:<cyan>{line}</cyan>\n"
    "{message}"
)


def configure_logging(level: str = "INFO") -> int:
    """Replace loguru's sinks with a single stderr sink at *level*.

    The library never calls this itself; applications opt in.

    Returns:
        The loguru handler id of the new sink.
    """
    logger.remove()
    return logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)
