"""Logging setup for site builds."""

import sys

from loguru import logger


def configure_logging(*, verbose: bool = False, quiet: bool = False) -> str:
    """Send loguru output to stderr and return the chosen level.

    Build progress is logged at INFO; --quiet keeps warnings such as
    unordered chapter folders, --verbose adds per-file detail.
    """
    level = "DEBUG" if verbose else "WARNING" if quiet else "INFO"
    logger.remove()
    logger.add(sys.stderr, level=level, format="{level.icon} {message}")
    return level
