"""Logging setup built on loguru."""

import sys

from loguru import logger

DEFAULT_LEVEL = "WARNING"
VERBOSE_LEVEL = "DEBUG"
LOG_FORMAT = "<level>{level: <8}</level> | {name}:{line} - {message}"


def configure_logging(verbose: bool = False) -> None:
    """Replace loguru's default handler with a single stderr sink."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=VERBOSE_LEVEL if verbose else DEFAULT_LEVEL,
        format=LOG_FORMAT,
        backtrace=False,
        diagnose=False,
    )
