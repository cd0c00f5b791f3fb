"""Shared logger setup for the solver packages."""

from __future__ import annotations

import logging

LOGGER_NAME = "tenner"


def get_logger() -> logging.Logger:
    """
    Return the logger shared by the engine, the seeder and the grid helpers.

    A stream handler printing WARNING and above is attached the first time,
    unless the host application already configured one.
    """
    logger = logging.getLogger(LOGGER_NAME)

    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter(
            "%(asctime)s [%(levelname)s] [%(name)s] %(message)s"
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.setLevel(logging.WARNING)

    return logger


def set_verbosity(verbose: bool) -> None:
    """Switch the shared logger between DEBUG and WARNING output."""
    get_logger().setLevel(logging.DEBUG if verbose else logging.WARNING)
