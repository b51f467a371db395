"""
Logging Configuration

Logging set-up for the orbital decay calculator.

The decay table goes to stdout (and the CSV log), so log records are sent to
stderr and never interleave with the report rows. decay_calculator.main()
calls configure_logging() once, switching to DEBUG with --verbose to trace
every emitted sample. The decay_service modules only create module-level
loggers and leave configuration to the caller, so importing them in tests or
other scripts has no side effects.

Usage:
    from logging_config import get_logger, configure_logging

    configure_logging(level=logging.DEBUG, log_file="decay_run.log")
    logger = get_logger(__name__)
    logger.info("Re-entry after 123.4 days")
"""

import logging
import sys
from typing import Optional

# Default logging format
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """
    Route calculator log records to stderr and optionally a file.

    Replaces any handlers already installed, so calling it again (for
    example from a test or a second CLI run) changes the level cleanly.

    Parameters
    ----------
    level : int
        Logging level (logging.DEBUG traces every sample)
    log_file : str, optional
        Path of a run log. If None, logs only to stderr.
    """
    handlers = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        datefmt=DATE_FORMAT,
        handlers=handlers,
        force=True,
    )


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance.

    Parameters
    ----------
    name : str
        Name of the logger (typically __name__)

    Returns
    -------
    logging.Logger
        Logger instance
    """
    return logging.getLogger(name)
