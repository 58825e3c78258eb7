"""
Logging configuration for velquad.

All modules log through children of the package logger ("velquad"), which
gets a console handler and, optionally, a file handler. Call
setup_logging() once from the entry point; library code only calls
logging.getLogger(__name__).
"""

import logging
from typing import Optional, Union

NAME = "velquad"
FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"
DATE_FORMAT = "%H:%M:%S"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    file_name: Optional[str] = None,
    file_level: Union[int, str] = logging.DEBUG,
) -> logging.Logger:
    """
    Configure and return the package logger.

    Args:
        level: Console level (name or number)
        file_name: Optional path of a log file
        file_level: File handler level

    Returns:
        The "velquad" logger
    """
    log = logging.getLogger(NAME)
    remove_handlers(log)

    if isinstance(level, str):
        level = _parse_level(level)
    if isinstance(file_level, str):
        file_level = _parse_level(file_level)

    formatter = logging.Formatter(FORMAT, DATE_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    log.addHandler(console)

    min_level = level
    if file_name is not None:
        file_handler = logging.FileHandler(file_name, mode="w")
        file_handler.setLevel(file_level)
        file_handler.setFormatter(formatter)
        log.addHandler(file_handler)
        min_level = min(level, file_level)

    log.setLevel(min_level)
    log.propagate = False
    return log


def remove_handlers(log: logging.Logger) -> None:
    """Detach and close every handler on log."""
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()


def _parse_level(name: str) -> int:
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level '{name}'")
    return level
