"""Logging setup for the notemarker package.

Every module logs under the ``notemarker`` namespace through
``get_logger(__name__)``. The CLI calls setup_logging once with the
configured level; library use without it gets INFO messages on stderr.
"""

import logging
import sys
from pathlib import Path
from typing import Final

LOG_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"
CONSOLE_FORMAT: Final[str] = "%(levelname)s: %(message)s"

LOGGER_PREFIX: Final[str] = "notemarker"

_logging_configured = False


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level: {level}")
    return resolved


def _console_handler(level: int, verbose: bool) -> logging.Handler:
    # stderr, so the import summary on stdout stays clean
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if verbose:
        handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    return handler


def _file_handler(log_file: Path | str, level: int) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))
    return handler


def setup_logging(
    level: int | str = logging.INFO,
    log_file: Path | str | None = None,
    console: bool = True,
    verbose: bool = False,
) -> logging.Logger:
    """Configure the notemarker logger.

    Calling it again replaces the handlers of the previous call, closing
    any open log file.

    Args:
        level: Logging level name or number
        log_file: Optional log file; its directory is created if needed
        console: Log to stderr
        verbose: Timestamped console format instead of "LEVEL: message"

    Returns:
        The package logger

    Raises:
        ValueError: If level is not a logging level name

    Example:
        >>> setup_logging("DEBUG", log_file="logs/import.log")
    """
    global _logging_configured

    level = _resolve_level(level)
    package_logger = logging.getLogger(LOGGER_PREFIX)
    package_logger.setLevel(level)

    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()

    if console:
        package_logger.addHandler(_console_handler(level, verbose))
    if log_file:
        package_logger.addHandler(_file_handler(log_file, level))

    _logging_configured = True
    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger for a module, placed under the notemarker namespace."""
    if not _logging_configured:
        setup_logging()

    if name != LOGGER_PREFIX and not name.startswith(f"{LOGGER_PREFIX}."):
        name = f"{LOGGER_PREFIX}.{name}"
    return logging.getLogger(name)
