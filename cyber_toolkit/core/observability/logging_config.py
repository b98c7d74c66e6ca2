"""
Logging configuration — central setup for the CLI entrypoint.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

Console level, in precedence order:
    --debug / --verbose / --quiet  >  CTK_LOG_LEVEL  >  WARNING

A log file is added when CTK_LOG_FILE is set. Package-manager command
lines are logged at INFO and their output tails at DEBUG, so
CTK_LOG_FILE_LEVEL=DEBUG keeps a full transcript of a run while the
console stays quiet.
"""

from __future__ import annotations

import logging
import os
import sys

ENV_LOG_LEVEL = "CTK_LOG_LEVEL"
ENV_LOG_FILE = "CTK_LOG_FILE"
ENV_LOG_FILE_LEVEL = "CTK_LOG_FILE_LEVEL"

# WARNING and above: just the message
_FMT_MINIMAL = "%(levelname)s: %(message)s"

# INFO: timestamp and the module that logged
_FMT_VERBOSE = "%(asctime)s [%(name)s] %(message)s"

# DEBUG and file output: file:line
_FMT_DETAIL = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d — %(message)s"

_DATEFMT_CONSOLE = "%H:%M:%S"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"


def resolve_level(*, debug: bool = False, verbose: bool = False, quiet: bool = False) -> str:
    """Pick the console level from CLI flags, falling back to CTK_LOG_LEVEL."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    return os.environ.get(ENV_LOG_LEVEL, "WARNING")


def setup_from_env(level: str) -> None:
    """Configure logging with file output taken from the environment."""
    setup_logging(
        level=level,
        log_file=os.environ.get(ENV_LOG_FILE),
        log_file_level=os.environ.get(ENV_LOG_FILE_LEVEL),
    )


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root handlers with a console handler and an optional file.

    Args:
        level: Console level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to a log file.
        log_file_level: Level for the log file; defaults to ``level``.
    """
    console_level = _parse_level(level)

    if console_level <= logging.DEBUG:
        console_fmt = logging.Formatter(_FMT_DETAIL, datefmt=_DATEFMT_CONSOLE)
    elif console_level <= logging.INFO:
        console_fmt = logging.Formatter(_FMT_VERBOSE, datefmt=_DATEFMT_CONSOLE)
    else:
        console_fmt = logging.Formatter(_FMT_MINIMAL)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(console_fmt)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_DETAIL, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Level name → numeric level; unknown or empty names mean WARNING."""
    numeric = getattr(logging, level.upper(), None) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
