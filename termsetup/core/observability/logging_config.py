"""
Logging configuration — diagnostic logs for a termsetup run.

Configured once by the CLI. Modules log through
``logging.getLogger(__name__)``; stage banners ("==> Installing Oh My
Zsh...") are printed by the CLI with click and are not log records,
so they stay visible at the default WARNING level.

Console level, highest precedence first:
    --debug / --verbose / --quiet  >  TERMSETUP_LOG_LEVEL  >  WARNING

TERMSETUP_LOG_FILE adds a file handler at TERMSETUP_LOG_FILE_LEVEL
(default: the console level).
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping

LEVEL_ENV_VAR = "TERMSETUP_LOG_LEVEL"
FILE_ENV_VAR = "TERMSETUP_LOG_FILE"
FILE_LEVEL_ENV_VAR = "TERMSETUP_LOG_FILE_LEVEL"

# (max level, format, datefmt); first row whose level >= the console level wins
_CONSOLE_FORMATS = (
    (logging.DEBUG, "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s", "%H:%M:%S"),
    (logging.INFO, "%(asctime)s [%(name)s] %(message)s", "%H:%M:%S"),
    (logging.CRITICAL, "%(message)s", None),
)
_FILE_FORMAT = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d  %(message)s"
_FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def resolve_level(
    debug: bool = False,
    verbose: bool = False,
    quiet: bool = False,
    environ: Mapping[str, str] | None = None,
) -> str:
    """Console level name from the CLI flags, then the environment."""
    if debug:
        return "DEBUG"
    if verbose:
        return "INFO"
    if quiet:
        return "ERROR"
    env = os.environ if environ is None else environ
    return env.get(LEVEL_ENV_VAR) or "WARNING"


def setup_logging(
    level: str = "WARNING",
    log_file: str | None = None,
    log_file_level: str | None = None,
) -> None:
    """Replace the root logger's handlers with a stderr handler (and a file one).

    Args:
        level: Console level name.
        log_file: Optional log file path.
        log_file_level: Level for the file; defaults to ``level``.
    """
    console_level = _parse_level(level)
    fmt, datefmt = next(
        (f, d) for max_level, f, d in _CONSOLE_FORMATS if console_level <= max_level
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)
    root_level = console_level

    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else console_level
        handler = logging.FileHandler(log_file, encoding="utf-8")
        handler.setLevel(file_level)
        handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt=_FILE_DATEFMT))
        root.addHandler(handler)
        root_level = min(root_level, file_level)

    root.setLevel(root_level)
    logging.raiseExceptions = False


def setup_from_env(level: str, environ: Mapping[str, str] | None = None) -> None:
    """``setup_logging`` with the file handler taken from the environment."""
    env = os.environ if environ is None else environ
    setup_logging(
        level=level,
        log_file=env.get(FILE_ENV_VAR) or None,
        log_file_level=env.get(FILE_LEVEL_ENV_VAR) or None,
    )


def _parse_level(level: str | None) -> int:
    """Level name to number; unknown names fall back to WARNING."""
    numeric = getattr(logging, level.upper(), None) if level else None
    return numeric if isinstance(numeric, int) else logging.WARNING
