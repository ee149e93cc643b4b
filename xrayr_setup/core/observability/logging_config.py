"""
Logging configuration: central setup for all entrypoints.

Called once at startup by main.py.  Every module that does
``logger = logging.getLogger(__name__)`` inherits this config.

The installer talks to the operator through the log: every console
line carries a coloured severity tag (``[INFO]``, ``[STEP]``,
``[WARN]``, ``[ERROR]``). STEP is a custom level between INFO and
WARNING used for the numbered step headers.

Levels are resolved in precedence order:
    CLI flag  >  XRAYR_SETUP_LOG_LEVEL env var  >  INFO (default)

Optional file output via XRAYR_SETUP_LOG_FILE / XRAYR_SETUP_LOG_FILE_LEVEL.
"""

from __future__ import annotations

import logging
import sys

import click

# ── Custom level ────────────────────────────────────────────────

STEP = 25
logging.addLevelName(STEP, "STEP")

# ── Format strings ──────────────────────────────────────────────

# INFO level: tag + message, what the operator sees by default
_FMT_CONSOLE = "%(tag)s %(message)s"

# Verbose: timestamped with module context
_FMT_VERBOSE = "%(asctime)s %(tag)s [%(name)s] %(message)s"
_DATEFMT_VERBOSE = "%H:%M:%S"

# DEBUG level: full diagnostic with file:line
_FMT_DEBUG = "%(asctime)s %(tag)s %(name)s:%(lineno)d - %(message)s"
_DATEFMT_DEBUG = "%H:%M:%S"

# File output: always full detail, never coloured
_FMT_FILE = "%(asctime)s %(levelname)-5s %(name)s:%(lineno)d - %(message)s"
_DATEFMT_FILE = "%Y-%m-%d %H:%M:%S"

_TAGS: dict[int, tuple[str, str]] = {
    logging.DEBUG: ("DEBUG", "white"),
    logging.INFO: ("INFO", "green"),
    STEP: ("STEP", "blue"),
    logging.WARNING: ("WARN", "yellow"),
    logging.ERROR: ("ERROR", "red"),
    logging.CRITICAL: ("ERROR", "red"),
}


class ConsoleFormatter(logging.Formatter):
    """Formatter that prefixes each record with a coloured ``[TAG]``."""

    def __init__(self, fmt: str, datefmt: str | None = None, color: bool = True):
        super().__init__(fmt, datefmt=datefmt)
        self._color = color

    def format(self, record: logging.LogRecord) -> str:
        label, colour = _TAGS.get(record.levelno, (record.levelname, "white"))
        tag = f"[{label}]"
        record.tag = click.style(tag, fg=colour, bold=True) if self._color else tag
        return super().format(record)


def step(logger: logging.Logger, message: str, *args: object) -> None:
    """Log a step header at the STEP level."""
    logger.log(STEP, message, *args)


def setup_logging(
    level: str = "INFO",
    verbose: bool = False,
    log_file: str | None = None,
    log_file_level: str | None = None,
    color: bool | None = None,
) -> None:
    """Configure Python logging for the entire process.

    Args:
        level: Log level name (DEBUG, INFO, STEP, WARNING, ERROR).
        verbose: Add timestamps and logger names to console lines.
        log_file: Optional path to a log file.
        log_file_level: Optional separate level for the log file.
            Defaults to the same as ``level``.
        color: Force colour on/off. Defaults to "stderr is a TTY".
    """
    numeric_level = _parse_level(level)
    if color is None:
        color = sys.stderr.isatty()

    # ── Console handler (stderr) ────────────────────────────────
    if numeric_level <= logging.DEBUG:
        fmt, datefmt = _FMT_DEBUG, _DATEFMT_DEBUG
    elif verbose:
        fmt, datefmt = _FMT_VERBOSE, _DATEFMT_VERBOSE
    else:
        fmt, datefmt = _FMT_CONSOLE, None

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(numeric_level)
    console.setFormatter(ConsoleFormatter(fmt, datefmt=datefmt, color=color))

    # ── Root logger ─────────────────────────────────────────────
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(console)

    # Effective root level = minimum of console and file levels
    effective_level = numeric_level

    # ── File handler (optional) ─────────────────────────────────
    if log_file:
        file_level = _parse_level(log_file_level) if log_file_level else numeric_level
        effective_level = min(effective_level, file_level)

        # Opened on the first record
        fh = logging.FileHandler(log_file, encoding="utf-8", delay=True)
        fh.setLevel(file_level)
        fh.setFormatter(logging.Formatter(_FMT_FILE, datefmt=_DATEFMT_FILE))
        root.addHandler(fh)

    root.setLevel(effective_level)

    # Don't propagate exceptions from logging itself
    logging.raiseExceptions = False


def _parse_level(level: str | None) -> int:
    """Convert a level name string to its numeric constant."""
    if not level:
        return logging.INFO
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        return logging.INFO
    return numeric
