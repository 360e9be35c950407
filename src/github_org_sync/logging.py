"""Logging setup for the sync, built on loguru.

Every module logs through ``get_logger(__name__)``. Records about a specific
repository, pull request or review carry ``kind`` and ``entity`` extras
(see ``bind_entity``), and the console format prints them in brackets so
skips, retries and failures always say what they touched:

    12:00:01 | WARNING  | sync [pull_request vercel/next.js#42] - PR not found, skipping

githubkit's httpx traffic and SQLAlchemy's engine log arrive through the
standard library and are routed into the same sinks.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from loguru import logger

if TYPE_CHECKING:
    from loguru import Logger, Record

LogLevel = Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_configured = False


def _console_format(record: Record) -> str:
    extra = record["extra"]
    source = "<cyan>{extra[name]}</cyan>" if "name" in extra else "<cyan>{name}</cyan>"
    if "entity" in extra:
        source += " <magenta>[{extra[kind]} {extra[entity]}]</magenta>"
    return (
        "<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | "
        + source
        + " - <level>{message}</level>\n{exception}"
    )


class InterceptHandler(logging.Handler):
    """Route standard library records (httpx, SQLAlchemy) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        from types import FrameType

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = str(record.levelno)

        frame: FrameType | None = logging.currentframe()
        depth = 2
        while frame is not None and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(
    level: LogLevel = "INFO",
    *,
    verbose: bool = False,
    quiet: bool = False,
    log_file: Path | None = None,
    rotation: str = "10 MB",
    retention: str = "7 days",
    serialize: bool = False,
) -> Logger:
    """Configure the console sink and, optionally, a rotating file sink.

    Args:
        level: Base log level from settings
        verbose: Use DEBUG (wins over quiet)
        quiet: Use WARNING
        log_file: Path of the rotating file sink, if any
        rotation: When to rotate the file (e.g. "10 MB", "1 day")
        retention: How long rotated files are kept
        serialize: Write file records as JSON lines

    Returns:
        The configured logger
    """
    global _configured

    effective_level: LogLevel
    if verbose:
        effective_level = "DEBUG"
    elif quiet:
        effective_level = "WARNING"
    else:
        effective_level = level

    logger.remove()
    logger.add(
        sys.stderr,
        level=effective_level,
        format=_console_format,
        colorize=True,
        backtrace=True,
        diagnose=verbose,
    )

    if log_file:
        # The file captures DEBUG regardless of the console level
        logger.add(
            log_file,
            level="DEBUG",
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | "
                "{name}:{line} | {extra} | {message}"
            ),
            rotation=rotation,
            retention=retention,
            compression="gz",
            serialize=serialize,
        )

    _intercept_stdlib_logging(effective_level)

    _configured = True
    return logger


def _intercept_stdlib_logging(level: LogLevel) -> None:
    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    debug = level in ("TRACE", "DEBUG")
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if debug else logging.WARNING)
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.DEBUG if debug else logging.WARNING)


def get_logger(name: str) -> Logger:
    """Get a logger with the module name bound.

    Usage:
        logger = get_logger(__name__)
        logger.info("Found {} repositories", len(repos))
    """
    return logger.bind(name=name)


def bind_entity(kind: str, identifier: str) -> Logger:
    """Logger for records about one synced entity.

    Args:
        kind: Entity kind ("repository", "pull_request", "review", "user")
        identifier: Human-readable id, e.g. ``vercel/next.js#42``
    """
    return logger.bind(name="sync", kind=kind, entity=identifier)


def bind_repo(full_name: str) -> Logger:
    return bind_entity("repository", full_name)


def bind_pr(full_name: str, number: int) -> Logger:
    return bind_entity("pull_request", f"{full_name}#{number}")


def is_configured() -> bool:
    return _configured


def reset_logging() -> None:
    """Remove every sink (used by tests)."""
    global _configured
    logger.remove()
    _configured = False
