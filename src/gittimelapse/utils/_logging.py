"""Logging utilities for gittimelapse.

This module provides standalone structlog logger factories. Each logger is
self-contained and does not modify global structlog configuration, so the
library can be embedded without touching the host application's logging.
"""

import logging
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal, TextIO, cast

import structlog

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

LogFormatType = Literal["json", "text"]

DEBUG_ENV_VAR = "GITTIMELAPSE_DEBUG"


def _log_level_from_string(level: str, *, respect_env: bool = False) -> int:
    """Convert a log level string to a logging level integer.

    Args:
        level: Log level string (debug, info, warning, error).
        respect_env: If True, GITTIMELAPSE_DEBUG overrides to DEBUG level.

    Returns:
        The logging level as an integer.
    """
    if respect_env and getenv(DEBUG_ENV_VAR, None):
        return logging.DEBUG

    log_levels = logging.getLevelNamesMapping()
    return log_levels.get(level.upper(), logging.INFO)


def _create_logger(
    stream: TextIO,
    *,
    log_level: int,
    log_format: LogFormatType = "json",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a standalone structlog logger writing to ``stream``.

    Args:
        stream: Open text stream receiving one rendered line per event.
        log_level: Minimum level that is emitted.
        log_format: Output format, either "json" or "text".

    Returns:
        A configured FilteringBoundLogger instance.
    """
    processors: list[structlog.typing.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        # "timestamp [level] event key=value ..."
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.WriteLoggerFactory(file=stream)(),
            processors=processors,
            wrapper_class=structlog.make_filtering_bound_logger(log_level),
            context_class=dict,
        ),
    )


@contextmanager
def open_cli_logger(
    *,
    level: str = "info",
    log_format: LogFormatType = "text",
    log_file: str = "",
    verbose: bool = False,
    command: str = "",
) -> Iterator["FilteringBoundLogger"]:  # noqa: UP037
    """Open a logger for the command-line interface.

    Logs go to ``log_file`` when one is configured and to stderr otherwise,
    so they never interleave with the rendered revisions on stdout. The log
    file is closed when the context exits.

    The log level is determined by (in order of precedence):
    1. ``verbose`` (enables DEBUG, which carries the timing diagnostics)
    2. GITTIMELAPSE_DEBUG environment variable (if set, enables DEBUG)
    3. The ``level`` parameter

    Args:
        level: Log level threshold (debug, info, warning, error).
        log_format: Output format, either "json" or "text".
        log_file: Path to a log file opened in append mode (stderr if empty).
        verbose: Force DEBUG level.
        command: Name of the CLI command for context (bound to all entries).

    Yields:
        A FilteringBoundLogger instance configured for CLI logging.
    """
    effective_level = (
        logging.DEBUG if verbose else _log_level_from_string(level, respect_env=True)
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        stream: TextIO = log_path.open("a", encoding="utf-8")
    else:
        stream = sys.stderr

    logger = _create_logger(stream, log_level=effective_level, log_format=log_format)
    try:
        yield logger.bind(command=command) if command else logger
    finally:
        if stream is not sys.stderr:
            stream.close()


def create_null_logger() -> "FilteringBoundLogger":  # noqa: UP037
    """Create a logger that discards every event below CRITICAL.

    Used as the default for library objects constructed without a logger.
    """
    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            structlog.ReturnLogger(),
            processors=[],
            wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL),
            context_class=dict,
        ),
    )


@contextmanager
def log_duration(
    logger: "FilteringBoundLogger",  # noqa: UP037
    event: str,
    **fields: Any,  # pyright: ignore[reportExplicitAny,reportAny]
) -> Iterator[dict[str, Any]]:  # pyright: ignore[reportExplicitAny]
    """Log how long the enclosed block took, at DEBUG level.

    The yielded dictionary may be filled with extra fields that are only known
    once the block has run (result sizes, counts).

    Args:
        logger: Logger receiving the event.
        event: Event name.
        **fields: Fields bound to the event.

    Yields:
        A mutable dictionary merged into the logged fields.

    Example:
        >>> with log_duration(logger, "history_walk", path="f.txt") as extra:
        ...     commits = walker.find_commits("HEAD", "f.txt")
        ...     extra["commits"] = len(commits)
    """
    extra: dict[str, Any] = {}  # pyright: ignore[reportExplicitAny]
    started = time.perf_counter()
    try:
        yield extra
    finally:
        elapsed_ms = round((time.perf_counter() - started) * 1000, 3)
        logger.debug(event, duration_ms=elapsed_ms, **fields, **extra)
