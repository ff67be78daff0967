"""Structured log files for the supervisor and the CLI.

Every logger returned here is a standalone structlog logger bound to one
file. Nothing touches the global structlog or logging configuration, so a
supervisor embedded in another application leaves its host's logging alone.
"""

import logging
from logging.handlers import RotatingFileHandler
from os import getenv
from pathlib import Path
from typing import TYPE_CHECKING, Literal, cast

import structlog

from ._paths import get_cli_log_file, get_supervisor_log_file

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger, Processor

LogFormatType = Literal["json", "text"]

DEFAULT_BACKUP_COUNT = 3


def resolve_log_level(level: str | None = None) -> int:
    """Resolve the effective log level.

    FWGATE_DEBUG wins over everything, then the explicit `level`, then
    FWGATE_LOG_LEVEL. Unknown names fall back to INFO.
    """
    if getenv("FWGATE_DEBUG"):
        return logging.DEBUG

    name = level if level is not None else getenv("FWGATE_LOG_LEVEL", "info")
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def _processors(log_format: LogFormatType) -> list["Processor"]:  # noqa: UP037
    processors: list[Processor] = [
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if log_format == "json":
        processors.append(structlog.processors.dict_tracebacks)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))
    return processors


def _rotating_logger(
    log_path: Path,
    level: int,
    max_bytes: int,
    backup_count: int,
) -> logging.Logger:
    # One private stdlib logger per file; re-creating it replaces the handler
    stdlib_logger = logging.getLogger(f"fwgate.log:{log_path.resolve()}")
    for handler in stdlib_logger.handlers:
        handler.close()
    stdlib_logger.handlers.clear()
    stdlib_logger.propagate = False
    stdlib_logger.setLevel(level)

    handler = RotatingFileHandler(log_path, maxBytes=max_bytes, backupCount=backup_count)
    handler.setFormatter(logging.Formatter("%(message)s"))
    stdlib_logger.addHandler(handler)
    return stdlib_logger


def _create_logger(
    log_file_path: str,
    *,
    log_level: int | None = None,
    log_format: LogFormatType = "json",
    max_bytes: int | None = None,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a logger that appends to one file.

    Args:
        log_file_path: Log file; missing parent directories are created.
        log_level: Level threshold. Resolved from the environment if None.
        log_format: "json" for one JSON object per line, "text" for key=value.
        max_bytes: Rotate once the file reaches this size. No rotation if None.
        backup_count: Rotated files to keep.
    """
    log_path = Path(log_file_path)
    log_path.parent.mkdir(parents=True, exist_ok=True)
    level = log_level if log_level is not None else resolve_log_level()

    raw_logger: object
    if max_bytes:
        raw_logger = _rotating_logger(log_path, level, max_bytes, backup_count)
    else:
        raw_logger = structlog.WriteLogger(file=log_path.open("a"))

    return cast(
        "FilteringBoundLogger",
        structlog.wrap_logger(
            raw_logger,
            processors=_processors(log_format),
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
        ),
    )


def create_supervisor_logger(
    *,
    level: str | None = None,
    log_format: LogFormatType = "json",
    log_file: str = "",
    max_bytes: int | None = None,
    backup_count: int = DEFAULT_BACKUP_COUNT,
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create the logger used by SupervisorService.

    Args:
        level: Level name. See resolve_log_level for precedence.
        log_format: Output format, either "json" or "text".
        log_file: Log file. Defaults to supervisor.log in the fwgate log dir.
        max_bytes: Rotate once the file reaches this size.
        backup_count: Rotated files to keep.

    Returns:
        A logger bound with component="supervisor".
    """
    logger = _create_logger(
        log_file or str(get_supervisor_log_file()),
        log_level=resolve_log_level(level),
        log_format=log_format,
        max_bytes=max_bytes,
        backup_count=backup_count,
    )
    return logger.bind(component="supervisor")


def create_cli_logger(
    *,
    level: str | None = None,
    log_format: LogFormatType = "json",
    log_file: str = "",
    command: str = "",
) -> "FilteringBoundLogger":  # noqa: UP037
    """Create a logger for a CLI command, writing to cli.log by default."""
    logger = _create_logger(
        log_file or str(get_cli_log_file()),
        log_level=resolve_log_level(level),
        log_format=log_format,
    )
    return logger.bind(command=command) if command else logger
