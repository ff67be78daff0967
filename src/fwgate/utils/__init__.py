"""Shared utilities for fwgate."""

from ._logging import LogFormatType, create_cli_logger, create_supervisor_logger
from ._paths import (
    get_cli_log_file,
    get_fwgate_dir,
    get_fwgate_log_dir,
    get_supervisor_log_file,
)

__all__ = [
    "LogFormatType",
    "create_cli_logger",
    "create_supervisor_logger",
    "get_cli_log_file",
    "get_fwgate_dir",
    "get_fwgate_log_dir",
    "get_supervisor_log_file",
]
