"""fwgate exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path


class FwgateError(Exception):
    """Base exception for fwgate errors."""


class ConfigError(FwgateError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded, parsed or validated."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column


# =============================================================================
# Supervisor Exceptions
# =============================================================================


class SupervisorError(FwgateError):
    """Base exception for supervisor errors."""


class DaemonNotFoundError(SupervisorError, KeyError):
    """Raised when a daemon name is not registered with the supervisor.

    Attributes:
        daemon_name: The name of the daemon that was not found.
    """

    def __init__(self, message: str, *, daemon_name: str) -> None:
        """Initialize with error message and daemon context.

        Args:
            message: Human-readable error message.
            daemon_name: The name of the daemon that was not found.
        """
        super().__init__(message)
        self.daemon_name: str = daemon_name

    def __str__(self) -> str:
        # KeyError would otherwise render the message with quotes
        return str(self.args[0])


class DuplicateDaemonError(SupervisorError, ValueError):
    """Raised when two daemon specs share the same name.

    Attributes:
        daemon_name: The name registered more than once.
    """

    def __init__(self, message: str, *, daemon_name: str) -> None:
        """Initialize with error message and daemon context.

        Args:
            message: Human-readable error message.
            daemon_name: The name registered more than once.
        """
        super().__init__(message)
        self.daemon_name: str = daemon_name


class SpawnError(SupervisorError):
    """Raised when the OS refuses to start a daemon's command.

    Attributes:
        daemon_name: The name of the daemon that failed to start.
        cause: The underlying exception that caused the failure.
    """

    def __init__(
        self,
        message: str,
        *,
        daemon_name: str,
        cause: Exception | None = None,
    ) -> None:
        """Initialize with error message and daemon context.

        Args:
            message: Human-readable error message.
            daemon_name: The name of the daemon that failed to start.
            cause: The underlying exception that caused the failure.
        """
        super().__init__(message)
        self.daemon_name: str = daemon_name
        self.cause: Exception | None = cause
