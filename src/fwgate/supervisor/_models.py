"""Data models for the supervisor system.

This module defines the core data types for daemon management:
- RestartPolicy: Per-daemon rule for automatic restarts
- DaemonStatus: Lifecycle states for managed daemons
- DaemonSpec: Immutable daemon configuration
- DaemonState: Mutable runtime state
- LogLine: A captured line of daemon output
- ExitOutcome / RestartDecision: Inputs and outputs of the restart policy
- SupervisorEventType / SupervisorEvent: Lifecycle event records
"""

from dataclasses import dataclass, field, replace
from enum import StrEnum
from pathlib import Path  # noqa: TC003 - Used in runtime type annotations
from typing import Literal

LogStream = Literal["stdout", "stderr"]


class RestartPolicy(StrEnum):
    """Whether an unexpected exit should trigger an automatic restart.

    - ALWAYS: Restart after any unrequested exit, up to max_restarts
    - NEVER: Never restart automatically
    - ON_FAILURE: Restart only after a non-clean exit, up to max_restarts
    """

    ALWAYS = "always"
    NEVER = "never"
    ON_FAILURE = "on-failure"


class DaemonStatus(StrEnum):
    """Daemon lifecycle states.

    Allowed transitions:
    - STOPPED -> STARTING: start requested (manual or automatic)
    - STARTING -> RUNNING: the OS reported a live pid
    - STARTING -> STOPPED: the spawn failed
    - STARTING | RUNNING -> STOPPING: stop requested
    - STOPPING -> STOPPED: process confirmed exited
    - RUNNING -> STOPPED: process exited without a stop request
    """

    STOPPED = "stopped"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


class RestartReason(StrEnum):
    """Why the restart policy reached its decision."""

    SCHEDULED = "scheduled"
    REQUESTED = "requested"
    POLICY_NEVER = "policy-never"
    CLEAN_EXIT = "clean-exit"
    MAX_RESTARTS = "max-restarts"


class SupervisorEventType(StrEnum):
    """Types of daemon lifecycle events.

    - STARTED: Daemon process has been spawned
    - STOPPED: Daemon stopped by request or exited cleanly
    - CRASHED: Daemon exited unexpectedly with a failure
    - RESTARTING: An automatic restart has been scheduled
    - FAILED: A spawn failed or the restart budget is exhausted
    - HEALTH_CHANGED: The health probe result flipped
    """

    STARTED = "started"
    STOPPED = "stopped"
    CRASHED = "crashed"
    RESTARTING = "restarting"
    FAILED = "failed"
    HEALTH_CHANGED = "health_changed"


@dataclass(frozen=True, slots=True)
class DaemonSpec:
    """Configuration for a managed daemon.

    Attributes:
        name: Unique identifier for the daemon.
        command: Executable and arguments to run.
        port: Port the daemon listens on. Informational, except for health probing.
        restart_policy: Rule governing automatic restarts.
        max_restarts: Cap on automatic restarts before giving up.
        restart_delay_ms: Delay before an automatic restart attempt.
        cwd: Working directory for the process.
        env: Extra environment variables merged over the host environment.
        health_endpoint: HTTP path probed on localhost:port, if any.
    """

    name: str
    command: tuple[str, ...]
    port: int | None = None
    restart_policy: RestartPolicy = RestartPolicy.ALWAYS
    max_restarts: int = 5
    restart_delay_ms: int = 1000
    cwd: Path | None = None
    env: dict[str, str] = field(default_factory=dict)
    health_endpoint: str | None = None

    @property
    def has_health_check(self) -> bool:
        """Return True if the daemon can be health probed."""
        return self.port is not None and bool(self.health_endpoint)


@dataclass(slots=True)
class DaemonState:
    """Mutable runtime state of a daemon.

    Owned by the supervisor. Callers receive copies made by snapshot().

    Attributes:
        name: Name of the daemon this state belongs to.
        status: Current lifecycle state.
        pid: Process ID while starting or running.
        port: Port copied from the DaemonSpec.
        started_at: ISO 8601 timestamp of the last spawn.
        stopped_at: ISO 8601 timestamp of the last exit.
        restart_count: Automatic restarts since the last manual start or restart.
        last_exit_code: Exit code of the most recent exit.
        last_signal: Signal number that terminated the most recent run.
        last_error: Reason for the most recent failure.
        last_health_check: ISO 8601 timestamp of the last health probe.
        healthy: Result of the last health probe.
        uptime: Seconds since started_at, filled in by snapshots of running daemons.
    """

    name: str
    status: DaemonStatus = DaemonStatus.STOPPED
    pid: int | None = None
    port: int | None = None
    started_at: str | None = None
    stopped_at: str | None = None
    restart_count: int = 0
    last_exit_code: int | None = None
    last_signal: int | None = None
    last_error: str | None = None
    last_health_check: str | None = None
    healthy: bool | None = None
    uptime: int | None = None

    def snapshot(self, *, uptime: int | None = None) -> "DaemonState":  # noqa: UP037
        """Return a detached copy of this state."""
        return replace(self, uptime=uptime)


@dataclass(frozen=True, slots=True)
class LogLine:
    """A single line of daemon output.

    Attributes:
        timestamp: ISO 8601 timestamp when the line was captured.
        stream: Which output stream the line came from.
        text: The line without its trailing newline.
    """

    timestamp: str
    stream: LogStream
    text: str


@dataclass(frozen=True, slots=True)
class ExitOutcome:
    """How a daemon process instance ended.

    Attributes:
        exit_code: Process exit code, if it exited normally.
        signal: Signal number, if it was terminated by a signal.
        was_requested: True if the supervisor asked the process to stop.
        error: Spawn error message, if the process never started.
    """

    exit_code: int | None = None
    signal: int | None = None
    was_requested: bool = False
    error: str | None = None

    @classmethod
    def from_returncode(
        cls,
        returncode: int,
        *,
        was_requested: bool,
    ) -> "ExitOutcome":  # noqa: UP037
        """Build an outcome from a subprocess return code.

        Negative return codes mean the process was killed by that signal.
        """
        if returncode < 0:
            return cls(signal=-returncode, was_requested=was_requested)
        return cls(exit_code=returncode, was_requested=was_requested)

    @classmethod
    def spawn_failure(cls, error: str) -> "ExitOutcome":  # noqa: UP037
        """Build a failing outcome for a command that could not be started."""
        return cls(error=error)

    @property
    def is_clean(self) -> bool:
        """Return True if the process exited on its own with code 0."""
        return self.error is None and self.signal is None and self.exit_code == 0


@dataclass(frozen=True, slots=True)
class RestartDecision:
    """Result of the restart policy.

    Attributes:
        should_restart: Whether to schedule an automatic restart.
        delay_ms: Delay before the restart, zero when not restarting.
        reason: Why the decision was reached.
    """

    should_restart: bool
    delay_ms: int
    reason: RestartReason


@dataclass(frozen=True, slots=True)
class SupervisorEvent:
    """Immutable daemon lifecycle event.

    Events are emitted to OutputSinks for logging, monitoring, or UI updates.

    Attributes:
        daemon_name: Name of the daemon that generated the event.
        event_type: Type of lifecycle event.
        timestamp: ISO 8601 formatted timestamp.
        status: Daemon status after the event.
        pid: Process ID if applicable.
        port: Port from the daemon spec.
        exit_code: Exit code if the process terminated.
        restart_count: Restart count after the event.
        message: Optional human-readable message.
    """

    daemon_name: str
    event_type: SupervisorEventType
    timestamp: str
    status: DaemonStatus
    pid: int | None = None
    port: int | None = None
    exit_code: int | None = None
    restart_count: int = 0
    message: str | None = None
