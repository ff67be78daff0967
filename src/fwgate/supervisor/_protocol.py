"""Protocol definitions for the supervisor system.

This module defines the interfaces that decouple the supervisor core from
output/UI implementations and from the process layer:
- OutputSink: Protocol for consuming daemon output and events
- LineSink: Callback a ProcessController uses to hand over output lines
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ._models import LogStream, SupervisorEvent

LineSink = Callable[[int, "LogStream", str], Awaitable[None]]
"""Receives (pid, stream, line) for each line a process writes."""


@runtime_checkable
class OutputSink(Protocol):
    """Protocol for consuming daemon output lines and lifecycle events.

    OutputSinks receive output from managed daemons and can format, store,
    or display it. The protocol is async to support non-blocking I/O
    operations like writing to files or pushing to websockets.

    Errors raised by a sink are logged by the supervisor and otherwise
    ignored.
    """

    async def write_line(
        self,
        daemon_name: str,
        pid: int,
        stream: LogStream,
        line: str,
    ) -> None:
        """Write a line of daemon output.

        Args:
            daemon_name: Name of the daemon that produced the output.
            pid: Process ID of the daemon.
            stream: Which output stream the line came from.
            line: The redacted output line (without trailing newline).
        """
        ...

    async def write_event(self, event: SupervisorEvent) -> None:
        """Write a daemon lifecycle event.

        Args:
            event: The lifecycle event to record.
        """
        ...
