"""Output sink implementations for the supervisor system.

This module provides concrete implementations of the OutputSink protocol
for consuming and displaying daemon output and events.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, final

from rich.console import Console
from rich.style import Style
from rich.text import Text

from ._models import SupervisorEventType

if TYPE_CHECKING:
    from ._models import LogStream, SupervisorEvent


@final
class ConcatenatedOutputSink:
    """Output sink that writes to the console with formatted prefixes.

    Formats daemon output as `[name:pid] line` with color coding:
    - stdout: Default styling
    - stderr: Dim red styling
    - Events: Special formatting based on event type
    """

    __slots__ = ("_console", "_event_styles", "_stderr_style", "_stdout_style")

    def __init__(self, console: Console | None = None) -> None:
        """Initialize the output sink.

        Args:
            console: Rich Console instance for output. If None, creates a new one.
        """
        self._console = console or Console()
        self._stdout_style = Style()
        self._stderr_style = Style(color="red", dim=True)
        self._event_styles: dict[SupervisorEventType, Style] = {
            SupervisorEventType.STARTED: Style(color="green", bold=True),
            SupervisorEventType.STOPPED: Style(color="yellow"),
            SupervisorEventType.CRASHED: Style(color="red", bold=True),
            SupervisorEventType.RESTARTING: Style(color="cyan"),
            SupervisorEventType.FAILED: Style(color="magenta", bold=True),
            SupervisorEventType.HEALTH_CHANGED: Style(dim=True),
        }

    async def write_line(
        self,
        daemon_name: str,
        pid: int,
        stream: LogStream,
        line: str,
    ) -> None:
        """Write a line of daemon output with prefix."""
        prefix = f"[{daemon_name}:{pid}]"
        style = self._stderr_style if stream == "stderr" else self._stdout_style

        text = Text()
        _ = text.append(prefix, style=Style(color="blue", bold=True))
        _ = text.append(" ")
        _ = text.append(line, style=style)

        self._console.print(text)

    async def write_event(self, event: SupervisorEvent) -> None:
        """Write a daemon lifecycle event with special formatting."""
        style = self._event_styles.get(event.event_type, Style())

        text = Text()
        _ = text.append(f"[{event.daemon_name}]", style=Style(color="blue", bold=True))
        _ = text.append(" ")
        _ = text.append(event.event_type.value.upper(), style=style)

        if event.pid is not None:
            _ = text.append(f" (pid={event.pid})", style=Style(dim=True))

        if event.exit_code is not None:
            _ = text.append(f" exit_code={event.exit_code}", style=Style(dim=True))

        if event.message:
            _ = text.append(f" - {event.message}", style=style)

        self._console.print(text)


@final
class NullOutputSink:
    """Output sink that discards everything.

    Used when the supervisor is embedded in a host that only reads logs
    through get_logs().
    """

    __slots__ = ()

    async def write_line(
        self,
        daemon_name: str,
        pid: int,
        stream: LogStream,
        line: str,
    ) -> None:
        """Discard a line of daemon output."""

    async def write_event(self, event: SupervisorEvent) -> None:
        """Discard a lifecycle event."""
