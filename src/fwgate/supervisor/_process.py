"""Process controller for a single daemon process instance.

A ProcessController owns exactly one spawned OS process. It streams the
process's output to a line sink, and when the process exits it posts a
single ExitNotice onto the supervisor's exit channel.
"""

from __future__ import annotations

import contextlib
import os
import signal
import subprocess
from dataclasses import dataclass
from typing import TYPE_CHECKING, final

import anyio
import anyio.abc
from anyio.streams.text import TextReceiveStream

from fwgate.exceptions import SpawnError

from ._models import ExitOutcome

if TYPE_CHECKING:
    from anyio.streams.memory import MemoryObjectSendStream

    from ._models import DaemonSpec, LogStream
    from ._protocol import LineSink

DEFAULT_DRAIN_TIMEOUT = 1.0
MAX_LINE_LENGTH = 64 * 1024


def get_timestamp() -> str:
    """Get current timestamp in ISO 8601 format."""
    import pendulum  # noqa: PLC0415

    return pendulum.now("UTC").to_iso8601_string()


def seconds_since(timestamp: str) -> int:
    """Return whole seconds elapsed since an ISO 8601 timestamp."""
    import pendulum  # noqa: PLC0415

    started = pendulum.parse(timestamp)
    return pendulum.now("UTC").diff(started).in_seconds()  # pyright: ignore[reportArgumentType]


@dataclass(frozen=True, slots=True)
class ExitNotice:
    """Message posted on the exit channel when a process instance ends.

    Attributes:
        daemon_name: Name of the daemon the process belonged to.
        controller: The controller that owned the process.
        outcome: How the process ended.
    """

    daemon_name: str
    controller: ProcessController
    outcome: ExitOutcome


@final
class ProcessController:
    """Spawns and terminates one OS process for a DaemonSpec.

    Attributes:
        spec: The daemon configuration this instance was spawned from.
    """

    __slots__ = (
        "_drain_timeout",
        "_exit_send",
        "_exited",
        "_line_sink",
        "_process",
        "_stop_requested",
        "spec",
    )

    def __init__(
        self,
        spec: DaemonSpec,
        *,
        line_sink: LineSink,
        exit_send: MemoryObjectSendStream[ExitNotice],
        drain_timeout: float = DEFAULT_DRAIN_TIMEOUT,
    ) -> None:
        """Initialize the controller.

        Args:
            spec: Configuration of the daemon to run.
            line_sink: Receives every non-blank output line.
            exit_send: Channel the exit notice is posted to.
            drain_timeout: Seconds to keep reading output after the process exits.
        """
        self.spec = spec
        self._line_sink = line_sink
        self._exit_send = exit_send
        self._drain_timeout = drain_timeout
        self._process: anyio.abc.Process | None = None
        self._exited = anyio.Event()
        self._stop_requested = False

    @property
    def pid(self) -> int | None:
        """Return the process ID once spawned."""
        return self._process.pid if self._process is not None else None

    @property
    def has_exited(self) -> bool:
        """Return True once the exit of the process has been observed."""
        return self._exited.is_set()

    async def spawn(self, task_group: anyio.abc.TaskGroup) -> int:
        """Launch the process and arm the exit watcher.

        Args:
            task_group: Task group that hosts the output readers and the watcher.

        Returns:
            The process ID.

        Raises:
            SpawnError: If the command is empty or cannot be executed.
        """
        if self._process is not None:
            msg = f"Daemon '{self.spec.name}' controller has already spawned"
            raise RuntimeError(msg)

        if not self.spec.command:
            msg = f"Daemon '{self.spec.name}' has an empty command"
            raise SpawnError(msg, daemon_name=self.spec.name)

        env: dict[str, str] | None = None
        if self.spec.env:
            env = {**os.environ, **self.spec.env}

        try:
            self._process = await anyio.open_process(
                self.spec.command,
                cwd=self.spec.cwd,
                env=env,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except (OSError, ValueError) as e:
            # ValueError covers NUL bytes and "=" in env names, rejected by Popen
            msg = f"Failed to start daemon '{self.spec.name}': {e}"
            raise SpawnError(msg, daemon_name=self.spec.name, cause=e) from e

        task_group.start_soon(
            self._watch, self._process, name=f"watch:{self.spec.name}"
        )
        return self._process.pid

    async def signal_stop(self, grace_period_ms: int) -> None:
        """Stop the process, escalating to SIGKILL after the grace period.

        Returns once the exit has been observed, or immediately if the
        process already exited or was never spawned.

        Args:
            grace_period_ms: Milliseconds to wait after SIGTERM before SIGKILL.
        """
        process = self._process
        if process is None or self._exited.is_set():
            return

        self._stop_requested = True

        with contextlib.suppress(ProcessLookupError):
            process.send_signal(signal.SIGTERM)

        with anyio.move_on_after(grace_period_ms / 1000):
            await self._exited.wait()

        if not self._exited.is_set():
            # Process didn't exit, force kill
            with contextlib.suppress(ProcessLookupError):
                process.kill()
            await self._exited.wait()

    async def _watch(self, process: anyio.abc.Process) -> None:
        """Stream output until the process exits, then post the exit notice."""
        returncode = -1
        try:
            async with anyio.create_task_group() as tg:
                if process.stdout is not None:
                    stdout = TextReceiveStream(process.stdout, errors="replace")
                    tg.start_soon(self._pump, stdout, process.pid, "stdout")

                if process.stderr is not None:
                    stderr = TextReceiveStream(process.stderr, errors="replace")
                    tg.start_soon(self._pump, stderr, process.pid, "stderr")

                returncode = await process.wait()

                # Grandchildren can hold the pipes open; bound the drain
                tg.cancel_scope.deadline = anyio.current_time() + self._drain_timeout
        finally:
            with anyio.CancelScope(shield=True):
                if process.returncode is None:
                    with contextlib.suppress(ProcessLookupError):
                        process.kill()
                await process.aclose()
            self._exited.set()

        outcome = ExitOutcome.from_returncode(
            returncode, was_requested=self._stop_requested
        )
        with contextlib.suppress(anyio.BrokenResourceError, anyio.ClosedResourceError):
            await self._exit_send.send(ExitNotice(self.spec.name, self, outcome))

    async def _pump(
        self,
        stream: TextReceiveStream,
        pid: int,
        stream_name: LogStream,
    ) -> None:
        """Split a text stream into lines and hand them to the line sink."""
        pending = ""
        try:
            async for chunk in stream:
                pending += chunk
                *lines, pending = pending.split("\n")
                for line in lines:
                    await self._deliver(pid, stream_name, line)

                # Output without newlines is cut into MAX_LINE_LENGTH pieces
                while len(pending) >= MAX_LINE_LENGTH:
                    await self._deliver(pid, stream_name, pending[:MAX_LINE_LENGTH])
                    pending = pending[MAX_LINE_LENGTH:]
        except (anyio.ClosedResourceError, anyio.BrokenResourceError):
            # Stream closed, which is expected on process exit
            pass

        await self._deliver(pid, stream_name, pending)

    async def _deliver(self, pid: int, stream_name: LogStream, line: str) -> None:
        clean_line = line.rstrip("\r")
        if clean_line.strip():
            await self._line_sink(pid, stream_name, clean_line)
