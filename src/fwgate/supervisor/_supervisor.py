"""Main supervisor coordinator for managing the gateway's helper daemons.

This module provides SupervisorService, which owns the runtime state of
every registered daemon, linearizes operations per daemon with a lock, and
reacts to process exits by applying the restart policy.
"""

from __future__ import annotations

import math
import signal
from contextlib import AsyncExitStack
from dataclasses import dataclass
from functools import partial
from typing import TYPE_CHECKING, final

import anyio
import anyio.abc

from fwgate.exceptions import SpawnError, SupervisorError
from fwgate.utils import create_supervisor_logger

from ._buffer import LogBuffer, redact_secrets
from ._health import HealthProbe
from ._models import (
    DaemonState,
    DaemonStatus,
    ExitOutcome,
    LogLine,
    RestartReason,
    SupervisorEvent,
    SupervisorEventType,
)
from ._output import NullOutputSink
from ._policy import decide
from ._process import ExitNotice, ProcessController, get_timestamp, seconds_since
from ._registry import DaemonRegistry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable
    from types import TracebackType

    from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
    from structlog.typing import FilteringBoundLogger

    from fwgate.config import SupervisorConfig

    from ._models import DaemonSpec, LogStream
    from ._protocol import OutputSink


@dataclass(frozen=True, slots=True)
class BulkResult:
    """Outcome of start_all() or stop_all().

    Attributes:
        states: Snapshots of every daemon after the operation, in registry order.
        failures: Error message per daemon whose operation raised.
    """

    states: list[DaemonState]
    failures: dict[str, str]

    @property
    def ok(self) -> bool:
        """Return True if no daemon failed."""
        return not self.failures


@final
class SupervisorService:
    """Supervises a fixed set of daemons.

    Background work (exit watchers, delayed restarts, health probes) runs in
    a task group owned by the service, so the service must be entered as an
    async context manager, or driven through run(), before daemons can be
    spawned. Leaving the context stops every daemon.

    Each daemon has its own lock. Explicit operations, exit handling and
    delayed restarts take it, so operations on one daemon are linearized
    while different daemons proceed concurrently.
    """

    __slots__ = (
        "_buffers",
        "_closing",
        "_config",
        "_controllers",
        "_exit_send",
        "_exit_stack",
        "_health_probe",
        "_health_scopes",
        "_locks",
        "_logger",
        "_output_sink",
        "_registry",
        "_restart_scopes",
        "_shutdown_event",
        "_started",
        "_states",
        "_task_group",
    )

    def __init__(
        self,
        specs: Iterable[DaemonSpec],
        *,
        config: SupervisorConfig | None = None,
        output_sink: OutputSink | None = None,
        logger: FilteringBoundLogger | None = None,
        health_probe: HealthProbe | None = None,
    ) -> None:
        """Initialize the supervisor with every daemon stopped.

        Args:
            specs: Daemons to manage. Names must be unique.
            config: Supervisor tuning. Uses defaults if None.
            output_sink: Receives daemon output and events. Discards them if None.
            logger: Structured logger. Writes to the supervisor log file if None.
            health_probe: Probe used for health checks. Built from config if None.

        Raises:
            DuplicateDaemonError: If two specs share a name.
        """
        if config is None:
            from fwgate.config import SupervisorConfig  # noqa: PLC0415

            config = SupervisorConfig()

        self._config: SupervisorConfig = config
        self._registry = DaemonRegistry(specs)
        self._output_sink: OutputSink = output_sink or NullOutputSink()
        self._logger: FilteringBoundLogger = logger or create_supervisor_logger()
        self._health_probe = health_probe or HealthProbe(
            timeout=config.health_check_timeout_ms / 1000
        )

        self._states: dict[str, DaemonState] = {}
        self._buffers: dict[str, LogBuffer] = {}
        self._locks: dict[str, anyio.Lock] = {}
        for spec in self._registry:
            self._states[spec.name] = DaemonState(name=spec.name, port=spec.port)
            self._buffers[spec.name] = LogBuffer(config.log_capacity)
            self._locks[spec.name] = anyio.Lock()

        self._controllers: dict[str, ProcessController] = {}
        self._restart_scopes: dict[str, anyio.CancelScope] = {}
        self._health_scopes: dict[str, anyio.CancelScope] = {}

        self._started = False
        self._closing = False
        self._shutdown_event = anyio.Event()
        self._task_group: anyio.abc.TaskGroup | None = None
        self._exit_send: MemoryObjectSendStream[ExitNotice] | None = None
        self._exit_stack: AsyncExitStack | None = None

    @property
    def registry(self) -> DaemonRegistry:
        """Return the registry of managed daemons."""
        return self._registry

    @property
    def config(self) -> SupervisorConfig:
        """Return the supervisor configuration."""
        return self._config

    # -------------------------------------------------------------------------
    # Context management
    # -------------------------------------------------------------------------

    async def __aenter__(self) -> SupervisorService:
        if self._exit_stack is not None:
            msg = "Supervisor is already running"
            raise SupervisorError(msg)

        stack = AsyncExitStack()
        try:
            _ = await stack.enter_async_context(self._health_probe)
            task_group = await stack.enter_async_context(anyio.create_task_group())
        except BaseException:
            await stack.aclose()
            raise

        send, receive = anyio.create_memory_object_stream[ExitNotice](math.inf)
        task_group.start_soon(
            self._dispatch_exits, receive, task_group, name="exit-dispatcher"
        )

        self._exit_stack = stack
        self._exit_send = send
        self._task_group = task_group
        self._closing = False
        self._logger.debug("supervisor_entered", daemons=self._registry.names())
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        stack = self._exit_stack
        if stack is None:
            return

        # No new spawns once shutdown begins, including pending restarts
        self._closing = True
        try:
            with anyio.CancelScope(shield=True):
                _ = await self.stop_all()
        finally:
            for name in list(self._restart_scopes):
                self._cancel_pending_restart(name)
            for name in list(self._health_scopes):
                self._cancel_health_loop(name)

            if self._exit_send is not None:
                self._exit_send.close()
            if self._task_group is not None:
                self._task_group.cancel_scope.cancel()

            self._exit_send = None
            self._task_group = None
            self._exit_stack = None
            await stack.aclose()
            self._logger.debug("supervisor_exited")

    async def run(self) -> None:
        """Run the supervisor, starting all daemons.

        Blocks until shutdown is triggered (via SIGINT/SIGTERM or shutdown()),
        then stops every daemon.
        """

        async def handle_signals() -> None:
            with anyio.open_signal_receiver(signal.SIGINT, signal.SIGTERM) as signals:
                async for signum in signals:
                    self._logger.info("supervisor_signal_received", signal=int(signum))
                    self._shutdown_event.set()
                    break

        async with self:
            result = await self.start_all()
            if result.failures:
                self._logger.warning(
                    "supervisor_start_failures", failures=result.failures
                )

            async with anyio.create_task_group() as tg:
                tg.start_soon(handle_signals)
                await self._shutdown_event.wait()
                tg.cancel_scope.cancel()

    async def shutdown(self) -> None:
        """Trigger graceful shutdown of run()."""
        self._shutdown_event.set()

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_daemon_names(self) -> list[str]:
        """Return the names of all managed daemons in registry order."""
        return self._registry.names()

    def get_status(self) -> list[DaemonState]:
        """Return snapshots of every daemon's state in registry order."""
        return [self._snapshot(self._states[name]) for name in self._registry.names()]

    def get_daemon_status(self, name: str) -> DaemonState:
        """Return a snapshot of one daemon's state.

        Raises:
            DaemonNotFoundError: If no daemon exists with that name.
        """
        _ = self._registry.get(name)
        return self._snapshot(self._states[name])

    def get_logs(self, name: str, limit: int | None = None) -> list[LogLine]:
        """Return the most recent output lines of a daemon, oldest first.

        Args:
            name: The daemon name.
            limit: Maximum number of lines. Uses the configured default if None.

        Raises:
            DaemonNotFoundError: If no daemon exists with that name.
        """
        _ = self._registry.get(name)
        effective_limit = self._config.default_log_limit if limit is None else limit
        return self._buffers[name].tail(effective_limit)

    def is_started(self) -> bool:
        """Return True between start_all() and stop_all()."""
        return self._started

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def start_daemon(self, name: str) -> DaemonState:
        """Start a daemon.

        Starting a daemon that is already starting or running is a no-op.

        Args:
            name: The daemon name.

        Returns:
            A snapshot of the daemon's state afterwards.

        Raises:
            DaemonNotFoundError: If no daemon exists with that name.
            SupervisorError: If the supervisor is not running.
            SpawnError: If the process could not be started.
        """
        spec = self._registry.get(name)
        _ = self._require_task_group()

        async with self._locks[name]:
            state = self._states[name]
            if state.status in (DaemonStatus.STARTING, DaemonStatus.RUNNING):
                self._logger.warning(
                    "daemon_already_running", daemon=name, pid=state.pid
                )
                return self._snapshot(state)

            self._cancel_pending_restart(name)
            state.restart_count = 0
            self._buffers[name].clear()
            await self._spawn_locked(spec, state)
            return self._snapshot(state)

    async def stop_daemon(self, name: str) -> DaemonState:
        """Stop a daemon and cancel any pending automatic restart.

        Args:
            name: The daemon name.

        Returns:
            A snapshot of the daemon's state afterwards.

        Raises:
            DaemonNotFoundError: If no daemon exists with that name.
        """
        spec = self._registry.get(name)

        async with self._locks[name]:
            self._cancel_pending_restart(name)
            state = self._states[name]
            if state.status is DaemonStatus.STOPPED:
                return self._snapshot(state)

            await self._stop_locked(spec, state)
            return self._snapshot(state)

    async def restart_daemon(self, name: str) -> DaemonState:
        """Stop a daemon if needed and start it again with a fresh restart count.

        Args:
            name: The daemon name.

        Returns:
            A snapshot of the daemon's state afterwards.

        Raises:
            DaemonNotFoundError: If no daemon exists with that name.
            SupervisorError: If the supervisor is not running.
            SpawnError: If the process could not be started.
        """
        spec = self._registry.get(name)
        _ = self._require_task_group()

        async with self._locks[name]:
            self._cancel_pending_restart(name)
            state = self._states[name]
            if state.status is not DaemonStatus.STOPPED:
                await self._stop_locked(spec, state)

            # Reset restart count on manual restart
            state.restart_count = 0
            self._buffers[name].clear()
            await self._spawn_locked(spec, state)
            return self._snapshot(state)

    async def start_all(self) -> BulkResult:
        """Start every daemon concurrently.

        Raises:
            SupervisorError: If the supervisor is not running.
        """
        _ = self._require_task_group()
        failures = await self._for_each_daemon(self.start_daemon)
        self._started = True
        self._logger.info(
            "supervisor_started",
            daemons=len(self._registry),
            failed=sorted(failures),
        )
        return BulkResult(states=self.get_status(), failures=failures)

    async def stop_all(self) -> BulkResult:
        """Stop every daemon concurrently."""
        failures = await self._for_each_daemon(self.stop_daemon)
        self._started = False
        self._logger.info("supervisor_stopped", failed=sorted(failures))
        return BulkResult(states=self.get_status(), failures=failures)

    async def check_health(self, name: str) -> bool | None:
        """Probe a daemon's health endpoint once and record the result.

        Args:
            name: The daemon name.

        Returns:
            The probe result, or None if the daemon has no health endpoint
            or is not running.

        Raises:
            DaemonNotFoundError: If no daemon exists with that name.
        """
        spec = self._registry.get(name)
        if self._exit_stack is None:
            return None
        return await self._probe(spec)

    # -------------------------------------------------------------------------
    # Internals: spawning and stopping
    # -------------------------------------------------------------------------

    def _require_task_group(self) -> anyio.abc.TaskGroup:
        if self._task_group is None or self._closing:
            msg = "Supervisor is not running"
            raise SupervisorError(msg)
        return self._task_group

    def _snapshot(self, state: DaemonState) -> DaemonState:
        uptime: int | None = None
        if state.status is DaemonStatus.RUNNING and state.started_at is not None:
            uptime = seconds_since(state.started_at)
        return state.snapshot(uptime=uptime)

    async def _for_each_daemon(
        self,
        operation: Callable[[str], Awaitable[DaemonState]],
    ) -> dict[str, str]:
        failures: dict[str, str] = {}

        async def run_one(name: str) -> None:
            try:
                _ = await operation(name)
            except SupervisorError as e:
                failures[name] = str(e)

        async with anyio.create_task_group() as tg:
            for name in self._registry.names():
                tg.start_soon(run_one, name, name=f"bulk:{name}")

        return failures

    async def _spawn_locked(self, spec: DaemonSpec, state: DaemonState) -> None:
        """Spawn a new process instance. The daemon's lock must be held."""
        task_group = self._require_task_group()
        assert self._exit_send is not None

        state.status = DaemonStatus.STARTING
        state.pid = None
        state.started_at = get_timestamp()
        state.healthy = None

        controller = ProcessController(
            spec,
            line_sink=partial(self._record_line, spec.name),
            exit_send=self._exit_send,
            drain_timeout=self._config.output_drain_timeout_ms / 1000,
        )

        try:
            pid = await controller.spawn(task_group)
        except SpawnError as e:
            state.status = DaemonStatus.STOPPED
            state.stopped_at = get_timestamp()
            state.last_error = str(e)
            self._logger.error("daemon_spawn_failed", daemon=spec.name, error=str(e))
            await self._emit(spec, state, SupervisorEventType.FAILED, message=str(e))
            await self._after_exit_locked(spec, state, ExitOutcome.spawn_failure(str(e)))
            raise
        except BaseException:
            # Cancellation or an unexpected error must not leave STARTING behind
            state.status = DaemonStatus.STOPPED
            state.stopped_at = get_timestamp()
            raise

        self._controllers[spec.name] = controller
        state.pid = pid
        state.status = DaemonStatus.RUNNING
        state.last_error = None

        self._logger.info(
            "daemon_started",
            daemon=spec.name,
            pid=pid,
            command=list(spec.command),
            restart_count=state.restart_count,
        )
        await self._emit(spec, state, SupervisorEventType.STARTED)

        if spec.has_health_check:
            self._start_health_loop(spec, task_group)

    async def _stop_locked(self, spec: DaemonSpec, state: DaemonState) -> None:
        """Stop the current process instance. The daemon's lock must be held."""
        pid = state.pid
        state.status = DaemonStatus.STOPPING
        state.pid = None
        controller = self._controllers.pop(spec.name, None)
        self._cancel_health_loop(spec.name)

        if controller is not None:
            await controller.signal_stop(self._config.grace_period_ms)

        state.status = DaemonStatus.STOPPED
        state.stopped_at = get_timestamp()

        self._logger.info("daemon_stopped", daemon=spec.name, pid=pid)
        await self._emit(
            spec,
            state,
            SupervisorEventType.STOPPED,
            pid=pid,
            message="Stopped by request",
        )

    # -------------------------------------------------------------------------
    # Internals: exit handling and restarts
    # -------------------------------------------------------------------------

    async def _dispatch_exits(
        self,
        receive: MemoryObjectReceiveStream[ExitNotice],
        task_group: anyio.abc.TaskGroup,
    ) -> None:
        async with receive:
            async for notice in receive:
                task_group.start_soon(
                    self._handle_exit, notice, name=f"exit:{notice.daemon_name}"
                )

    async def _handle_exit(self, notice: ExitNotice) -> None:
        spec = self._registry.get(notice.daemon_name)

        async with self._locks[spec.name]:
            # Requested stops pop the controller before signalling it
            if self._controllers.get(spec.name) is not notice.controller:
                self._logger.debug(
                    "daemon_exit_ignored",
                    daemon=spec.name,
                    exit_code=notice.outcome.exit_code,
                )
                return

            del self._controllers[spec.name]
            self._cancel_health_loop(spec.name)

            outcome = notice.outcome
            state = self._states[spec.name]
            pid = state.pid
            state.status = DaemonStatus.STOPPED
            state.pid = None
            state.stopped_at = get_timestamp()
            state.last_exit_code = outcome.exit_code
            state.last_signal = outcome.signal

            if outcome.is_clean:
                self._logger.info("daemon_exited", daemon=spec.name, pid=pid, exit_code=0)
                await self._emit(
                    spec,
                    state,
                    SupervisorEventType.STOPPED,
                    pid=pid,
                    exit_code=0,
                    message="Exited cleanly",
                )
            else:
                self._logger.warning(
                    "daemon_exited",
                    daemon=spec.name,
                    pid=pid,
                    exit_code=outcome.exit_code,
                    signal=outcome.signal,
                )
                if outcome.signal is not None:
                    message = f"Terminated by signal {outcome.signal}"
                else:
                    message = f"Exited with code {outcome.exit_code}"
                await self._emit(
                    spec,
                    state,
                    SupervisorEventType.CRASHED,
                    pid=pid,
                    exit_code=outcome.exit_code,
                    message=message,
                )

            await self._after_exit_locked(spec, state, outcome)

    async def _after_exit_locked(
        self,
        spec: DaemonSpec,
        state: DaemonState,
        outcome: ExitOutcome,
    ) -> None:
        """Apply the restart policy to an exit. The daemon's lock must be held."""
        decision = decide(spec, state.restart_count, outcome)

        if decision.should_restart:
            state.restart_count += 1
            self._logger.info(
                "daemon_restart_scheduled",
                daemon=spec.name,
                attempt=state.restart_count,
                max_restarts=spec.max_restarts,
                delay_ms=decision.delay_ms,
            )
            msg = (
                f"Restarting in {decision.delay_ms}ms "
                f"(attempt {state.restart_count}/{spec.max_restarts})"
            )
            await self._emit(spec, state, SupervisorEventType.RESTARTING, message=msg)
            self._schedule_restart(spec, decision.delay_ms)
            return

        if decision.reason is RestartReason.MAX_RESTARTS:
            state.last_error = f"Max restarts ({spec.max_restarts}) exceeded"
            if outcome.error is not None:
                state.last_error += f": {outcome.error}"
            self._logger.error(
                "daemon_max_restarts_exceeded",
                daemon=spec.name,
                max_restarts=spec.max_restarts,
            )
            await self._emit(
                spec, state, SupervisorEventType.FAILED, message=state.last_error
            )
        else:
            self._logger.debug(
                "daemon_not_restarted", daemon=spec.name, reason=decision.reason.value
            )

    def _schedule_restart(self, spec: DaemonSpec, delay_ms: int) -> None:
        if self._task_group is None or self._closing:
            return

        self._cancel_pending_restart(spec.name)
        scope = anyio.CancelScope()
        self._restart_scopes[spec.name] = scope
        self._task_group.start_soon(
            self._delayed_restart, spec, delay_ms, scope, name=f"restart:{spec.name}"
        )

    def _cancel_pending_restart(self, name: str) -> None:
        scope = self._restart_scopes.pop(name, None)
        if scope is not None:
            scope.cancel()
            self._logger.debug("daemon_restart_cancelled", daemon=name)

    async def _delayed_restart(
        self,
        spec: DaemonSpec,
        delay_ms: int,
        scope: anyio.CancelScope,
    ) -> None:
        with scope:
            await anyio.sleep(delay_ms / 1000)

            async with self._locks[spec.name]:
                if self._restart_scopes.get(spec.name) is not scope:
                    return
                del self._restart_scopes[spec.name]

                state = self._states[spec.name]
                if state.status is not DaemonStatus.STOPPED:
                    return

                try:
                    await self._spawn_locked(spec, state)
                except SupervisorError as e:
                    self._logger.warning(
                        "daemon_restart_failed", daemon=spec.name, error=str(e)
                    )

    # -------------------------------------------------------------------------
    # Internals: health probing
    # -------------------------------------------------------------------------

    def _start_health_loop(
        self,
        spec: DaemonSpec,
        task_group: anyio.abc.TaskGroup,
    ) -> None:
        self._cancel_health_loop(spec.name)
        scope = anyio.CancelScope()
        self._health_scopes[spec.name] = scope
        task_group.start_soon(
            self._health_loop, spec, scope, name=f"health:{spec.name}"
        )

    def _cancel_health_loop(self, name: str) -> None:
        scope = self._health_scopes.pop(name, None)
        if scope is not None:
            scope.cancel()

    async def _health_loop(self, spec: DaemonSpec, scope: anyio.CancelScope) -> None:
        interval = self._config.health_check_interval_ms / 1000
        with scope:
            while True:
                await anyio.sleep(interval)
                _ = await self._probe(spec)

    async def _probe(self, spec: DaemonSpec) -> bool | None:
        if spec.port is None or not spec.health_endpoint:
            return None

        state = self._states[spec.name]
        if state.status is not DaemonStatus.RUNNING:
            return None

        healthy = await self._health_probe.check(spec.port, spec.health_endpoint)

        # The daemon may have stopped while the probe was in flight
        if state.status is not DaemonStatus.RUNNING:
            return healthy

        previous = state.healthy
        state.healthy = healthy
        state.last_health_check = get_timestamp()

        if not healthy:
            self._logger.warning(
                "daemon_health_check_failed",
                daemon=spec.name,
                port=spec.port,
                endpoint=spec.health_endpoint,
            )

        if previous != healthy:
            await self._emit(
                spec,
                state,
                SupervisorEventType.HEALTH_CHANGED,
                message="healthy" if healthy else "unhealthy",
            )
        return healthy

    # -------------------------------------------------------------------------
    # Internals: output
    # -------------------------------------------------------------------------

    async def _record_line(
        self,
        name: str,
        pid: int,
        stream: LogStream,
        line: str,
    ) -> None:
        text = redact_secrets(line)
        self._buffers[name].append(
            LogLine(timestamp=get_timestamp(), stream=stream, text=text)
        )
        try:
            await self._output_sink.write_line(name, pid, stream, text)
        except Exception as e:  # noqa: BLE001
            self._logger.warning("output_sink_failed", daemon=name, error=str(e))

    async def _emit(
        self,
        spec: DaemonSpec,
        state: DaemonState,
        event_type: SupervisorEventType,
        *,
        pid: int | None = None,
        exit_code: int | None = None,
        message: str | None = None,
    ) -> None:
        event = SupervisorEvent(
            daemon_name=spec.name,
            event_type=event_type,
            timestamp=get_timestamp(),
            status=state.status,
            pid=pid if pid is not None else state.pid,
            port=spec.port,
            exit_code=exit_code,
            restart_count=state.restart_count,
            message=message,
        )
        try:
            await self._output_sink.write_event(event)
        except Exception as e:  # noqa: BLE001
            self._logger.warning("output_sink_failed", daemon=spec.name, error=str(e))


def initialize_supervisor(
    specs: Iterable[DaemonSpec],
    *,
    config: SupervisorConfig | None = None,
    output_sink: OutputSink | None = None,
    logger: FilteringBoundLogger | None = None,
) -> SupervisorService:
    """Create a supervisor with one stopped state per spec.

    Args:
        specs: Daemons to manage.
        config: Supervisor tuning. Uses defaults if None.
        output_sink: Receives daemon output and events.
        logger: Structured logger.

    Raises:
        DuplicateDaemonError: If two specs share a name.
    """
    return SupervisorService(
        specs,
        config=config,
        output_sink=output_sink,
        logger=logger,
    )
