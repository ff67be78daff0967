"""FastAPI control endpoints for the supervisor.

This module provides REST API endpoints for controlling and monitoring
the supervisor and its managed daemons.
"""

# pyright: reportUnusedFunction=false
# FastAPI route handlers are registered via decorators, not direct calls

from __future__ import annotations

from typing import TYPE_CHECKING, Never

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel

from fwgate.exceptions import DaemonNotFoundError, SupervisorError

if TYPE_CHECKING:
    from ._models import DaemonState, LogLine
    from ._supervisor import BulkResult, SupervisorService


class DaemonStatusResponse(BaseModel):
    """Response model for daemon status."""

    name: str
    status: str
    pid: int | None
    port: int | None
    started_at: str | None
    stopped_at: str | None
    restart_count: int
    last_exit_code: int | None
    last_signal: int | None
    last_error: str | None
    last_health_check: str | None
    healthy: bool | None
    uptime: int | None


class SupervisorStatusResponse(BaseModel):
    """Response model for overall supervisor status."""

    started: bool
    daemons: list[DaemonStatusResponse]
    total_daemons: int
    running_daemons: int


class DaemonNamesResponse(BaseModel):
    """Response model for the list of managed daemons."""

    daemons: list[str]


class LogLineResponse(BaseModel):
    """Response model for a single captured output line."""

    timestamp: str
    stream: str
    text: str


class DaemonLogsResponse(BaseModel):
    """Response model for a daemon's recent output."""

    name: str
    lines: list[LogLineResponse]
    count: int


class BulkResultResponse(BaseModel):
    """Response model for start-all and stop-all."""

    daemons: list[DaemonStatusResponse]
    failures: dict[str, str]


def _build_daemon_status(state: DaemonState) -> DaemonStatusResponse:
    return DaemonStatusResponse(
        name=state.name,
        status=state.status.value,
        pid=state.pid,
        port=state.port,
        started_at=state.started_at,
        stopped_at=state.stopped_at,
        restart_count=state.restart_count,
        last_exit_code=state.last_exit_code,
        last_signal=state.last_signal,
        last_error=state.last_error,
        last_health_check=state.last_health_check,
        healthy=state.healthy,
        uptime=state.uptime,
    )


def _build_log_line(line: LogLine) -> LogLineResponse:
    return LogLineResponse(timestamp=line.timestamp, stream=line.stream, text=line.text)


def _build_bulk_result(result: BulkResult) -> BulkResultResponse:
    return BulkResultResponse(
        daemons=[_build_daemon_status(state) for state in result.states],
        failures=dict(result.failures),
    )


def _raise_not_found(name: str, cause: DaemonNotFoundError) -> Never:
    """Raise HTTP 404 for daemon not found.

    Args:
        name: The daemon name.
        cause: The original exception.

    Raises:
        HTTPException: Always raises with 404 status.
    """
    raise HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Daemon not found: {name}",
    ) from cause


def _raise_server_error(cause: Exception) -> Never:
    """Raise HTTP 500 for internal server error.

    Args:
        cause: The original exception.

    Raises:
        HTTPException: Always raises with 500 status.
    """
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(cause),
    ) from cause


def clamp_log_limit(limit: int | None, *, default: int, maximum: int) -> int:
    """Clamp a requested log limit to 1..maximum, using default when absent."""
    if limit is None:
        return default
    return max(1, min(limit, maximum))


def create_control_router(supervisor: SupervisorService) -> APIRouter:  # noqa: C901
    """Create a FastAPI router for supervisor control endpoints.

    Args:
        supervisor: The SupervisorService instance to control.

    Returns:
        A FastAPI APIRouter with control endpoints under /supervisor.
    """
    router = APIRouter(prefix="/supervisor", tags=["supervisor"])

    @router.get("/daemons", response_model=DaemonNamesResponse)
    async def list_daemons() -> DaemonNamesResponse:
        """List the names of all managed daemons."""
        return DaemonNamesResponse(daemons=supervisor.get_daemon_names())

    @router.get("/status", response_model=SupervisorStatusResponse)
    async def get_supervisor_status() -> SupervisorStatusResponse:
        """Get overall supervisor status."""
        daemons = [_build_daemon_status(state) for state in supervisor.get_status()]
        running_count = sum(1 for d in daemons if d.status == "running")

        return SupervisorStatusResponse(
            started=supervisor.is_started(),
            daemons=daemons,
            total_daemons=len(daemons),
            running_daemons=running_count,
        )

    @router.post("/start-all", response_model=BulkResultResponse)
    async def start_all() -> BulkResultResponse:
        """Start every daemon."""
        try:
            result = await supervisor.start_all()
        except SupervisorError as e:
            _raise_server_error(e)

        return _build_bulk_result(result)

    @router.post("/stop-all", response_model=BulkResultResponse)
    async def stop_all() -> BulkResultResponse:
        """Stop every daemon."""
        result = await supervisor.stop_all()
        return _build_bulk_result(result)

    @router.get("/{name}/status", response_model=DaemonStatusResponse)
    async def get_daemon_status(name: str) -> DaemonStatusResponse:
        """Get status of a specific daemon."""
        try:
            state = supervisor.get_daemon_status(name)
        except DaemonNotFoundError as e:
            _raise_not_found(name, e)

        return _build_daemon_status(state)

    @router.post("/{name}/start", response_model=DaemonStatusResponse)
    async def start_daemon(name: str) -> DaemonStatusResponse:
        """Start a specific daemon."""
        try:
            state = await supervisor.start_daemon(name)
        except DaemonNotFoundError as e:
            _raise_not_found(name, e)
        except SupervisorError as e:
            _raise_server_error(e)

        return _build_daemon_status(state)

    @router.post("/{name}/stop", response_model=DaemonStatusResponse)
    async def stop_daemon(name: str) -> DaemonStatusResponse:
        """Stop a specific daemon."""
        try:
            state = await supervisor.stop_daemon(name)
        except DaemonNotFoundError as e:
            _raise_not_found(name, e)

        return _build_daemon_status(state)

    @router.post("/{name}/restart", response_model=DaemonStatusResponse)
    async def restart_daemon(name: str) -> DaemonStatusResponse:
        """Restart a specific daemon."""
        try:
            state = await supervisor.restart_daemon(name)
        except DaemonNotFoundError as e:
            _raise_not_found(name, e)
        except SupervisorError as e:
            _raise_server_error(e)

        return _build_daemon_status(state)

    @router.get("/{name}/logs", response_model=DaemonLogsResponse)
    async def get_daemon_logs(
        name: str,
        limit: int | None = Query(default=None),
    ) -> DaemonLogsResponse:
        """Get the most recent output lines of a specific daemon."""
        effective_limit = clamp_log_limit(
            limit,
            default=supervisor.config.default_log_limit,
            maximum=supervisor.config.max_log_limit,
        )
        try:
            lines = supervisor.get_logs(name, effective_limit)
        except DaemonNotFoundError as e:
            _raise_not_found(name, e)

        return DaemonLogsResponse(
            name=name,
            lines=[_build_log_line(line) for line in lines],
            count=len(lines),
        )

    return router
