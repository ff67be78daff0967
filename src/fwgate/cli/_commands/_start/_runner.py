"""Async runner for the start command.

This module provides the async entry point that coordinates running
the supervisor and control app together using anyio.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, cast

import anyio
import uvicorn

from fwgate.supervisor import ConcatenatedOutputSink, initialize_supervisor
from fwgate.utils import create_supervisor_logger

from ._app import create_control_app

if TYPE_CHECKING:
    from structlog.typing import FilteringBoundLogger

    from fwgate.config import GatewayConfig, LoggingConfig
    from fwgate.utils import LogFormatType


def create_logger_from_config(config: LoggingConfig) -> FilteringBoundLogger:
    """Build the supervisor logger described by a logging config section."""
    return create_supervisor_logger(
        level=config.level.value,
        log_format=cast("LogFormatType", config.format.value),
        log_file=config.file,
        max_bytes=config.max_bytes or None,
        backup_count=config.backup_count,
    )


async def run_start(
    config: GatewayConfig,
    host: str,
    control_port: int,
) -> None:
    """Run the supervisor with its daemons and control app.

    Starts the supervisor managing all configured daemons, plus an
    in-process control API for managing the supervisor.

    Args:
        config: Loaded gateway configuration.
        host: Interface the control API binds to.
        control_port: Port for the control API server.
    """
    supervisor = initialize_supervisor(
        config.daemon_specs(),
        config=config.supervisor,
        output_sink=ConcatenatedOutputSink(),
        logger=create_logger_from_config(config.logging),
    )
    control_app = create_control_app(supervisor)

    # Configure uvicorn for the control server
    uvicorn_config = uvicorn.Config(
        app=control_app,
        host=host,
        port=control_port,
        log_level="warning",
        access_log=False,
    )
    control_server = uvicorn.Server(uvicorn_config)

    async with anyio.create_task_group() as tg:
        # Start the control server first so it's ready before daemons start
        tg.start_soon(control_server.serve)

        # Give the control server a moment to start
        await anyio.sleep(0.1)

        # Run the supervisor (blocks until shutdown)
        await supervisor.run()

        # Supervisor has shut down, stop the control server
        control_server.should_exit = True
