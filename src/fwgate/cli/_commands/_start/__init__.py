# pyright: reportUnusedCallResult=false
# ruff: noqa: TC003  # Path needed at runtime for cyclopts parameter parsing
"""fwgate start command - runs the supervisor and its control API."""

from pathlib import Path
from typing import Annotated

import anyio
from cyclopts import App, Parameter

from fwgate.cli._commands._shared import ExitCode, exit_with_error
from fwgate.exceptions import ConfigLoadError

app = App(
    name="start",
    help="Start the supervisor with all configured daemons",
    help_on_error=True,
)


@app.default
def start(
    *,
    config: Annotated[
        Path | None,
        Parameter(help="Path to a TOML config file."),
    ] = None,
    control_port: Annotated[
        int | None,
        Parameter(help="Port for the supervisor control API."),
    ] = None,
    host: Annotated[
        str | None,
        Parameter(help="Interface the control API binds to."),
    ] = None,
) -> None:
    """Start the daemon supervisor.

    Launches every configured daemon as a managed subprocess and serves
    the control API for managing them at runtime. Runs until interrupted.
    """
    from fwgate.config import load_config  # noqa: PLC0415
    from fwgate.utils import create_cli_logger  # noqa: PLC0415

    from ._runner import run_start  # noqa: PLC0415

    logger = create_cli_logger(command="start")

    try:
        loaded_config = load_config(config)
    except FileNotFoundError:
        logger.error("config_not_found", path=str(config))
        exit_with_error(f"Config file not found: {config}", ExitCode.NOT_FOUND)
    except ConfigLoadError as e:
        logger.error("config_load_failed", path=str(config), error=str(e))
        exit_with_error(str(e), ExitCode.LOAD_ERROR)

    effective_host = host if host is not None else loaded_config.server.host
    effective_port = (
        control_port if control_port is not None else loaded_config.server.control_port
    )

    if not loaded_config.daemons:
        print("No daemons configured.")
        return

    # Print startup info
    print(
        f"Starting fwgate supervisor (control API on {effective_host}:{effective_port})"
    )
    for daemon in loaded_config.daemons:
        port_info = f" on port {daemon.port}" if daemon.port is not None else ""
        print(f"  {daemon.name}: {' '.join(daemon.command)}{port_info}")
    print()

    logger.info(
        "supervisor_launching",
        daemons=[daemon.name for daemon in loaded_config.daemons],
        host=effective_host,
        control_port=effective_port,
    )
    anyio.run(run_start, loaded_config, effective_host, effective_port)


if __name__ == "__main__":
    app()
