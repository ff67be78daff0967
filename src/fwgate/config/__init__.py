"""Configuration for fwgate.

Configuration is read from an optional TOML file and overridden by
FWGATE_* environment variables:

    [supervisor]
    grace_period_ms = 2000

    [[daemons]]
    name = "cm-server"
    command = ["cm", "serve"]
    port = 8766
    restart_policy = "on-failure"
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from ._loader import deep_merge, parse_env_vars, parse_string_value, read_toml_file
from ._models import (
    DaemonConfig,
    GatewayConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    ServerConfig,
    SupervisorConfig,
    default_daemons,
)

if TYPE_CHECKING:
    from pathlib import Path


def load_config(path: Path | None = None, *, include_env: bool = True) -> GatewayConfig:
    """Load and validate configuration.

    Args:
        path: Optional TOML file. When given, it must exist.
        include_env: Whether FWGATE_* variables override file values.

    Raises:
        FileNotFoundError: If path does not exist.
        ConfigLoadError: If the configuration cannot be parsed or validated.
    """
    return GatewayConfig.load(path, include_env=include_env)


__all__ = [
    "DaemonConfig",
    "GatewayConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "ServerConfig",
    "SupervisorConfig",
    "deep_merge",
    "default_daemons",
    "load_config",
    "parse_env_vars",
    "parse_string_value",
    "read_toml_file",
]
