"""Configuration models.

This module provides Pydantic models for fwgate configuration sections
and the GatewayConfig container.
"""

from fwgate.config._models._common import LogFormat, LogLevel
from fwgate.config._models._config import GatewayConfig
from fwgate.config._models._daemons import DaemonConfig, default_daemons
from fwgate.config._models._logging import LoggingConfig
from fwgate.config._models._supervisor import ServerConfig, SupervisorConfig

__all__ = [
    "DaemonConfig",
    "GatewayConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "ServerConfig",
    "SupervisorConfig",
    "default_daemons",
]
