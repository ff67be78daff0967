"""Supervisor and control server configuration models."""

from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field


class SupervisorConfig(BaseModel):
    """Supervisor tuning knobs.

    Attributes:
        log_capacity: Output lines retained per daemon.
        default_log_limit: Lines returned by get_logs when no limit is given.
        max_log_limit: Upper bound on the limit accepted by the control API.
        grace_period_ms: Time a daemon gets to exit after SIGTERM before SIGKILL.
        health_check_interval_ms: Delay between health probes.
        health_check_timeout_ms: Timeout of a single health probe.
        output_drain_timeout_ms: Time spent reading leftover output after exit.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    log_capacity: int = Field(default=1000, ge=1)
    default_log_limit: int = Field(default=100, ge=1)
    max_log_limit: int = Field(default=1000, ge=1)
    grace_period_ms: int = Field(default=5000, ge=0)
    health_check_interval_ms: int = Field(default=5000, ge=1)
    health_check_timeout_ms: int = Field(default=3000, ge=1)
    output_drain_timeout_ms: int = Field(default=1000, ge=0)


class ServerConfig(BaseModel):
    """Control API server settings.

    Attributes:
        host: Interface the control API binds to.
        control_port: Port of the control API.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    host: str = "127.0.0.1"
    control_port: int = Field(default=6279, ge=0, le=65535)
