"""Daemon configuration model.

DaemonConfig is the validated, file-facing form of a DaemonSpec.
"""

from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

from fwgate.supervisor import DaemonSpec, RestartPolicy


class DaemonConfig(BaseModel):
    """A single `[[daemons]]` entry.

    Attributes:
        name: Unique daemon name.
        command: Executable and arguments.
        port: Port the daemon listens on.
        restart_policy: always, never or on-failure.
        max_restarts: Cap on automatic restarts.
        restart_delay_ms: Delay before an automatic restart.
        cwd: Working directory.
        env: Extra environment variables.
        health_endpoint: HTTP path probed on localhost:port.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    name: str = Field(min_length=1)
    command: list[str] = Field(min_length=1)
    port: int | None = Field(default=None, ge=1, le=65535)
    restart_policy: RestartPolicy = RestartPolicy.ALWAYS
    max_restarts: int = Field(default=5, ge=0)
    restart_delay_ms: int = Field(default=1000, ge=0)
    cwd: Path | None = None
    env: dict[str, str] = Field(default_factory=dict)
    health_endpoint: str | None = None

    def to_spec(self) -> DaemonSpec:
        """Convert to the supervisor's immutable spec."""
        return DaemonSpec(
            name=self.name,
            command=tuple(self.command),
            port=self.port,
            restart_policy=self.restart_policy,
            max_restarts=self.max_restarts,
            restart_delay_ms=self.restart_delay_ms,
            cwd=self.cwd,
            env=dict(self.env),
            health_endpoint=self.health_endpoint,
        )


def default_daemons() -> list[DaemonConfig]:
    """Return the gateway's standard helper daemons."""
    return [
        DaemonConfig(
            name="agent-mail",
            command=["mcp-agent-mail", "serve"],
            port=8765,
            health_endpoint="/health",
        ),
        DaemonConfig(
            name="cm-server",
            command=["cm", "serve"],
            port=8766,
            health_endpoint="/health",
        ),
    ]
