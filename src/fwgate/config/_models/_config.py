# pyright: reportExplicitAny=false, reportAny=false
"""Root configuration container.

This module provides GatewayConfig, the validated view of a configuration
file merged with environment overrides.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from fwgate.config._loader import deep_merge, parse_env_vars, read_toml_file
from fwgate.config._models._daemons import DaemonConfig, default_daemons
from fwgate.config._models._logging import LoggingConfig
from fwgate.config._models._supervisor import ServerConfig, SupervisorConfig
from fwgate.exceptions import ConfigLoadError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from fwgate.supervisor import DaemonSpec


class GatewayConfig(BaseModel):
    """Top-level configuration.

    Attributes:
        supervisor: Supervisor tuning knobs.
        server: Control API settings.
        logging: Logging settings.
        daemons: Daemons managed by the supervisor.
    """

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")

    supervisor: SupervisorConfig = Field(default_factory=SupervisorConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    daemons: list[DaemonConfig] = Field(default_factory=default_daemons)

    @field_validator("daemons")
    @classmethod
    def _unique_names(cls, daemons: list[DaemonConfig]) -> list[DaemonConfig]:
        seen: set[str] = set()
        for daemon in daemons:
            if daemon.name in seen:
                msg = f"duplicate daemon name '{daemon.name}'"
                raise ValueError(msg)
            seen.add(daemon.name)
        return daemons

    def daemon_specs(self) -> list[DaemonSpec]:
        """Return the configured daemons as supervisor specs."""
        return [daemon.to_spec() for daemon in self.daemons]

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        *,
        path: Path | None = None,
    ) -> GatewayConfig:
        """Validate a raw configuration dictionary.

        Raises:
            ConfigLoadError: If validation fails.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigLoadError(msg, path=path) from e

    @classmethod
    def load(
        cls,
        path: Path | None = None,
        *,
        include_env: bool = True,
        environ: Mapping[str, str] | None = None,
    ) -> GatewayConfig:
        """Load configuration from a TOML file and the environment.

        Args:
            path: TOML file to read. Defaults are used when None.
            include_env: Whether FWGATE_* variables override file values.
            environ: Mapping to read instead of os.environ.

        Returns:
            The validated configuration.

        Raises:
            FileNotFoundError: If path does not exist.
            ConfigLoadError: If the file cannot be parsed or validated.
        """
        data: dict[str, Any] = {} if path is None else read_toml_file(path)
        if include_env:
            data = deep_merge(data, parse_env_vars(environ=environ))
        return cls.from_dict(data, path=path)
