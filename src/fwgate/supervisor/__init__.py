"""Supervisor package for managing the gateway's helper daemons.

This package starts, monitors and automatically restarts a fixed set of
long-running daemons with structured concurrency, bounded retries, bounded
output buffers and a control API.

Key Components:
    - DaemonSpec: Immutable daemon configuration
    - DaemonState: Runtime state snapshots
    - DaemonRegistry: Name-keyed table of specs
    - LogBuffer: Bounded, redacted output buffer
    - ProcessController: Single process instance lifecycle
    - decide: Restart policy
    - SupervisorService: Multi-daemon coordinator
    - OutputSink: Protocol for output consumption
    - ConcatenatedOutputSink: Console output implementation
    - create_control_router: FastAPI endpoint factory

Example:
    >>> from fwgate.supervisor import DaemonSpec, initialize_supervisor
    >>> specs = [
    ...     DaemonSpec(name="agent-mail", command=("mcp-agent-mail", "serve"), port=8765),
    ...     DaemonSpec(name="cm-server", command=("cm", "serve"), port=8766),
    ... ]
    >>> supervisor = initialize_supervisor(specs)
    >>> await supervisor.run()  # Blocks until shutdown
"""

from ._api import create_control_router
from ._buffer import DEFAULT_CAPACITY, LogBuffer, redact_secrets
from ._health import HealthProbe
from ._models import (
    DaemonSpec,
    DaemonState,
    DaemonStatus,
    ExitOutcome,
    LogLine,
    LogStream,
    RestartDecision,
    RestartPolicy,
    RestartReason,
    SupervisorEvent,
    SupervisorEventType,
)
from ._output import ConcatenatedOutputSink, NullOutputSink
from ._policy import decide
from ._process import ExitNotice, ProcessController
from ._protocol import LineSink, OutputSink
from ._registry import DaemonRegistry
from ._supervisor import BulkResult, SupervisorService, initialize_supervisor

__all__ = [
    "DEFAULT_CAPACITY",
    "BulkResult",
    "ConcatenatedOutputSink",
    "DaemonRegistry",
    "DaemonSpec",
    "DaemonState",
    "DaemonStatus",
    "ExitNotice",
    "ExitOutcome",
    "HealthProbe",
    "LineSink",
    "LogBuffer",
    "LogLine",
    "LogStream",
    "NullOutputSink",
    "OutputSink",
    "ProcessController",
    "RestartDecision",
    "RestartPolicy",
    "RestartReason",
    "SupervisorEvent",
    "SupervisorEventType",
    "SupervisorService",
    "create_control_router",
    "decide",
    "initialize_supervisor",
    "redact_secrets",
]
