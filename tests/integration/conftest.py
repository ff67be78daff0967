from pathlib import Path

import pytest

from fwgate.config import SupervisorConfig
from fwgate.supervisor import LogStream, SupervisorEvent, SupervisorEventType


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


class RecordingSink:
    """Output sink that keeps everything it receives."""

    def __init__(self) -> None:
        self.lines: list[tuple[str, LogStream, str]] = []
        self.events: list[SupervisorEvent] = []

    async def write_line(
        self,
        daemon_name: str,
        pid: int,
        stream: LogStream,
        line: str,
    ) -> None:
        self.lines.append((daemon_name, stream, line))

    async def write_event(self, event: SupervisorEvent) -> None:
        self.events.append(event)

    def event_types(self, daemon_name: str) -> list[SupervisorEventType]:
        return [e.event_type for e in self.events if e.daemon_name == daemon_name]


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def supervisor_config() -> SupervisorConfig:
    return SupervisorConfig(
        grace_period_ms=2000,
        health_check_interval_ms=50,
        output_drain_timeout_ms=200,
    )
