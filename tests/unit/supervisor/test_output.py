import pytest
from rich.console import Console

from fwgate.supervisor import (
    ConcatenatedOutputSink,
    DaemonStatus,
    NullOutputSink,
    OutputSink,
    SupervisorEvent,
    SupervisorEventType,
)


def _event(
    event_type: SupervisorEventType,
    *,
    pid: int | None = None,
    exit_code: int | None = None,
    message: str | None = None,
) -> SupervisorEvent:
    return SupervisorEvent(
        daemon_name="agent-mail",
        event_type=event_type,
        timestamp="2026-01-01T00:00:00Z",
        status=DaemonStatus.STOPPED,
        pid=pid,
        exit_code=exit_code,
        message=message,
    )


class TestConcatenatedOutputSink:
    def test_satisfies_protocol(self, console: Console) -> None:
        assert isinstance(ConcatenatedOutputSink(console), OutputSink)

    @pytest.mark.anyio
    async def test_write_line_prefixes_name_and_pid(self, console: Console) -> None:
        sink = ConcatenatedOutputSink(console)

        await sink.write_line("agent-mail", 1234, "stdout", "listening on 8765")

        assert "[agent-mail:1234] listening on 8765" in console.export_text()

    @pytest.mark.anyio
    async def test_write_line_stderr(self, console: Console) -> None:
        sink = ConcatenatedOutputSink(console)

        await sink.write_line("cm-server", 99, "stderr", "warning: slow disk")

        assert "[cm-server:99] warning: slow disk" in console.export_text()

    @pytest.mark.anyio
    async def test_write_event_includes_details(self, console: Console) -> None:
        sink = ConcatenatedOutputSink(console)

        await sink.write_event(
            _event(
                SupervisorEventType.CRASHED,
                pid=1234,
                exit_code=3,
                message="Exited with code 3",
            )
        )

        output = console.export_text()
        assert "[agent-mail] CRASHED" in output
        assert "pid=1234" in output
        assert "exit_code=3" in output
        assert "Exited with code 3" in output

    @pytest.mark.anyio
    @pytest.mark.parametrize("event_type", list(SupervisorEventType))
    async def test_write_event_handles_every_type(
        self, console: Console, event_type: SupervisorEventType
    ) -> None:
        sink = ConcatenatedOutputSink(console)

        await sink.write_event(_event(event_type))

        assert event_type.value.upper() in console.export_text()


class TestNullOutputSink:
    @pytest.mark.anyio
    async def test_discards_everything(self) -> None:
        sink = NullOutputSink()

        await sink.write_line("agent-mail", 1, "stdout", "hello")
        await sink.write_event(_event(SupervisorEventType.STARTED))

        assert isinstance(sink, OutputSink)
