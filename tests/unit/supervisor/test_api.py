from collections.abc import AsyncIterator

import httpx
import pytest
from fastapi import FastAPI

from fwgate.config import SupervisorConfig
from fwgate.supervisor import (
    DaemonSpec,
    SupervisorService,
    create_control_router,
)
from fwgate.supervisor._api import clamp_log_limit


@pytest.fixture
def supervisor() -> SupervisorService:
    return SupervisorService(
        [
            DaemonSpec(name="agent-mail", command=("mcp-agent-mail", "serve"), port=8765),
            DaemonSpec(name="cm-server", command=("cm", "serve"), port=8766),
        ],
        config=SupervisorConfig(default_log_limit=10, max_log_limit=50),
    )


@pytest.fixture
async def client(supervisor: SupervisorService) -> AsyncIterator[httpx.AsyncClient]:
    app = FastAPI()
    app.include_router(create_control_router(supervisor))
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestClampLogLimit:
    def test_none_uses_default(self) -> None:
        assert clamp_log_limit(None, default=100, maximum=1000) == 100

    def test_clamps_to_maximum(self) -> None:
        assert clamp_log_limit(5000, default=100, maximum=1000) == 1000

    def test_clamps_to_one(self) -> None:
        assert clamp_log_limit(0, default=100, maximum=1000) == 1
        assert clamp_log_limit(-3, default=100, maximum=1000) == 1

    def test_passes_through_valid_limit(self) -> None:
        assert clamp_log_limit(42, default=100, maximum=1000) == 42


class TestControlRouter:
    @pytest.mark.anyio
    async def test_list_daemons(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/supervisor/daemons")

        assert response.status_code == 200
        assert response.json() == {"daemons": ["agent-mail", "cm-server"]}

    @pytest.mark.anyio
    async def test_supervisor_status(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/supervisor/status")

        assert response.status_code == 200
        body = response.json()
        assert body["started"] is False
        assert body["total_daemons"] == 2
        assert body["running_daemons"] == 0
        assert [d["name"] for d in body["daemons"]] == ["agent-mail", "cm-server"]
        assert body["daemons"][0]["status"] == "stopped"
        assert body["daemons"][0]["port"] == 8765

    @pytest.mark.anyio
    async def test_daemon_status(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/supervisor/cm-server/status")

        assert response.status_code == 200
        body = response.json()
        assert body["name"] == "cm-server"
        assert body["status"] == "stopped"
        assert body["pid"] is None
        assert body["restart_count"] == 0

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("GET", "/supervisor/ghost/status"),
            ("POST", "/supervisor/ghost/start"),
            ("POST", "/supervisor/ghost/stop"),
            ("POST", "/supervisor/ghost/restart"),
            ("GET", "/supervisor/ghost/logs"),
        ],
    )
    async def test_unknown_daemon_is_404(
        self, client: httpx.AsyncClient, method: str, path: str
    ) -> None:
        response = await client.request(method, path)

        assert response.status_code == 404
        assert response.json()["detail"] == "Daemon not found: ghost"

    @pytest.mark.anyio
    async def test_stop_stopped_daemon_is_noop(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/supervisor/agent-mail/stop")

        assert response.status_code == 200
        assert response.json()["status"] == "stopped"

    @pytest.mark.anyio
    async def test_logs_of_idle_daemon_are_empty(
        self, client: httpx.AsyncClient
    ) -> None:
        response = await client.get("/supervisor/agent-mail/logs", params={"limit": 5})

        assert response.status_code == 200
        assert response.json() == {"name": "agent-mail", "lines": [], "count": 0}

    @pytest.mark.anyio
    async def test_start_outside_running_supervisor_is_500(
        self, client: httpx.AsyncClient
    ) -> None:
        response = await client.post("/supervisor/agent-mail/start")

        assert response.status_code == 500
        assert response.json()["detail"] == "Supervisor is not running"

    @pytest.mark.anyio
    async def test_stop_all_reports_every_daemon(
        self, client: httpx.AsyncClient
    ) -> None:
        response = await client.post("/supervisor/stop-all")

        assert response.status_code == 200
        body = response.json()
        assert body["failures"] == {}
        assert {d["status"] for d in body["daemons"]} == {"stopped"}
