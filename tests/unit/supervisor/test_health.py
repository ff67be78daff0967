import httpx
import pytest

from fwgate.supervisor import HealthProbe


def _transport(status_code: int, seen: list[str] | None = None) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(str(request.url))
        return httpx.Response(status_code, json={"status": "ok"})

    return httpx.MockTransport(handler)


class TestHealthProbe:
    def test_url_for_adds_leading_slash(self) -> None:
        probe = HealthProbe()

        assert probe.url_for(8765, "health") == "http://127.0.0.1:8765/health"
        assert probe.url_for(8765, "/health") == "http://127.0.0.1:8765/health"

    @pytest.mark.anyio
    async def test_success_status_is_healthy(self) -> None:
        seen: list[str] = []

        async with HealthProbe(transport=_transport(200, seen)) as probe:
            assert await probe.check(8766, "/health")

        assert seen == ["http://127.0.0.1:8766/health"]

    @pytest.mark.anyio
    async def test_error_status_is_unhealthy(self) -> None:
        async with HealthProbe(transport=_transport(503)) as probe:
            assert not await probe.check(8766, "/health")

    @pytest.mark.anyio
    async def test_connection_error_is_unhealthy(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with HealthProbe(transport=httpx.MockTransport(handler)) as probe:
            assert not await probe.check(8766, "/health")

    @pytest.mark.anyio
    async def test_check_before_enter_raises(self) -> None:
        probe = HealthProbe()

        with pytest.raises(RuntimeError, match="must be entered"):
            _ = await probe.check(8766, "/health")

    @pytest.mark.anyio
    async def test_can_be_reentered(self) -> None:
        probe = HealthProbe(transport=_transport(200))

        async with probe:
            assert await probe.check(1, "/health")
        async with probe:
            assert await probe.check(1, "/health")
