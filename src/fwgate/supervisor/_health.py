"""HTTP health probing for daemons that expose a health endpoint."""

from __future__ import annotations

from typing import TYPE_CHECKING, final

import httpx

if TYPE_CHECKING:
    from types import TracebackType

DEFAULT_PROBE_HOST = "127.0.0.1"


@final
class HealthProbe:
    """Issues GET requests against daemon health endpoints.

    One probe is shared by every daemon of a supervisor. It must be entered
    as an async context manager before use so that the underlying httpx
    client is opened and later closed.
    """

    __slots__ = ("_client", "_host", "_timeout", "_transport")

    def __init__(
        self,
        *,
        timeout: float = 3.0,
        host: str = DEFAULT_PROBE_HOST,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the probe.

        Args:
            timeout: Seconds before a probe counts as failed.
            host: Host the daemons listen on.
            transport: Optional httpx transport, mainly for tests.
        """
        self._timeout = timeout
        self._host = host
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> HealthProbe:
        self._client = httpx.AsyncClient(
            timeout=self._timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def url_for(self, port: int, endpoint: str) -> str:
        """Build the probe URL for a daemon."""
        path = endpoint if endpoint.startswith("/") else f"/{endpoint}"
        return f"http://{self._host}:{port}{path}"

    async def check(self, port: int, endpoint: str) -> bool:
        """Probe a daemon once.

        Args:
            port: Port the daemon listens on.
            endpoint: HTTP path of the health endpoint.

        Returns:
            True if the endpoint answered with a 2xx status. Connection
            errors and timeouts count as unhealthy.
        """
        if self._client is None:
            msg = "HealthProbe must be entered before use"
            raise RuntimeError(msg)

        try:
            response = await self._client.get(self.url_for(port, endpoint))
        except httpx.HTTPError:
            return False
        return response.is_success
