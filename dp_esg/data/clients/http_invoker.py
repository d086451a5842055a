# === MODULE PURPOSE ===
# Transport port for the Data Platform clients: send one request, get one response.

# === DEPENDENCIES ===
# - httpx: Async HTTP client with connection pooling

# === KEY CONCEPTS ===
# - HttpInvoker: The port the clients depend on (easy to fake in tests)
# - HttpxInvoker: Shared httpx.AsyncClient, safe for concurrent calls
# - Redirects: Never followed here; RedirectFollower handles 3xx explicitly

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

import httpx

from dp_esg.data.clients.errors import TransportError

logger = logging.getLogger(__name__)


@runtime_checkable
class HttpInvoker(Protocol):
    """Sends a single HTTP request and returns the raw response."""

    async def send(self, request: httpx.Request) -> httpx.Response:
        ...


class HttpxInvoker:
    """
    HttpInvoker backed by one pooled httpx.AsyncClient.

    Usage:
        invoker = HttpxInvoker(timeout=30.0)
        await invoker.start()
        response = await invoker.send(httpx.Request("GET", url))
        await invoker.stop()
    """

    def __init__(
        self,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            timeout: Per-request timeout in seconds
            transport: Optional custom transport (e.g. httpx.MockTransport)
        """
        self._timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def start(self) -> None:
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self._timeout),
            follow_redirects=False,
            transport=self._transport,
        )
        logger.info("Data Platform HTTP invoker started")

    async def stop(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("Data Platform HTTP invoker stopped")

    async def __aenter__(self) -> HttpxInvoker:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    @property
    def is_started(self) -> bool:
        return self._client is not None

    async def send(self, request: httpx.Request) -> httpx.Response:
        """
        Send the request without following redirects.

        Raises:
            TransportError: If no HTTP response was received
            RuntimeError: If invoker not started
        """
        if not self._client:
            raise RuntimeError("HttpxInvoker not started. Call start() first.")

        try:
            response = await self._client.send(request, follow_redirects=False)
        except httpx.HTTPError as e:
            logger.error(f"HTTP transport error for {request.method} {request.url}: {e}")
            raise TransportError(str(request.url), e) from e

        logger.debug(f"{request.method} {request.url} -> {response.status_code}")
        return response
