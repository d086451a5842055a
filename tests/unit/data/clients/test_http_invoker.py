# === MODULE PURPOSE ===
# Tests for HttpxInvoker.
# Uses httpx.MockTransport so no network access is needed.

import httpx
import pytest

from dp_esg.data.clients.errors import TransportError
from dp_esg.data.clients.http_invoker import HttpInvoker, HttpxInvoker


class TestHttpxInvoker:
    """Tests for HttpxInvoker."""

    def test_satisfies_port(self):
        """Test HttpxInvoker implements the HttpInvoker protocol."""
        assert isinstance(HttpxInvoker(), HttpInvoker)

    @pytest.mark.asyncio
    async def test_send_not_started(self):
        """Test send raises RuntimeError before start()."""
        invoker = HttpxInvoker()
        with pytest.raises(RuntimeError, match="not started"):
            await invoker.send(httpx.Request("GET", "https://a.example/"))

    @pytest.mark.asyncio
    async def test_redirects_not_followed(self):
        """Test a 302 is returned to the caller instead of being followed."""
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(302, headers={"Location": "https://b.example/"})

        async with HttpxInvoker(transport=httpx.MockTransport(handler)) as invoker:
            response = await invoker.send(httpx.Request("GET", "https://a.example/"))

        assert response.status_code == 302
        assert response.headers["location"] == "https://b.example/"
        assert seen == ["https://a.example/"]

    @pytest.mark.asyncio
    async def test_body_is_read(self):
        """Test response body is available after send."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"ok": True}))

        async with HttpxInvoker(transport=transport) as invoker:
            response = await invoker.send(httpx.Request("GET", "https://a.example/"))

        assert response.json() == {"ok": True}

    @pytest.mark.asyncio
    async def test_transport_error_wrapped(self):
        """Test httpx errors are wrapped in TransportError."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with HttpxInvoker(transport=httpx.MockTransport(handler)) as invoker:
            with pytest.raises(TransportError) as exc_info:
                await invoker.send(httpx.Request("GET", "https://a.example/"))

        assert exc_info.value.url == "https://a.example/"
        assert isinstance(exc_info.value.cause, httpx.ConnectError)

    @pytest.mark.asyncio
    async def test_stop_is_idempotent(self):
        """Test stop can be called twice."""
        invoker = HttpxInvoker()
        await invoker.start()
        assert invoker.is_started is True
        await invoker.stop()
        await invoker.stop()
        assert invoker.is_started is False
