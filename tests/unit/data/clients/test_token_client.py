# === MODULE PURPOSE ===
# Tests for TokenClient.
# Verifies grant-specific form fields, redirect following and outcome mapping.

from urllib.parse import parse_qs

import httpx
import pytest

from dp_esg.data.clients.endpoints import DPEndpoints
from dp_esg.data.clients.errors import TransportError
from dp_esg.data.clients.token_client import TokenClient
from dp_esg.data.models.outcome import (
    Failure,
    MalformedResponse,
    RedirectExhausted,
    Success,
)
from dp_esg.data.models.token import TokenError, TokenSuccess

TOKEN_BODY = {
    "access_token": "eyJ0eXAi",
    "refresh_token": "rt-123",
    "expires_in": "300",
    "scope": "trapi.data.esg",
    "token_type": "Bearer",
}


def form_of(request: httpx.Request) -> dict[str, list[str]]:
    return parse_qs(request.content.decode())


def sent(invoker) -> list[httpx.Request]:
    return [call.args[0] for call in invoker.send.call_args_list]


class TestTokenForm:
    """Tests for grant-specific form fields."""

    def test_password_grant_fields(self):
        """Test password grant sends exclusive sign-on, scope and password."""
        form = TokenClient.build_form("user", "secret", "app-key")
        assert list(form) == [
            "username",
            "client_id",
            "takeExclusiveSignOnControl",
            "scope",
            "grant_type",
            "password",
        ]
        assert form["takeExclusiveSignOnControl"] == "True"
        assert form["scope"] == "trapi"
        assert form["grant_type"] == "password"
        assert form["password"] == "secret"

    def test_refresh_grant_never_sends_password(self):
        """Test refresh grant sends the refresh token and no password."""
        form = TokenClient.build_form(
            "user", "secret", "app-key", refresh_token="rt-1", use_refresh_token=True
        )
        assert form == {
            "username": "user",
            "client_id": "app-key",
            "grant_type": "refresh_token",
            "refresh_token": "rt-1",
        }
        assert "password" not in form


class TestTokenClient:
    """Tests for TokenClient.fetch_token."""

    @pytest.mark.asyncio
    async def test_success(self, invoker):
        """Test 200 response decodes into TokenSuccess."""
        invoker.send.return_value = httpx.Response(200, json=TOKEN_BODY)
        client = TokenClient(invoker)

        outcome = await client.fetch_token("user", "secret", "app-key")

        assert isinstance(outcome, Success)
        assert outcome.is_success is True
        assert outcome.status_code == 200
        assert outcome.status_text == "OK"
        assert outcome.value == TokenSuccess(
            access_token="eyJ0eXAi",
            refresh_token="rt-123",
            expires_in=300,
            scope="trapi.data.esg",
            token_type="Bearer",
        )

    @pytest.mark.asyncio
    async def test_request_shape(self, invoker):
        """Test request is a form POST to the token URL with the redirect marker header."""
        invoker.send.return_value = httpx.Response(200, json=TOKEN_BODY)
        client = TokenClient(invoker)

        await client.fetch_token("user", "secret", "app-key")

        (request,) = sent(invoker)
        assert request.method == "POST"
        assert str(request.url) == "https://api.refinitiv.com/auth/oauth2/v1/token"
        assert request.headers["AllowAutoRedirect"] == "False"
        assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
        assert form_of(request)["password"] == ["secret"]
        assert form_of(request)["grant_type"] == ["password"]

    @pytest.mark.asyncio
    async def test_refresh_request_has_no_password(self, invoker):
        """Test refresh grant body carries no password field."""
        invoker.send.return_value = httpx.Response(200, json=TOKEN_BODY)
        client = TokenClient(invoker)

        await client.fetch_token(
            "user", "secret", "app-key", refresh_token="rt-1", use_refresh_token=True
        )

        form = form_of(sent(invoker)[0])
        assert "password" not in form
        assert form["grant_type"] == ["refresh_token"]
        assert form["refresh_token"] == ["rt-1"]

    @pytest.mark.asyncio
    async def test_password_request_is_not_refresh_grant(self, invoker):
        """Test password grant body never asks for the refresh_token grant."""
        invoker.send.return_value = httpx.Response(200, json=TOKEN_BODY)
        client = TokenClient(invoker)

        await client.fetch_token("user", "secret", "app-key", refresh_token="rt-1")

        form = form_of(sent(invoker)[0])
        assert form["grant_type"] == ["password"]
        assert "refresh_token" not in form

    @pytest.mark.asyncio
    async def test_custom_endpoints_and_override_url(self, invoker):
        """Test configured endpoints are used unless override_url is given."""
        invoker.send.return_value = httpx.Response(200, json=TOKEN_BODY)
        client = TokenClient(invoker, DPEndpoints(server="api.test.local", token_path="oauth/token"))

        await client.fetch_token("user", "secret", "app-key")
        await client.fetch_token("user", "secret", "app-key", override_url="https://other.local/t")

        urls = [str(r.url) for r in sent(invoker)]
        assert urls == ["https://api.test.local/oauth/token", "https://other.local/t"]

    @pytest.mark.asyncio
    async def test_expired_refresh_token(self, invoker):
        """Test 400 invalid_grant maps to Failure with a TokenError."""
        invoker.send.return_value = httpx.Response(
            400, json={"error": "invalid_grant", "error_description": "token expired"}
        )
        client = TokenClient(invoker)

        outcome = await client.fetch_token(
            "user", "", "app-key", refresh_token="old", use_refresh_token=True
        )

        assert isinstance(outcome, Failure)
        assert outcome.is_success is False
        assert outcome.status_code == 400
        assert outcome.status_text == "Bad Request"
        assert outcome.error.error == "invalid_grant"
        assert outcome.error.error_description == "token expired"
        assert outcome.error.error_uri is None

    @pytest.mark.asyncio
    async def test_error_without_body(self, invoker):
        """Test non-200 with empty body yields an empty TokenError."""
        invoker.send.return_value = httpx.Response(401)
        client = TokenClient(invoker)

        outcome = await client.fetch_token("user", "secret", "app-key")

        assert isinstance(outcome, Failure)
        assert outcome.error == TokenError()
        assert outcome.to_dict() == {
            "status_code": 401,
            "status_text": "Unauthorized",
            "is_success": False,
        }

    @pytest.mark.asyncio
    async def test_redirect_is_followed(self, invoker):
        """Test 302 re-issues the same request at the Location URL."""
        invoker.send.side_effect = [
            httpx.Response(302, headers={"Location": "https://alt.example/x"}),
            httpx.Response(200, json=TOKEN_BODY),
        ]
        client = TokenClient(invoker)

        outcome = await client.fetch_token("user", "secret", "app-key", scope="trapi.custom")

        first, second = sent(invoker)
        assert str(second.url) == "https://alt.example/x"
        assert second.method == "POST"
        assert form_of(second) == form_of(first)
        assert form_of(second)["scope"] == ["trapi.custom"]
        assert isinstance(outcome, Success)
        assert outcome.status_code == 200

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [301, 307, 308])
    async def test_other_redirect_statuses(self, invoker, status):
        """Test 301/307/308 are followed like 302."""
        invoker.send.side_effect = [
            httpx.Response(status, headers={"Location": "https://alt.example/x"}),
            httpx.Response(400, json={"error": "invalid_client"}),
        ]
        client = TokenClient(invoker)

        outcome = await client.fetch_token("user", "secret", "app-key")

        assert invoker.send.call_count == 2
        assert outcome.status_code == 400
        assert outcome.error.error == "invalid_client"

    @pytest.mark.asyncio
    async def test_redirect_without_location(self, invoker):
        """Test redirect status without Location falls through to error handling."""
        invoker.send.return_value = httpx.Response(302)
        client = TokenClient(invoker)

        outcome = await client.fetch_token("user", "secret", "app-key")

        assert invoker.send.call_count == 1
        assert isinstance(outcome, Failure)
        assert outcome.status_code == 302
        assert outcome.error == TokenError()

    @pytest.mark.asyncio
    async def test_redirect_loop(self, invoker):
        """Test redirect chain beyond max_redirects returns RedirectExhausted."""
        invoker.send.return_value = httpx.Response(
            302, headers={"Location": "https://alt.example/loop"}
        )
        client = TokenClient(invoker, max_redirects=2)

        outcome = await client.fetch_token("user", "secret", "app-key")

        assert invoker.send.call_count == 3
        assert isinstance(outcome, Failure)
        assert isinstance(outcome.error, RedirectExhausted)
        assert outcome.error.hops == 2
        assert outcome.error.last_location == "https://alt.example/loop"
        assert outcome.status_code == 302
        assert outcome.is_success is False

    @pytest.mark.asyncio
    async def test_malformed_success_body(self, invoker):
        """Test 200 with a non-JSON body becomes a 502 MalformedResponse failure."""
        invoker.send.return_value = httpx.Response(200, text="<html>maintenance</html>")
        client = TokenClient(invoker)

        outcome = await client.fetch_token("user", "secret", "app-key")

        assert isinstance(outcome, Failure)
        assert isinstance(outcome.error, MalformedResponse)
        assert outcome.error.upstream_status == 200
        assert outcome.error.body_excerpt == "<html>maintenance</html>"
        assert outcome.status_code == 502
        assert outcome.is_success is False

    @pytest.mark.asyncio
    async def test_wrong_field_type(self, invoker):
        """Test 200 with a negative expires_in is rejected as malformed."""
        invoker.send.return_value = httpx.Response(
            200, json={"access_token": "x", "expires_in": -5}
        )
        client = TokenClient(invoker)

        outcome = await client.fetch_token("user", "secret", "app-key")

        assert isinstance(outcome.error, MalformedResponse)

    @pytest.mark.asyncio
    async def test_plain_text_error_body(self, invoker):
        """Test non-200 with a non-JSON body gives an empty TokenError with the upstream status."""
        invoker.send.return_value = httpx.Response(503, text="Service Unavailable")
        client = TokenClient(invoker)

        outcome = await client.fetch_token("user", "secret", "app-key")

        assert isinstance(outcome, Failure)
        assert outcome.error == TokenError()
        assert outcome.status_code == 503
        assert outcome.status_text == "Service Unavailable"
        assert outcome.is_success is False

    @pytest.mark.asyncio
    async def test_error_body_of_wrong_shape(self, invoker):
        """Test a JSON error body that is not an object gives an empty TokenError."""
        invoker.send.return_value = httpx.Response(400, json=["invalid_grant"])
        client = TokenClient(invoker)

        outcome = await client.fetch_token("user", "secret", "app-key")

        assert outcome.error == TokenError()
        assert outcome.status_code == 400

    @pytest.mark.asyncio
    async def test_transport_error_propagates(self, invoker):
        """Test TransportError from the invoker is raised to the caller."""
        invoker.send.side_effect = TransportError("https://x", httpx.ConnectError("refused"))
        client = TokenClient(invoker)

        with pytest.raises(TransportError):
            await client.fetch_token("user", "secret", "app-key")
