# === MODULE PURPOSE ===
# Client for the Data Platform OAuth2 token service.
# Exchanges username/password or a refresh token for an access token.

# === DEPENDENCIES ===
# - httpx: Request construction (form-encoded POST)
# - pydantic: Strict decode of success/error bodies
# - RedirectFollower: Manual 3xx handling

# === KEY CONCEPTS ===
# - Password grant: Sends takeExclusiveSignOnControl=True, which terminates any
#   other active session of the same account. Not idempotent upstream.
# - Refresh grant: Never sends the password
# - Every call resolves to a Success or Failure; only TransportError is raised

from __future__ import annotations

import logging
from typing import Union

import httpx
from pydantic import ValidationError

from dp_esg.data.clients.endpoints import DPEndpoints
from dp_esg.data.clients.errors import RedirectLoopError
from dp_esg.data.clients.http_invoker import HttpInvoker
from dp_esg.data.clients.redirects import DEFAULT_MAX_REDIRECTS, RedirectFollower
from dp_esg.data.models.outcome import (
    Failure,
    MalformedResponse,
    Outcome,
    RedirectExhausted,
    Success,
    malformed,
    redirect_exhausted,
)
from dp_esg.data.models.token import TokenError, TokenSuccess

logger = logging.getLogger(__name__)

TokenOutcome = Outcome[TokenSuccess, Union[TokenError, MalformedResponse, RedirectExhausted]]

DEFAULT_SCOPE = "trapi"

# Marker header; the invoker is what actually disables redirect following
ALLOW_AUTO_REDIRECT_HEADER = {"AllowAutoRedirect": "False"}


class TokenClient:
    """
    Async client for the token service.

    Usage:
        async with HttpxInvoker() as invoker:
            client = TokenClient(invoker)
            outcome = await client.fetch_token("user", "secret", "app-key")
            if outcome.is_success:
                access_token = outcome.value.access_token
    """

    def __init__(
        self,
        invoker: HttpInvoker,
        endpoints: DPEndpoints | None = None,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
    ):
        self._endpoints = endpoints or DPEndpoints()
        self._follower = RedirectFollower(invoker, max_redirects=max_redirects)

    @staticmethod
    def build_form(
        username: str,
        password: str,
        client_id: str,
        scope: str = DEFAULT_SCOPE,
        refresh_token: str = "",
        use_refresh_token: bool = False,
    ) -> dict[str, str]:
        """Build the ordered form fields for the requested grant."""
        form = {
            "username": username,
            "client_id": client_id,
        }
        if use_refresh_token:
            form["grant_type"] = "refresh_token"
            form["refresh_token"] = refresh_token or ""
        else:
            form["takeExclusiveSignOnControl"] = "True"
            form["scope"] = scope
            form["grant_type"] = "password"
            form["password"] = password
        return form

    async def fetch_token(
        self,
        username: str,
        password: str,
        client_id: str,
        scope: str = DEFAULT_SCOPE,
        refresh_token: str = "",
        use_refresh_token: bool = False,
        override_url: str = "",
    ) -> TokenOutcome:
        """
        Request an access token.

        Args:
            username: Data Platform username or machine id
            password: Data Platform password (unused with a refresh token)
            client_id: Client id / app key
            scope: Requested scope, default "trapi"
            refresh_token: Refresh token for the refresh grant
            use_refresh_token: Use the refresh grant instead of the password grant
            override_url: Exact URL to call instead of the configured token URL

        Returns:
            Success(TokenSuccess) on 200, otherwise Failure with a TokenError,
            MalformedResponse or RedirectExhausted payload

        Raises:
            TransportError: If no HTTP response was received
        """
        form = self.build_form(
            username, password, client_id, scope, refresh_token, use_refresh_token
        )

        def build_request(url: str) -> httpx.Request:
            return httpx.Request("POST", url, data=form, headers=ALLOW_AUTO_REDIRECT_HEADER)

        url = override_url or self._endpoints.token_url
        grant = "refresh_token" if use_refresh_token else "password"
        logger.info(f"Requesting access token ({grant} grant) from {url}")

        try:
            response = await self._follower.send(build_request, url)
        except RedirectLoopError as e:
            logger.warning(f"Token request failed: {e}")
            return redirect_exhausted(e.hops, e.last_location, e.status_code, e.status_text)

        return self._to_outcome(response)

    def _to_outcome(self, response: httpx.Response) -> TokenOutcome:
        status_code = response.status_code
        status_text = response.reason_phrase
        body = response.text

        if status_code == 200:
            try:
                token = TokenSuccess.model_validate_json(body)
            except ValidationError as e:
                logger.warning(f"Malformed token response: {e.error_count()} validation errors")
                return malformed("Token response does not match expected shape", status_code, status_text, body)
            logger.info(f"Access token received: {token}")
            return Success(value=token, status_code=status_code, status_text=status_text)

        if not response.content:
            error = TokenError()
        else:
            try:
                error = TokenError.model_validate_json(body)
            except ValidationError:
                # Non-JSON or unexpected error shape keeps only the status fields
                logger.warning(f"Token service returned HTTP {status_code} with undecodable body")
                error = TokenError()

        logger.warning(
            f"Token request failed: HTTP {status_code} {status_text} "
            f"error={error.error} description={error.error_description}"
        )
        return Failure(error=error, status_code=status_code, status_text=status_text)
