# === MODULE PURPOSE ===
# Client for the Data Platform ESG universe service.
# Exchanges an access token for the universe of tracked entities.

# === DEPENDENCIES ===
# - httpx: Request construction (GET with Authorization header)
# - pydantic: Strict decode of the columnar payload and the error envelope
# - RedirectFollower: Manual 3xx handling, same policy as the token client

from __future__ import annotations

import logging
from typing import Union

import httpx
from pydantic import ValidationError

from dp_esg.data.clients.endpoints import DPEndpoints
from dp_esg.data.clients.errors import RedirectLoopError
from dp_esg.data.clients.http_invoker import HttpInvoker
from dp_esg.data.clients.redirects import DEFAULT_MAX_REDIRECTS, RedirectFollower
from dp_esg.data.clients.token_client import ALLOW_AUTO_REDIRECT_HEADER
from dp_esg.data.models.outcome import (
    Failure,
    MalformedResponse,
    Outcome,
    RedirectExhausted,
    Success,
    malformed,
    redirect_exhausted,
)
from dp_esg.data.models.universe import UniverseError, UniverseSuccess

logger = logging.getLogger(__name__)

UniverseOutcome = Outcome[
    UniverseSuccess, Union[UniverseError, MalformedResponse, RedirectExhausted]
]


class UniverseClient:
    """
    Async client for the ESG universe service.

    Usage:
        client = UniverseClient(invoker)
        outcome = await client.fetch_universe(access_token)
        if outcome.is_success:
            for row in outcome.value.rows:
                print(row.perm_id, row.primary_ric, row.common_name)
    """

    def __init__(
        self,
        invoker: HttpInvoker,
        endpoints: DPEndpoints | None = None,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
    ):
        self._endpoints = endpoints or DPEndpoints()
        self._follower = RedirectFollower(invoker, max_redirects=max_redirects)

    async def fetch_universe(
        self,
        access_token: str,
        token_type: str = "Bearer",
        override_url: str = "",
    ) -> UniverseOutcome:
        """
        Fetch the ESG universe.

        Args:
            access_token: Valid Data Platform access token
            token_type: Authorization scheme, default "Bearer"
            override_url: Exact URL to call instead of the configured universe URL

        Returns:
            Success(UniverseSuccess) on 200, otherwise Failure with an
            UniverseError, MalformedResponse or RedirectExhausted payload

        Raises:
            TransportError: If no HTTP response was received
        """
        headers = {
            "Authorization": f"{token_type or 'Bearer'} {access_token}",
            **ALLOW_AUTO_REDIRECT_HEADER,
        }

        def build_request(url: str) -> httpx.Request:
            return httpx.Request("GET", url, headers=headers)

        url = override_url or self._endpoints.universe_url
        logger.info(f"Requesting ESG universe from {url}")

        try:
            response = await self._follower.send(build_request, url)
        except RedirectLoopError as e:
            logger.warning(f"Universe request failed: {e}")
            return redirect_exhausted(e.hops, e.last_location, e.status_code, e.status_text)

        return self._to_outcome(response)

    def _to_outcome(self, response: httpx.Response) -> UniverseOutcome:
        status_code = response.status_code
        status_text = response.reason_phrase
        body = response.text

        if status_code == 200:
            try:
                universe = UniverseSuccess.from_json(body)
            except ValidationError as e:
                logger.warning(f"Malformed universe response: {e.error_count()} validation errors")
                return malformed("Universe response does not match expected shape", status_code, status_text, body)
            logger.info(f"ESG universe received: count={universe.count}, rows={len(universe.rows)}")
            return Success(value=universe, status_code=status_code, status_text=status_text)

        if not response.content:
            error = UniverseError()
        else:
            try:
                error = UniverseError.from_json(body)
            except ValidationError:
                # Non-JSON or unexpected error shape keeps only the status fields
                logger.warning(f"Universe service returned HTTP {status_code} with undecodable body")
                error = UniverseError()

        logger.warning(
            f"Universe request failed: HTTP {status_code} {status_text} "
            f"code={error.code} message={error.message}"
        )
        return Failure(error=error, status_code=status_code, status_text=status_text)
