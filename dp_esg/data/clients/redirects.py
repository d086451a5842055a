# === MODULE PURPOSE ===
# Manual redirect handling for the Data Platform clients.
# Transport-level redirects are disabled, so 3xx responses are followed here.

# === KEY CONCEPTS ===
# - Same request, new URL: Method, headers and body are rebuilt unchanged
# - Bounded: At most max_redirects hops, then RedirectLoopError
# - Sequential: Each hop awaits the previous response

from __future__ import annotations

import logging
from typing import Callable
from urllib.parse import urljoin

import httpx

from dp_esg.data.clients.errors import RedirectLoopError
from dp_esg.data.clients.http_invoker import HttpInvoker

logger = logging.getLogger(__name__)

# 301 Moved, 302 Found, 307 Temporary Redirect, 308 Permanent Redirect
REDIRECT_STATUSES = frozenset({301, 302, 307, 308})

DEFAULT_MAX_REDIRECTS = 5

RequestBuilder = Callable[[str], httpx.Request]


class RedirectFollower:
    """
    Sends a request and re-issues it at each Location target.

    A redirect status without a Location header ends the chain and the
    response is returned as-is for the caller's error handling.
    """

    def __init__(self, invoker: HttpInvoker, max_redirects: int = DEFAULT_MAX_REDIRECTS):
        if max_redirects < 0:
            raise ValueError(f"max_redirects must be >= 0, got {max_redirects}")
        self._invoker = invoker
        self.max_redirects = max_redirects

    async def send(self, build_request: RequestBuilder, url: str) -> httpx.Response:
        """
        Send build_request(url), following redirects.

        Args:
            build_request: Builds the full request for a given URL
            url: Initial target URL

        Returns:
            The first non-redirect response (or a redirect without Location)

        Raises:
            RedirectLoopError: If more than max_redirects hops are needed
            TransportError: Propagated from the invoker
        """
        hops = 0
        while True:
            response = await self._invoker.send(build_request(url))

            if response.status_code not in REDIRECT_STATUSES:
                return response

            location = response.headers.get("location")
            if not location:
                logger.warning(f"HTTP {response.status_code} from {url} without Location header")
                return response

            # Relative Location values are resolved against the current URL
            target = urljoin(url, location)
            if hops >= self.max_redirects:
                raise RedirectLoopError(
                    hops=hops,
                    last_location=target,
                    status_code=response.status_code,
                    status_text=response.reason_phrase,
                )

            hops += 1
            logger.info(f"HTTP {response.status_code} redirect {hops}/{self.max_redirects}: {target}")
            url = target
