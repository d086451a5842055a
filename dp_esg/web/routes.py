# === MODULE PURPOSE ===
# HTTP trigger endpoints: read inbound parameters, call the clients,
# serialize whichever outcome occurred.

# === ENDPOINTS ===
# GET|POST /api/token            - Get a new access token (JSON)
# GET|POST /api/universe         - Get the ESG universe (JSON)
# GET|POST /api/universe/search  - Search the ESG universe by keyword (JSON)
# GET      /api/status           - Health check (JSON)
#
# GET reads the query string, POST reads a JSON object body.
# Outcomes are always returned with HTTP 200, failures included; only bad
# inbound parameters (400) and transport failures (502) change the status.

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from fastapi import APIRouter, HTTPException, Request

from dp_esg.data.clients.errors import TransportError
from dp_esg.data.clients.token_client import DEFAULT_SCOPE, TokenClient
from dp_esg.data.clients.universe_client import UniverseClient, UniverseOutcome
from dp_esg.data.universe_search import SEARCH_FIELDS

logger = logging.getLogger(__name__)

TOKEN_PARAMS = ("username", "password", "appid", "userefreshtoken", "refreshtoken")
UNIVERSE_PARAMS = ("token", "tokentype", "showuniverse")
SEARCH_PARAMS = UNIVERSE_PARAMS + ("keyword", "field")


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


async def read_params(request: Request, names: tuple[str, ...]) -> dict[str, str | None]:
    """
    Read named parameters from the query string (GET) or a JSON body (POST).

    Raises:
        HTTPException: 400 if a POST body is not a JSON object
    """
    if request.method.lower() == "post":
        try:
            source = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Request body must be JSON")
        if not isinstance(source, dict):
            raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    else:
        source = request.query_params

    return {name: _as_str(source.get(name)) for name in names}


def parse_bool(name: str, value: str | None, default: bool) -> bool:
    """Parse "true"/"false" (any case); empty means default."""
    if not value:
        return default
    normalized = value.strip().lower()
    if normalized == "true":
        return True
    if normalized == "false":
        return False
    raise HTTPException(status_code=400, detail=f"{name} must be true or false, got {value!r}")


def create_router() -> APIRouter:
    """Create API router with all endpoints."""
    router = APIRouter(prefix="/api")

    def get_token_client(request: Request) -> TokenClient:
        return request.app.state.token_client

    def get_universe_client(request: Request) -> UniverseClient:
        return request.app.state.universe_client

    async def fetch_universe(request: Request, params: dict[str, str | None]) -> UniverseOutcome:
        client = get_universe_client(request)
        try:
            return await client.fetch_universe(
                params["token"] or "",
                token_type=params["tokentype"] or "Bearer",
            )
        except TransportError as e:
            raise HTTPException(status_code=502, detail=str(e))

    @router.get("/status")
    async def get_status():
        """Health check."""
        return {"status": "ok"}

    @router.api_route("/token", methods=["GET", "POST"])
    async def get_new_token(request: Request):
        """
        Get a new access token from the token service.

        Parameters:
            username: Data Platform username or machine id
            password: Data Platform password
            appid: Client id / app key
            userefreshtoken: "true" to use refreshtoken instead of password
            refreshtoken: Refresh token
        """
        params = await read_params(request, TOKEN_PARAMS)
        use_refresh_token = parse_bool("userefreshtoken", params["userefreshtoken"], False)

        client = get_token_client(request)
        try:
            outcome = await client.fetch_token(
                params["username"] or "",
                params["password"] or "",
                params["appid"] or "",
                scope=DEFAULT_SCOPE,
                refresh_token=params["refreshtoken"] or "",
                use_refresh_token=use_refresh_token,
            )
        except TransportError as e:
            raise HTTPException(status_code=502, detail=str(e))

        return outcome.to_dict()

    @router.api_route("/universe", methods=["GET", "POST"])
    async def get_esg_universe(request: Request):
        """
        Get the ESG universe.

        Parameters:
            token: Access token
            tokentype: Authorization scheme (default Bearer)
            showuniverse: "false" returns only the count, without rows and headers
        """
        params = await read_params(request, UNIVERSE_PARAMS)
        show_universe = params["showuniverse"] or "true"

        outcome = await fetch_universe(request, params)
        if outcome.is_success and "false" in show_universe:
            outcome = replace(
                outcome,
                value=outcome.value.model_copy(update={"rows": [], "header_metas": []}),
            )

        return outcome.to_dict()

    @router.api_route("/universe/search", methods=["GET", "POST"])
    async def search_esg_universe(request: Request):
        """
        Fetch the ESG universe and return the rows matching a keyword.

        Parameters:
            token, tokentype: As for /api/universe
            keyword: Substring to look for
            field: all (default), permid, ric or commonname
        """
        params = await read_params(request, SEARCH_PARAMS)
        keyword = params["keyword"]
        if not keyword:
            raise HTTPException(status_code=400, detail="keyword is required")

        field = (params["field"] or "all").lower()
        search = SEARCH_FIELDS.get(field)
        if search is None:
            raise HTTPException(
                status_code=400,
                detail=f"field must be one of {', '.join(SEARCH_FIELDS)}, got {field!r}",
            )

        outcome = await fetch_universe(request, params)
        if not outcome.is_success:
            return outcome.to_dict()

        matches = search(keyword, outcome.value.rows)
        logger.info(f"Universe search {field}={keyword!r}: {len(matches)} matches")
        return {
            "status_code": outcome.status_code,
            "status_text": outcome.status_text,
            "is_success": outcome.is_success,
            "keyword": keyword,
            "field": field,
            "count": len(matches),
            "rows": [row.model_dump() for row in matches],
        }

    return router
