# === MODULE PURPOSE ===
# FastAPI application exposing the token and ESG universe clients over HTTP.

# === DEPENDENCIES ===
# - HttpxInvoker: Shared pooled transport for both clients
# - routes: Parameter plumbing and outcome serialization

from __future__ import annotations

import logging

from fastapi import FastAPI

from dp_esg.common.config import PlatformSettings, get_platform_settings, load_default_config
from dp_esg.data.clients.endpoints import DPEndpoints
from dp_esg.data.clients.http_invoker import HttpInvoker, HttpxInvoker
from dp_esg.data.clients.token_client import TokenClient
from dp_esg.data.clients.universe_client import UniverseClient
from dp_esg.web.routes import create_router

logger = logging.getLogger(__name__)


def create_app(
    settings: PlatformSettings | None = None,
    invoker: HttpInvoker | None = None,
) -> FastAPI:
    """
    Create FastAPI application.

    Args:
        settings: Platform endpoints and limits. Read from config/dp-config.yaml
            and env if not provided.
        invoker: Transport for both clients. An HttpxInvoker owned by the app
            (started/stopped with it) is created if not provided.

    Returns:
        Configured FastAPI app.
    """
    settings = settings or get_platform_settings(load_default_config())

    app = FastAPI(
        title="Data Platform ESG Gateway",
        description="Access tokens and ESG universe from the Data Platform",
        version="1.0.0",
    )

    owned_invoker: HttpxInvoker | None = None
    if invoker is None:
        owned_invoker = HttpxInvoker(timeout=settings.timeout)
        invoker = owned_invoker

    endpoints = DPEndpoints.from_settings(settings)
    app.state.settings = settings
    app.state.token_client = TokenClient(invoker, endpoints, settings.max_redirects)
    app.state.universe_client = UniverseClient(invoker, endpoints, settings.max_redirects)

    app.include_router(create_router())

    @app.on_event("startup")
    async def startup():
        if owned_invoker is not None:
            await owned_invoker.start()
        logger.info(f"Web trigger started (upstream: {settings.server})")

    @app.on_event("shutdown")
    async def shutdown():
        if owned_invoker is not None:
            await owned_invoker.stop()
        logger.info("Web trigger stopped")

    return app


def run_server(
    host: str = "0.0.0.0",
    port: int = 8000,
    settings: PlatformSettings | None = None,
) -> None:
    """
    Run the web server (blocking).

    Args:
        host: Bind host.
        port: Bind port.
        settings: Platform settings.
    """
    import uvicorn

    app = create_app(settings=settings)
    uvicorn.run(app, host=host, port=port)
