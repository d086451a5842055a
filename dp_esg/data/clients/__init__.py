# === MODULE PURPOSE ===
# HTTP clients for the Data Platform token and ESG universe services.

from dp_esg.data.clients.endpoints import DPEndpoints
from dp_esg.data.clients.errors import (
    DataPlatformError,
    RedirectLoopError,
    TransportError,
)
from dp_esg.data.clients.http_invoker import HttpInvoker, HttpxInvoker
from dp_esg.data.clients.redirects import REDIRECT_STATUSES, RedirectFollower
from dp_esg.data.clients.token_client import TokenClient
from dp_esg.data.clients.universe_client import UniverseClient

__all__ = [
    "DPEndpoints",
    "DataPlatformError",
    "HttpInvoker",
    "HttpxInvoker",
    "REDIRECT_STATUSES",
    "RedirectFollower",
    "RedirectLoopError",
    "TokenClient",
    "TransportError",
    "UniverseClient",
]
