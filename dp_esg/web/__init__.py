# === MODULE PURPOSE ===
# HTTP trigger layer for the token and ESG universe clients.
# Provides a FastAPI-based JSON API.

from dp_esg.web.app import create_app

__all__ = ["create_app"]
