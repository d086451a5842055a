#!/usr/bin/env python3
# === MODULE PURPOSE ===
# Command-line entry point for the Data Platform ESG gateway.
# Fetches tokens and the ESG universe, searches it, or runs the web trigger.

# === USAGE ===
# uv run python scripts/main.py token
# uv run python scripts/main.py token --refresh-token <token>
# uv run python scripts/main.py universe --summary
# uv run python scripts/main.py search "AAPL" --field ric
# uv run python scripts/main.py serve --port 8000

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from dp_esg.common.config import (
    DEFAULT_CONFIG_PATH,
    Config,
    get_dp_credentials,
    get_platform_settings,
    get_web_config,
    load_default_config,
)
from dp_esg.data.clients.endpoints import DPEndpoints
from dp_esg.data.clients.errors import TransportError
from dp_esg.data.clients.http_invoker import HttpxInvoker
from dp_esg.data.clients.token_client import TokenClient
from dp_esg.data.clients.universe_client import UniverseClient
from dp_esg.data.universe_search import SEARCH_FIELDS

logger = logging.getLogger(__name__)


def setup_logging(config: Config) -> None:
    """Configure logging based on config."""
    level = config.get_str("logging.level", "INFO")
    format_str = config.get_str(
        "logging.format",
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    log_file = config.get_str("logging.file")
    if log_file:
        log_path = project_root / log_file
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logging.basicConfig(
            level=getattr(logging, level.upper()),
            format=format_str,
            handlers=[
                logging.StreamHandler(),
                logging.FileHandler(log_path, encoding="utf-8"),
            ],
        )
    else:
        logging.basicConfig(
            level=getattr(logging, level.upper()),
            format=format_str,
        )


def load_config(config_path: str) -> Config:
    """Load YAML config; a missing default file means built-in defaults."""
    path = Path(config_path)
    if path == DEFAULT_CONFIG_PATH:
        return load_default_config()
    return Config.load(path)


def print_json(data: dict) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


async def run(args: argparse.Namespace, config: Config) -> int:
    """Run a client subcommand. Returns the process exit code."""
    settings = get_platform_settings(config)
    endpoints = DPEndpoints.from_settings(settings)

    async with HttpxInvoker(timeout=settings.timeout) as invoker:
        token_client = TokenClient(invoker, endpoints, settings.max_redirects)
        universe_client = UniverseClient(invoker, endpoints, settings.max_redirects)

        access_token = getattr(args, "access_token", None)
        token_type = "Bearer"

        if args.command == "token" or not access_token:
            username, password, app_key = get_dp_credentials()
            token_outcome = await token_client.fetch_token(
                username,
                password,
                app_key,
                scope=config.get_str("platform.scope", "trapi"),
                refresh_token=getattr(args, "refresh_token", None) or "",
                use_refresh_token=bool(getattr(args, "refresh_token", None)),
            )
            if args.command == "token" or not token_outcome.is_success:
                print_json(token_outcome.to_dict())
                return 0 if token_outcome.is_success else 1

            access_token = token_outcome.value.access_token or ""
            token_type = token_outcome.value.token_type or "Bearer"

        outcome = await universe_client.fetch_universe(access_token, token_type)
        if not outcome.is_success:
            print_json(outcome.to_dict())
            return 1

        universe = outcome.value
        if args.command == "universe":
            if args.summary:
                universe = universe.model_copy(update={"rows": [], "header_metas": []})
            print_json(replace(outcome, value=universe).to_dict())
            return 0

        matches = SEARCH_FIELDS[args.field](args.keyword, universe.rows)
        print(f"{len(matches)} of {universe.count} entities match {args.keyword!r}")
        print("-" * 80)
        for row in matches[: args.limit]:
            print(f"{row.perm_id or '':<14} {row.primary_ric or '':<14} {row.common_name or ''}")
        return 0


def main() -> int:
    parser = argparse.ArgumentParser(description="Data Platform ESG gateway")
    parser.add_argument(
        "--config",
        "-c",
        default=str(DEFAULT_CONFIG_PATH),
        help="Path to configuration file",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    token_parser = subparsers.add_parser("token", help="Get a new access token")
    token_parser.add_argument("--refresh-token", help="Use this refresh token instead of the password")

    universe_parser = subparsers.add_parser("universe", help="Fetch the ESG universe")
    universe_parser.add_argument("--access-token", help="Existing access token (skips the token call)")
    universe_parser.add_argument("--summary", action="store_true", help="Only print the count")

    search_parser = subparsers.add_parser("search", help="Search the ESG universe")
    search_parser.add_argument("keyword", help="Substring to look for")
    search_parser.add_argument("--field", choices=list(SEARCH_FIELDS), default="all")
    search_parser.add_argument("--access-token", help="Existing access token (skips the token call)")
    search_parser.add_argument("--limit", type=int, default=50, help="Maximum rows to print")

    subparsers.add_parser("serve", help="Run the HTTP trigger")

    args = parser.parse_args()

    config = load_config(args.config)
    setup_logging(config)

    if args.command == "serve":
        from dp_esg.web.app import run_server

        web = get_web_config()
        run_server(host=web["host"], port=web["port"], settings=get_platform_settings(config))
        return 0

    try:
        return asyncio.run(run(args, config))
    except TransportError as e:
        logger.error(f"Data Platform unreachable: {e}")
        return 2
    except ValueError as e:
        logger.error(str(e))
        return 2


if __name__ == "__main__":
    sys.exit(main())
