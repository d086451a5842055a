# === MODULE PURPOSE ===
# Configuration management for the Data Platform gateway.
# Loads YAML configuration files and provides typed access to settings.

# === KEY CONCEPTS ===
# - YAML-based: Human-readable configuration format
# - Environment overrides: DP_* variables win over YAML values
# - Secrets separation: Credentials stored in secrets.yaml, never in main config

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

# Project root directory
PROJECT_ROOT = Path(__file__).parent.parent.parent
SECRETS_PATH = PROJECT_ROOT / "config" / "secrets.yaml"
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "dp-config.yaml"


class Config:
    """
    Configuration loader and accessor.

    Loads configuration from YAML files and provides typed access
    to configuration values.

    Usage:
        config = Config.load("config/dp-config.yaml")

        # Access nested values
        server = config.get("platform.server", default="api.refinitiv.com")

        # Access with type checking
        hops = config.get_int("http.max_redirects", default=5)
    """

    def __init__(self, data: dict[str, Any]):
        self._data = data

    @classmethod
    def load(cls, config_path: str | Path) -> "Config":
        """
        Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Config instance with loaded data

        Raises:
            FileNotFoundError: If config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        logger.info(f"Loaded configuration from {path}")
        return cls(data)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Config":
        """Create Config from a dictionary."""
        return cls(data)

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get a configuration value by dot-separated key.

        Args:
            key: Dot-separated path (e.g., "platform.token_path")
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        value: Any = self._data

        for k in key.split("."):
            if isinstance(value, dict):
                value = value.get(k)
                if value is None:
                    return default
            else:
                return default

        return value

    def get_str(self, key: str, default: str = "") -> str:
        """Get a string configuration value."""
        value = self.get(key, default)
        return str(value) if value is not None else default

    def get_int(self, key: str, default: int = 0) -> int:
        """Get an integer configuration value."""
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    def get_float(self, key: str, default: float = 0.0) -> float:
        """Get a float configuration value."""
        value = self.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError):
            return default

    @property
    def raw(self) -> dict[str, Any]:
        """Access raw configuration data."""
        return self._data

    def __repr__(self) -> str:
        return f"Config({list(self._data.keys())})"


def load_default_config() -> Config:
    """Load config/dp-config.yaml, or an empty Config when the file is absent."""
    if not DEFAULT_CONFIG_PATH.exists():
        logger.info(f"No config file at {DEFAULT_CONFIG_PATH}, using built-in defaults")
        return Config.from_dict({})
    return Config.load(DEFAULT_CONFIG_PATH)


# === PLATFORM SETTINGS ===


@dataclass
class PlatformSettings:
    """Upstream endpoints and transport limits for the Data Platform clients."""

    server: str = "api.refinitiv.com"
    token_path: str = "auth/oauth2/v1/token"
    universe_path: str = "data/environmental-social-governance/v1/universe"
    timeout: float = 30.0
    max_redirects: int = 5


def get_platform_settings(config: Config | None = None) -> PlatformSettings:
    """
    Build platform settings from YAML config with environment overrides.

    Environment variables:
        DP_SERVER: Upstream host (default: api.refinitiv.com)
        DP_TOKEN_PATH: Token service path
        DP_UNIVERSE_PATH: ESG universe path
        DP_HTTP_TIMEOUT: Per-request timeout in seconds
        DP_MAX_REDIRECTS: Maximum redirect hops per call

    Args:
        config: Loaded configuration. Defaults are used when None.

    Returns:
        PlatformSettings instance
    """
    config = config or Config.from_dict({})
    defaults = PlatformSettings()

    server = config.get_str("platform.server", defaults.server)
    token_path = config.get_str("platform.token_path", defaults.token_path)
    universe_path = config.get_str("platform.universe_path", defaults.universe_path)
    timeout = config.get_float("http.timeout", defaults.timeout)
    max_redirects = config.get_int("http.max_redirects", defaults.max_redirects)

    try:
        timeout = float(os.getenv("DP_HTTP_TIMEOUT", timeout))
        max_redirects = int(os.getenv("DP_MAX_REDIRECTS", max_redirects))
    except ValueError as e:
        raise ValueError(f"Invalid DP_HTTP_TIMEOUT/DP_MAX_REDIRECTS value: {e}") from e

    if max_redirects < 0:
        raise ValueError(f"max_redirects must be >= 0, got {max_redirects}")

    return PlatformSettings(
        server=os.getenv("DP_SERVER", server),
        token_path=os.getenv("DP_TOKEN_PATH", token_path),
        universe_path=os.getenv("DP_UNIVERSE_PATH", universe_path),
        timeout=timeout,
        max_redirects=max_redirects,
    )


# === SECRETS MANAGEMENT ===

_secrets_cache: Config | None = None


def load_secrets() -> Config:
    """
    Load secrets from config/secrets.yaml.

    Returns:
        Config instance with secrets data

    Raises:
        FileNotFoundError: If secrets.yaml doesn't exist
    """
    global _secrets_cache
    if _secrets_cache is not None:
        return _secrets_cache

    if not SECRETS_PATH.exists():
        raise FileNotFoundError(
            f"Secrets file not found: {SECRETS_PATH}\n"
            "Please copy config/secrets.yaml.example to config/secrets.yaml "
            "and fill in your credentials."
        )

    _secrets_cache = Config.load(SECRETS_PATH)
    logger.info("Loaded secrets configuration")
    return _secrets_cache


def get_dp_credentials() -> tuple[str, str, str]:
    """
    Get Data Platform credentials.

    Credentials are read in the following order:
    1. Environment variables: DP_USERNAME, DP_PASSWORD, DP_APP_KEY
    2. secrets.yaml file: dp.username, dp.password, dp.app_key

    Returns:
        Tuple of (username, password, app_key)

    Raises:
        ValueError: If credentials are missing from both env and secrets.yaml
    """
    # Priority 1: Environment variables (for container deployment)
    username = os.environ.get("DP_USERNAME", "")
    password = os.environ.get("DP_PASSWORD", "")
    app_key = os.environ.get("DP_APP_KEY", "")

    if username and password and app_key:
        logger.debug("Using Data Platform credentials from environment variables")
        return username, password, app_key

    # Priority 2: secrets.yaml (for local development)
    try:
        secrets = load_secrets()
        username = secrets.get_str("dp.username")
        password = secrets.get_str("dp.password")
        app_key = secrets.get_str("dp.app_key")

        if username and password and app_key:
            logger.debug("Using Data Platform credentials from secrets.yaml")
            return username, password, app_key
    except FileNotFoundError:
        pass  # secrets.yaml not found, will raise ValueError below

    raise ValueError(
        "Data Platform credentials not configured. "
        "Set DP_USERNAME, DP_PASSWORD and DP_APP_KEY environment variables, "
        "or configure them in config/secrets.yaml"
    )


def get_web_config() -> dict[str, Any]:
    """
    Get web trigger configuration from environment variables.

    Environment variables:
        WEB_HOST: Host to bind to (default: 0.0.0.0)
        WEB_PORT: Port to listen on (default: 8000)

    Returns:
        Dictionary with keys host and port
    """
    return {
        "host": os.getenv("WEB_HOST", "0.0.0.0"),
        "port": int(os.getenv("WEB_PORT", "8000")),
    }
