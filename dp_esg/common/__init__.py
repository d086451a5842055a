# === MODULE PURPOSE ===
# Common utilities shared across all modules.

from .config import Config, PlatformSettings, get_platform_settings, load_default_config

__all__ = [
    "Config",
    "PlatformSettings",
    "get_platform_settings",
    "load_default_config",
]
