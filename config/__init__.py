"""Configuration helpers for ffcraft.

Updates: v0.2.0 - 2026-10-08 - Expose persistence helpers and provider constants.
Updates: v0.1.0 - 2026-09-28 - Expose settings loader and configuration error types.
"""

from .persistence import persist_settings_to_config, store_api_key
from .settings import (
    API_KEY_ENV_VARS,
    DEFAULT_MODELS,
    DEFAULT_PROVIDER,
    PROVIDERS,
    FfcraftSettings,
    SettingsError,
    load_settings,
)

__all__ = [
    "API_KEY_ENV_VARS",
    "DEFAULT_MODELS",
    "DEFAULT_PROVIDER",
    "FfcraftSettings",
    "PROVIDERS",
    "SettingsError",
    "load_settings",
    "persist_settings_to_config",
    "store_api_key",
]
