"""Helpers for persisting ffcraft configuration changes.

Updates:
  v0.2.0 - 2026-10-08 - Store provider API keys in the state directory .env file.
  v0.1.0 - 2026-10-03 - Persist non-secret settings to config.json.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any, cast

from dotenv import set_key

from config.settings import (
    API_KEY_ENV_VARS,
    DEFAULT_HISTORY_MAX_ENTRIES,
    DEFAULT_MODELS,
    DEFAULT_PROVIDER,
    PROVIDERS,
    SECRET_FIELDS,
)

logger = logging.getLogger("ffcraft.settings.persistence")

_DEFAULTS: dict[str, object] = {
    "default_provider": DEFAULT_PROVIDER,
    "auto_copy": False,
    "history_max_entries": DEFAULT_HISTORY_MAX_ENTRIES,
    **{f"{provider}_model": model for provider, model in DEFAULT_MODELS.items()},
}


def _read_config(path: Path) -> dict[str, Any]:
    if not path.exists():
        return {}
    try:
        parsed = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logger.warning("Replacing unreadable configuration file %s", path)
        return {}
    if not isinstance(parsed, Mapping):
        return {}
    return {str(key): value for key, value in cast("Mapping[object, Any]", parsed).items()}


def persist_settings_to_config(updates: Mapping[str, object | None], path: Path) -> Path:
    """Merge *updates* into the JSON configuration file at *path*.

    Secrets (API keys) are never written to disk here; use :func:`store_api_key`.
    Values equal to the built-in defaults, or ``None``, remove the key so the
    file only records deliberate choices.
    """
    config_data = _read_config(path)
    for key, value in updates.items():
        if key in SECRET_FIELDS or key in API_KEY_ENV_VARS.values():
            config_data.pop(key, None)
            continue
        if isinstance(value, str):
            value = value.strip() or None
        if value is None or _DEFAULTS.get(key, object()) == value:
            config_data.pop(key, None)
        else:
            config_data[key] = value
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config_data, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    return path


def store_api_key(provider: str, api_key: str, env_path: Path) -> str:
    """Write *api_key* for *provider* into the dotenv file and return the variable name."""
    name = provider.strip().lower()
    if name not in PROVIDERS:
        raise ValueError(f"Unknown provider '{provider}'")
    secret = api_key.strip()
    if not secret:
        raise ValueError("API key cannot be empty")
    variable = API_KEY_ENV_VARS[name]
    env_path.parent.mkdir(parents=True, exist_ok=True)
    env_path.touch(mode=0o600, exist_ok=True)
    set_key(str(env_path), variable, secret, quote_mode="never")
    return variable


__all__ = ["persist_settings_to_config", "store_api_key"]
