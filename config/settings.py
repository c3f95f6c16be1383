"""Settings management utilities for ffcraft configuration.

Updates:
  v0.3.0 - 2026-10-12 - Read legacy nested provider blocks from config.json.
  v0.2.1 - 2026-10-08 - Load provider keys from .env, .env.local and the state directory.
  v0.2.0 - 2026-10-03 - Ignore API keys placed in the JSON configuration file.
  v0.1.0 - 2026-09-28 - Introduce FfcraftSettings with provider defaults.
"""

from __future__ import annotations

import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Literal, cast

from dotenv import dotenv_values
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

logger = logging.getLogger("ffcraft.settings")

ProviderName = Literal["openai", "claude", "gemini", "grok"]

PROVIDERS: tuple[str, ...] = ("openai", "claude", "gemini", "grok")

DEFAULT_PROVIDER = "openai"
DEFAULT_STATE_DIR = Path("~/.ffcraft")
DEFAULT_HISTORY_MAX_ENTRIES = 1000
DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "claude": "claude-3-haiku-20240307",
    "gemini": "gemini-1.5-flash",
    "grok": "grok-beta",
}
API_KEY_ENV_VARS: dict[str, str] = {
    "openai": "OPENAI_API_KEY",
    "claude": "ANTHROPIC_API_KEY",
    "gemini": "GOOGLE_GENERATIVE_AI_API_KEY",
    "grok": "XAI_API_KEY",
}
SECRET_FIELDS: frozenset[str] = frozenset(f"{provider}_api_key" for provider in PROVIDERS)

_DOTENV_FILENAMES: tuple[str, ...] = (".env", ".env.local")

# Canonical field -> accepted environment variable names, highest priority first.
_ENV_ALIASES: dict[str, tuple[str, ...]] = {
    "state_dir": ("FFCRAFT_STATE_DIR",),
    "default_provider": ("FFCRAFT_DEFAULT_PROVIDER",),
    "openai_model": ("FFCRAFT_OPENAI_MODEL",),
    "claude_model": ("FFCRAFT_CLAUDE_MODEL",),
    "gemini_model": ("FFCRAFT_GEMINI_MODEL",),
    "grok_model": ("FFCRAFT_GROK_MODEL",),
    "openai_api_key": ("FFCRAFT_OPENAI_API_KEY", "OPENAI_API_KEY"),
    "claude_api_key": ("FFCRAFT_CLAUDE_API_KEY", "ANTHROPIC_API_KEY"),
    "gemini_api_key": (
        "FFCRAFT_GEMINI_API_KEY",
        "GOOGLE_GENERATIVE_AI_API_KEY",
        "GEMINI_API_KEY",
    ),
    "grok_api_key": ("FFCRAFT_GROK_API_KEY", "XAI_API_KEY"),
    "auto_copy": ("FFCRAFT_AUTO_COPY",),
    "history_max_entries": ("FFCRAFT_HISTORY_MAX_ENTRIES",),
    "request_timeout_seconds": ("FFCRAFT_REQUEST_TIMEOUT_SECONDS",),
}

_JSON_FIELDS: tuple[str, ...] = (
    "default_provider",
    "openai_model",
    "claude_model",
    "gemini_model",
    "grok_model",
    "auto_copy",
    "history_max_entries",
    "request_timeout_seconds",
)


class SettingsError(Exception):
    """Raised when ffcraft configuration cannot be loaded or validated."""


def resolve_state_dir(explicit: object | None = None) -> Path:
    """Return the state directory from *explicit*, ``FFCRAFT_STATE_DIR`` or the default."""
    candidate = explicit
    if candidate in (None, ""):
        candidate = os.getenv("FFCRAFT_STATE_DIR") or DEFAULT_STATE_DIR
    return Path(str(candidate)).expanduser()


def resolve_config_path(state_dir: Path) -> Path:
    """Return the JSON configuration path (``FFCRAFT_CONFIG_JSON`` wins)."""
    explicit = os.getenv("FFCRAFT_CONFIG_JSON")
    if explicit and explicit.strip():
        return Path(explicit.strip()).expanduser()
    return state_dir / "config.json"


def _read_dotenv_values(state_dir: Path) -> dict[str, str]:
    """Merge ``.env`` files without mutating ``os.environ``; earlier files win."""
    override = os.getenv("FFCRAFT_ENV_FILE")
    if override is not None:
        candidates = [Path(override.strip()).expanduser()] if override.strip() else []
    else:
        candidates = [Path(name) for name in _DOTENV_FILENAMES]
        candidates.append(state_dir / ".env")
    merged: dict[str, str] = {}
    for path in candidates:
        if not path.is_file():
            continue
        for key, value in dotenv_values(path).items():
            if value is None or key in merged:
                continue
            merged[str(key)] = str(value)
    return merged


def _lookup_aliases(source: Mapping[str, str]) -> dict[str, Any]:
    data: dict[str, Any] = {}
    for field, names in _ENV_ALIASES.items():
        for name in names:
            value = source.get(name)
            if value is None:
                continue
            stripped = str(value).strip()
            if stripped:
                data[field] = stripped
                break
    return data


def _flatten_legacy_config(data: dict[str, Any]) -> dict[str, Any]:
    """Translate ``{"openai": {"defaultModel": ...}, "defaultProvider": ...}`` layouts."""
    mapped: dict[str, Any] = {}
    if "defaultProvider" in data:
        mapped["default_provider"] = data["defaultProvider"]
    if "autoCopy" in data:
        mapped["auto_copy"] = data["autoCopy"]
    for provider in PROVIDERS:
        block = data.get(provider)
        if not isinstance(block, Mapping):
            continue
        block_mapping = cast("Mapping[str, Any]", block)
        model = block_mapping.get("defaultModel") or block_mapping.get("default_model")
        if model:
            mapped[f"{provider}_model"] = model
        if block_mapping.get("apiKey") or block_mapping.get("api_key"):
            mapped[f"{provider}_api_key"] = "<redacted>"
    return mapped


class FfcraftSettings(BaseSettings):
    """Application configuration sourced from flags, environment, JSON and .env files."""

    state_dir: Path = Field(default=DEFAULT_STATE_DIR, validate_default=True)
    default_provider: ProviderName = Field(default=DEFAULT_PROVIDER)
    openai_model: str = Field(default=DEFAULT_MODELS["openai"])
    claude_model: str = Field(default=DEFAULT_MODELS["claude"])
    gemini_model: str = Field(default=DEFAULT_MODELS["gemini"])
    grok_model: str = Field(default=DEFAULT_MODELS["grok"])
    openai_api_key: str | None = Field(default=None, repr=False)
    claude_api_key: str | None = Field(default=None, repr=False)
    gemini_api_key: str | None = Field(default=None, repr=False)
    grok_api_key: str | None = Field(default=None, repr=False)
    auto_copy: bool = False
    history_max_entries: int = Field(default=DEFAULT_HISTORY_MAX_ENTRIES)
    request_timeout_seconds: float | None = None

    model_config = cast(
        "SettingsConfigDict",
        {
            "env_prefix": "FFCRAFT_",
            "case_sensitive": False,
            "populate_by_name": True,
            "extra": "ignore",
        },
    )

    @field_validator("state_dir", mode="before")
    def _normalise_state_dir(cls, value: Any) -> Path:
        """Expand user-relative paths and coerce values to Path instances."""
        if value is None or str(value).strip() == "":
            raise ValueError("a state directory path is required")
        return Path(str(value)).expanduser()

    @field_validator("default_provider", mode="before")
    def _normalise_provider(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("openai_model", "claude_model", "gemini_model", "grok_model")
    def _require_model(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("model identifiers cannot be empty")
        return stripped

    @field_validator(
        "openai_api_key", "claude_api_key", "gemini_api_key", "grok_api_key", mode="before"
    )
    def _strip_secret(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = str(value).strip()
        return stripped or None

    @field_validator("history_max_entries")
    def _validate_capacity(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("history_max_entries must be greater than zero")
        return value

    @field_validator("request_timeout_seconds")
    def _validate_timeout(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("request_timeout_seconds must be greater than zero")
        return value

    # ------------------------------------------------------------------ #
    # Derived paths and provider helpers
    # ------------------------------------------------------------------ #
    @property
    def history_path(self) -> Path:
        return self.state_dir / "history.json"

    @property
    def presets_path(self) -> Path:
        return self.state_dir / "presets.json"

    @property
    def config_path(self) -> Path:
        return resolve_config_path(self.state_dir)

    @property
    def env_path(self) -> Path:
        return self.state_dir / ".env"

    def api_key_for(self, provider: str) -> str | None:
        name = provider.strip().lower()
        if name not in PROVIDERS:
            return None
        return cast("str | None", getattr(self, f"{name}_api_key"))

    def model_for(self, provider: str) -> str | None:
        name = provider.strip().lower()
        if name not in PROVIDERS:
            return None
        return cast("str", getattr(self, f"{name}_model"))

    def has_any_api_key(self) -> bool:
        return any(self.api_key_for(provider) for provider in PROVIDERS)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
        PydanticBaseSettingsSource,
    ]:
        """Define configuration source precedence.

        Order (highest → lowest):
            1. Explicit keyword arguments (CLI flags via load_settings(...)).
            2. Environment variables / aliases.
            3. JSON configuration file (``<state_dir>/config.json``).
            4. ``.env`` files (``.env``, ``.env.local``, ``<state_dir>/.env``).
        """
        init_kwargs = cast("dict[str, Any]", getattr(init_settings, "init_kwargs", {}) or {})
        state_dir = resolve_state_dir(init_kwargs.get("state_dir"))

        def env_with_aliases(_: BaseSettings | None = None) -> dict[str, Any]:
            return _lookup_aliases(os.environ)

        def dotenv_with_aliases(_: BaseSettings | None = None) -> dict[str, Any]:
            data = _lookup_aliases(_read_dotenv_values(state_dir))
            data.pop("state_dir", None)
            return data

        return (
            init_settings,
            cast("PydanticBaseSettingsSource", env_with_aliases),
            cls._json_config_settings_source(resolve_config_path(state_dir)),
            cast("PydanticBaseSettingsSource", dotenv_with_aliases),
        )

    @classmethod
    def _json_config_settings_source(cls, path: Path) -> PydanticBaseSettingsSource:
        """Return settings extracted from the optional JSON config file."""

        def _loader(_: BaseSettings | None = None) -> dict[str, Any]:
            explicit = bool(os.getenv("FFCRAFT_CONFIG_JSON"))
            if not path.exists():
                if explicit:
                    raise SettingsError(f"Configuration file not found: {path}")
                return {}
            try:
                raw_contents = path.read_text(encoding="utf-8")
            except OSError as exc:  # pragma: no cover - filesystem failure is env-specific
                raise SettingsError(f"Unable to read configuration file: {path}") from exc
            try:
                data = json.loads(raw_contents) if raw_contents.strip() else {}
            except json.JSONDecodeError as exc:
                raise SettingsError(f"Invalid JSON in configuration file: {path}") from exc
            if not isinstance(data, dict):
                raise SettingsError(f"Configuration file {path} must contain a JSON object")
            data_dict = {str(key): value for key, value in cast("dict[Any, Any]", data).items()}

            mapped = _flatten_legacy_config(data_dict)
            for key in _JSON_FIELDS:
                if key in data_dict:
                    mapped[key] = data_dict[key]
            removed_secrets = sorted(
                key
                for key in (*SECRET_FIELDS, *API_KEY_ENV_VARS.values())
                if data_dict.get(key) or mapped.get(key)
            )
            for key in SECRET_FIELDS:
                mapped.pop(key, None)
            if removed_secrets:
                logger.warning(
                    "Ignoring secret key(s) %s in configuration file %s; "
                    "use `ffcraft config --<provider> KEY` or environment variables instead.",
                    ", ".join(removed_secrets),
                    path,
                )
            return mapped

        return cast("PydanticBaseSettingsSource", _loader)


def load_settings(**overrides: Any) -> FfcraftSettings:
    """Return validated settings, raising SettingsError on failure."""
    cleaned = {key: value for key, value in overrides.items() if value is not None}
    try:
        return FfcraftSettings(**cleaned)
    except SettingsError:
        raise
    except ValidationError as exc:
        raise SettingsError(f"Invalid ffcraft configuration: {exc}") from exc


__all__ = [
    "API_KEY_ENV_VARS",
    "DEFAULT_MODELS",
    "DEFAULT_PROVIDER",
    "DEFAULT_STATE_DIR",
    "FfcraftSettings",
    "PROVIDERS",
    "ProviderName",
    "SettingsError",
    "load_settings",
    "resolve_config_path",
    "resolve_state_dir",
]
