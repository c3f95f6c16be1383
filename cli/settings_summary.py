"""Printable summaries for ffcraft configuration.

Updates:
  v0.1.1 - 2026-10-12 - List the configuration source precedence.
  v0.1.0 - 2026-10-03 - Render `ffcraft config --show` output.
"""

from __future__ import annotations

from config import PROVIDERS, FfcraftSettings

from .utils import mask_secret

_PROVIDER_LABELS = {
    "openai": "OpenAI",
    "claude": "Claude",
    "gemini": "Gemini",
    "grok": "Grok",
}


def render_settings_summary(settings: FfcraftSettings) -> str:
    """Return a readable summary of provider credentials and defaults."""
    lines = [
        "ffcraft configuration summary",
        "-----------------------------",
        f"State directory: {settings.state_dir}",
        f"Config file: {settings.config_path}"
        + ("" if settings.config_path.exists() else " (missing)"),
        f"Credentials file: {settings.env_path}"
        + ("" if settings.env_path.exists() else " (missing)"),
        "",
        "API keys",
        "--------",
    ]
    for provider in PROVIDERS:
        lines.append(f"{_PROVIDER_LABELS[provider]}: {mask_secret(settings.api_key_for(provider))}")

    lines.extend(
        [
            "",
            "Defaults",
            "--------",
            f"Default provider: {settings.default_provider}",
        ]
    )
    for provider in PROVIDERS:
        lines.append(f"{_PROVIDER_LABELS[provider]} model: {settings.model_for(provider)}")
    timeout = settings.request_timeout_seconds
    lines.extend(
        [
            "",
            "Settings",
            "--------",
            f"Auto-copy: {'enabled' if settings.auto_copy else 'disabled'}",
            f"History capacity: {settings.history_max_entries}",
            f"Request timeout: {f'{timeout:g}s' if timeout is not None else 'provider default'}",
            "",
            "Configuration priority",
            "----------------------",
            "1. CLI flags (highest)",
            "2. Environment variables",
            f"3. {settings.config_path}",
            "4. .env files (lowest)",
        ]
    )
    return "\n".join(lines)


def print_settings_summary(settings: FfcraftSettings) -> None:
    """Emit the configuration summary to stdout."""
    print(render_settings_summary(settings))


__all__ = ["print_settings_summary", "render_settings_summary"]
