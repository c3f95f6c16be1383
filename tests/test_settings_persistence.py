"""Verify configuration persistence helpers.

Updates:
  v0.2.0 - 2026-10-08 - Cover API key storage in the state directory .env file.
  v0.1.0 - 2026-10-03 - Cover config.json merges and default pruning.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from dotenv import dotenv_values

from config import load_settings
from config.persistence import persist_settings_to_config, store_api_key


def test_persist_settings_to_config(state_dir: Path) -> None:
    """Persist non-default overrides and read them back through load_settings."""
    path = state_dir / "config.json"

    persist_settings_to_config(
        {"default_provider": "claude", "claude_model": "claude-3-opus"}, path
    )

    data = json.loads(path.read_text(encoding="utf-8"))
    assert data == {"default_provider": "claude", "claude_model": "claude-3-opus"}
    settings = load_settings(state_dir=state_dir)
    assert settings.default_provider == "claude"
    assert settings.claude_model == "claude-3-opus"


def test_persist_merges_with_existing_values(state_dir: Path) -> None:
    path = state_dir / "config.json"
    path.write_text(json.dumps({"grok_model": "grok-2", "custom": 1}), encoding="utf-8")

    persist_settings_to_config({"auto_copy": True}, path)

    assert json.loads(path.read_text(encoding="utf-8")) == {
        "grok_model": "grok-2",
        "custom": 1,
        "auto_copy": True,
    }


def test_persist_drops_defaults_and_blank_values(state_dir: Path) -> None:
    """Values matching the defaults, blanks and None remove the key."""
    path = state_dir / "config.json"
    path.write_text(
        json.dumps({"default_provider": "gemini", "openai_model": "gpt-4o", "auto_copy": True}),
        encoding="utf-8",
    )

    persist_settings_to_config(
        {"default_provider": "openai", "openai_model": "  ", "auto_copy": None},
        path,
    )

    assert json.loads(path.read_text(encoding="utf-8")) == {}


def test_persist_never_writes_secrets(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"

    persist_settings_to_config({"openai_api_key": "sk-1", "XAI_API_KEY": "xai-2"}, path)

    assert path.exists()
    assert "sk-1" not in path.read_text(encoding="utf-8")
    assert json.loads(path.read_text(encoding="utf-8")) == {}


def test_persist_replaces_unreadable_config(state_dir: Path) -> None:
    path = state_dir / "config.json"
    path.write_text("{oops", encoding="utf-8")

    persist_settings_to_config({"grok_model": "grok-2"}, path)

    assert json.loads(path.read_text(encoding="utf-8")) == {"grok_model": "grok-2"}


def test_store_api_key_writes_dotenv(state_dir: Path) -> None:
    """Stored keys land in the state .env file and are picked up on the next load."""
    env_path = state_dir / ".env"

    variable = store_api_key("Claude", "  sk-ant-123  ", env_path)
    store_api_key("openai", "sk-oa", env_path)
    store_api_key("claude", "sk-ant-456", env_path)

    assert variable == "ANTHROPIC_API_KEY"
    assert dotenv_values(env_path) == {"ANTHROPIC_API_KEY": "sk-ant-456", "OPENAI_API_KEY": "sk-oa"}
    settings = load_settings(state_dir=state_dir)
    assert settings.claude_api_key == "sk-ant-456"
    assert settings.openai_api_key == "sk-oa"


@pytest.mark.parametrize(("provider", "key"), [("mistral", "k"), ("openai", "   ")])
def test_store_api_key_rejects_bad_input(state_dir: Path, provider: str, key: str) -> None:
    with pytest.raises(ValueError):
        store_api_key(provider, key, state_dir / ".env")
    assert not (state_dir / ".env").exists()
