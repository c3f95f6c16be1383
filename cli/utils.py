"""Shared CLI utility functions for ffcraft commands.

Updates:
  v0.2.0 - 2026-10-12 - Add history/preset renderers and --set pair parsing.
  v0.1.0 - 2026-10-02 - Stdout logging, secret masking and export path helpers.
"""

from __future__ import annotations

from datetime import UTC, date, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:  # pragma: no cover - typing helpers
    from collections.abc import Sequence
    from logging import Logger

    from models import HistoryEntry, Preset
else:  # pragma: no cover - runtime placeholders for type-only imports
    Sequence = Logger = HistoryEntry = Preset = Any


def print_and_log(logger: Logger, level: int, message: str) -> None:
    """Log *message* at *level* and mirror it to stdout."""
    logger.log(level, message)
    print(message)


def mask_secret(value: str | None) -> str:
    """Return an obfuscated representation of secret configuration values."""
    if not value:
        return "not set"
    secret = value.strip()
    if len(secret) <= 8:
        return "set (****)"
    return f"set ({secret[:4]}...{secret[-4:]})"


def parse_assignments(pairs: Sequence[str] | None) -> dict[str, str]:
    """Turn ``name=value`` strings from ``--set`` flags into a mapping."""
    values: dict[str, str] = {}
    for pair in pairs or ():
        name, separator, value = pair.partition("=")
        if not separator or not name.strip():
            raise ValueError(f"Expected name=value, got '{pair}'")
        values[name.strip()] = value
    return values


def parse_bool(value: str) -> bool:
    """Interpret a CLI boolean such as ``true``/``false``/``yes``/``0``."""
    lowered = value.strip().lower()
    if lowered in {"true", "1", "yes", "on"}:
        return True
    if lowered in {"false", "0", "no", "off"}:
        return False
    raise ValueError(f"Expected true or false, got '{value}'")


def default_export_path(prefix: str, fmt: str, *, today: date | None = None) -> Path:
    """Return ``<prefix>-YYYY-MM-DD.<fmt>`` in the working directory."""
    stamp = (today or datetime.now(UTC).date()).isoformat()
    return Path(f"{prefix}-{stamp}.{fmt}")


def format_entry_time(timestamp_ms: int) -> str:
    """Render an epoch-millisecond timestamp in local time."""
    moment = datetime.fromtimestamp(timestamp_ms / 1000, tz=UTC).astimezone()
    return moment.strftime("%Y-%m-%d %H:%M")


def render_history_entries(title: str, entries: Sequence[HistoryEntry]) -> str:
    """Return a printable listing of history *entries* under *title*."""
    if not entries:
        return "No commands found"
    lines = [title, "-" * len(title)]
    for index, entry in enumerate(entries, start=1):
        marker = "*" if entry.is_favorite else " "
        tags = f" [{', '.join(entry.tags)}]" if entry.tags else ""
        lines.append(f"{marker} {index}. {entry.prompt}{tags}")
        outcome = entry.command if not entry.failed else f"(failed: {entry.error or 'no command'})"
        lines.append(f"   {outcome}")
        lines.append(
            f"   {format_entry_time(entry.timestamp)} · {entry.provider} · "
            f"Used {entry.execution_count}x · id={entry.id}"
        )
    return "\n".join(lines)


def render_history_entry(entry: HistoryEntry) -> str:
    """Return the detail view for a single history entry."""
    lines = [
        "Command Details",
        "---------------",
        f"ID: {entry.id}",
        f"Prompt: {entry.prompt}",
        f"Command: {entry.command or '(none)'}",
        f"Provider: {entry.provider}" + (f" ({entry.model})" if entry.model else ""),
        f"Created: {format_entry_time(entry.timestamp)}",
        f"Used: {entry.execution_count} times",
        f"Tags: {', '.join(entry.tags) or 'none'}",
        f"Favorite: {'yes' if entry.is_favorite else 'no'}",
    ]
    if entry.category:
        lines.append(f"Category: {entry.category}")
    if entry.error:
        lines.append(f"Error: {entry.error}")
    return "\n".join(lines)


def render_preset_list(title: str, presets: Sequence[Preset]) -> str:
    """Return a compact preset listing."""
    if not presets:
        return "No presets found"
    lines = [title, "-" * len(title)]
    for preset in presets:
        origin = "custom" if preset.is_custom else "built-in"
        common = " *" if preset.common_use else ""
        lines.append(f"- {preset.id}: {preset.name} [{preset.category}, {origin}]{common}")
        if preset.description:
            lines.append(f"    {preset.description}")
    return "\n".join(lines)


def render_preset(preset: Preset) -> str:
    """Return the detail view for a single preset, parameters included."""
    lines = [
        f"{preset.name} ({preset.id})",
        f"Category: {preset.category}  Difficulty: {preset.difficulty.value}",
        f"Description: {preset.description or '(none)'}",
        f"Prompt: {preset.prompt}",
    ]
    if preset.tags:
        lines.append(f"Tags: {', '.join(preset.tags)}")
    if preset.parameters:
        lines.append("Parameters:")
        for parameter in preset.parameters:
            flags = "required" if parameter.required else "optional"
            default = f", default={parameter.default}" if parameter.default is not None else ""
            lines.append(f"  {parameter.name} ({parameter.type.value}, {flags}{default})")
            if parameter.description:
                lines.append(f"      {parameter.description}")
            if parameter.options:
                lines.append(f"      options: {' | '.join(parameter.options)}")
    if preset.examples:
        lines.append("Examples:")
        lines.extend(f"  - {example}" for example in preset.examples)
    return "\n".join(lines)


__all__ = [
    "default_export_path",
    "format_entry_time",
    "mask_secret",
    "parse_assignments",
    "parse_bool",
    "print_and_log",
    "render_history_entries",
    "render_history_entry",
    "render_preset",
    "render_preset_list",
]
