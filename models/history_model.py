"""History entry data model definitions.

Updates: v0.3.0 - 2026-10-14 - Add tagged favourite toggle result and stats container.
Updates: v0.2.0 - 2026-10-09 - Accept camelCase record aliases written by older exports.
Updates: v0.1.0 - 2026-09-28 - Initial HistoryEntry schema with serialization helpers.
"""
from __future__ import annotations

import time
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any


def now_ms() -> int:
    """Return the current wall-clock time as integer epoch milliseconds."""
    return int(time.time() * 1000)


def format_timestamp(value: int) -> str:
    """Render epoch milliseconds as an ISO-8601 UTC string (``...Z``)."""
    moment = datetime.fromtimestamp(value / 1000, tz=UTC)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _ensure_timestamp(value: Any) -> int:
    """Coerce epoch milliseconds, ISO strings or datetimes into epoch milliseconds."""
    if value is None or value == "":
        return now_ms()
    if isinstance(value, bool):
        raise ValueError("timestamp must be numeric")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        moment = value if value.tzinfo else value.replace(tzinfo=UTC)
        return int(moment.timestamp() * 1000)
    text = str(value).strip()
    if text.lstrip("-").isdigit():
        return int(text)
    moment = datetime.fromisoformat(text.replace("Z", "+00:00"))
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return int(moment.timestamp() * 1000)


def _unique_strings(items: Iterable[Any] | None) -> list[str]:
    """Return trimmed, de-duplicated strings preserving first-seen order."""
    if items is None:
        return []
    if isinstance(items, str):
        items = [items]
    cleaned: list[str] = []
    for raw in items:
        text = str(raw).strip()
        if text and text not in cleaned:
            cleaned.append(text)
    return cleaned


def _optional_text(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    """Return the first present value among *keys* (snake_case first, then aliases)."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


@dataclass(slots=True)
class HistoryEntry:
    """A single generation attempt recorded in the history log."""

    id: str
    prompt: str
    command: str
    provider: str
    model: str | None = None
    timestamp: int = field(default_factory=now_ms)
    execution_count: int = 1
    tags: list[str] = field(default_factory=list)
    is_favorite: bool = False
    category: str | None = None
    error: str | None = None

    @property
    def failed(self) -> bool:
        """Return True when the attempt did not produce a command."""
        return bool(self.error) or not self.command

    def to_record(self) -> dict[str, Any]:
        """Return a plain dictionary suitable for JSON persistence."""
        record: dict[str, Any] = {
            "id": self.id,
            "prompt": self.prompt,
            "command": self.command,
            "provider": self.provider,
            "timestamp": self.timestamp,
            "execution_count": self.execution_count,
            "tags": list(self.tags),
            "is_favorite": self.is_favorite,
        }
        if self.model is not None:
            record["model"] = self.model
        if self.category is not None:
            record["category"] = self.category
        if self.error is not None:
            record["error"] = self.error
        return record

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> HistoryEntry:
        """Hydrate an entry, filling defaults for fields older files lack."""
        execution_count = _pick(data, "execution_count", "executionCount")
        try:
            count = int(execution_count) if execution_count is not None else 1
        except (TypeError, ValueError):
            count = 1
        favourite = _pick(data, "is_favorite", "isFavorite")
        return cls(
            id=str(data.get("id") or ""),
            prompt=str(data.get("prompt") or ""),
            command=str(data.get("command") or ""),
            provider=str(data.get("provider") or ""),
            model=_optional_text(data.get("model")),
            timestamp=_ensure_timestamp(data.get("timestamp")),
            execution_count=max(count, 1),
            tags=_unique_strings(data.get("tags")),
            is_favorite=bool(favourite) if favourite is not None else False,
            category=_optional_text(data.get("category")),
            error=_optional_text(data.get("error")),
        )


@dataclass(slots=True)
class HistoryStats:
    """Aggregates derived on demand from the current history snapshot."""

    total_commands: int
    favorite_count: int
    most_used_provider: str
    most_used_category: str
    commands_today: int
    commands_this_week: int
    commands_this_month: int

    def to_record(self) -> dict[str, Any]:
        """Return a plain mapping for display or JSON output."""
        return {
            "total_commands": self.total_commands,
            "favorite_count": self.favorite_count,
            "most_used_provider": self.most_used_provider,
            "most_used_category": self.most_used_category,
            "commands_today": self.commands_today,
            "commands_this_week": self.commands_this_week,
            "commands_this_month": self.commands_this_month,
        }


class ToggleStatus(str, Enum):
    """Outcome of a favourite toggle request."""

    NOT_FOUND = "not_found"
    TOGGLED = "toggled"


@dataclass(frozen=True, slots=True)
class FavoriteToggle:
    """Tagged result distinguishing a missing id from a toggled-off entry."""

    status: ToggleStatus
    is_favorite: bool = False

    @property
    def found(self) -> bool:
        return self.status is ToggleStatus.TOGGLED

    @classmethod
    def not_found(cls) -> FavoriteToggle:
        return cls(ToggleStatus.NOT_FOUND)

    @classmethod
    def toggled(cls, value: bool) -> FavoriteToggle:
        return cls(ToggleStatus.TOGGLED, value)


__all__ = [
    "FavoriteToggle",
    "HistoryEntry",
    "HistoryStats",
    "ToggleStatus",
    "format_timestamp",
    "now_ms",
]
