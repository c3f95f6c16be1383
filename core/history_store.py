"""Durable, queryable log of command generation attempts.

Updates:
  v0.4.1 - 2026-10-18 - Import atomically and report dropped records as RECOVERED.
  v0.4.0 - 2026-10-14 - Return a tagged FavoriteToggle from toggle_favorite.
  v0.3.1 - 2026-10-12 - Optionally report the inserted count from import_history.
  v0.3.0 - 2026-10-10 - Expose LoadResult and surface write failures as StateWriteError.
  v0.2.0 - 2026-10-04 - Add statistics, JSON/CSV export, and JSON import.
  v0.1.0 - 2026-09-28 - Introduce HistoryStore with dedup-on-insert and auto tags.
"""

from __future__ import annotations

import csv
import io
import json
import logging
import secrets
from collections import Counter
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any, Literal, cast

from models.history_model import (
    FavoriteToggle,
    HistoryEntry,
    HistoryStats,
    format_timestamp,
    now_ms,
)

from .exceptions import HistoryImportError, UnsupportedImportFormat
from .storage import JsonArrayFile, LoadResult
from .tagging import derive_tags

DEFAULT_MAX_ENTRIES = 1000
DEFAULT_RECENT_LIMIT = 10
DEFAULT_PRUNE_DAYS = 30

_DAY_MS = 24 * 60 * 60 * 1000
_WEEK_MS = 7 * _DAY_MS
_MONTH_MS = 30 * _DAY_MS

CSV_HEADERS: tuple[str, ...] = (
    "Timestamp",
    "Prompt",
    "Command",
    "Provider",
    "Model",
    "Tags",
    "Favorite",
    "Execution Count",
)

ExportFormat = Literal["json", "csv"]

logger = logging.getLogger("ffcraft.history")


class HistoryStore:
    """Keep generation attempts in memory and mirror every mutation to disk."""

    def __init__(
        self,
        path: Path | str,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], int] | None = None,
        match_tag_words: bool = False,
    ) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be greater than zero")
        self._file = JsonArrayFile(path)
        self._max_entries = max_entries
        self._clock = clock or now_ms
        self._match_tag_words = match_tag_words
        self._entries: list[HistoryEntry] = []
        records, self.load_result = self._file.load()
        self._hydrate(records)

    # ------------------------------------------------------------------ #
    # Loading and persistence
    # ------------------------------------------------------------------ #
    def _hydrate(self, records: Iterable[Mapping[str, Any]]) -> None:
        seen: set[str] = set()
        dropped = 0
        for record in records:
            try:
                entry = HistoryEntry.from_record(record)
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping unreadable history record: %s", exc)
                dropped += 1
                continue
            if not entry.id or entry.id in seen:
                entry.id = self._new_id(seen)
            seen.add(entry.id)
            self._entries.append(entry)
        self.load_result = self.load_result.with_dropped(dropped, len(self._entries), "history")
        logger.debug("Loaded %d history entries from %s", len(self._entries), self.path)

    @property
    def path(self) -> Path:
        return self._file.path

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def _persist(self) -> None:
        if len(self._entries) > self._max_entries:
            dropped = len(self._entries) - self._max_entries
            self._entries.sort(key=lambda entry: entry.timestamp, reverse=True)
            del self._entries[self._max_entries :]
            logger.info("Trimmed %d history entries beyond capacity", dropped)
        self._file.save([entry.to_record() for entry in self._entries])

    def _new_id(self, taken: set[str] | None = None) -> str:
        existing = taken if taken is not None else {entry.id for entry in self._entries}
        while True:
            candidate = secrets.token_hex(8)
            if candidate not in existing:
                return candidate

    def _find(self, entry_id: str) -> HistoryEntry | None:
        for entry in self._entries:
            if entry.id == entry_id:
                return entry
        return None

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> list[HistoryEntry]:
        """Return the entries in store order."""
        return list(self._entries)

    # ------------------------------------------------------------------ #
    # Mutations
    # ------------------------------------------------------------------ #
    def add(
        self,
        prompt: str,
        command: str,
        provider: str,
        model: str | None = None,
        *,
        category: str | None = None,
        error: str | None = None,
    ) -> HistoryEntry:
        """Record a generation attempt, merging repeats of the same prompt/command."""
        lowered = prompt.lower()
        for entry in self._entries:
            if entry.prompt.lower() == lowered and entry.command == command:
                entry.execution_count += 1
                entry.timestamp = self._clock()
                self._persist()
                return entry

        entry = HistoryEntry(
            id=self._new_id(),
            prompt=prompt,
            command=command,
            provider=provider,
            model=model,
            timestamp=self._clock(),
            execution_count=1,
            tags=derive_tags(prompt, match_words=self._match_tag_words),
            is_favorite=False,
            category=category,
            error=error,
        )
        self._entries.insert(0, entry)
        self._persist()
        return entry

    def toggle_favorite(self, entry_id: str) -> FavoriteToggle:
        entry = self._find(entry_id)
        if entry is None:
            return FavoriteToggle.not_found()
        entry.is_favorite = not entry.is_favorite
        self._persist()
        return FavoriteToggle.toggled(entry.is_favorite)

    def add_tags(self, entry_id: str, tags: Iterable[str]) -> bool:
        """Union *tags* into the entry's tag set; return whether the id matched."""
        entry = self._find(entry_id)
        if entry is None:
            return False
        for tag in tags:
            text = str(tag).strip()
            if text and text not in entry.tags:
                entry.tags.append(text)
        self._persist()
        return True

    def set_category(self, entry_id: str, category: str | None) -> bool:
        entry = self._find(entry_id)
        if entry is None:
            return False
        cleaned = category.strip() if category is not None else ""
        entry.category = cleaned or None
        self._persist()
        return True

    def delete(self, entry_id: str) -> bool:
        entry = self._find(entry_id)
        if entry is None:
            return False
        self._entries.remove(entry)
        self._persist()
        return True

    def clear(self) -> None:
        self._entries.clear()
        self._persist()

    def clear_old_entries(self, days_to_keep: int = DEFAULT_PRUNE_DAYS) -> int:
        """Remove non-favourite entries older than *days_to_keep* days."""
        cutoff = self._clock() - days_to_keep * _DAY_MS
        before = len(self._entries)
        self._entries = [
            entry for entry in self._entries if entry.is_favorite or entry.timestamp > cutoff
        ]
        self._persist()
        removed = before - len(self._entries)
        if removed:
            logger.info("Pruned %d history entries older than %d days", removed, days_to_keep)
        return removed

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    def get(self, entry_id: str) -> HistoryEntry | None:
        return self._find(entry_id)

    def get_recent(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[HistoryEntry]:
        ordered = sorted(self._entries, key=lambda entry: entry.timestamp, reverse=True)
        return ordered[: max(limit, 0)]

    def get_favorites(self) -> list[HistoryEntry]:
        favourites = [entry for entry in self._entries if entry.is_favorite]
        return sorted(favourites, key=lambda entry: entry.execution_count, reverse=True)

    def get_most_used(self, limit: int = DEFAULT_RECENT_LIMIT) -> list[HistoryEntry]:
        repeated = [entry for entry in self._entries if entry.execution_count > 1]
        repeated.sort(key=lambda entry: entry.execution_count, reverse=True)
        return repeated[: max(limit, 0)]

    def search(self, query: str) -> list[HistoryEntry]:
        """Case-insensitive substring search over prompt, command, tags and category."""
        needle = query.lower()
        return [
            entry
            for entry in self._entries
            if needle in entry.prompt.lower()
            or needle in entry.command.lower()
            or any(needle in tag.lower() for tag in entry.tags)
            or (entry.category is not None and needle in entry.category.lower())
        ]

    def get_by_tag(self, tag: str) -> list[HistoryEntry]:
        wanted = tag.lower()
        return [
            entry
            for entry in self._entries
            if any(candidate.lower() == wanted for candidate in entry.tags)
        ]

    def get_by_category(self, category: str) -> list[HistoryEntry]:
        wanted = category.lower()
        return [
            entry
            for entry in self._entries
            if entry.category is not None and entry.category.lower() == wanted
        ]

    def all_tags(self) -> list[str]:
        return sorted({tag for entry in self._entries for tag in entry.tags})

    def get_stats(self) -> HistoryStats:
        now = self._clock()
        providers = Counter(entry.provider for entry in self._entries)
        categories = Counter(entry.category for entry in self._entries if entry.category)
        top_provider = providers.most_common(1)
        top_category = categories.most_common(1)
        return HistoryStats(
            total_commands=len(self._entries),
            favorite_count=sum(1 for entry in self._entries if entry.is_favorite),
            most_used_provider=top_provider[0][0] if top_provider else "none",
            most_used_category=top_category[0][0] if top_category else "uncategorized",
            commands_today=self._count_since(now - _DAY_MS),
            commands_this_week=self._count_since(now - _WEEK_MS),
            commands_this_month=self._count_since(now - _MONTH_MS),
        )

    def _count_since(self, threshold: int) -> int:
        return sum(1 for entry in self._entries if entry.timestamp > threshold)

    # ------------------------------------------------------------------ #
    # Export / import
    # ------------------------------------------------------------------ #
    def export_history(self, fmt: ExportFormat | str = "json") -> str:
        """Serialise every entry as pretty-printed JSON or eight-column CSV."""
        choice = str(fmt).strip().lower()
        if choice == "json":
            return json.dumps(
                [entry.to_record() for entry in self._entries], indent=2, ensure_ascii=False
            )
        if choice != "csv":
            raise ValueError(f"Unsupported export format: {fmt}")
        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for entry in self._entries:
            writer.writerow(
                (
                    format_timestamp(entry.timestamp),
                    entry.prompt,
                    entry.command,
                    entry.provider,
                    entry.model or "",
                    ";".join(entry.tags),
                    "Yes" if entry.is_favorite else "No",
                    str(entry.execution_count),
                )
            )
        return buffer.getvalue().rstrip("\n")

    def import_history(
        self,
        data: str | bytes | Sequence[Mapping[str, Any]],
        fmt: str = "json",
        *,
        count_inserted: bool = False,
    ) -> int:
        """Merge exported entries into the store.

        Entries missing ``prompt``, ``command`` or ``provider`` are discarded; entries
        whose exact prompt and command already exist are skipped. The return value is
        the number of valid entries, or the number actually inserted when
        *count_inserted* is True. A record that fails to parse aborts the import and
        leaves the store untouched.
        """
        choice = fmt.strip().lower()
        if choice == "csv":
            raise UnsupportedImportFormat("CSV import is not implemented; export as JSON instead")
        if choice != "json":
            raise HistoryImportError(f"Failed to import history: unsupported format '{fmt}'")

        payload = self._parse_import_payload(data)
        valid = [
            cast("Mapping[str, Any]", item)
            for item in payload
            if isinstance(item, Mapping)
            and item.get("prompt")
            and item.get("command")
            and item.get("provider")
        ]

        pending: list[HistoryEntry] = []
        taken = {entry.id for entry in self._entries}
        known = {(entry.prompt, entry.command) for entry in self._entries}
        for item in valid:
            key = (str(item["prompt"]), str(item["command"]))
            if key in known:
                continue
            record = dict(item)
            if not record.get("timestamp"):
                record["timestamp"] = self._clock()
            try:
                entry = HistoryEntry.from_record(record)
            except (TypeError, ValueError) as exc:
                raise HistoryImportError(f"Failed to import history: {exc}") from exc
            if not entry.id or entry.id in taken:
                entry.id = self._new_id(taken)
            taken.add(entry.id)
            known.add(key)
            pending.append(entry)

        inserted = len(pending)
        self._entries.extend(pending)
        self._persist()
        logger.info(
            "Imported %d of %d valid history entries (%d candidates)",
            inserted,
            len(valid),
            len(payload),
        )
        return inserted if count_inserted else len(valid)

    @staticmethod
    def _parse_import_payload(data: str | bytes | Sequence[Mapping[str, Any]]) -> list[Any]:
        if isinstance(data, (str, bytes)):
            try:
                parsed = json.loads(data)
            except json.JSONDecodeError as exc:
                raise HistoryImportError(f"Failed to import history: {exc}") from exc
        else:
            parsed = data
        if not isinstance(parsed, list):
            raise HistoryImportError("Failed to import history: expected a JSON array of entries")
        return cast("list[Any]", parsed)


__all__ = [
    "CSV_HEADERS",
    "DEFAULT_MAX_ENTRIES",
    "HistoryStore",
]
