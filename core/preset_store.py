"""Catalogue of built-in and custom prompt presets.

Updates:
  v0.3.2 - 2026-10-18 - Raise StoreValidationError for unknown update fields.
  v0.3.1 - 2026-10-18 - Report dropped custom presets as a RECOVERED load.
  v0.3.0 - 2026-10-13 - Render parameter values through shared normalisation helpers.
  v0.2.1 - 2026-10-11 - Refuse id/is_custom changes in update_custom_preset.
  v0.2.0 - 2026-10-06 - Add preset export/import and usage counters.
  v0.1.0 - 2026-09-28 - Introduce PresetStore over the packaged catalogue.
"""

from __future__ import annotations

import json
import logging
import secrets
import string
from collections.abc import Callable, Iterable, Mapping, Sequence
from functools import lru_cache
from pathlib import Path
from typing import Any, cast

from catalog import builtin_catalog_resource
from models.history_model import now_ms
from models.preset_model import CustomPreset, Preset, PresetParameter

from .exceptions import (
    InvalidPresetFormat,
    PresetImportError,
    PresetNotFoundError,
    StoreValidationError,
)
from .parameters import normalize_parameter_value
from .storage import JsonArrayFile, LoadResult

logger = logging.getLogger("ffcraft.presets")

_ID_ALPHABET = string.ascii_lowercase + string.digits
_REQUIRED_FIELDS = ("name", "prompt", "category")
_FIELD_ALIASES = {
    "commonUse": "common_use",
    "createdAt": "created_at",
    "usageCount": "usage_count",
    "isCustom": "is_custom",
}
_UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "description",
        "category",
        "prompt",
        "parameters",
        "examples",
        "tags",
        "difficulty",
        "common_use",
        "created_at",
        "usage_count",
    }
)
_IMMUTABLE_FIELDS = frozenset({"id", "is_custom"})


@lru_cache(maxsize=1)
def load_builtin_presets() -> tuple[Preset, ...]:
    """Return the packaged preset catalogue, parsed once per process."""
    raw = builtin_catalog_resource().read_text(encoding="utf-8")
    records = cast("list[Mapping[str, Any]]", json.loads(raw))
    return tuple(Preset.from_record(record) for record in records)


def _canonical_key(key: str) -> str:
    return _FIELD_ALIASES.get(key, key)


def _record_value(value: Any) -> Any:
    if isinstance(value, PresetParameter):
        return value.to_record()
    if isinstance(value, (list, tuple)):
        return [_record_value(item) for item in cast("Sequence[Any]", value)]
    return value


class PresetStore:
    """Expose built-ins and persisted custom presets as one catalogue."""

    def __init__(
        self,
        path: Path | str,
        *,
        builtins: Iterable[Preset] | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        self._file = JsonArrayFile(path)
        self._builtins: tuple[Preset, ...] = (
            tuple(builtins) if builtins is not None else load_builtin_presets()
        )
        self._clock = clock or now_ms
        self._custom: list[CustomPreset] = []
        records, self.load_result = self._file.load()
        self._hydrate(records)

    def _hydrate(self, records: Iterable[Mapping[str, Any]]) -> None:
        taken = {preset.id for preset in self._builtins}
        dropped = 0
        for record in records:
            try:
                preset = CustomPreset.from_record(record)
            except (TypeError, ValueError) as exc:
                logger.warning("Skipping unreadable custom preset: %s", exc)
                dropped += 1
                continue
            if not preset.id or preset.id in taken:
                replacement = self._new_id(taken)
                logger.warning(
                    "Custom preset id %r is missing or duplicated; using %s",
                    preset.id,
                    replacement,
                )
                preset.id = replacement
            taken.add(preset.id)
            self._custom.append(preset)
        self.load_result = self.load_result.with_dropped(dropped, len(self._custom), "preset")

    @property
    def path(self) -> Path:
        return self._file.path

    def _persist(self) -> None:
        self._file.save([preset.to_record() for preset in self._custom])

    def _taken_ids(self) -> set[str]:
        return {preset.id for preset in self._builtins} | {preset.id for preset in self._custom}

    def _new_id(self, taken: set[str] | None = None) -> str:
        existing = taken if taken is not None else self._taken_ids()
        while True:
            suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
            candidate = f"custom-{self._clock()}-{suffix}"
            if candidate not in existing:
                return candidate

    def _find_custom(self, preset_id: str) -> int | None:
        for index, preset in enumerate(self._custom):
            if preset.id == preset_id:
                return index
        return None

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    def get_all_presets(self) -> list[Preset]:
        """Return built-ins followed by custom presets."""
        return [*self._builtins, *self._custom]

    def get_builtin_presets(self) -> list[Preset]:
        return list(self._builtins)

    def get_custom_presets(self) -> list[CustomPreset]:
        return list(self._custom)

    def get_presets_by_category(self, category: str) -> list[Preset]:
        return [preset for preset in self.get_all_presets() if preset.category == category]

    def get_preset_by_id(self, preset_id: str) -> Preset | None:
        for preset in self.get_all_presets():
            if preset.id == preset_id:
                return preset
        return None

    def get_categories(self) -> list[str]:
        return sorted({preset.category for preset in self.get_all_presets()})

    def get_common_presets(self) -> list[Preset]:
        return [preset for preset in self.get_all_presets() if preset.common_use]

    def search_presets(self, query: str) -> list[Preset]:
        """Case-insensitive substring search over name, description, tags and body."""
        needle = query.lower()
        return [
            preset
            for preset in self.get_all_presets()
            if needle in preset.name.lower()
            or needle in preset.description.lower()
            or any(needle in tag.lower() for tag in preset.tags)
            or needle in preset.prompt.lower()
        ]

    # ------------------------------------------------------------------ #
    # Custom preset mutations
    # ------------------------------------------------------------------ #
    def _create_custom(self, data: Mapping[str, Any] | Preset) -> CustomPreset:
        source = data.to_record() if isinstance(data, Preset) else data
        record = {_canonical_key(str(key)): _record_value(value) for key, value in source.items()}
        missing = [name for name in _REQUIRED_FIELDS if not str(record.get(name) or "").strip()]
        if missing:
            raise StoreValidationError(
                f"Custom preset requires non-empty {', '.join(missing)}"
            )
        record["id"] = self._new_id()
        record["created_at"] = self._clock()
        record["usage_count"] = 0
        try:
            return CustomPreset.from_record(record)
        except (TypeError, ValueError) as exc:
            raise StoreValidationError(f"Invalid custom preset: {exc}") from exc

    def add_custom_preset(self, data: Mapping[str, Any] | Preset) -> CustomPreset:
        """Create a custom preset with a fresh id, zero usage and the current time."""
        preset = self._create_custom(data)
        self._custom.append(preset)
        self._persist()
        logger.info("Added custom preset %s (%s)", preset.id, preset.name)
        return preset

    def update_custom_preset(self, preset_id: str, updates: Mapping[str, Any]) -> bool:
        """Shallow-merge *updates* into a custom preset; built-ins are never matched."""
        index = self._find_custom(preset_id)
        if index is None:
            return False
        normalised = {_canonical_key(str(key)): value for key, value in updates.items()}
        unknown = sorted(
            key for key in normalised if key not in _UPDATABLE_FIELDS | _IMMUTABLE_FIELDS
        )
        if unknown:
            raise StoreValidationError(f"Unknown preset field(s): {', '.join(unknown)}")
        ignored = sorted(key for key in normalised if key in _IMMUTABLE_FIELDS)
        if ignored:
            logger.warning(
                "Ignoring attempt to change %s on preset %s", ", ".join(ignored), preset_id
            )

        merged = self._custom[index].to_record()
        for key, value in normalised.items():
            if key in _IMMUTABLE_FIELDS:
                continue
            merged[key] = _record_value(value)
        try:
            updated = CustomPreset.from_record(merged)
        except (TypeError, ValueError) as exc:
            raise StoreValidationError(f"Invalid update for preset {preset_id}: {exc}") from exc
        self._custom[index] = updated
        self._persist()
        return True

    def delete_custom_preset(self, preset_id: str) -> bool:
        index = self._find_custom(preset_id)
        if index is None:
            return False
        del self._custom[index]
        self._persist()
        return True

    def increment_usage_count(self, preset_id: str) -> bool:
        """Bump the usage counter of a custom preset; built-ins are a no-op."""
        index = self._find_custom(preset_id)
        if index is None:
            return False
        self._custom[index].usage_count += 1
        self._persist()
        return True

    # ------------------------------------------------------------------ #
    # Rendering
    # ------------------------------------------------------------------ #
    def build_prompt_from_preset(
        self,
        preset_id: str,
        values: Mapping[str, Any] | None = None,
    ) -> str:
        """Substitute parameter values (or defaults) into the preset body.

        Placeholders with neither a supplied value nor a default stay in the output.
        Rendering does not touch usage counters.
        """
        preset = self.get_preset_by_id(preset_id)
        if preset is None:
            raise PresetNotFoundError(f"Preset {preset_id} not found")
        supplied = values or {}
        prompt = preset.prompt
        for parameter in preset.parameters:
            value = supplied.get(parameter.name)
            if value is None:
                value = parameter.default
            if value is None:
                continue
            prompt = prompt.replace(
                f"{{{parameter.name}}}",
                normalize_parameter_value(parameter, value),
            )
        return prompt

    # ------------------------------------------------------------------ #
    # Export / import
    # ------------------------------------------------------------------ #
    def export_presets(self) -> str:
        payload = {
            "builtIn": [preset.to_record() for preset in self._builtins],
            "custom": [preset.to_record() for preset in self._custom],
        }
        return json.dumps(payload, indent=2, ensure_ascii=False)

    def import_custom_presets(
        self, data: str | bytes | Sequence[Mapping[str, Any]] | Mapping[str, Any]
    ) -> int:
        """Add presets from an exported payload and return how many were imported.

        Accepts a raw array or an object with a ``custom`` array. Candidates need a
        non-empty ``name``, ``prompt`` and ``category``; each receives a new id.
        """
        if isinstance(data, (str, bytes)):
            try:
                parsed: Any = json.loads(data)
            except json.JSONDecodeError as exc:
                raise PresetImportError(f"Failed to import presets: {exc}") from exc
        else:
            parsed = data
        if isinstance(parsed, Mapping) and "custom" in parsed:
            parsed = cast("Mapping[str, Any]", parsed)["custom"]
        if not isinstance(parsed, list):
            raise InvalidPresetFormat("Invalid preset data format")

        imported: list[CustomPreset] = []
        for candidate in cast("list[Any]", parsed):
            if not isinstance(candidate, Mapping):
                continue
            mapping = cast("Mapping[str, Any]", candidate)
            if not all(str(mapping.get(name) or "").strip() for name in _REQUIRED_FIELDS):
                continue
            try:
                preset = self._create_custom(mapping)
            except StoreValidationError as exc:
                logger.warning("Skipping preset %r: %s", mapping.get("name"), exc)
                continue
            self._custom.append(preset)
            imported.append(preset)

        if imported:
            self._persist()
        logger.info("Imported %d custom preset(s)", len(imported))
        return len(imported)


__all__ = ["PresetStore", "load_builtin_presets"]
