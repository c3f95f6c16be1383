"""Preset (parameterised prompt template) data model definitions.

Updates: v0.2.1 - 2026-10-14 - Keep display placeholders on parameters for CLI hints.
Updates: v0.2.0 - 2026-10-09 - Add CustomPreset with usage counters and creation time.
Updates: v0.1.0 - 2026-09-28 - Initial Preset and PresetParameter schema.
"""
from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .history_model import now_ms


class ParameterType(str, Enum):
    """Value kinds a preset parameter can accept."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    SELECT = "select"
    FILE = "file"


class Difficulty(str, Enum):
    """Skill level a preset is aimed at."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


def _string_list(items: Iterable[Any] | None) -> list[str]:
    if items is None:
        return []
    if isinstance(items, str):
        return [items]
    return [str(item) for item in items]


def _pick(data: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return None


def _parse_difficulty(value: Any) -> Difficulty:
    if isinstance(value, Difficulty):
        return value
    try:
        return Difficulty(str(value or Difficulty.INTERMEDIATE.value).strip().lower())
    except ValueError:
        return Difficulty.INTERMEDIATE


@dataclass(slots=True)
class ParameterValidation:
    """Optional numeric range and string pattern constraints."""

    min: float | None = None
    max: float | None = None
    pattern: str | None = None

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {}
        if self.min is not None:
            record["min"] = self.min
        if self.max is not None:
            record["max"] = self.max
        if self.pattern is not None:
            record["pattern"] = self.pattern
        return record

    @classmethod
    def from_record(cls, data: Mapping[str, Any] | None) -> ParameterValidation | None:
        if not data:
            return None
        return cls(min=data.get("min"), max=data.get("max"), pattern=data.get("pattern"))


@dataclass(slots=True)
class PresetParameter:
    """A named slot substituted into a preset's ``{name}`` placeholder."""

    name: str
    description: str = ""
    type: ParameterType = ParameterType.STRING
    default: Any = None
    required: bool = False
    options: list[str] = field(default_factory=list)
    placeholder: str | None = None
    validation: ParameterValidation | None = None

    def to_record(self) -> dict[str, Any]:
        record: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "type": self.type.value,
        }
        if self.default is not None:
            record["default"] = self.default
        if self.required:
            record["required"] = True
        if self.options:
            record["options"] = list(self.options)
        if self.placeholder is not None:
            record["placeholder"] = self.placeholder
        if self.validation is not None:
            record["validation"] = self.validation.to_record()
        return record

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> PresetParameter:
        name = str(data.get("name") or "").strip()
        if not name:
            raise ValueError("Preset parameter requires a name")
        raw_type = str(data.get("type") or ParameterType.STRING.value).strip().lower()
        try:
            param_type = ParameterType(raw_type)
        except ValueError as exc:
            raise ValueError(f"Unsupported parameter type '{raw_type}' for '{name}'") from exc
        options = _string_list(data.get("options"))
        if param_type is ParameterType.SELECT and not options:
            raise ValueError(f"Select parameter '{name}' requires options")
        return cls(
            name=name,
            description=str(data.get("description") or ""),
            type=param_type,
            default=data.get("default"),
            required=bool(data.get("required", False)),
            options=options,
            placeholder=data.get("placeholder"),
            validation=ParameterValidation.from_record(data.get("validation")),
        )


@dataclass(slots=True)
class Preset:
    """A reusable prompt template with declared parameters."""

    id: str
    name: str
    description: str
    category: str
    prompt: str
    parameters: list[PresetParameter] = field(default_factory=list)
    examples: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    difficulty: Difficulty = Difficulty.INTERMEDIATE
    common_use: bool = False

    @property
    def is_custom(self) -> bool:
        return False

    def parameter(self, name: str) -> PresetParameter | None:
        """Return the declared parameter called *name*, if any."""
        for candidate in self.parameters:
            if candidate.name == name:
                return candidate
        return None

    def to_record(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "prompt": self.prompt,
            "parameters": [parameter.to_record() for parameter in self.parameters],
            "examples": list(self.examples),
            "tags": list(self.tags),
            "difficulty": self.difficulty.value,
            "common_use": self.common_use,
        }

    @staticmethod
    def _base_fields(data: Mapping[str, Any]) -> dict[str, Any]:
        raw_parameters = data.get("parameters") or []
        return {
            "id": str(data.get("id") or ""),
            "name": str(data.get("name") or ""),
            "description": str(data.get("description") or ""),
            "category": str(data.get("category") or ""),
            "prompt": str(data.get("prompt") or ""),
            "parameters": [PresetParameter.from_record(item) for item in raw_parameters],
            "examples": _string_list(data.get("examples")),
            "tags": _string_list(data.get("tags")),
            "difficulty": _parse_difficulty(data.get("difficulty")),
            "common_use": bool(_pick(data, "common_use", "commonUse") or False),
        }

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> Preset:
        return cls(**cls._base_fields(data))


@dataclass(slots=True)
class CustomPreset(Preset):
    """A user-authored preset persisted alongside its usage counter."""

    created_at: int = field(default_factory=now_ms)
    usage_count: int = 0

    @property
    def is_custom(self) -> bool:
        return True

    def to_record(self) -> dict[str, Any]:
        record = Preset.to_record(self)
        record["is_custom"] = True
        record["created_at"] = self.created_at
        record["usage_count"] = self.usage_count
        return record

    @classmethod
    def from_record(cls, data: Mapping[str, Any]) -> CustomPreset:
        fields = cls._base_fields(data)
        created_at = _pick(data, "created_at", "createdAt")
        usage_count = _pick(data, "usage_count", "usageCount")
        return cls(
            **fields,
            created_at=int(created_at) if created_at is not None else now_ms(),
            usage_count=max(int(usage_count or 0), 0),
        )


__all__ = [
    "CustomPreset",
    "Difficulty",
    "ParameterType",
    "ParameterValidation",
    "Preset",
    "PresetParameter",
]
