"""Data models for ffcraft.

Updates: v0.2.0 - 2026-10-09 - Export preset dataclasses.
Updates: v0.1.0 - 2026-09-28 - Export HistoryEntry dataclass.
"""

from .history_model import FavoriteToggle, HistoryEntry, HistoryStats, ToggleStatus
from .preset_model import (
    CustomPreset,
    Difficulty,
    ParameterType,
    ParameterValidation,
    Preset,
    PresetParameter,
)

__all__ = [
    "CustomPreset",
    "Difficulty",
    "FavoriteToggle",
    "HistoryEntry",
    "HistoryStats",
    "ParameterType",
    "ParameterValidation",
    "Preset",
    "PresetParameter",
    "ToggleStatus",
]
