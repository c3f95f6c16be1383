"""Core service layer for ffcraft.

Updates:
  v0.3.0 - 2026-10-14 - Export generation, clipboard and runner collaborators.
  v0.2.0 - 2026-10-06 - Export PresetStore and parameter helpers.
  v0.1.0 - 2026-09-28 - Surface HistoryStore and the exception hierarchy.
"""

from .clipboard import copy_to_clipboard
from .exceptions import (
    ClipboardError,
    FfcraftError,
    GenerationError,
    GenerationNetworkError,
    HistoryImportError,
    InvalidPresetFormat,
    PresetImportError,
    PresetNotFoundError,
    PresetParameterError,
    ProviderAuthError,
    StateWriteError,
    StoreError,
    StoreValidationError,
    UnsupportedImportFormat,
)
from .factory import AppServices, build_services
from .generation import CommandGenerator, GeneratedCommand
from .history_store import HistoryStore
from .parameters import normalize_parameter_value, validate_parameter_values
from .preset_store import PresetStore, load_builtin_presets
from .runner import run_command
from .storage import JsonArrayFile, LoadResult, LoadStatus
from .tagging import derive_tags

__all__ = [
    "AppServices",
    "ClipboardError",
    "CommandGenerator",
    "FfcraftError",
    "GeneratedCommand",
    "GenerationError",
    "GenerationNetworkError",
    "HistoryImportError",
    "HistoryStore",
    "InvalidPresetFormat",
    "JsonArrayFile",
    "LoadResult",
    "LoadStatus",
    "PresetImportError",
    "PresetNotFoundError",
    "PresetParameterError",
    "PresetStore",
    "ProviderAuthError",
    "StateWriteError",
    "StoreError",
    "StoreValidationError",
    "UnsupportedImportFormat",
    "build_services",
    "copy_to_clipboard",
    "derive_tags",
    "load_builtin_presets",
    "normalize_parameter_value",
    "run_command",
    "validate_parameter_values",
]
