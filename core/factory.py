"""Factories for constructing ffcraft services from validated settings.

Updates:
  v0.2.0 - 2026-10-10 - Pass history capacity from settings and log recovered state files.
  v0.1.0 - 2026-09-30 - Build explicit store instances instead of module singletons.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .generation import CommandGenerator
from .history_store import HistoryStore
from .preset_store import PresetStore

if TYPE_CHECKING:  # pragma: no cover - typing only
    from config import FfcraftSettings

factory_logger = logging.getLogger("ffcraft.factory")


@dataclass(slots=True)
class AppServices:
    """Stores and collaborators shared by CLI command handlers."""

    settings: FfcraftSettings
    history: HistoryStore
    presets: PresetStore
    generator: CommandGenerator


def build_services(settings: FfcraftSettings) -> AppServices:
    """Construct the history store, preset store and generator for *settings*."""
    history = HistoryStore(settings.history_path, max_entries=settings.history_max_entries)
    presets = PresetStore(settings.presets_path)
    for label, result in (("history", history.load_result), ("presets", presets.load_result)):
        if not result.ok:
            factory_logger.warning(
                "Recovered %s state with data loss (%s): %s",
                label,
                result.status.value,
                result.message,
            )
    return AppServices(
        settings=settings,
        history=history,
        presets=presets,
        generator=CommandGenerator(settings),
    )


__all__ = ["AppServices", "build_services"]
