"""Common exception classes for the core package.

All exceptions ultimately inherit from :class:`FfcraftError`, allowing callers to
catch a single base class for any ffcraft failure while still distinguishing
individual error categories when needed. Store validation errors also derive from
:class:`ValueError` and lookup failures from :class:`LookupError` so generic
callers keep working.

Updates:
  v0.4.0 - 2026-10-14 - Add generation and clipboard error hierarchy.
  v0.3.0 - 2026-10-09 - Add preset parameter validation errors.
  v0.2.0 - 2026-10-02 - Separate state write failures from import validation.
  v0.1.0 - 2026-09-28 - Created module.
"""

from __future__ import annotations

from collections.abc import Sequence


class FfcraftError(Exception):
    """Base exception for ffcraft failures."""


# ---------------------------------------------------------------------------
# Local state stores
# ---------------------------------------------------------------------------


class StoreError(FfcraftError):
    """Base class for history and preset store failures."""


class StateWriteError(StoreError):
    """Raised when a state file cannot be written to disk."""


class StoreValidationError(StoreError, ValueError):
    """Raised when a payload handed to a store is malformed."""


class HistoryImportError(StoreValidationError):
    """Raised when a history import payload cannot be parsed."""


class PresetImportError(StoreValidationError):
    """Raised when a preset import payload cannot be parsed."""


class InvalidPresetFormat(PresetImportError, TypeError):
    """Raised when a preset import payload does not resolve to an array."""


class UnsupportedImportFormat(StoreError, NotImplementedError):
    """Raised for import formats that are recognised but not implemented."""


class PresetNotFoundError(StoreError, LookupError):
    """Raised when a preset id does not resolve in the combined catalogue."""


class PresetParameterError(StoreValidationError):
    """Raised when supplied preset parameter values fail validation."""

    def __init__(self, message: str, problems: Sequence[str] | None = None) -> None:
        super().__init__(message)
        self.problems: list[str] = list(problems or [])


# ---------------------------------------------------------------------------
# External collaborators
# ---------------------------------------------------------------------------


class GenerationError(FfcraftError):
    """Raised when a command cannot be generated by the configured provider."""


class ProviderAuthError(GenerationError):
    """Raised when the provider rejects or lacks credentials."""


class GenerationNetworkError(GenerationError):
    """Raised when the provider cannot be reached."""


class ClipboardError(FfcraftError):
    """Raised when no clipboard utility accepted the text."""


__all__ = [
    "ClipboardError",
    "FfcraftError",
    "GenerationError",
    "GenerationNetworkError",
    "HistoryImportError",
    "InvalidPresetFormat",
    "PresetImportError",
    "PresetNotFoundError",
    "PresetParameterError",
    "ProviderAuthError",
    "StateWriteError",
    "StoreError",
    "StoreValidationError",
    "UnsupportedImportFormat",
]
