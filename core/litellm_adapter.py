"""Shared LiteLLM adapters for ffcraft.

Updates:
  v0.2.0 - 2026-10-14 - Expose LiteLLM authentication and connection error types.
  v0.1.1 - 2026-10-08 - Retry completion calls without parameters a model rejects.
  v0.1.0 - 2026-09-30 - Provide lazy completion import helper.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

logger = logging.getLogger("ffcraft.litellm")


class LiteLLMNotInstalledError(RuntimeError):
    """Raised when LiteLLM is not available in the current environment."""


@dataclass(frozen=True, slots=True)
class LiteLLMErrorTypes:
    """Exception classes used to classify LiteLLM failures."""

    base: tuple[type[BaseException], ...]
    authentication: tuple[type[BaseException], ...]
    connection: tuple[type[BaseException], ...]


_completion: Callable[..., object] | None = None
_error_types: LiteLLMErrorTypes | None = None


def _types_named(module: object, *names: str) -> tuple[type[BaseException], ...]:
    found: list[type[BaseException]] = []
    for name in names:
        candidate = getattr(module, name, None)
        if isinstance(candidate, type) and issubclass(candidate, BaseException):
            found.append(candidate)
    return tuple(found)


def _ensure_loaded() -> None:
    """Import LiteLLM lazily; the package is slow to import for non-generating commands."""
    global _completion, _error_types
    if _completion is not None:
        return
    try:  # pragma: no cover - runtime import path
        litellm = importlib.import_module("litellm")
    except ImportError as exc:
        raise LiteLLMNotInstalledError(
            "Command generation requires the dependency 'litellm'. "
            "Install it with `pip install litellm`."
        ) from exc

    completion = getattr(litellm, "completion", None)
    if completion is None:
        raise RuntimeError("litellm completion API is unavailable in the installed version.")

    exceptions_module = importlib.import_module("litellm.exceptions")
    base = _types_named(exceptions_module, "LiteLLMException", "OpenAIError", "APIError")
    _completion = completion
    _error_types = LiteLLMErrorTypes(
        base=base or (Exception,),
        authentication=_types_named(
            exceptions_module, "AuthenticationError", "PermissionDeniedError"
        ),
        connection=_types_named(
            exceptions_module, "APIConnectionError", "Timeout", "ServiceUnavailableError"
        ),
    )


def get_completion() -> tuple[Callable[..., object], LiteLLMErrorTypes]:
    """Return the LiteLLM completion callable and its exception classification."""
    _ensure_loaded()
    assert _completion is not None and _error_types is not None  # pragma: no cover
    return _completion, _error_types


def call_completion_with_fallback(
    request: dict[str, object],
    completion: Callable[..., object],
    lite_llm_exception: tuple[type[BaseException], ...],
    *,
    drop_candidates: Iterable[str] | None = None,
) -> object:
    """Invoke LiteLLM completion and retry once without unsupported params."""
    try:
        return completion(**request)
    except lite_llm_exception as exc:
        unsupported = _detect_unsupported_parameters(str(exc), request.keys(), drop_candidates)
        if not unsupported:
            raise
        trimmed_request = {key: value for key, value in request.items() if key not in unsupported}
        logger.info(
            "LiteLLM model rejected parameters %s; retrying request without them.",
            ", ".join(sorted(unsupported)),
        )
        return completion(**trimmed_request)


def _detect_unsupported_parameters(
    message: str,
    parameters: Iterable[str],
    drop_candidates: Iterable[str] | None = None,
) -> set[str]:
    lowered = message.lower()
    indicators = ("not support", "unsupported", "not allowed", "unexpected", "unknown")
    if not any(token in lowered for token in indicators):
        return set()

    candidates = set(drop_candidates or {"max_tokens", "temperature", "timeout"})
    unsupported: set[str] = set()
    for key in parameters:
        if key not in candidates:
            continue
        key_forms = (key, key.replace("_", " "), key.replace("_", "-"))
        if any(form in lowered for form in key_forms):
            unsupported.add(key)
    return unsupported


__all__ = [
    "LiteLLMErrorTypes",
    "LiteLLMNotInstalledError",
    "call_completion_with_fallback",
    "get_completion",
]
