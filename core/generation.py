"""LiteLLM-backed ffmpeg command generation.

Updates:
  v0.2.1 - 2026-10-14 - Classify LiteLLM authentication and network failures.
  v0.2.0 - 2026-10-08 - Route claude/gemini/grok providers through LiteLLM prefixes.
  v0.1.0 - 2026-09-30 - Introduce CommandGenerator.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, cast

from .exceptions import GenerationError, GenerationNetworkError, ProviderAuthError
from .litellm_adapter import call_completion_with_fallback, get_completion

if TYPE_CHECKING:
    from config.settings import FfcraftSettings

logger = logging.getLogger("ffcraft.generation")

SYSTEM_MESSAGE = (
    "You create ffmpeg commands based on the user's description. Only provide a command "
    "line command for ffmpeg, without any extra text. All responses should be a single "
    "line with no line breaks."
)

LITELLM_PREFIXES: dict[str, str] = {
    "openai": "",
    "claude": "anthropic/",
    "gemini": "gemini/",
    "grok": "xai/",
}

_LEADING_FFMPEG = re.compile(r"^(\s*ffmpeg)(\s+)")
_CODE_FENCE = re.compile(r"^```[\w-]*\s*|\s*```$")


@dataclass(slots=True)
class GeneratedCommand:
    """A post-processed command plus the provider/model that produced it."""

    command: str
    provider: str
    model: str
    raw_text: str


def litellm_model_name(provider: str, model: str) -> str:
    """Return the LiteLLM routing name for *model* on *provider*."""
    prefix = LITELLM_PREFIXES[provider]
    if not prefix or model.startswith(prefix):
        return model
    return f"{prefix}{model}"


def postprocess_command(text: str) -> str:
    """Normalise model output into a single runnable ffmpeg command line."""
    command = _CODE_FENCE.sub("", text.strip()).strip()
    command = " ".join(line.strip() for line in command.splitlines() if line.strip())
    if not command:
        raise GenerationError("Failed to generate a response.")
    command = command.replace('\\"', '"')
    return _LEADING_FFMPEG.sub(r"\1 -v quiet -stats\2", command, count=1)


def _extract_completion_text(payload: Any) -> str:
    """Extract assistant content from a LiteLLM completion payload."""
    if not isinstance(payload, Mapping):
        model_dump = getattr(payload, "model_dump", None)
        if not callable(model_dump):
            raise GenerationError("LiteLLM returned an unexpected payload")
        payload = model_dump()
    mapping = cast("Mapping[str, Any]", payload)
    choices = mapping.get("choices")
    if not isinstance(choices, Sequence) or not choices:
        raise GenerationError("LiteLLM returned an unexpected payload")
    first = cast("Sequence[Any]", choices)[0]
    if not isinstance(first, Mapping):
        raise GenerationError("LiteLLM returned an unexpected payload")
    first_mapping = cast("Mapping[str, Any]", first)
    message = first_mapping.get("message")
    if isinstance(message, Mapping):
        content = cast("Mapping[str, Any]", message).get("content")
        if content is not None:
            return str(content)
    text = first_mapping.get("text")
    if text is not None:
        return str(text)
    raise GenerationError("LiteLLM response is missing assistant content.")


class CommandGenerator:
    """Turn natural-language descriptions into ffmpeg commands via LiteLLM."""

    def __init__(self, settings: FfcraftSettings) -> None:
        self._settings = settings

    def resolve(self, provider: str | None = None, model: str | None = None) -> tuple[str, str]:
        """Return the effective (provider, model) pair for a request."""
        name = (provider or self._settings.default_provider).strip().lower()
        if name not in LITELLM_PREFIXES:
            supported = ", ".join(LITELLM_PREFIXES)
            raise GenerationError(f"Unknown provider: {name}. Supported providers: {supported}")
        chosen_model = (model or "").strip() or self._settings.model_for(name)
        assert chosen_model is not None
        return name, chosen_model

    def generate(
        self,
        prompt: str,
        *,
        provider: str | None = None,
        model: str | None = None,
    ) -> GeneratedCommand:
        """Generate and post-process a command for *prompt*."""
        name, chosen_model = self.resolve(provider, model)
        api_key = self._settings.api_key_for(name)
        if not api_key:
            raise ProviderAuthError(
                f"No API key found for {name}. Configure it with "
                f"`ffcraft config --{name} YOUR_API_KEY` or set the environment variable."
            )
        try:
            completion, error_types = get_completion()
        except RuntimeError as exc:
            raise GenerationError(str(exc)) from exc

        request: dict[str, object] = {
            "model": litellm_model_name(name, chosen_model),
            "messages": [
                {"role": "system", "content": SYSTEM_MESSAGE},
                {"role": "user", "content": prompt.strip()},
            ],
            "api_key": api_key,
        }
        if self._settings.request_timeout_seconds is not None:
            request["timeout"] = self._settings.request_timeout_seconds

        logger.debug("Requesting ffmpeg command", extra={"provider": name, "model": chosen_model})
        try:
            response = call_completion_with_fallback(
                request,
                completion,
                error_types.base,
                drop_candidates={"timeout"},
            )
        except error_types.authentication as exc:
            raise ProviderAuthError(f"{name} rejected the API key: {exc}") from exc
        except error_types.connection as exc:
            raise GenerationNetworkError(f"Could not reach {name}: {exc}") from exc
        except error_types.base as exc:
            raise GenerationError(f"LiteLLM request failed: {exc}") from exc

        raw_text = _extract_completion_text(response)
        return GeneratedCommand(
            command=postprocess_command(raw_text),
            provider=name,
            model=chosen_model,
            raw_text=raw_text,
        )


__all__ = [
    "CommandGenerator",
    "GeneratedCommand",
    "LITELLM_PREFIXES",
    "SYSTEM_MESSAGE",
    "litellm_model_name",
    "postprocess_command",
]
