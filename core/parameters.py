"""Type-aware validation and rendering of preset parameter values.

Updates:
  v0.2.0 - 2026-10-13 - Validate parameter values through dynamic Pydantic models.
  v0.1.0 - 2026-10-05 - Extract select option normalisation from the preset store.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Literal

from pydantic import BaseModel, Field, ValidationError, create_model

from models.preset_model import ParameterType, ParameterValidation, PresetParameter

from .exceptions import PresetParameterError

if TYPE_CHECKING:
    from models.preset_model import Preset

_LEADING_INTEGER = re.compile(r"^(\d+)\s*\(")


def render_scalar(value: Any) -> str:
    """Return the text substituted for *value* in a rendered prompt."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def normalize_option(text: str) -> str:
    """Strip the descriptive suffix from select options such as ``"23 (Medium)"``."""
    match = _LEADING_INTEGER.match(text)
    if match:
        return match.group(1)
    if "(" in text:
        return text.split("(", 1)[0].strip()
    return text


def normalize_parameter_value(parameter: PresetParameter, value: Any) -> str:
    """Return the prompt text for *value*; select options lose their annotations."""
    text = render_scalar(value)
    if parameter.type is ParameterType.SELECT:
        return normalize_option(text)
    return text


def _match_option(parameter: PresetParameter, value: Any) -> Any:
    """Map shorthand such as ``"23"`` back onto the declared ``"23 (Medium)"`` option."""
    text = render_scalar(value).strip()
    if text in parameter.options:
        return text
    lowered = text.lower()
    for option in parameter.options:
        if option.lower() == lowered or normalize_option(option).lower() == lowered:
            return option
    return value


def _field_definition(parameter: PresetParameter) -> tuple[Any, Any]:
    validation = parameter.validation or ParameterValidation()
    constraints: dict[str, Any] = {}
    annotation: Any
    if parameter.type is ParameterType.NUMBER:
        annotation = float
        if validation.min is not None:
            constraints["ge"] = validation.min
        if validation.max is not None:
            constraints["le"] = validation.max
    elif parameter.type is ParameterType.BOOLEAN:
        annotation = bool
    elif parameter.type is ParameterType.SELECT:
        annotation = Literal[tuple(parameter.options)]  # type: ignore[valid-type]
    else:
        annotation = str
        if validation.pattern:
            constraints["pattern"] = validation.pattern

    if parameter.default is not None:
        default: Any = parameter.default
    elif parameter.required:
        default = ...
    else:
        annotation = annotation | None
        default = None
    field_info = Field(
        default,
        alias=parameter.name,
        description=parameter.description or None,
        **constraints,
    )
    return annotation, field_info


def _build_model(preset: Preset) -> type[BaseModel]:
    fields = {
        f"p{index}": _field_definition(parameter)
        for index, parameter in enumerate(preset.parameters)
    }
    return create_model("PresetParameters", **fields)  # type: ignore[call-overload]


def validate_parameter_values(preset: Preset, values: Mapping[str, Any]) -> dict[str, Any]:
    """Validate and coerce caller-supplied *values* against *preset* parameters.

    Empty strings count as "not supplied" so defaults apply. Returns a mapping of
    parameter name to coerced value (defaults included) and raises
    :class:`PresetParameterError` listing every failing parameter otherwise.
    """
    declared = {parameter.name: parameter for parameter in preset.parameters}
    unknown = sorted(name for name in values if name not in declared)
    if unknown:
        raise PresetParameterError(
            f"Unknown parameter(s) for preset '{preset.id}': {', '.join(unknown)}",
            [f"{name}: not declared by this preset" for name in unknown],
        )

    payload: dict[str, Any] = {}
    for name, raw in values.items():
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            continue
        parameter = declared[name]
        if parameter.type is ParameterType.SELECT:
            payload[name] = _match_option(parameter, raw)
        elif parameter.type in (ParameterType.STRING, ParameterType.FILE):
            payload[name] = render_scalar(raw)
        else:
            payload[name] = raw

    model = _build_model(preset)
    try:
        instance = model.model_validate(payload)
    except ValidationError as exc:
        problems: list[str] = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"])
            problems.append(f"{location}: {error['msg']}")
        raise PresetParameterError(
            f"Invalid parameters for preset '{preset.id}': {'; '.join(problems)}",
            problems,
        ) from exc

    resolved: dict[str, Any] = {}
    for index, parameter in enumerate(preset.parameters):
        value = getattr(instance, f"p{index}")
        if value is not None:
            resolved[parameter.name] = value
    return resolved


def missing_required(preset: Preset, values: Mapping[str, Any]) -> list[PresetParameter]:
    """Return required parameters that have neither a supplied value nor a default."""
    missing: list[PresetParameter] = []
    for parameter in preset.parameters:
        if not parameter.required or parameter.default is not None:
            continue
        supplied = values.get(parameter.name)
        if supplied is None or (isinstance(supplied, str) and not supplied.strip()):
            missing.append(parameter)
    return missing


__all__ = [
    "missing_required",
    "normalize_option",
    "normalize_parameter_value",
    "render_scalar",
    "validate_parameter_values",
]
