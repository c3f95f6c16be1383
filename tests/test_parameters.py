"""Tests for preset parameter validation and value normalisation.

Updates:
  v0.2.0 - 2026-10-13 - Cover Pydantic-backed validation of typed parameters.
  v0.1.0 - 2026-10-05 - Cover select option normalisation.
"""

from __future__ import annotations

import pytest

from core.exceptions import PresetParameterError
from core.parameters import (
    missing_required,
    normalize_option,
    normalize_parameter_value,
    render_scalar,
    validate_parameter_values,
)
from models import Preset, PresetParameter

PRESET = Preset.from_record(
    {
        "id": "sample",
        "name": "Sample",
        "category": "Testing",
        "prompt": "{input} {fps} {mute} {mode} {stamp}",
        "parameters": [
            {"name": "input", "type": "file", "required": True},
            {"name": "fps", "type": "number", "default": 10, "validation": {"min": 5, "max": 30}},
            {"name": "mute", "type": "boolean", "default": False},
            {
                "name": "mode",
                "type": "select",
                "options": ["with re-encoding", "without re-encoding (fast)"],
                "default": "without re-encoding (fast)",
            },
            {"name": "stamp", "type": "string", "validation": {"pattern": r"^\d{2}:\d{2}:\d{2}$"}},
        ],
    }
)


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("23 (Medium)", "23"),
        ("18(High)", "18"),
        ("without re-encoding (fast)", "without re-encoding"),
        ("720p", "720p"),
        ("(odd)", ""),
    ],
)
def test_normalize_option(text: str, expected: str) -> None:
    assert normalize_option(text) == expected


def test_normalization_only_applies_to_select_parameters() -> None:
    """Free text keeps parentheses; select options lose their annotation."""
    text_param = PresetParameter(name="title")
    select_param = PRESET.parameter("mode")
    assert select_param is not None

    assert normalize_parameter_value(text_param, "clip (final)") == "clip (final)"
    assert normalize_parameter_value(select_param, "without re-encoding (fast)") == (
        "without re-encoding"
    )


def test_render_scalar_formats_numbers_and_booleans() -> None:
    assert render_scalar(10.0) == "10"
    assert render_scalar(2.5) == "2.5"
    assert render_scalar(True) == "true"
    assert render_scalar("x") == "x"


def test_validate_coerces_cli_strings() -> None:
    """String input from the command line becomes typed values; defaults are filled."""
    values = validate_parameter_values(
        PRESET, {"input": "a.mp4", "fps": "24", "mute": "true", "stamp": "00:00:05"}
    )

    assert values["input"] == "a.mp4"
    assert values["fps"] == 24.0
    assert values["mute"] is True
    assert values["mode"] == "without re-encoding (fast)"
    assert values["stamp"] == "00:00:05"


def test_validate_maps_select_shorthand_to_declared_option() -> None:
    values = validate_parameter_values(PRESET, {"input": "a.mp4", "mode": "without re-encoding"})

    assert values["mode"] == "without re-encoding (fast)"


def test_validate_treats_blank_values_as_missing() -> None:
    values = validate_parameter_values(PRESET, {"input": "a.mp4", "fps": "  "})

    assert values["fps"] == 10


def test_validate_reports_every_problem() -> None:
    """Range, option and pattern failures are all listed."""
    with pytest.raises(PresetParameterError) as excinfo:
        validate_parameter_values(
            PRESET,
            {"input": "a.mp4", "fps": "60", "mode": "turbo", "stamp": "5s"},
        )

    problems = excinfo.value.problems
    assert len(problems) == 3
    assert any(problem.startswith("fps") for problem in problems)
    assert any(problem.startswith("mode") for problem in problems)
    assert any(problem.startswith("stamp") for problem in problems)
    assert isinstance(excinfo.value, ValueError)


def test_validate_requires_required_parameters() -> None:
    with pytest.raises(PresetParameterError) as excinfo:
        validate_parameter_values(PRESET, {})

    assert excinfo.value.problems[0].startswith("input")


def test_validate_rejects_unknown_names() -> None:
    with pytest.raises(PresetParameterError, match="Unknown parameter"):
        validate_parameter_values(PRESET, {"input": "a.mp4", "speed": "2"})


def test_missing_required_ignores_defaults() -> None:
    assert [parameter.name for parameter in missing_required(PRESET, {})] == ["input"]
    assert missing_required(PRESET, {"input": "a.mp4"}) == []
