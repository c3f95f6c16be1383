"""Tests for shell execution of generated commands."""

from __future__ import annotations

import subprocess
from typing import Any

import pytest

import core.runner as runner_module
from core.runner import run_command


def test_run_command_uses_shell_and_returns_status(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def _fake_run(command: str, **kwargs: Any) -> subprocess.CompletedProcess[bytes]:
        captured["command"] = command
        captured.update(kwargs)
        return subprocess.CompletedProcess(command, 0)

    monkeypatch.setattr(runner_module.subprocess, "run", _fake_run)

    assert run_command("ffmpeg -v quiet -stats -version") == 0
    assert captured["command"] == "ffmpeg -v quiet -stats -version"
    assert captured["shell"] is True
    assert captured["check"] is False


def test_run_command_reports_failures(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(
        runner_module.subprocess,
        "run",
        lambda command, **_: subprocess.CompletedProcess(command, 2),
    )

    with caplog.at_level("WARNING", logger="ffcraft.runner"):
        assert run_command("ffmpeg -i missing.mp4 out.mp4") == 2
    assert "exited with code 2" in caplog.text


def test_run_command_rejects_blank_input() -> None:
    with pytest.raises(ValueError):
        run_command("   ")
