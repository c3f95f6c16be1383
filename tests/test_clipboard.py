"""Tests for clipboard utility discovery and invocation."""

from __future__ import annotations

import subprocess
from typing import Any

import pytest

import core.clipboard as clipboard_module
from core.clipboard import clipboard_command, copy_to_clipboard
from core.exceptions import ClipboardError


def _which_only(*available: str) -> Any:
    return lambda name: f"/usr/bin/{name}" if name in available else None


def test_clipboard_command_per_platform(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(clipboard_module.shutil, "which", _which_only("xsel", "wl-copy"))

    assert clipboard_command("darwin") == ["pbcopy"]
    assert clipboard_command("win32") == ["clip"]
    assert clipboard_command("linux") == ["/usr/bin/xsel", "--clipboard", "--input"]


def test_clipboard_command_prefers_xclip(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(clipboard_module.shutil, "which", _which_only("xclip", "xsel"))

    assert clipboard_command("linux") == ["/usr/bin/xclip", "-selection", "clipboard"]


def test_clipboard_command_without_utilities(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(clipboard_module.shutil, "which", _which_only())

    with pytest.raises(ClipboardError, match="No clipboard utility found"):
        clipboard_command("linux")


def test_copy_pipes_utf8_text(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, Any] = {}

    def _fake_run(cmd: list[str], **kwargs: Any) -> subprocess.CompletedProcess[bytes]:
        captured["cmd"] = cmd
        captured.update(kwargs)
        return subprocess.CompletedProcess(cmd, 0)

    monkeypatch.setattr(clipboard_module, "clipboard_command", lambda: ["pbcopy"])
    monkeypatch.setattr(clipboard_module.subprocess, "run", _fake_run)

    copy_to_clipboard('ffmpeg -i "café.mp4" out.gif')

    assert captured["cmd"] == ["pbcopy"]
    assert captured["input"] == 'ffmpeg -i "café.mp4" out.gif'.encode()
    assert captured["check"] is True


@pytest.mark.parametrize(
    ("error", "message"),
    [
        (FileNotFoundError("pbcopy"), "Clipboard utility not found"),
        (subprocess.TimeoutExpired(["pbcopy"], 5), "timed out"),
        (subprocess.CalledProcessError(3, ["pbcopy"]), "exited with code 3"),
    ],
)
def test_copy_failures_raise_clipboard_error(
    monkeypatch: pytest.MonkeyPatch, error: Exception, message: str
) -> None:
    def _failing_run(*args: Any, **kwargs: Any) -> Any:  # noqa: ARG001
        raise error

    monkeypatch.setattr(clipboard_module, "clipboard_command", lambda: ["pbcopy"])
    monkeypatch.setattr(clipboard_module.subprocess, "run", _failing_run)

    with pytest.raises(ClipboardError, match=message):
        copy_to_clipboard("text")
