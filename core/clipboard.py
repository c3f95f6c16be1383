"""Copy text to the OS clipboard through platform utilities.

Updates:
  v0.1.0 - 2026-09-30 - Support pbcopy, clip, xclip, xsel and wl-copy.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import sys

from .exceptions import ClipboardError

logger = logging.getLogger("ffcraft.clipboard")

_LINUX_CANDIDATES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("xclip", ("-selection", "clipboard")),
    ("xsel", ("--clipboard", "--input")),
    ("wl-copy", ()),
)


def clipboard_command(platform: str | None = None) -> list[str]:
    """Return the argv of the clipboard utility available on *platform*."""
    current = platform or sys.platform
    if current == "darwin":
        return ["pbcopy"]
    if current.startswith("win"):
        return ["clip"]
    for name, args in _LINUX_CANDIDATES:
        resolved = shutil.which(name)
        if resolved:
            return [resolved, *args]
    raise ClipboardError("No clipboard utility found. Please install xclip, xsel, or wl-copy.")


def copy_to_clipboard(text: str, *, timeout: float = 5.0) -> None:
    """Pipe *text* into the clipboard utility, raising ClipboardError on failure."""
    cmd = clipboard_command()
    try:
        subprocess.run(
            cmd,
            input=text.encode("utf-8"),
            capture_output=True,
            check=True,
            timeout=timeout,
        )
    except FileNotFoundError as exc:
        raise ClipboardError(f"Clipboard utility not found: {cmd[0]}") from exc
    except subprocess.TimeoutExpired as exc:
        raise ClipboardError(f"Clipboard command timed out: {cmd[0]}") from exc
    except subprocess.CalledProcessError as exc:
        raise ClipboardError(f"Clipboard command exited with code {exc.returncode}") from exc
    logger.debug("Copied %d characters to the clipboard via %s", len(text), cmd[0])


__all__ = ["clipboard_command", "copy_to_clipboard"]
