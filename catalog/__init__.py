"""Built-in preset catalog resources for ffcraft.

Updates: v0.2.0 - 2026-10-12 - Ship the ffmpeg preset catalogue as packaged JSON.
Updates: v0.1.0 - 2026-09-28 - Provide packaged default catalogue resource.
"""

from __future__ import annotations

from importlib.resources import files
from typing import Any


def builtin_catalog_resource() -> Any:
    """Return a Traversable pointing to the packaged presets JSON file."""
    return files(__name__).joinpath("presets.json")


__all__ = ["builtin_catalog_resource"]
