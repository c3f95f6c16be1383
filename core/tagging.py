"""Keyword-based tag inference for history prompts.

Updates:
  v0.1.1 - 2026-10-11 - Add opt-in word-boundary matching.
  v0.1.0 - 2026-09-28 - Introduce keyword families for automatic history tags.
"""

from __future__ import annotations

import re

# Ordered so derived tags always come back in the same sequence.
TAG_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("video", ("video", "mp4", "avi")),
    ("audio", ("audio", "mp3", "sound")),
    ("conversion", ("convert", "to")),
    ("compression", ("compress", "reduce", "optimize")),
    ("gif", ("gif",)),
    ("streaming", ("stream", "rtmp", "hls")),
    ("extraction", ("extract",)),
    ("resize", ("resize", "scale", "resolution")),
)

_WORD_PATTERNS: dict[str, re.Pattern[str]] = {
    tag: re.compile(r"\b(?:" + "|".join(map(re.escape, keywords)) + r")\b")
    for tag, keywords in TAG_KEYWORDS
}


def derive_tags(prompt: str, *, match_words: bool = False) -> list[str]:
    """Return the tags whose keywords occur in *prompt*.

    Matching is case-insensitive substring matching by default, so ``"to"`` also
    matches inside ``"photo"``. Pass ``match_words=True`` to require whole words.
    """
    lowered = prompt.lower()
    tags: list[str] = []
    for tag, keywords in TAG_KEYWORDS:
        if match_words:
            matched = _WORD_PATTERNS[tag].search(lowered) is not None
        else:
            matched = any(keyword in lowered for keyword in keywords)
        if matched:
            tags.append(tag)
    return tags


__all__ = ["TAG_KEYWORDS", "derive_tags"]
