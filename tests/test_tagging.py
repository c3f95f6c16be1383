"""Tests for keyword-based history tag inference."""

from __future__ import annotations

import pytest

from core.tagging import TAG_KEYWORDS, derive_tags


@pytest.mark.parametrize(
    ("prompt", "expected"),
    [
        ("convert video.mp4 to webm", {"video", "conversion"}),
        ("extract audio as mp3", {"audio", "extraction"}),
        ("Make a GIF", {"gif"}),
        ("push an HLS stream over RTMP", {"streaming"}),
        ("reduce size and scale down", {"compression", "resize"}),
    ],
)
def test_derive_tags_matches_keyword_families(prompt: str, expected: set[str]) -> None:
    """Every family with a keyword hit contributes its tag."""
    assert expected <= set(derive_tags(prompt))


def test_derive_tags_follows_declared_order() -> None:
    order = [tag for tag, _ in TAG_KEYWORDS]
    tags = derive_tags("stream a gif, then extract audio from the video")

    assert tags == sorted(tags, key=order.index)


def test_substring_matching_is_over_broad_by_default() -> None:
    """'to' inside 'photo' still counts as a conversion keyword."""
    assert derive_tags("photo slideshow") == ["conversion"]


def test_word_matching_avoids_substring_false_positives() -> None:
    assert derive_tags("photo slideshow", match_words=True) == []
    assert derive_tags("convert clip to webm", match_words=True) == ["conversion"]


def test_no_keywords_yields_no_tags() -> None:
    assert derive_tags("print the ffmpeg version") == []
