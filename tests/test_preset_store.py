"""Tests for the preset catalogue, custom preset lifecycle and rendering.

Updates:
  v0.3.1 - 2026-10-18 - Cover corrupt and partially unreadable custom preset files.
  v0.3.0 - 2026-10-13 - Cover select option normalisation through rendering.
  v0.2.0 - 2026-10-06 - Cover preset export/import and usage counters.
  v0.1.0 - 2026-09-28 - Cover built-in catalogue queries.
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest

from core.exceptions import (
    InvalidPresetFormat,
    PresetImportError,
    PresetNotFoundError,
    StoreValidationError,
)
from core.preset_store import PresetStore, load_builtin_presets
from core.storage import LoadStatus
from models import CustomPreset, Difficulty, Preset

if TYPE_CHECKING:
    from conftest import FakeClock

GIF_TEMPLATE = Preset.from_record(
    {
        "id": "gif",
        "name": "GIF",
        "description": "Video segment to GIF",
        "category": "GIF Creation",
        "prompt": (
            "create gif from {input} starting at {start} seconds "
            "for {duration} seconds with {fps}fps"
        ),
        "parameters": [
            {"name": "input", "type": "file", "required": True},
            {"name": "start", "type": "number", "default": 0},
            {"name": "duration", "type": "number", "default": 5},
            {"name": "fps", "type": "number", "default": 10},
        ],
        "tags": ["gif"],
        "common_use": True,
    }
)


def _custom_payload(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "name": "Speed up",
        "category": "Effects & Filters",
        "prompt": "speed up {input} by {factor}x",
        "parameters": [
            {"name": "input", "type": "file", "required": True},
            {"name": "factor", "type": "number", "default": 2},
        ],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def store(tmp_path: Path, clock: FakeClock) -> PresetStore:
    return PresetStore(tmp_path / "presets.json", clock=clock)


def test_builtin_catalogue_is_loaded(store: PresetStore) -> None:
    """The packaged catalogue ships 21 presets with unique ids."""
    builtins = store.get_builtin_presets()

    assert len(builtins) == 21
    assert len({preset.id for preset in builtins}) == 21
    assert all(not preset.is_custom for preset in builtins)
    assert store.get_preset_by_id("video-to-gif") is not None
    assert store.load_result.status is LoadStatus.MISSING


def test_load_builtin_presets_is_cached() -> None:
    assert load_builtin_presets() is load_builtin_presets()


def test_categories_are_sorted_and_unique(store: PresetStore) -> None:
    categories = store.get_categories()

    assert categories == sorted(set(categories))
    assert "GIF Creation" in categories
    assert "Social Media" in categories


def test_category_and_common_filters(store: PresetStore) -> None:
    """Category filtering is exact; common presets all carry the flag."""
    gif_presets = store.get_presets_by_category("GIF Creation")

    assert {preset.id for preset in gif_presets} == {"video-to-gif", "optimize-gif"}
    assert store.get_presets_by_category("gif creation") == []
    common = store.get_common_presets()
    assert common and all(preset.common_use for preset in common)
    assert store.get_preset_by_id("optimize-gif") not in common


def test_search_covers_name_description_tags_and_body(store: PresetStore) -> None:
    assert any(preset.id == "stream-to-rtmp" for preset in store.search_presets("RTMP"))
    assert any(preset.id == "convert-to-mp4" for preset in store.search_presets("h264"))
    assert store.search_presets("definitely-not-present") == []


def test_add_custom_preset_assigns_identity(store: PresetStore, clock: FakeClock) -> None:
    """Custom presets get a fresh id, creation time and zero usage."""
    created = store.add_custom_preset(_custom_payload(id="convert-to-mp4", usage_count=9))

    assert isinstance(created, CustomPreset)
    assert created.is_custom
    assert re.fullmatch(rf"custom-{clock.now}-[a-z0-9]{{9}}", created.id)
    assert created.created_at == clock.now
    assert created.usage_count == 0
    assert created.difficulty is Difficulty.INTERMEDIATE
    assert created.common_use is False
    assert store.get_all_presets()[-1] is created
    assert len(store.get_all_presets()) == 22


def test_add_custom_preset_requires_core_fields(store: PresetStore) -> None:
    with pytest.raises(StoreValidationError, match="name"):
        store.add_custom_preset(_custom_payload(name=" "))
    assert store.get_custom_presets() == []


def test_custom_presets_persist_and_reload(tmp_path: Path, clock: FakeClock) -> None:
    """Only custom presets are written to disk."""
    path = tmp_path / "presets.json"
    store = PresetStore(path, clock=clock)
    created = store.add_custom_preset(_custom_payload())

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    reloaded = PresetStore(path, clock=clock)

    assert [record["id"] for record in on_disk] == [created.id]
    assert on_disk[0]["is_custom"] is True
    assert reloaded.get_custom_presets()[0].to_record() == created.to_record()


def test_update_custom_preset_merges_fields(store: PresetStore) -> None:
    created = store.add_custom_preset(_custom_payload())

    assert store.update_custom_preset(created.id, {"name": "Faster", "commonUse": True}) is True
    updated = store.get_preset_by_id(created.id)
    assert updated is not None
    assert updated.name == "Faster"
    assert updated.common_use is True
    assert updated.prompt == created.prompt


def test_update_ignores_identity_fields(store: PresetStore) -> None:
    created = store.add_custom_preset(_custom_payload())

    store.update_custom_preset(created.id, {"id": "hijack", "is_custom": False, "name": "X"})

    assert store.get_preset_by_id("hijack") is None
    updated = store.get_preset_by_id(created.id)
    assert updated is not None and updated.is_custom and updated.name == "X"


def test_update_rejects_unknown_fields(store: PresetStore) -> None:
    created = store.add_custom_preset(_custom_payload())

    with pytest.raises(StoreValidationError, match="Unknown preset field"):
        store.update_custom_preset(created.id, {"colour": "red"})


def test_builtins_cannot_be_mutated(store: PresetStore) -> None:
    """Built-in ids are not found by the custom mutation paths."""
    before = store.get_preset_by_id("video-to-gif")

    assert store.update_custom_preset("video-to-gif", {"name": "Hacked"}) is False
    assert store.delete_custom_preset("video-to-gif") is False
    assert store.increment_usage_count("video-to-gif") is False
    assert store.get_preset_by_id("video-to-gif") == before
    assert len(store.get_builtin_presets()) == 21


def test_delete_custom_preset_leaves_builtins(store: PresetStore) -> None:
    created = store.add_custom_preset(_custom_payload())

    assert store.delete_custom_preset(created.id) is True
    assert store.delete_custom_preset(created.id) is False
    assert len(store.get_all_presets()) == 21


def test_increment_usage_count(store: PresetStore) -> None:
    created = store.add_custom_preset(_custom_payload())

    assert store.increment_usage_count(created.id) is True
    store.increment_usage_count(created.id)

    reloaded = store.get_preset_by_id(created.id)
    assert isinstance(reloaded, CustomPreset)
    assert reloaded.usage_count == 2


def test_render_uses_defaults_for_missing_values(tmp_path: Path) -> None:
    """Supplied values win; absent ones fall back to declared defaults."""
    store = PresetStore(tmp_path / "presets.json", builtins=[GIF_TEMPLATE])

    rendered = store.build_prompt_from_preset("gif", {"input": "a.mp4", "start": 5, "duration": 10})

    assert rendered == "create gif from a.mp4 starting at 5 seconds for 10 seconds with 10fps"


def test_render_leaves_unresolved_placeholders(tmp_path: Path) -> None:
    store = PresetStore(tmp_path / "presets.json", builtins=[GIF_TEMPLATE])

    rendered = store.build_prompt_from_preset("gif")

    assert rendered.startswith("create gif from {input} starting at 0 seconds")


def test_render_normalises_select_options(store: PresetStore) -> None:
    """Annotated select options collapse to their value."""
    crf = store.add_custom_preset(
        _custom_payload(
            prompt="encode {input} with crf {quality}",
            parameters=[
                {"name": "input", "type": "file", "required": True},
                {
                    "name": "quality",
                    "type": "select",
                    "options": ["18 (High)", "23 (Medium)", "28 (Low)"],
                    "default": "23 (Medium)",
                },
            ],
        )
    )
    trim = store.build_prompt_from_preset(
        "trim-video", {"input": "in.mp4", "start": "00:00:10", "end": "00:00:20"}
    )

    assert store.build_prompt_from_preset(crf.id, {"input": "a.mp4"}) == "encode a.mp4 with crf 23"
    assert (
        store.build_prompt_from_preset(crf.id, {"input": "a.mp4", "quality": "18 (High)"})
        == "encode a.mp4 with crf 18"
    )
    assert trim == "trim in.mp4 from 00:00:10 to 00:00:20 without re-encoding"


def test_render_does_not_touch_usage(tmp_path: Path, clock: FakeClock) -> None:
    store = PresetStore(tmp_path / "presets.json", clock=clock)
    created = store.add_custom_preset(_custom_payload())

    assert store.build_prompt_from_preset(created.id, {"input": "x.mp4"}) == "speed up x.mp4 by 2x"
    assert store.get_custom_presets()[0].usage_count == 0


def test_render_unknown_preset_raises(store: PresetStore) -> None:
    with pytest.raises(PresetNotFoundError, match="Preset missing not found"):
        store.build_prompt_from_preset("missing")
    with pytest.raises(LookupError):
        store.build_prompt_from_preset("missing")


def test_export_contains_builtin_and_custom(store: PresetStore) -> None:
    created = store.add_custom_preset(_custom_payload())

    payload = json.loads(store.export_presets())

    assert set(payload) == {"builtIn", "custom"}
    assert len(payload["builtIn"]) == 21
    assert [record["id"] for record in payload["custom"]] == [created.id]


def test_import_accepts_export_wrapper_and_raw_array(tmp_path: Path, clock: FakeClock) -> None:
    """Both `{custom: [...]}` and bare arrays import; built-ins are not duplicated."""
    source = PresetStore(tmp_path / "a.json", clock=clock)
    source.add_custom_preset(_custom_payload())
    exported = source.export_presets()
    target = PresetStore(tmp_path / "b.json", clock=clock)

    assert target.import_custom_presets(exported) == 1
    assert target.import_custom_presets([_custom_payload(name="Other")]) == 1
    assert len(target.get_custom_presets()) == 2
    assert len(target.get_builtin_presets()) == 21
    assert all(preset.usage_count == 0 for preset in target.get_custom_presets())


def test_import_skips_incomplete_candidates(store: PresetStore) -> None:
    payload = [
        _custom_payload(),
        _custom_payload(prompt=""),
        {"name": "no category", "prompt": "x"},
        "junk",
    ]

    assert store.import_custom_presets(json.dumps(payload)) == 1


def test_import_rejects_non_array(store: PresetStore) -> None:
    with pytest.raises(InvalidPresetFormat, match="Invalid preset data format"):
        store.import_custom_presets('{"presets": []}')
    with pytest.raises(TypeError):
        store.import_custom_presets('"just a string"')


def test_import_rejects_malformed_json(store: PresetStore) -> None:
    with pytest.raises(PresetImportError):
        store.import_custom_presets("[{")


def test_corrupt_custom_file_recovers_empty(
    tmp_path: Path, clock: FakeClock, caplog: pytest.LogCaptureFixture
) -> None:
    """A malformed presets file is reported and the built-ins stay available."""
    path = tmp_path / "presets.json"
    path.write_text("[{broken", encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="ffcraft.storage"):
        store = PresetStore(path, clock=clock)

    assert store.get_custom_presets() == []
    assert store.get_preset_by_id("video-to-gif") is not None
    assert store.load_result.status is LoadStatus.RECOVERED
    assert not store.load_result.ok
    assert "starting with empty state" in caplog.text


def test_unreadable_custom_presets_mark_load_recovered(tmp_path: Path, clock: FakeClock) -> None:
    path = tmp_path / "presets.json"
    good = {**_custom_payload(), "id": "custom-1-aaaaaaaaa"}
    bad = {
        **_custom_payload(name="Broken"),
        "id": "custom-2-bbbbbbbbb",
        "parameters": [{"name": "input", "type": "colour"}],
    }
    path.write_text(json.dumps([good, bad]), encoding="utf-8")

    store = PresetStore(path, clock=clock)

    assert [preset.id for preset in store.get_custom_presets()] == ["custom-1-aaaaaaaaa"]
    assert store.load_result.status is LoadStatus.RECOVERED
    assert store.load_result.count == 1
    assert "Dropped 1 unreadable preset record" in (store.load_result.message or "")


def test_reload_replaces_ids_colliding_with_builtins(tmp_path: Path, clock: FakeClock) -> None:
    path = tmp_path / "presets.json"
    record = {**_custom_payload(), "id": "video-to-gif", "is_custom": True}
    path.write_text(json.dumps([record]), encoding="utf-8")

    store = PresetStore(path, clock=clock)

    custom = store.get_custom_presets()
    assert len(custom) == 1
    assert custom[0].id.startswith("custom-")
    gif = store.get_preset_by_id("video-to-gif")
    assert gif is not None and not gif.is_custom
