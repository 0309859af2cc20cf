"""
View preparation and snapshot document tests.
"""
import json

import pytest

from services.errors import ConfigurationError
from services.styles import normalize_document
from services.views import (
    load_presets,
    preset_key,
    index_group_meta,
    prepare_views,
    display_title,
    header_lines,
    build_snapshot_document,
)

PRESETS = [
    {"id": "byDate", "label": "By date", "groupBy": "date", "columns": [{"field": "time", "width": 50}]},
    {"label": "By tag", "groupBy": "tagId", "entrySort": ["description:asc"]},
    {"id": "broken", "label": "No groupBy"},
]


def _payload():
    return {
        "data": {"scheduleDetail": [
            {"date": "2025-05-16", "time": "09:00", "description": "Doors", "tagIds": ["t1"], "tags": ["FOH"]},
            {"date": "2025-05-15", "time": "10:00", "description": "Sound", "tagIds": ["t2"], "tags": ["Audio"]},
            {"date": "2025-05-15", "time": "08:00", "description": "Load in", "tagIds": ["t1", "t2"],
             "tags": ["FOH", "Audio"]},
            "not a row",
        ]},
        "groupMeta": {"date": [{"date": "2025-05-15", "data": {"title": "Build day", "above": ["Crew", "Trucks"]}}]},
        "event": {"name": "Gala", "header": ["Gala 2025"], "logoUrl": "https://example.com/logo.png",
                  "keyInfo": "Be early"},
    }


class TestLoadPresets:

    def test_group_presets_object(self, tmp_path):
        path = tmp_path / "presets.json"
        path.write_text(json.dumps({"groupPresets": PRESETS}))
        assert load_presets(str(path)) == PRESETS

    def test_bare_list(self, tmp_path):
        path = tmp_path / "presets.json"
        path.write_text(json.dumps(PRESETS))
        assert len(load_presets(str(path))) == 3

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_presets(str(tmp_path / "missing.json"))

    def test_bad_json(self, tmp_path):
        path = tmp_path / "presets.json"
        path.write_text("{nope")
        with pytest.raises(ConfigurationError):
            load_presets(str(path))

    def test_bundled_presets_load(self):
        from config import PRESETS_PATH
        keys = [preset_key(p) for p in load_presets(PRESETS_PATH)]
        assert keys == ["byDate", "byTag", "byLocation"]


class TestIndexGroupMeta:

    def test_list_and_map_forms_merge(self):
        index = index_group_meta({
            "groupMeta": {"location": [{"locationId": "l1", "title": "Foyer", "below": "Stairs"}]},
            "dicts": {"groupMeta": {"date": {"2025-05-15": {"title": "Day 1"}}}},
        })
        assert index["location"]["l1"] == {"title": "Foyer", "above": "", "below": "Stairs"}
        assert index["date"]["2025-05-15"]["title"] == "Day 1"

    def test_map_form_wins_on_clash(self):
        index = index_group_meta({
            "groupMeta": {"date": [{"date": "d", "title": "List"}]},
            "dicts": {"groupMeta": {"date": {"d": {"title": "Map"}}}},
        })
        assert index["date"]["d"]["title"] == "Map"


class TestPrepareViews:

    def test_one_view_per_preset_with_group_by(self):
        views = prepare_views(_payload(), PRESETS)
        assert sorted(views) == ["By tag", "byDate"]

    def test_date_view_groups_sorted_with_meta(self):
        view = prepare_views(_payload(), PRESETS)["byDate"]

        assert [g["rawKey"] for g in view["groups"]] == ["2025-05-15", "2025-05-16"]
        first = view["groups"][0]
        assert [e["time"] for e in first["entries"]] == ["08:00", "10:00"]
        assert first["meta"]["title"] == "Build day"
        assert first["entries"][0]["dateKey"] == "Build day"

    def test_tag_view_titles_and_entry_sort(self):
        view = prepare_views(_payload(), PRESETS)["By tag"]
        titles = {g["rawKey"]: g["title"] for g in view["groups"]}
        assert titles == {"t1": "FOH", "t2": "Audio"}
        t2 = next(g for g in view["groups"] if g["rawKey"] == "t2")
        assert [e["description"] for e in t2["entries"]] == ["Load in", "Sound"]

    def test_columns_are_copied(self):
        views = prepare_views(_payload(), PRESETS)
        views["byDate"]["columns"][0]["width"] = 999
        assert PRESETS[0]["columns"][0]["width"] == 50

    def test_input_rows_not_mutated(self):
        payload = _payload()
        prepare_views(payload, PRESETS)
        assert "dateKey" not in payload["data"]["scheduleDetail"][0]


class TestDisplay:

    def test_display_title_priority(self):
        assert display_title({"rawKey": "2025-05-15", "meta": {"title": "Build"}}, "date") == "Build"
        assert display_title({"rawKey": "2025-05-15"}, "date") == "Thursday, 15 May 2025"
        assert display_title({"rawKey": "t1", "title": "FOH"}, "tagId") == "FOH"

    def test_header_lines_add_name_once(self):
        doc = normalize_document({})
        assert header_lines({"header": ["Gala"]}, doc, "Audio") == ["Gala", "Audio"]
        assert header_lines({"header": ["Gala", "audio"]}, doc, "Audio") == ["Gala", "audio"]


class TestBuildSnapshotDocument:

    def test_filters_titles_and_document(self):
        payload = _payload()
        views = prepare_views(payload, PRESETS)
        document = normalize_document({"footer": "Confidential"})

        prepared = build_snapshot_document(
            {"name": "Audio crew", "groupPresetId": "byDate", "filterTagIds": ["t2"]},
            views["byDate"], payload, document,
        )

        assert prepared["name"] == "Audio crew"
        assert [g["title"] for g in prepared["groups"]] == ["Build day"]
        assert prepared["groups"][0]["metadataAbove"] == "Crew\nTrucks"
        assert prepared["document"]["filename"] == "Audio crew"
        assert prepared["document"]["header"]["text"] == ["Gala 2025", "Audio crew"]
        assert prepared["document"]["header"]["logo"]["url"] == "https://example.com/logo.png"
        assert prepared["keyInfo"] == "Be early"
        assert prepared["columns"] == [{"field": "time", "width": 50}]
        # Shared document untouched
        assert document["filename"] == ""

    def test_columns_fall_back_to_payload_then_profile(self):
        payload = _payload()
        view = prepare_views(payload, PRESETS)["By tag"]
        document = normalize_document({})

        prepared = build_snapshot_document({"name": "x"}, view, payload, document,
                                           profile={"columns": [{"field": "description"}]})
        assert prepared["columns"] == [{"field": "description"}]

        payload["columns"] = [{"field": "time"}]
        prepared = build_snapshot_document({"name": "x"}, view, payload, document,
                                           profile={"columns": [{"field": "description"}]})
        assert prepared["columns"] == [{"field": "time"}]
