"""
generateHome orchestration tests.

Artifacts are written to a LocalStorage under tmp_path whose public edge
host is https://cdn.example.com.
"""
import json
import logging
from unittest.mock import patch

import pytest

import config
from services.errors import ConfigurationError, UploadError
from services.home import generate_home, derive_run_id, app_and_event_names, profile_id_for
from services.profiles import MemoryProfileStore

EDGE = "https://cdn.example.com/FlairApp/SummerGala"


def _generate(payload, storage, clock, no_logo, **kwargs):
    kwargs.setdefault("profile_store", MemoryProfileStore())
    kwargs.setdefault("presets_path", config.PRESETS_PATH)
    return generate_home(payload, storage=storage, clock=clock, logo_fetcher=no_logo, **kwargs)


class TestRunIds:

    def test_run_id_from_body(self, clock):
        assert derive_run_id({"runId": "abc"}, clock) == "abc"
        assert derive_run_id({"run_id": 7}, clock) == "7"

    def test_run_id_derived_from_clock(self, clock):
        assert derive_run_id({}, clock) == f"run_{clock.epoch_ms()}"

    def test_names_and_profile_id(self):
        body = {"glideAppName": "My App!", "event": {"eventName": "Gala (Day 1)", "profileId": "p1"},
                "profileId": "p2"}
        assert app_and_event_names(body) == ("MyApp", "GalaDay1")
        assert app_and_event_names({}) == ("App", "Event")
        assert profile_id_for(body) == "p1"
        assert profile_id_for({"profileId": "p2"}) == "p2"


class TestGenerateHome:

    def test_publishes_snapshots_and_home(self, schedule_payload, storage, clock, no_logo):
        result = _generate(schedule_payload, storage, clock, no_logo)

        assert result["success"] is True
        assert result["message"] == "Published 2 of 2 snapshot(s)"
        assert result["htmlUrl"] == f"{EDGE}/mom.html"
        assert result["timestamp"] == "2025-08-27T17:17:00+00:00"
        assert result["snapshots"] == [
            {"name": "Full schedule", "htmlUrl": f"{EDGE}/Fullschedule.html",
             "pdfUrl": f"{EDGE}/Fullschedule-20250827-1817.pdf"},
            {"name": "Audio", "htmlUrl": f"{EDGE}/Audio.html",
             "pdfUrl": f"{EDGE}/Audio-20250827-1817.pdf"},
        ]

        prefix = "public/FlairApp/SummerGala"
        assert storage.get_file(f"{prefix}/Fullschedule-20250827-1817.pdf").read().startswith(b"%PDF")
        home = storage.get_file(f"{prefix}/mom.html").read().decode("utf-8")
        assert f'href="{EDGE}/Fullschedule.html"' in home
        assert "Summer Gala - Home" in home

    def test_filtered_snapshot_only_holds_matching_rows(self, schedule_payload, storage, clock, no_logo):
        _generate(schedule_payload, storage, clock, no_logo)

        html = storage.get_file("public/FlairApp/SummerGala/Audio.html").read().decode("utf-8")
        assert "Sound check" in html
        assert "Load in" in html
        assert "Doors open" not in html
        assert 'href="mom.html"' in html

    def test_failed_snapshot_does_not_stop_siblings(self, schedule_payload, storage, clock, no_logo, caplog):
        from services import home

        real_publish = home.publish_snapshot

        def flaky(prepared, styles, **kwargs):
            if prepared["name"] == "Full schedule":
                raise RuntimeError("renderer crashed")
            return real_publish(prepared, styles, **kwargs)

        with patch.object(home, "publish_snapshot", side_effect=flaky):
            with caplog.at_level(logging.ERROR):
                result = _generate(schedule_payload, storage, clock, no_logo)

        assert result["success"] is True
        assert result["message"] == "Published 1 of 2 snapshot(s)"
        failed, ok = result["snapshots"]
        assert failed == {"name": "Full schedule", "htmlUrl": None, "pdfUrl": None, "error": "renderer crashed"}
        assert ok["htmlUrl"] == f"{EDGE}/Audio.html"
        assert "renderer crashed" in caplog.text

        home_html = storage.get_file("public/FlairApp/SummerGala/mom.html").read().decode("utf-8")
        assert 'aria-disabled="true"><span class="snap-label">Full schedule' in home_html

    def test_workers_keep_input_order(self, schedule_payload, storage, clock, no_logo):
        result = _generate(schedule_payload, storage, clock, no_logo, workers=2)
        assert [s["name"] for s in result["snapshots"]] == ["Full schedule", "Audio"]
        assert all(s["htmlUrl"] for s in result["snapshots"])

    def test_unknown_preset_fails_before_rendering(self, schedule_payload, storage, clock, no_logo):
        schedule_payload["snapshots"][1]["groupPresetId"] = "byMood"

        with pytest.raises(ConfigurationError, match="byMood"):
            _generate(schedule_payload, storage, clock, no_logo)
        assert not storage.exists("public/FlairApp/SummerGala/mom.html")

    def test_missing_preset_id(self, schedule_payload, storage, clock, no_logo):
        del schedule_payload["snapshots"][0]["groupPresetId"]
        with pytest.raises(ConfigurationError, match="no groupPresetId"):
            _generate(schedule_payload, storage, clock, no_logo)

    def test_missing_profile(self, schedule_payload, storage, clock, no_logo):
        schedule_payload["profileId"] = "nope"
        with pytest.raises(ConfigurationError, match="Style profile not found: nope"):
            _generate(schedule_payload, storage, clock, no_logo)

    def test_profile_styles_merged_under_request(self, schedule_payload, storage, clock, no_logo):
        profiles = MemoryProfileStore()
        profiles.set("house", {
            "styles": {"row": {"important": {"backgroundColour": "#123456", "fontColour": "#654321"}}},
            "document": {"footer": "House footer"},
        })
        schedule_payload["event"]["profileId"] = "house"
        schedule_payload["styles"] = {"row": {"important": {"fontColour": "#ABCDEF"}}}

        _generate(schedule_payload, storage, clock, no_logo, profile_store=profiles)

        html = storage.get_file("public/FlairApp/SummerGala/Fullschedule.html").read().decode("utf-8")
        important_rule = html.split("tr.row-important td {", 1)[1].split("}", 1)[0]
        assert "#123456" in important_rule
        assert "#abcdef" in important_rule.lower()
        assert "House footer" in html

    def test_debug_dump_uploads_prepared_json(self, schedule_payload, storage, clock, no_logo):
        schedule_payload["debug"] = True
        _generate(schedule_payload, storage, clock, no_logo)

        dump = json.loads(storage.get_file("public/FlairApp/SummerGala/Audio.json").read())
        assert dump["name"] == "Audio"

    def test_home_upload_failure_raises(self, schedule_payload, storage, clock, no_logo):
        real_put = storage.put_bytes

        def put(data, key, **kwargs):
            if key.endswith("mom.html"):
                raise OSError("disk full")
            return real_put(data, key, **kwargs)

        storage.put_bytes = put
        with pytest.raises(UploadError, match="disk full"):
            _generate(schedule_payload, storage, clock, no_logo)
