"""
Snapshot filter tests.

OR within a dimension, AND across dimensions, empty filters are off.
"""
from services.filters import filter_entries, apply_snapshot_filters_to_view, normalise_id_array


ENTRIES = [
    {"id": 1, "tagIds": ["x"], "locationIds": ["loc1"]},
    {"id": 2, "tagIds": ["y"], "locationIds": ["loc2"], "subLocationIds": ["s1"]},
    {"id": 3, "tagIds": ["x", "y"], "locationIds": ["loc2"]},
    {"id": 4},
]


class TestFilterEntries:

    def test_empty_filters_return_everything_in_order(self):
        """No active dimension is a no-op."""
        assert filter_entries(ENTRIES, {}) == ENTRIES
        assert filter_entries(ENTRIES, {"filterTagIds": [], "filterLocationIds": None}) == ENTRIES

    def test_or_within_a_dimension(self):
        result = filter_entries(ENTRIES, {"filterTagIds": ["x", "z"]})
        assert [e["id"] for e in result] == [1, 3]

    def test_and_across_dimensions_excludes_on_any_failure(self):
        """Tag passes but location fails, so the entry is dropped."""
        entry = {"tagIds": ["x"], "locationIds": ["loc1"]}
        assert filter_entries([entry], {"filterTagIds": ["x"], "filterLocationIds": ["loc2"]}) == []

    def test_all_three_dimensions(self):
        result = filter_entries(ENTRIES, {
            "filterTagIds": ["y"],
            "filterLocationIds": ["loc2"],
            "filterSubLocationIds": ["s1"],
        })
        assert [e["id"] for e in result] == [2]

    def test_missing_id_arrays_are_empty(self):
        """An entry without ids fails any active filter but never raises."""
        result = filter_entries(ENTRIES, {"filterLocationIds": ["loc1"]})
        assert [e["id"] for e in result] == [1]

    def test_idempotent(self):
        filters = {"filterTagIds": ["y"], "filterLocationIds": ["loc2"]}
        once = filter_entries(ENTRIES, filters)
        assert filter_entries(once, filters) == once

    def test_returns_same_objects(self):
        result = filter_entries(ENTRIES, {"filterTagIds": ["x"]})
        assert result[0] is ENTRIES[0]


class TestNormaliseIdArray:

    def test_variants(self):
        assert normalise_id_array(None) == []
        assert normalise_id_array("a") == ["a"]
        assert normalise_id_array(["a", None, "", 3]) == ["a", "3"]


class TestApplySnapshotFiltersToView:

    def test_drops_empty_groups_and_keeps_metadata(self):
        view = {
            "label": "By date",
            "groupBy": "date",
            "columns": [{"field": "time"}],
            "groups": [
                {"rawKey": "2025-01-01", "title": "2025-01-01", "meta": {"title": "Day 1"}, "entries": [ENTRIES[0]]},
                {"rawKey": "2025-01-02", "title": "2025-01-02", "entries": [ENTRIES[1]]},
            ],
        }

        filtered = apply_snapshot_filters_to_view(view, {"filterTagIds": ["x"]})

        assert [g["rawKey"] for g in filtered["groups"]] == ["2025-01-01"]
        assert filtered["groups"][0]["meta"] == {"title": "Day 1"}
        assert filtered["label"] == "By date"
        assert filtered["columns"] == [{"field": "time"}]
        # Base view untouched
        assert len(view["groups"]) == 2
        assert view["groups"][1]["entries"] == [ENTRIES[1]]
