"""
Task catalog tests
"""
import json

import pytest

from housekeeping.errors import ValidationFailed
from housekeeping.services.catalog import (
    TaskCatalog, load_feed_file, normalize_feed, slugify, unique_slug,
)


class TestSlugify:

    def test_basic(self):
        assert slugify("Clean Balcony") == "clean-balcony"

    def test_runs_and_edges(self):
        assert slugify("  Clean  Balcony / Doors! ") == "clean-balcony-doors"
        assert slugify("--Check Mini-Bar--") == "check-mini-bar"

    def test_no_alphanumerics(self):
        assert slugify("!!!") == ""

    def test_unique_slug_suffixes(self):
        taken = {"sweep"}
        assert unique_slug("Sweep", taken) == "sweep-1"
        assert unique_slug("Sweep", taken) == "sweep-2"
        assert "sweep-2" in taken


class TestDefaults:

    def test_default_categories_in_order(self):
        catalog = TaskCatalog()
        assert catalog.categories() == ["washroom", "kitchen", "bedroom"]
        assert catalog.version == 0

    def test_default_ids(self):
        catalog = TaskCatalog()
        assert [d.task_id for d in catalog.definitions("washroom")] == [
            "clean-mirror", "scrub-toilet", "clean-sink",
            "clean-shower", "replace-towels", "sanitize",
        ]
        assert [d.task_id for d in catalog.definitions("kitchen")] == [
            "clean-fridge", "clean-dishes", "wipe-counter", "check-oven",
        ]
        assert len(catalog.definitions("bedroom")) == 8
        assert catalog.definitions("bedroom")[-1].task_id == "final-inspection"

    def test_defaults_unrestricted(self):
        catalog = TaskCatalog()
        assert catalog.is_applicable("kitchen", "Standard Twin")
        assert len(catalog.definitions_for_room_type("Standard Twin")) == 18


class TestIngest:

    def test_legacy_list_shape(self):
        normalized = normalize_feed({"balcony": ["Sweep", "Water Plants"]})
        assert normalized == {"balcony": {"tasks": ["Sweep", "Water Plants"], "roomTypes": []}}

    def test_object_shape(self):
        normalized = normalize_feed({"balcony": {"tasks": ["Sweep"], "roomTypes": ["Suite"]}})
        assert normalized["balcony"]["roomTypes"] == ["Suite"]

    def test_ingest_bumps_version(self):
        catalog = TaskCatalog()
        assert catalog.ingest({"balcony": ["Sweep"]}) == 1
        assert catalog.ingest({"balcony": ["Sweep", "Mop"]}) == 2
        assert [d.label for d in catalog.definitions("balcony")] == ["Sweep", "Mop"]

    def test_new_category_appended_after_defaults(self):
        catalog = TaskCatalog()
        catalog.ingest({"balcony": ["Sweep"]})
        assert catalog.categories() == ["washroom", "kitchen", "bedroom", "balcony"]

    def test_feed_tasks_follow_default_tasks(self):
        catalog = TaskCatalog()
        catalog.ingest({"kitchen": ["Empty Bin"]})
        ids = [d.task_id for d in catalog.definitions("kitchen")]
        assert ids[:4] == ["clean-fridge", "clean-dishes", "wipe-counter", "check-oven"]
        assert ids[4] == "empty-bin"

    def test_slug_collision_with_defaults(self):
        catalog = TaskCatalog()
        catalog.ingest({"washroom": ["Clean Mirror", "Clean Mirror"]})
        ids = [d.task_id for d in catalog.definitions("washroom")]
        assert ids[-2:] == ["clean-mirror-1", "clean-mirror-2"]
        assert catalog.find("clean-mirror-2").category == "washroom"

    def test_room_type_restriction_is_substring_case_insensitive(self):
        catalog = TaskCatalog()
        catalog.ingest({"balcony": {"tasks": ["Sweep"], "roomTypes": ["suite"]}})
        assert catalog.is_applicable("balcony", "Garden Suite")
        assert not catalog.is_applicable("balcony", "Deluxe King")

    def test_restriction_on_default_category(self):
        catalog = TaskCatalog()
        catalog.ingest({"kitchen": {"tasks": [], "roomTypes": ["Suite", "Family"]}})
        assert not catalog.is_applicable("kitchen", "Deluxe King")
        assert catalog.is_applicable("kitchen", "Family Room")
        assert len(catalog.definitions_for_room_type("Deluxe King")) == 14

    def test_unknown_category_is_unrestricted(self):
        assert TaskCatalog().is_applicable("laundry", "Deluxe King")

    def test_invalid_feed(self):
        catalog = TaskCatalog()
        with pytest.raises(ValidationFailed) as exc_info:
            catalog.ingest({"kitchen": "mop", "balcony": {"tasks": [1, 2]}})
        assert set(exc_info.value.errors) == {"kitchen", "balcony"}
        assert catalog.version == 0

    def test_feed_must_be_mapping(self):
        with pytest.raises(ValidationFailed):
            normalize_feed(["Sweep"])

    def test_blank_labels_dropped(self):
        assert normalize_feed({"balcony": ["Sweep", "  "]})["balcony"]["tasks"] == ["Sweep"]

    def test_restore_keeps_version(self):
        catalog = TaskCatalog()
        catalog.restore({"balcony": ["Sweep"]}, version=7)
        assert catalog.version == 7
        assert catalog.find("sweep") is not None


class TestFeedFile:

    def test_yaml(self, tmp_path):
        path = tmp_path / "catalog.yaml"
        path.write_text("balcony:\n  tasks:\n    - Sweep\n  roomTypes:\n    - Suite\nlaundry:\n  - Fold Towels\n")
        feed = load_feed_file(str(path))
        assert feed["balcony"]["tasks"] == ["Sweep"]
        assert feed["laundry"] == ["Fold Towels"]

    def test_json(self, tmp_path):
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps({"balcony": ["Sweep"]}))
        assert load_feed_file(str(path)) == {"balcony": ["Sweep"]}

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert load_feed_file(str(path)) == {}
