"""
tests/unit/test_stores.py
──────────────────────────────────────────────────────────────────────────────
Unit tests for OccupationIndex and OccupationDetailStore over the in-memory
document store.

Verifies:
  • insert → lookup with a case/whitespace-different name
  • Conflict on a name already indexed under another code
  • Idempotent re-insert, link refresh, code ownership markers
  • Detail put/get preserves task order and replaces wholesale
"""
from __future__ import annotations

import pytest

from anzsco_cache.domain.exceptions import ConflictError
from anzsco_cache.domain.models import OccupationDetail, OccupationEntry


def _entry(name="Software Engineer", code="2611", link="https://example.test/2611"):
    return OccupationEntry(occupation_name=name, anzsco_code=code, direct_link=link)


class TestOccupationIndex:
    def test_lookup_on_empty_index_is_none(self, index):
        assert index.lookup("Software Engineer") is None

    def test_insert_then_lookup_normalised_name(self, index):
        inserted = index.insert(_entry())
        found = index.lookup("software engineer ")
        assert found == inserted

    def test_blank_lookup_is_none(self, index):
        assert index.lookup("   ") is None

    def test_conflicting_code_raises(self, index):
        index.insert(_entry())
        with pytest.raises(ConflictError, match="2611"):
            index.insert(_entry(name="SOFTWARE ENGINEER", code="2613"))

    def test_conflict_leaves_original_entry(self, index):
        index.insert(_entry())
        with pytest.raises(ConflictError):
            index.insert(_entry(code="2613"))
        assert index.lookup("Software Engineer").anzsco_code == "2611"
        assert not index.has_code("2613")

    def test_reinsert_same_code_returns_stored_entry(self, index):
        index.insert(_entry())
        again = index.insert(_entry(name="software engineer", link="https://other"))
        assert again.occupation_name == "Software Engineer"
        assert again.direct_link == "https://example.test/2611"

    def test_reinsert_restores_missing_code_marker(self, index, store):
        index.insert(_entry())
        store.delete(index.CODES_COLLECTION, "2611")
        index.insert(_entry())
        assert index.has_code("2611")

    def test_code_marker_written_before_entry(self, index, store):
        order = []
        real_put = store.put

        def _recording_put(collection, key, document):
            order.append(collection)
            real_put(collection, key, document)

        store.put = _recording_put
        index.insert(_entry())
        assert order == [index.CODES_COLLECTION, index.COLLECTION]

    def test_has_code_after_insert(self, index):
        assert not index.has_code("2611")
        index.insert(_entry())
        assert index.has_code("2611")

    def test_two_names_may_share_a_code(self, index):
        index.insert(_entry(name="Software Engineer"))
        index.insert(_entry(name="Software Developer"))
        assert {e.occupation_name for e in index.entries()} == {
            "Software Engineer", "Software Developer",
        }

    def test_refresh_link(self, index):
        index.insert(_entry())
        updated = index.refresh_link("SOFTWARE ENGINEER", " https://new.test/2611 ")
        assert updated.direct_link == "https://new.test/2611"
        assert index.lookup("Software Engineer").direct_link == "https://new.test/2611"
        assert updated.anzsco_code == "2611"

    def test_refresh_link_unknown_name_is_none(self, index):
        assert index.refresh_link("Nobody", "https://x") is None

    def test_entries_sorted_by_key(self, index):
        index.insert(_entry(name="Zookeeper", code="361114"))
        index.insert(_entry(name="Chef", code="351311"))
        assert [e.occupation_name for e in index.entries()] == ["Chef", "Zookeeper"]


class TestOccupationDetailStore:
    def test_get_missing_is_none(self, details):
        assert details.get("2611") is None

    def test_put_then_get_preserves_task_order(self, details):
        details.put(
            "2611",
            OccupationDetail(title="Software Engineer", tasks=["Design", "Test", "Deploy"]),
        )
        assert details.get("2611").tasks == ["Design", "Test", "Deploy"]

    def test_put_replaces_whole_record(self, details):
        details.put(
            "2611",
            OccupationDetail(title="Old", skill_level="1", tasks=["A"], source="ABS"),
        )
        details.put("2611", OccupationDetail(title="New"))
        stored = details.get("2611")
        assert stored.title == "New"
        assert stored.skill_level == ""
        assert stored.tasks == []
        assert stored.source == ""

    def test_returned_detail_is_a_copy(self, details):
        details.put("2611", OccupationDetail(title="X", tasks=["A"]))
        got = details.get("2611")
        got.tasks.append("B")
        assert details.get("2611").tasks == ["A"]
