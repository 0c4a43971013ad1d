"""
tests/unit/test_models.py
──────────────────────────────────────────────────────────────────────────────
Unit tests for domain model validation (Pydantic) and key helpers.

Tests cover:
  • Section enum values and section-tag normalisation
  • Occupation name normalisation and four-digit code reduction
  • OccupationEntry trimming and required fields
  • QueryRecord timestamp invariant and JSON serialisation
"""
from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from anzsco_cache.domain.models import (
    OccupationDetail,
    OccupationEntry,
    QueryRecord,
    Section,
    four_digit_code,
    normalize_occupation_name,
    normalize_section,
)

_T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


class TestSection:
    def test_values(self):
        assert [s.value for s in Section] == [
            "visa", "details", "assessment", "eoi", "nomination",
        ]

    def test_normalize_trims_and_casefolds(self):
        assert normalize_section("  EOI ") == Section.EOI
        assert normalize_section("Visa") == Section.VISA

    def test_normalize_passes_enum_through(self):
        assert normalize_section(Section.DETAILS) is Section.DETAILS

    def test_unknown_section_raises(self):
        with pytest.raises(ValueError, match="Unknown section"):
            normalize_section("salary")


class TestKeyHelpers:
    def test_occupation_name_normalisation(self):
        assert normalize_occupation_name("  Software Engineer ") == "software engineer"

    def test_four_digit_code_from_six_digits(self):
        assert four_digit_code("261313") == "2613"

    def test_four_digit_code_strips_non_digits(self):
        assert four_digit_code("2613-13") == "2613"

    def test_four_digit_code_accepts_int(self):
        assert four_digit_code(351311) == "3513"

    def test_four_digit_code_without_digits_raises(self):
        with pytest.raises(ValueError, match="no digits"):
            four_digit_code("ABC")


class TestOccupationEntry:
    def test_fields_are_trimmed(self):
        e = OccupationEntry(
            occupation_name=" Software Engineer ",
            anzsco_code=" 261313",
            direct_link="https://example.test/261313 ",
        )
        assert e.occupation_name == "Software Engineer"
        assert e.anzsco_code == "261313"
        assert e.direct_link == "https://example.test/261313"

    def test_key_is_normalised_name(self):
        e = OccupationEntry(occupation_name="Chef", anzsco_code="351311")
        assert e.key == "chef"

    def test_link_defaults_empty(self):
        e = OccupationEntry(occupation_name="Chef", anzsco_code="351311")
        assert e.direct_link == ""

    def test_missing_code_raises(self):
        with pytest.raises(ValidationError):
            OccupationEntry(occupation_name="Chef")  # type: ignore[call-arg]

    def test_empty_name_raises(self):
        with pytest.raises(ValidationError):
            OccupationEntry(occupation_name="", anzsco_code="351311")


class TestOccupationDetail:
    def test_tasks_keep_order_and_duplicates(self):
        d = OccupationDetail(title="Chef", tasks=["Cook", "Plate", "Cook"])
        assert d.tasks == ["Cook", "Plate", "Cook"]

    def test_defaults(self):
        d = OccupationDetail(title="Chef")
        assert d.tasks == []
        assert d.unit_group == ""


class TestQueryRecord:
    def _record(self, **overrides) -> QueryRecord:
        values = dict(
            id="abc",
            query="What skills are needed?",
            occupation_name="Software Engineer",
            section="assessment",
            response="A degree.",
            created_at=_T0,
            accessed_at=_T0,
            source="gpt-test",
        )
        values.update(overrides)
        return QueryRecord(**values)

    def test_section_coerced_to_enum(self):
        assert self._record().section == Section.ASSESSMENT

    def test_accessed_before_created_rejected(self):
        with pytest.raises(ValidationError, match="accessed_at"):
            self._record(accessed_at=_T0 - timedelta(seconds=1))

    def test_to_dict_is_json_serialisable(self):
        d = self._record().to_dict()
        assert d["section"] == "assessment"
        assert json.loads(json.dumps(d))["created_at"].startswith("2026-01-01")

    def test_round_trip_through_dict(self):
        r = self._record(accessed_at=_T0 + timedelta(minutes=5))
        assert QueryRecord.model_validate(r.to_dict()) == r
