"""Tests for core schemas: JobRecord, FilterState and result models."""

from datetime import date

import pytest
from pydantic import ValidationError

from canal.core.schemas import (
    FilterState,
    FreshnessBucket,
    FreshnessResult,
    JobRecord,
    WageBand,
    parse_iso_date,
)


def _make_record(**overrides: object) -> JobRecord:
    defaults: dict[str, object] = {
        "id": "1",
        "title": "Data Center Technician",
        "employer": "Oracle",
        "location": "Phoenix, AZ",
        "date_posted": "2026-10-01",
        "status": "Active",
        "wage": 60000,
        "category": "Technology",
    }
    defaults.update(overrides)
    return JobRecord(**defaults)  # type: ignore[arg-type]


class TestJobRecord:
    def test_upstream_aliases(self) -> None:
        r = JobRecord.model_validate({
            "id": 42,
            "jobTitle": "Network Engineer",
            "employer": "Intel",
            "location": "Chandler, AZ",
            "datePosted": "2026-09-30",
            "status": "Active",
            "wage": None,
            "category": "Technology",
            "occupationName": "Computer Network Architects",
            "soc": "15-1241",
            "url": "https://example.com/42",
        })
        assert r.id == "42"
        assert r.title == "Network Engineer"
        assert r.date_posted == "2026-09-30"
        assert r.source_occupation_code == "15-1241"
        assert r.posting_url == "https://example.com/42"
        assert r.occupation_name == "Computer Network Architects"

    def test_snake_case_names_accepted(self) -> None:
        r = _make_record(posting_url="https://example.com/1")
        assert r.posting_url == "https://example.com/1"

    def test_frozen(self) -> None:
        r = _make_record()
        with pytest.raises(ValidationError):
            r.title = "Changed"  # type: ignore[misc]

    def test_negative_wage_rejected(self) -> None:
        with pytest.raises(ValidationError):
            _make_record(wage=-1)

    def test_blank_id_rejected(self) -> None:
        with pytest.raises(ValidationError, match="id must not be empty"):
            _make_record(id="  ")

    def test_null_text_fields_become_empty(self) -> None:
        r = _make_record(employer=None, date_posted=None)
        assert r.employer == ""
        assert r.date_posted == ""

    def test_has_wage(self) -> None:
        assert _make_record(wage=1).has_wage is True
        assert _make_record(wage=0).has_wage is False
        assert _make_record(wage=None).has_wage is False

    def test_posted_on(self) -> None:
        assert _make_record(date_posted="2026-02-01").posted_on == date(2026, 2, 1)
        assert _make_record(date_posted="02/01/2026").posted_on is None


class TestParseIsoDate:
    def test_valid(self) -> None:
        assert parse_iso_date("2026-01-15") == date(2026, 1, 15)

    def test_invalid_calendar_date(self) -> None:
        assert parse_iso_date("2026-02-30") is None

    def test_wrong_shape(self) -> None:
        assert parse_iso_date("") is None
        assert parse_iso_date("2026-1-5") is None
        assert parse_iso_date("20260115") is None

    def test_other_iso_8601_forms_rejected(self) -> None:
        # accepted by date.fromisoformat on newer interpreters
        assert parse_iso_date("2026-W07-1") is None
        assert parse_iso_date("2026-046") is None
        assert parse_iso_date("2026-02-16T00:00") is None


class TestFilterState:
    UNIVERSE = frozenset({"Oracle", "Intel", "Amazon"})

    def test_default_unrestricted(self) -> None:
        s = FilterState()
        assert s.active_category is None
        assert s.employers is None
        assert s.wage_band is None
        assert s.query == ""

    def test_toggle_from_unrestricted_removes_value(self) -> None:
        s = FilterState().toggle("employer", "Intel", self.UNIVERSE)
        assert s.employers == frozenset({"Oracle", "Amazon"})

    def test_toggle_back_collapses_to_unrestricted(self) -> None:
        s = FilterState().toggle("employer", "Intel", self.UNIVERSE)
        s = s.toggle("employer", "Intel", self.UNIVERSE)
        assert s.employers is None

    def test_toggle_returns_new_state(self) -> None:
        base = FilterState()
        derived = base.toggle("location", "Tempe, AZ", frozenset({"Tempe, AZ", "Mesa, AZ"}))
        assert base.locations is None
        assert derived.locations == frozenset({"Mesa, AZ"})

    def test_empty_selection_is_not_unrestricted(self) -> None:
        s = FilterState().select_only("status", frozenset(), frozenset({"Active"}))
        assert s.statuses == frozenset()

    def test_select_only_full_universe_is_unrestricted(self) -> None:
        s = FilterState().select_only("employer", self.UNIVERSE, self.UNIVERSE)
        assert s.employers is None

    def test_select_all(self) -> None:
        s = FilterState(employers=frozenset({"Oracle"})).select_all("employer")
        assert s.employers is None

    def test_with_category_resets_inclusion_sets(self) -> None:
        s = FilterState(employers=frozenset({"Oracle"}), query="data")
        s = s.with_category("Technology")
        assert s.active_category == "Technology"
        assert s.employers is None
        assert s.query == "data"

    def test_cleared_keeps_category(self) -> None:
        s = FilterState(
            active_category="Healthcare",
            wage_band=WageBand.LISTED,
            date_from=date(2026, 1, 1),
            query="nurse",
        )
        assert s.cleared() == FilterState(active_category="Healthcare")

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(ValueError, match="unknown inclusion field"):
            FilterState().toggle("category", "x", frozenset())  # type: ignore[arg-type]

    def test_with_helpers(self) -> None:
        s = (
            FilterState()
            .with_wage_band(WageBand.FROM_100K_TO_150K)
            .with_dates(date(2026, 2, 1), None)
            .with_query("engineer")
        )
        assert s.wage_band is WageBand.FROM_100K_TO_150K
        assert s.date_from == date(2026, 2, 1)
        assert s.date_to is None
        assert s.query == "engineer"

    def test_wage_band_from_tag(self) -> None:
        assert FilterState(wage_band="100k-150k").wage_band is WageBand.FROM_100K_TO_150K  # type: ignore[arg-type]


class TestFreshnessResult:
    def test_total(self) -> None:
        r = FreshnessResult(buckets=(
            FreshnessBucket(label="0–5 days", count=2),
            FreshnessBucket(label="6+ days", count=3),
        ))
        assert r.total == 5
