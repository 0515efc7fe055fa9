"""Tests for filter, sort and recency projections."""

from datetime import datetime, timezone

import pytest

from vault.domain import FilePermission, FileShare
from vault.services.query_service import (
    DateRange,
    FilterSpec,
    SortSpec,
    apply_view,
    collation_key,
    filter_records,
    recent_view,
    sort_records,
)


def _names(records):
    return [record.name for record in records]


def _share(email="user@x.com"):
    return FileShare(
        id="share-1",
        user_id="user-1",
        user_name=email.split("@")[0],
        user_email=email,
        permissions=FilePermission.view_only(),
        created_at=datetime(2024, 4, 1, tzinfo=timezone.utc),
    )


class TestFilterRecords:
    """Test the filter projection."""

    def test_no_filter_keeps_every_record(self, scenario_records):
        result = filter_records(scenario_records, FilterSpec())
        assert _names(result) == ["Report.pdf", "Photo.png", "Notes.txt"]

    def test_search_is_case_insensitive_substring(self, scenario_records):
        result = filter_records(scenario_records, FilterSpec(search_term="photo"))
        assert _names(result) == ["Photo.png"]

    def test_empty_search_term_is_no_constraint(self, scenario_records):
        result = filter_records(scenario_records, FilterSpec(search_term=""))
        assert len(result) == 3

    def test_file_types_filter(self, scenario_records):
        result = filter_records(scenario_records, FilterSpec(file_types=["PDF", "txt"]))
        assert _names(result) == ["Report.pdf", "Notes.txt"]

    def test_date_range_is_inclusive(self, scenario_records):
        spec = FilterSpec(date_range=DateRange(
            start=datetime(2024, 2, 1, tzinfo=timezone.utc),
            end=datetime(2024, 3, 1, tzinfo=timezone.utc),
        ))
        assert _names(filter_records(scenario_records, spec)) == ["Photo.png", "Notes.txt"]

    def test_open_ended_date_range(self, scenario_records):
        spec = FilterSpec(date_range=DateRange(end=datetime(2024, 1, 15)))
        assert _names(filter_records(scenario_records, spec)) == ["Report.pdf"]

    def test_tags_match_any(self, scenario_records):
        scenario_records[0].tags = ["work"]
        scenario_records[2].tags = ["personal", "todo"]
        result = filter_records(scenario_records, FilterSpec(tags=["todo", "work"]))
        assert _names(result) == ["Report.pdf", "Notes.txt"]

    def test_flag_filters(self, scenario_records):
        scenario_records[0].is_favorite = True
        scenario_records[1].shared_with = [_share()]
        scenario_records[2].is_encrypted = True

        assert _names(filter_records(scenario_records, FilterSpec(only_favorites=True))) == ["Report.pdf"]
        assert _names(filter_records(scenario_records, FilterSpec(only_shared=True))) == ["Photo.png"]
        assert _names(filter_records(scenario_records, FilterSpec(only_encrypted=True))) == ["Notes.txt"]

    def test_clauses_are_conjunctive(self, scenario_records):
        scenario_records[0].is_favorite = True
        spec = FilterSpec(search_term="o", only_favorites=True)
        assert _names(filter_records(scenario_records, spec)) == ["Report.pdf"]

    def test_malformed_clauses_are_ignored(self, scenario_records):
        spec = FilterSpec(
            search_term=42,
            file_types=7,
            date_range="yesterday",
            tags=[None, 3],
            only_favorites="yes",
        )
        assert len(filter_records(scenario_records, spec)) == 3

    def test_input_is_not_mutated(self, scenario_records):
        snapshot = list(scenario_records)
        filter_records(scenario_records, FilterSpec(search_term="notes"))
        assert scenario_records == snapshot


class TestSortRecords:
    """Test the sort projection."""

    def test_date_desc_and_asc(self, scenario_records):
        desc = sort_records(scenario_records, SortSpec("date", "desc"))
        asc = sort_records(scenario_records, SortSpec("date", "asc"))
        assert _names(desc) == ["Notes.txt", "Photo.png", "Report.pdf"]
        assert _names(asc) == ["Report.pdf", "Photo.png", "Notes.txt"]

    def test_sort_by_size(self, scenario_records):
        assert _names(sort_records(scenario_records, SortSpec("size", "asc"))) == [
            "Photo.png", "Notes.txt", "Report.pdf"
        ]

    def test_sort_by_name_ignores_case(self, record_factory):
        records = [
            record_factory("beta.txt", datetime(2024, 1, 1, tzinfo=timezone.utc)),
            record_factory("Alpha.txt", datetime(2024, 1, 2, tzinfo=timezone.utc)),
            record_factory("Émile.txt", datetime(2024, 1, 3, tzinfo=timezone.utc)),
        ]
        assert _names(sort_records(records, SortSpec("name", "asc"))) == ["Alpha.txt", "beta.txt", "Émile.txt"]

    def test_sort_by_type(self, scenario_records):
        assert _names(sort_records(scenario_records, SortSpec("type", "asc"))) == [
            "Report.pdf", "Photo.png", "Notes.txt"
        ]

    def test_equal_keys_keep_incoming_order_in_both_directions(self, record_factory):
        when = datetime(2024, 5, 1, tzinfo=timezone.utc)
        records = [record_factory(name, when, size=10) for name in ("a.txt", "b.txt", "c.txt")]

        assert _names(sort_records(records, SortSpec("size", "asc"))) == ["a.txt", "b.txt", "c.txt"]
        assert _names(sort_records(records, SortSpec("size", "desc"))) == ["a.txt", "b.txt", "c.txt"]

    def test_unknown_field_keeps_order(self, scenario_records):
        result = sort_records(scenario_records, SortSpec("colour", "desc"))
        assert _names(result) == ["Report.pdf", "Photo.png", "Notes.txt"]

    def test_unknown_direction_sorts_descending(self, scenario_records):
        result = sort_records(scenario_records, SortSpec("date", "sideways"))
        assert _names(result) == ["Notes.txt", "Photo.png", "Report.pdf"]

    def test_unhashable_sort_field_keeps_order(self, scenario_records):
        result = sort_records(scenario_records, SortSpec(sort_by=["name"]))
        assert _names(result) == ["Report.pdf", "Photo.png", "Notes.txt"]

    def test_sort_spec_given_as_mapping(self, scenario_records):
        result = sort_records(scenario_records, {"sort_by": "size", "direction": "asc", "extra": 1})
        assert _names(result) == ["Photo.png", "Notes.txt", "Report.pdf"]

    @pytest.mark.parametrize("sort_spec", ["date", 3, ["date", "asc"]])
    def test_malformed_sort_spec_keeps_order(self, scenario_records, sort_spec):
        assert _names(sort_records(scenario_records, sort_spec)) == ["Report.pdf", "Photo.png", "Notes.txt"]

    def test_sort_returns_new_list(self, scenario_records):
        result = sort_records(scenario_records, SortSpec("date", "desc"))
        assert result is not scenario_records
        assert _names(scenario_records) == ["Report.pdf", "Photo.png", "Notes.txt"]


class TestApplyView:
    """Test the combined filter-then-sort view."""

    def test_view_is_deterministic(self, scenario_records):
        spec = FilterSpec(search_term="t")
        order = SortSpec("name", "asc")
        assert apply_view(scenario_records, spec, order) == apply_view(scenario_records, spec, order)

    def test_filter_then_sort(self, scenario_records):
        result = apply_view(scenario_records, FilterSpec(file_types=["png", "txt"]), SortSpec("date", "desc"))
        assert _names(result) == ["Notes.txt", "Photo.png"]

    def test_empty_mapping_filter_is_no_constraint(self, scenario_records):
        result = apply_view(scenario_records, {}, SortSpec("date", "asc"))
        assert _names(result) == ["Report.pdf", "Photo.png", "Notes.txt"]

    def test_filter_given_as_mapping(self, scenario_records):
        result = apply_view(scenario_records, {"search_term": "photo", "bogus": True}, None)
        assert _names(result) == ["Photo.png"]

    @pytest.mark.parametrize("filter_spec", ["photo", 42, ["photo"], object()])
    def test_malformed_filter_spec_is_no_constraint(self, scenario_records, filter_spec):
        assert len(apply_view(scenario_records, filter_spec, None)) == 3

    def test_view_of_empty_collection(self):
        assert apply_view([], FilterSpec(search_term="x"), SortSpec()) == []


class TestRecentView:
    """Test the recency projection."""

    def test_newest_first(self, scenario_records):
        assert _names(recent_view(scenario_records)) == ["Notes.txt", "Photo.png", "Report.pdf"]

    def test_limit_applies(self, scenario_records):
        assert _names(recent_view(scenario_records, limit=2)) == ["Notes.txt", "Photo.png"]

    def test_uses_creation_time_not_modification_time(self, record_factory):
        records = [
            record_factory("old.txt", datetime(2020, 1, 1, tzinfo=timezone.utc),
                            modified_at=datetime(2025, 1, 1, tzinfo=timezone.utc)),
            record_factory("new.txt", datetime(2024, 1, 1, tzinfo=timezone.utc)),
        ]
        assert _names(recent_view(records, limit=1)) == ["new.txt"]

    def test_default_limit_is_five(self, record_factory):
        records = [
            record_factory(f"f{day}.txt", datetime(2024, 1, day, tzinfo=timezone.utc))
            for day in range(1, 9)
        ]
        assert len(recent_view(records)) == 5
        assert len(recent_view(records, limit=None)) == 5

    @pytest.mark.parametrize("limit", [0, -3, "5"])
    def test_bad_limit_gives_empty_view(self, scenario_records, limit):
        assert recent_view(scenario_records, limit=limit) == []


def test_collation_key_folds_case_and_accents():
    assert collation_key("Éclair")[0] == collation_key("eclair")[0]
    assert collation_key("Éclair") != collation_key("eclair")
    assert collation_key(None) == ("", "")
