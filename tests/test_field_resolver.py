"""Tests for field resolution across header spellings."""

from __future__ import annotations

from party_turnout.processing.field_resolver import COUNTRY_FIELDS, TURNOUT_FIELDS, get_field


def test_exact_match_in_candidate_order() -> None:
    row = {"Country": "Spain", "country": "France"}

    assert get_field(row, COUNTRY_FIELDS) == "France"
    assert get_field(row, ["Country", "country"]) == "Spain"


def test_case_and_whitespace_insensitive_fallback() -> None:
    assert get_field({"COUNTRY ": "Chile"}, COUNTRY_FIELDS) == "Chile"
    assert get_field({" Turnout": "55"}, TURNOUT_FIELDS) == "55"


def test_exact_match_beats_fallback_for_earlier_candidate() -> None:
    row = {"TURNOUT": "10", "Turnout": "20"}

    # "turnout" has no exact hit; "Turnout" does, so pass 1 returns it
    assert get_field(row, ["turnout", "Turnout"]) == "20"


def test_missing_field_returns_none() -> None:
    assert get_field({"nation": "Peru"}, COUNTRY_FIELDS) is None
    assert get_field({}, COUNTRY_FIELDS) is None


def test_empty_cell_is_returned_not_skipped() -> None:
    assert get_field({"country": ""}, COUNTRY_FIELDS) == ""
