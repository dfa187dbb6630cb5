"""Tests for the country dataset join."""

from __future__ import annotations

import pytest

from party_turnout.processing.join import (
    DatasetJoiner,
    TurnoutLookup,
    coerce_number,
    coerce_year,
)
from party_turnout.processing.tabular import parse_delimited

from .conftest import CLASSIFICATION, TURNOUT_CSV


@pytest.fixture
def dataset(features):
    rows = parse_delimited(TURNOUT_CSV).rows
    return DatasetJoiner().join(features, rows, CLASSIFICATION)


def test_france_join_example() -> None:
    features = [{"type": "Feature", "properties": {"ADMIN": "France"}, "geometry": None}]
    rows = [
        {
            "country": "France",
            "VoterTurnout_ParliamentaryVotingTurnoutPct": "67.8",
            "VoterTurnout_ParliamentaryTurnoutDataYear": "2024",
        }
    ]

    dataset = DatasetJoiner().join(features, rows, {"FRANCE": "multi-party"})

    assert dataset.lookup_turnout("FRANCE") == TurnoutLookup(percentage=67.8, year=2024)
    assert dataset.lookup_classification("FRANCE") == "multi-party"
    assert dataset.features[0].party_system == "multi-party"


def test_absent_country_has_no_turnout(dataset) -> None:
    assert dataset.lookup_turnout("ATLANTIS") == TurnoutLookup(percentage=None, year=None)
    assert dataset.lookup_turnout("NOWHERE").percentage is None


def test_aliases_join_turnout_to_features(dataset) -> None:
    by_name = {f.canonical_name: f for f in dataset.features}

    assert by_name["RUSSIA"].percentage == pytest.approx(51.7)
    assert by_name["RUSSIA"].year == 2021
    assert by_name["RUSSIA"].raw_name == "RUSSIAN FEDERATION"
    assert by_name["UNITED STATES"].party_system == "two-party"


def test_malformed_numbers_become_none_not_zero(dataset) -> None:
    us = dataset.lookup_turnout("UNITED STATES")
    china = dataset.lookup_turnout("CHINA")

    assert us.percentage is None
    assert us.year == 2022
    assert china == TurnoutLookup(percentage=None, year=None)
    assert "CHINA" in dataset.turnout_by_country


def test_rows_without_country_are_skipped(dataset) -> None:
    assert "" not in dataset.turnout_by_country
    assert len(dataset.turnout_records) == 4


def test_feature_names_use_priority_keys_and_are_written_back(features) -> None:
    features[0]["properties"]["NAME"] = "Ignored"
    dataset = DatasetJoiner().join(features, [], {})

    assert [f.raw_name for f in dataset.features] == [
        "FRANCE",
        "RUSSIAN FEDERATION",
        "UNITED STATES OF AMERICA",
        "ATLANTIS",
        "UNKNOWN",
    ]
    assert [f["properties"]["ADMIN"] for f in features] == [f.raw_name for f in dataset.features]


def test_empty_admin_falls_through_to_next_key() -> None:
    features = [{"properties": {"ADMIN": "", "NAME": "Chile"}}, {"properties": None}]

    dataset = DatasetJoiner().join(features, [], {})

    assert [f.raw_name for f in dataset.features] == ["CHILE", "UNKNOWN"]
    assert features[1]["properties"] == {"ADMIN": "UNKNOWN"}


def test_classification_falls_back_to_raw_name() -> None:
    features = [{"properties": {"ADMIN": "Czechia"}}]

    dataset = DatasetJoiner().join(features, [], {"Czechia": "multi-party"})

    assert dataset.features[0].canonical_name == "CZECH REPUBLIC"
    assert dataset.features[0].party_system == "multi-party"
    assert dataset.lookup_classification("CZECH REPUBLIC") == "unknown"
    assert dataset.lookup_classification("CZECH REPUBLIC", "czechia") == "multi-party"
    assert dataset.match_diagnostics().party_matched == 1


def test_unrecognized_and_empty_classifications() -> None:
    features = [{"properties": {"ADMIN": "Narnia"}}, {"properties": {"ADMIN": "Oz"}}]

    dataset = DatasetJoiner().join(features, [], {"narnia": "monarchy-ish", "OZ": ""})

    assert dataset.lookup_classification("NARNIA") == "monarchy-ish"
    assert dataset.lookup_classification("OZ") == "unknown"
    assert dataset.match_diagnostics().party_matched == 1


def test_match_diagnostics(dataset) -> None:
    diagnostics = dataset.match_diagnostics()

    assert diagnostics.total == 5
    assert diagnostics.turnout_matched == 3
    assert diagnostics.party_matched == 3
    assert diagnostics.turnout_matched <= diagnostics.total
    assert diagnostics.party_matched <= diagnostics.total
    assert diagnostics.as_dict() == {"turnout_matched": 3, "party_matched": 3, "total": 5}


def test_later_turnout_rows_replace_earlier_ones() -> None:
    rows = parse_delimited("Country\tTurnout\tYear\nPeru\t80\t2016\nperu\t81.5\t2021\n").rows

    dataset = DatasetJoiner().join([], rows, {})

    assert dataset.lookup_turnout("PERU") == TurnoutLookup(percentage=81.5, year=2021)
    assert len(dataset.turnout_records) == 2


def test_custom_field_candidates() -> None:
    rows = [{"nation": "Chile", "pct": "47.2", "yr": "2021"}]
    joiner = DatasetJoiner(country_fields=["nation"], turnout_fields=["pct"], year_fields=["yr"])

    dataset = joiner.join([], rows, {})

    assert dataset.lookup_turnout("CHILE") == TurnoutLookup(percentage=47.2, year=2021)


def test_resolve_canonical_name_uses_joiner_normalizer(dataset) -> None:
    assert dataset.resolve_canonical_name("Viet Nam") == "VIETNAM"


def test_joined_lookups_are_read_only(dataset) -> None:
    with pytest.raises(TypeError):
        dataset.turnout_by_country["FRANCE"] = 1.0


@pytest.mark.parametrize(
    "raw, expected",
    [("67.8", 67.8), (" 42 ", 42.0), ("0", 0.0), ("-5", -5.0), ("1e2", 100.0)],
)
def test_coerce_number_valid(raw: str, expected: float) -> None:
    assert coerce_number(raw) == pytest.approx(expected)


@pytest.mark.parametrize("raw", [None, "", "   ", "n/a", "67.8%", "inf", "nan", "--"])
def test_coerce_number_invalid(raw) -> None:
    assert coerce_number(raw) is None


def test_coerce_year_prefers_integers() -> None:
    assert coerce_year("2024") == 2024
    assert isinstance(coerce_year("2024.0"), int)
    assert coerce_year("2024.5") == 2024.5
    assert coerce_year("soon") is None


@pytest.mark.parametrize("properties", [[], "France", 7])
def test_non_mapping_properties_are_replaced(properties) -> None:
    features = [{"type": "Feature", "properties": properties, "geometry": None}]

    dataset = DatasetJoiner().join(features, [], {})

    assert dataset.features[0].raw_name == "UNKNOWN"
    assert features[0]["properties"] == {"ADMIN": "UNKNOWN"}
