"""Tests for country name canonicalization."""

from __future__ import annotations

import pytest

from party_turnout.processing.names import DEFAULT_COUNTRY_ALIASES, NameNormalizer, normalize_name


@pytest.fixture
def normalizer() -> NameNormalizer:
    return NameNormalizer()


def test_russian_federation_is_russia(normalizer: NameNormalizer) -> None:
    assert normalizer.resolve_canonical_name("Russian Federation") == "RUSSIA"


def test_trim_and_upper_case_pass_through(normalizer: NameNormalizer) -> None:
    assert normalizer.resolve_canonical_name("  france ") == "FRANCE"
    assert normalizer.resolve_canonical_name(None) == ""


@pytest.mark.parametrize("spelling", ["Côte d’Ivoire", "Côte d'Ivoire", "CÔTE D'IVOIRE"])
def test_both_apostrophes_of_cote_divoire(normalizer: NameNormalizer, spelling: str) -> None:
    assert normalizer(spelling) == "COTE D'IVOIRE"


@pytest.mark.parametrize(
    "raw",
    list(DEFAULT_COUNTRY_ALIASES) + list(DEFAULT_COUNTRY_ALIASES.values()) + ["France", " viet nam", "", "x"],
)
def test_canonicalization_is_idempotent(normalizer: NameNormalizer, raw: str) -> None:
    once = normalizer.resolve_canonical_name(raw)
    assert normalizer.resolve_canonical_name(once) == once


def test_injected_table_replaces_defaults() -> None:
    normalizer = NameNormalizer({"burma": "myanmar"})

    assert normalizer("Burma") == "MYANMAR"
    assert normalizer("Russian Federation") == "RUSSIAN FEDERATION"


def test_overrides_extend_defaults() -> None:
    normalizer = NameNormalizer.with_overrides({"Republic of Korea": "South Korea", "czechia": "Czechia"})

    assert normalizer("REPUBLIC OF KOREA") == "SOUTH KOREA"
    assert normalizer("Russian Federation") == "RUSSIA"
    assert normalizer("Czechia") == "CZECHIA"


def test_chained_aliases_are_rejected() -> None:
    with pytest.raises(ValueError, match="aliased again"):
        NameNormalizer({"USA": "United States of America", "United States of America": "United States"})


def test_default_table_is_not_mutated_by_instances() -> None:
    before = dict(DEFAULT_COUNTRY_ALIASES)
    NameNormalizer.with_overrides({"Burma": "Myanmar"})

    assert DEFAULT_COUNTRY_ALIASES == before


def test_normalize_name_does_not_apply_aliases() -> None:
    assert normalize_name(" Viet Nam ") == "VIET NAM"
