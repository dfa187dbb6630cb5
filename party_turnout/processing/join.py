#!/usr/bin/env python3
"""
join.py - Country Dataset Joiner

Builds lookup tables keyed by canonical country name and attaches turnout,
reporting year and party system classification to every boundary feature.

Join policy:
- turnout rows without a usable country name are skipped
- unparseable percentages / years become None (never 0, never an error)
- classification is looked up by canonical name first, then by the
  upper-cased raw name, since the classification file does not go through
  the alias table
- features without a match get None / "unknown" and are only counted in the
  match diagnostics
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from loguru import logger

from .field_resolver import COUNTRY_FIELDS, FEATURE_NAME_KEYS, TURNOUT_FIELDS, YEAR_FIELDS, get_field
from .names import NameNormalizer, normalize_name
from .tabular import Row

Number = Union[int, float]

UNKNOWN_NAME = "UNKNOWN"
UNKNOWN_PARTY = "unknown"
NAME_PROPERTY = "ADMIN"


def coerce_number(value: Any) -> Optional[float]:
    """Convert a cell to a finite float, or None if that is not possible."""
    if value is None:
        return None
    text = str(value).strip()
    if not text:
        return None
    number = pd.to_numeric(text, errors="coerce")
    if not np.isfinite(number):
        return None
    return float(number)


def coerce_year(value: Any) -> Optional[Number]:
    year = coerce_number(value)
    if year is not None and year.is_integer():
        return int(year)
    return year


def find_classification(
    table: Mapping[str, str], canonical_name: str, raw_name: Optional[str] = None
) -> Optional[str]:
    value = table.get(canonical_name)
    if not value and raw_name is not None:
        value = table.get(normalize_name(raw_name))
    return value or None


@dataclass(frozen=True)
class TurnoutLookup:
    percentage: Optional[float] = None
    year: Optional[Number] = None


@dataclass(frozen=True)
class TurnoutRecord:
    """One usable turnout row, in input order."""

    country: str
    raw_name: str
    percentage: Optional[float]
    year: Optional[Number]


@dataclass(frozen=True)
class FeatureJoin:
    """Join result for a single boundary feature."""

    raw_name: str
    canonical_name: str
    party_system: str
    percentage: Optional[float]
    year: Optional[Number]
    feature: Mapping[str, Any]


@dataclass(frozen=True)
class MatchDiagnostics:
    turnout_matched: int
    party_matched: int
    total: int

    def as_dict(self) -> Dict[str, int]:
        return {
            "turnout_matched": self.turnout_matched,
            "party_matched": self.party_matched,
            "total": self.total,
        }


class JoinedDataset:
    """Read-only result of a join, and the only surface the renderers use."""

    def __init__(
        self,
        normalizer: NameNormalizer,
        turnout_by_country: Dict[str, Optional[float]],
        year_by_country: Dict[str, Optional[Number]],
        classification: Dict[str, str],
        turnout_records: Sequence[TurnoutRecord],
        features: Sequence[FeatureJoin],
    ):
        self._normalizer = normalizer
        self.turnout_by_country = MappingProxyType(dict(turnout_by_country))
        self.year_by_country = MappingProxyType(dict(year_by_country))
        self.classification = MappingProxyType(dict(classification))
        self.turnout_records: Tuple[TurnoutRecord, ...] = tuple(turnout_records)
        self.features: Tuple[FeatureJoin, ...] = tuple(features)

        self._diagnostics = MatchDiagnostics(
            turnout_matched=sum(1 for f in self.features if f.canonical_name in self.turnout_by_country),
            party_matched=sum(
                1 for f in self.features if find_classification(self.classification, f.canonical_name, f.raw_name)
            ),
            total=len(self.features),
        )

    def resolve_canonical_name(self, raw: Any) -> str:
        return self._normalizer.resolve_canonical_name(raw)

    def lookup_turnout(self, canonical_name: str) -> TurnoutLookup:
        """Turnout percentage and reporting year; both None when unmatched."""
        return TurnoutLookup(
            percentage=self.turnout_by_country.get(canonical_name),
            year=self.year_by_country.get(canonical_name),
        )

    def lookup_classification(self, canonical_name: str, raw_name: Optional[str] = None) -> str:
        """Party system for a country, falling back to the un-aliased name.

        Args:
            canonical_name: Alias-resolved join key
            raw_name: Name before alias substitution, if known

        Returns:
            The raw classification string, or "unknown"
        """
        return find_classification(self.classification, canonical_name, raw_name) or UNKNOWN_PARTY

    def match_diagnostics(self) -> MatchDiagnostics:
        return self._diagnostics


class DatasetJoiner:
    """Joins turnout and classification onto boundary features.

    Args:
        normalizer: Canonicalizer shared by all three sources
        country_fields: Column spellings for the country name
        turnout_fields: Column spellings for the turnout percentage
        year_fields: Column spellings for the reporting year
        feature_name_keys: GeoJSON property keys for the display name, in
            priority order
    """

    def __init__(
        self,
        normalizer: Optional[NameNormalizer] = None,
        country_fields: Sequence[str] = COUNTRY_FIELDS,
        turnout_fields: Sequence[str] = TURNOUT_FIELDS,
        year_fields: Sequence[str] = YEAR_FIELDS,
        feature_name_keys: Sequence[str] = FEATURE_NAME_KEYS,
    ):
        self.normalizer = normalizer or NameNormalizer()
        self.country_fields = list(country_fields)
        self.turnout_fields = list(turnout_fields)
        self.year_fields = list(year_fields)
        self.feature_name_keys = list(feature_name_keys)

    def build_turnout_records(self, rows: Iterable[Row]) -> List[TurnoutRecord]:
        records: List[TurnoutRecord] = []
        skipped = 0

        for row in rows:
            country_raw = get_field(row, self.country_fields)
            if not country_raw:
                skipped += 1
                continue

            raw_name = normalize_name(country_raw)
            country = self.normalizer.harmonize(raw_name)
            if not country:
                skipped += 1
                continue

            records.append(
                TurnoutRecord(
                    country=country,
                    raw_name=raw_name,
                    percentage=coerce_number(get_field(row, self.turnout_fields)),
                    year=coerce_year(get_field(row, self.year_fields)),
                )
            )

        if skipped:
            logger.debug(f"  ⏭️ Skipped {skipped} turnout rows without a country name")
        return records

    @staticmethod
    def build_classification_table(classification: Mapping[str, Any]) -> Dict[str, str]:
        """Key the classification mapping by upper-cased name.

        Empty values are dropped so they behave like missing entries. When two
        keys collide after upper-casing, the later one wins.
        """
        table: Dict[str, str] = {}
        for name, value in classification.items():
            if value is None or value == "":
                continue
            table[normalize_name(name)] = str(value)
        return table

    def feature_display_name(self, feature: Mapping[str, Any]) -> str:
        properties = feature.get("properties")
        if not isinstance(properties, dict):
            return UNKNOWN_NAME
        for key in self.feature_name_keys:
            value = properties.get(key)
            if value:
                return normalize_name(value)
        return UNKNOWN_NAME

    def join(
        self,
        features: Iterable[Dict[str, Any]],
        turnout_rows: Iterable[Row],
        classification: Mapping[str, Any],
    ) -> JoinedDataset:
        """Join turnout and party classification onto boundary features.

        Each feature's display name is written back, upper-cased, into its
        ``ADMIN`` property. Nothing else on the features is touched.

        Args:
            features: GeoJSON features (dicts with ``properties``)
            turnout_rows: Parsed turnout rows
            classification: Country name -> party system

        Returns:
            JoinedDataset with lookups, per-feature results and diagnostics
        """
        logger.info("🔗 Joining turnout and party systems onto country boundaries...")

        records = self.build_turnout_records(turnout_rows)
        turnout_by_country: Dict[str, Optional[float]] = {}
        year_by_country: Dict[str, Optional[Number]] = {}
        for record in records:
            turnout_by_country[record.country] = record.percentage
            year_by_country[record.country] = record.year

        party_table = self.build_classification_table(classification)

        joined: List[FeatureJoin] = []
        for feature in features:
            if not isinstance(feature.get("properties"), dict):
                feature["properties"] = {}
            raw_name = self.feature_display_name(feature)
            feature["properties"][NAME_PROPERTY] = raw_name

            canonical = self.normalizer.harmonize(raw_name)
            joined.append(
                FeatureJoin(
                    raw_name=raw_name,
                    canonical_name=canonical,
                    party_system=find_classification(party_table, canonical, raw_name) or UNKNOWN_PARTY,
                    percentage=turnout_by_country.get(canonical),
                    year=year_by_country.get(canonical),
                    feature=feature,
                )
            )

        dataset = JoinedDataset(
            self.normalizer, turnout_by_country, year_by_country, party_table, records, joined
        )

        diagnostics = dataset.match_diagnostics()
        logger.info(f"  📊 Turnout records: {len(records):,} ({len(turnout_by_country):,} countries)")
        logger.info(f"  ✓ Turnout matched: {diagnostics.turnout_matched}/{diagnostics.total}")
        logger.info(f"  ✓ Party matched: {diagnostics.party_matched}/{diagnostics.total}")
        for item in joined:
            if item.canonical_name not in turnout_by_country:
                logger.trace(f"    No turnout for {item.canonical_name}")

        return dataset
