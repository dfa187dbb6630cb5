#!/usr/bin/env python3
"""
data_utils.py - Source Loading Utilities

Reads the three inputs of the pipeline from local files or http(s) URLs:

- party system classification (JSON object: country -> classification)
- voter turnout export (comma- or tab-delimited text)
- country boundaries (GeoJSON FeatureCollection)

Any failure to fetch or decode a source is fatal and raised as
DataLoadError carrying the source identifier. Row-level problems inside a
successfully loaded source are not errors here; the joiner deals with them.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests
from loguru import logger

from .tabular import ParsedTable, parse_delimited

Source = Union[str, Path]


class DataLoadError(RuntimeError):
    """A source could not be fetched, read or decoded."""

    def __init__(self, source: Source, reason: str = ""):
        self.source = str(source)
        self.reason = reason
        message = f"Failed to load {self.source}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


@dataclass
class LoadedSources:
    """Raw inputs, each parsed independently before the join."""

    classification: Dict[str, Any]
    turnout: ParsedTable
    features: List[Dict[str, Any]]


def is_url(source: Source) -> bool:
    return isinstance(source, str) and source.lower().startswith(("http://", "https://"))


def load_text(source: Source, timeout: Optional[float] = 60) -> str:
    """Read a text source from disk or over HTTP.

    Args:
        source: Local path or http(s) URL
        timeout: Request timeout in seconds for URLs (None waits forever)

    Returns:
        Decoded text with any UTF-8 byte order mark removed

    Raises:
        DataLoadError: On IO errors or non-success HTTP responses
    """
    if is_url(source):
        logger.debug(f"  🌐 Fetching {source}")
        try:
            response = requests.get(str(source), timeout=timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise DataLoadError(source, str(e)) from e
        return response.content.decode("utf-8-sig", errors="replace")

    path = Path(source)
    logger.debug(f"  📂 Reading {path}")
    try:
        return path.read_text(encoding="utf-8-sig", errors="replace")
    except OSError as e:
        raise DataLoadError(source, e.strerror or str(e)) from e


def load_json(source: Source, timeout: Optional[float] = 60) -> Any:
    text = load_text(source, timeout=timeout)
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DataLoadError(source, f"invalid JSON ({e})") from e


def load_classification(source: Source, timeout: Optional[float] = 60) -> Dict[str, Any]:
    """Load the party system classification mapping."""
    data = load_json(source, timeout=timeout)
    if not isinstance(data, dict):
        raise DataLoadError(source, f"expected a JSON object, got {type(data).__name__}")
    logger.info(f"  🏛️ Loaded {len(data):,} party system classifications")
    return data


def load_turnout_table(source: Source, timeout: Optional[float] = 60) -> ParsedTable:
    """Load and parse the turnout export."""
    table = parse_delimited(load_text(source, timeout=timeout))

    logger.debug(f"  Turnout delimiter: {table.delimiter!r}")
    logger.debug(f"  Turnout headers: {table.headers}")
    logger.debug(f"  First row keys: {list(table.rows[0].keys()) if table.rows else []}")
    logger.info(f"  🗳️ Loaded {len(table.rows):,} turnout rows")
    return table


def load_boundaries(source: Source, timeout: Optional[float] = 60) -> List[Dict[str, Any]]:
    """Load the country boundary features from a GeoJSON FeatureCollection."""
    data = load_json(source, timeout=timeout)
    features = data.get("features") if isinstance(data, dict) else None
    if not isinstance(features, list):
        raise DataLoadError(source, "expected a GeoJSON FeatureCollection with a 'features' list")

    dropped = sum(1 for feature in features if not isinstance(feature, dict))
    if dropped:
        logger.warning(f"  ⚠️ Skipping {dropped} boundary features that are not JSON objects")
        features = [feature for feature in features if isinstance(feature, dict)]
    logger.info(f"  🗺️ Loaded {len(features):,} boundary features")
    return features


def load_sources(
    classification_source: Source,
    turnout_source: Source,
    boundaries_source: Source,
    timeout: Optional[float] = 60,
) -> LoadedSources:
    """Load all three inputs in a fixed order: classification, turnout, boundaries.

    The first failure aborts the whole load.
    """
    logger.info("📥 Loading input sources...")
    classification = load_classification(classification_source, timeout=timeout)
    turnout = load_turnout_table(turnout_source, timeout=timeout)
    features = load_boundaries(boundaries_source, timeout=timeout)
    return LoadedSources(classification=classification, turnout=turnout, features=features)
