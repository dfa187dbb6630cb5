"""Shared fixtures: small on-disk versions of the three input sources."""

from __future__ import annotations

import json
import os
from pathlib import Path

import pytest

os.environ.setdefault("MPLBACKEND", "Agg")


def square(x0: float, y0: float, size: float = 1.0) -> dict:
    return {
        "type": "Polygon",
        "coordinates": [[[x0, y0], [x0 + size, y0], [x0 + size, y0 + size], [x0, y0 + size], [x0, y0]]],
    }


def make_features() -> list[dict]:
    return [
        {"type": "Feature", "properties": {"ADMIN": "France"}, "geometry": square(2, 46)},
        {"type": "Feature", "properties": {"NAME": "Russian Federation"}, "geometry": square(40, 55)},
        {"type": "Feature", "properties": {"name": "United States of America"}, "geometry": square(-100, 40)},
        {"type": "Feature", "properties": {"SOVEREIGNT": "Atlantis"}, "geometry": square(-30, 0)},
        {"type": "Feature", "properties": {}, "geometry": square(0, -80)},
    ]


CLASSIFICATION = {
    "FRANCE": "multi-party",
    "Russia": "dominant-party",
    "UNITED STATES": "two-party",
    "China": "one-party",
}

TURNOUT_CSV = (
    "country,VoterTurnout_ParliamentaryVotingTurnoutPct,VoterTurnout_ParliamentaryTurnoutDataYear\n"
    "France,67.8,2024\n"
    '"Russian Federation","51.7","2021"\n'
    "\n"
    "United States of America,n/a,2022\n"
    "China,,\n"
    ",55.0,2020\n"
)


@pytest.fixture
def features() -> list[dict]:
    return make_features()


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    data = tmp_path / "data"
    data.mkdir()
    (data / "party_system.json").write_text(json.dumps(CLASSIFICATION), encoding="utf-8")
    (data / "turnout.csv").write_text(TURNOUT_CSV, encoding="utf-8")
    (data / "countries.geojson").write_text(
        json.dumps({"type": "FeatureCollection", "features": make_features()}), encoding="utf-8"
    )

    (tmp_path / "config.yaml").write_text(
        "project_name: Test Project\n"
        "input_files:\n"
        "  party_system_json: data/party_system.json\n"
        "  turnout_csv: data/turnout.csv\n"
        "  countries_geojson: data/countries.geojson\n"
        "directories:\n"
        "  html: out/html\n"
        "  charts: out/charts\n"
        "  geospatial: out/geo\n",
        encoding="utf-8",
    )
    return tmp_path
