#!/usr/bin/env python3
"""
Party System & Turnout Choropleth

Renders the joined country dataset as an interactive Folium map:

- fill colour: party system classification
- fill opacity: parliamentary voter turnout (registered voters)
- popup: country, party system, turnout and reporting year
- legend, match-rate badges and a reset-view button

Also exports the joined features as GeoJSON for reuse in other web maps.
"""

from pathlib import Path
from typing import Any, Dict, List, Union

import folium
import geopandas as gpd
import pandas as pd
from loguru import logger

from ..ops import Config
from ..processing.join import JoinedDataset, MatchDiagnostics
from .styling import (
    PARTY_LABELS,
    format_turnout_label,
    format_year_label,
    party_color,
    turnout_to_fill_opacity,
    turnout_to_opacity,
    turnout_to_stripe_weight,
)

WORLD_BOUNDS = {"min_lat": -85, "max_lat": 85, "min_lon": -180, "max_lon": 180}


def build_map_features(dataset: JoinedDataset) -> List[Dict[str, Any]]:
    """Copies of the boundary features carrying the joined properties."""
    features = []
    for item in dataset.features:
        properties = dict(item.feature.get("properties") or {})
        properties.update(
            {
                "country": item.canonical_name,
                "party_system": item.party_system,
                "turnout_pct": item.percentage,
                "turnout_year": item.year,
                "turnout_label": format_turnout_label(item.percentage),
                "year_label": format_year_label(item.year),
            }
        )
        features.append(
            {"type": "Feature", "geometry": item.feature.get("geometry"), "properties": properties}
        )
    return features


def make_style_function(encoding: str = "continuous"):
    """Style callback for folium.GeoJson.

    Args:
        encoding: "continuous" (opacity scaled with turnout) or "binned"
            (stepped opacity plus outline weight)
    """
    if encoding not in ("continuous", "binned"):
        raise ValueError(f"Unknown turnout encoding: {encoding}")

    def style_feature(feature: Dict[str, Any]) -> Dict[str, Any]:
        properties = feature["properties"]
        turnout_pct = properties.get("turnout_pct")
        if encoding == "binned":
            opacity = turnout_to_opacity(turnout_pct)
            weight = turnout_to_stripe_weight(turnout_pct)
        else:
            opacity = turnout_to_fill_opacity(turnout_pct)
            weight = 1.0
        return {
            "color": "#222",
            "weight": weight,
            "fillOpacity": opacity,
            "fillColor": party_color(properties.get("party_system")),
        }

    return style_feature


def legend_html() -> str:
    rows = "\n".join(
        f'<div class="legend-row"><span class="swatch" style="background:{party_color(key)}"></span> {label}</div>'
        for key, label in PARTY_LABELS.items()
    )
    return f"""
    <div class="legend" style="position: fixed; bottom: 30px; right: 10px; z-index: 1000;
         background: white; padding: 8px 10px; border-radius: 6px; font: 12px Arial, sans-serif;
         box-shadow: 0 1px 4px rgba(0,0,0,0.3);">
      <div class="legend-title" style="font-weight: bold; margin-bottom: 4px;">Party system (color)</div>
      {rows}
      <div class="small" style="margin-top: 4px; color: #555;">Fill opacity approximates turnout (registered voters, parliamentary).</div>
    </div>
    <style>.legend .swatch {{ display: inline-block; width: 12px; height: 12px; margin-right: 6px; }}</style>
    """


def badges_html(diagnostics: MatchDiagnostics, map_name: str, center: List[float], zoom: int) -> str:
    return f"""
    <div style="position: fixed; top: 10px; left: 10px; z-index: 1000; font: 12px Arial, sans-serif;">
      <span id="badge-turnout" style="background: white; padding: 4px 8px; border-radius: 4px; margin-right: 4px;">Turnout matched: {diagnostics.turnout_matched}/{diagnostics.total}</span>
      <span id="badge-party" style="background: white; padding: 4px 8px; border-radius: 4px; margin-right: 4px;">Party matched: {diagnostics.party_matched}/{diagnostics.total}</span>
      <button id="btn-refit" onclick="{map_name}.setView([{center[0]}, {center[1]}], {zoom});">Reset view</button>
    </div>
    """


def create_party_turnout_map(dataset: JoinedDataset, config: Config) -> folium.Map:
    """
    Build the Folium choropleth for a joined dataset.

    Args:
        dataset: Joined countries
        config: Configuration instance (visualization.* settings)

    Returns:
        folium.Map ready to save
    """
    logger.info("🗺️ Creating party system / turnout map...")

    center = list(config.get_visualization_setting("map_center"))
    zoom = int(config.get_visualization_setting("map_zoom"))
    encoding = config.get_visualization_setting("turnout_encoding")

    m = folium.Map(
        location=center,
        zoom_start=zoom,
        tiles=None,
        min_zoom=config.get_visualization_setting("min_zoom"),
        max_zoom=config.get_visualization_setting("max_zoom"),
        max_bounds=True,
        world_copy_jump=False,
        **WORLD_BOUNDS,
    )
    folium.TileLayer(
        "OpenStreetMap",
        max_zoom=config.get_visualization_setting("max_zoom"),
        no_wrap=True,
        attr="&copy; OpenStreetMap contributors",
        control=False,
    ).add_to(m)

    features = build_map_features(dataset)
    folium.GeoJson(
        data={"type": "FeatureCollection", "features": features},
        name="Party system & turnout",
        style_function=make_style_function(encoding),
        popup=folium.GeoJsonPopup(
            fields=["country", "party_system", "turnout_label", "year_label"],
            aliases=["Country:", "Party system:", "Turnout:", "Year:"],
            labels=True,
        ),
    ).add_to(m)

    diagnostics = dataset.match_diagnostics()
    m.get_root().html.add_child(folium.Element(legend_html()))
    m.get_root().html.add_child(folium.Element(badges_html(diagnostics, m.get_name(), center, zoom)))

    logger.debug(f"  ✓ Styled {len(features):,} countries (encoding={encoding})")
    return m


def save_party_turnout_map(dataset: JoinedDataset, config: Config, output_path: Union[str, Path]) -> Path:
    output_path = Path(output_path)
    m = create_party_turnout_map(dataset, config)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    m.save(str(output_path))
    logger.success(f"  ✅ Interactive map saved: {output_path}")
    return output_path


def export_joined_geojson(dataset: JoinedDataset, output_path: Union[str, Path]) -> Path:
    """
    Write the joined countries as GeoJSON (WGS84).

    Only the join results are kept as properties: country, party_system,
    turnout_pct and turnout_year.
    """
    output_path = Path(output_path)
    logger.info("💾 Exporting joined GeoJSON...")

    records = [
        {
            "type": "Feature",
            "geometry": item.feature.get("geometry"),
            "properties": {
                "country": item.canonical_name,
                "party_system": item.party_system,
                "turnout_pct": item.percentage,
                "turnout_year": item.year,
            },
        }
        for item in dataset.features
    ]
    gdf = gpd.GeoDataFrame.from_features(records, crs="EPSG:4326")
    # Object dtype keeps integral years as ints next to missing ones
    gdf["turnout_year"] = pd.Series([item.year for item in dataset.features], index=gdf.index, dtype=object)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(gdf.to_json(na="null"), encoding="utf-8")
    logger.success(f"  ✅ Joined GeoJSON saved: {output_path} ({len(gdf):,} features)")
    return output_path
