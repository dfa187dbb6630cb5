"""
Visual encodings shared by the map and the chart.

Colour encodes the party system, opacity (and optionally outline weight)
encodes turnout. Every turnout encoding accepts None/NaN and falls back to a
fixed low value so countries without data stay visible but faint.
"""

import math
from typing import Optional, Union

from ..processing.names import normalize_name

PARTY_COLORS = {
    "multi-party": "#2ca02c",
    "two-party": "#1f77b4",
    "dominant-party": "#ff7f0e",
    "one-party": "#d62728",
    "non-partisan": "#9467bd",
}
UNKNOWN_COLOR = "#cccccc"

PARTY_LABELS = {
    "multi-party": "Multi-party",
    "two-party": "Two-party",
    "dominant-party": "Dominant-party",
    "one-party": "One-party",
    "non-partisan": "Non-partisan",
}

# Chart order; anything else sorts last
PARTY_ORDER = ["two-party", "multi-party", "dominant-party", "one-party", "non-partisan", "unknown"]

MISSING_OPACITY = 0.15
MIN_FILL_OPACITY = 0.15
MAX_FILL_OPACITY = 0.80


def _missing(turnout_pct: Optional[float]) -> bool:
    return turnout_pct is None or math.isnan(turnout_pct)


def party_key(party_type: Optional[str]) -> str:
    return normalize_name(party_type).lower()


def party_color(party_type: Optional[str]) -> str:
    return PARTY_COLORS.get(party_key(party_type), UNKNOWN_COLOR)


def party_order(party_type: Optional[str]) -> int:
    key = (party_type or "").lower()
    return PARTY_ORDER.index(key) if key in PARTY_ORDER else 999


def turnout_to_fill_opacity(turnout_pct: Optional[float]) -> float:
    """Continuous encoding: clamp to [0, 100] and scale into [0.15, 0.80]."""
    if _missing(turnout_pct):
        return MISSING_OPACITY
    t = max(0.0, min(100.0, turnout_pct))
    return MIN_FILL_OPACITY + (t / 100) * (MAX_FILL_OPACITY - MIN_FILL_OPACITY)


def turnout_to_opacity(turnout_pct: Optional[float]) -> float:
    """Binned encoding: four opacity steps at 40 / 60 / 80 percent."""
    if _missing(turnout_pct):
        return MISSING_OPACITY
    if turnout_pct < 40:
        return 0.25
    if turnout_pct < 60:
        return 0.35
    if turnout_pct < 80:
        return 0.45
    return 0.6


def turnout_to_stripe_weight(turnout_pct: Optional[float]) -> int:
    if _missing(turnout_pct) or turnout_pct < 40:
        return 1
    if turnout_pct < 60:
        return 2
    if turnout_pct < 80:
        return 3
    return 4


def format_turnout_label(turnout_pct: Optional[float]) -> str:
    return "N/A" if _missing(turnout_pct) else f"{turnout_pct:.1f}%"


def format_year_label(year: Optional[Union[int, float]]) -> str:
    return "N/A" if _missing(year) else str(year)
