#!/usr/bin/env python3
"""
Average Voter Turnout by Party System

Groups turnout records by the party system of their country and plots the
average turnout per group as a bar chart. Groups follow a fixed order
(two-party, multi-party, dominant-party, one-party, non-partisan, unknown).
"""

from pathlib import Path
from typing import Union

import matplotlib.pyplot as plt
import pandas as pd
from loguru import logger

from ..ops import Config
from ..processing.join import JoinedDataset
from .styling import party_order

STAT_COLUMNS = ["type", "n", "avg", "min", "max"]

BAR_COLOR = "#e1d2ff"
BAR_EDGE_COLOR = "#c4a9ff"
TEXT_COLOR = "#111"


def aggregate_turnout_by_party(dataset: JoinedDataset) -> pd.DataFrame:
    """
    Turnout statistics per party system.

    Every turnout record with a numeric percentage counts once, so a country
    listed twice in the turnout file contributes twice.

    Args:
        dataset: Joined countries

    Returns:
        DataFrame with columns type, n, avg, min, max in party system order
    """
    rows = [
        {
            "type": dataset.lookup_classification(record.country, record.raw_name).lower(),
            "pct": record.percentage,
        }
        for record in dataset.turnout_records
        if record.percentage is not None
    ]
    logger.info(f"  📊 Turnout records with a percentage: {len(rows):,}")

    if not rows:
        return pd.DataFrame(columns=STAT_COLUMNS)

    stats = (
        pd.DataFrame(rows)
        .groupby("type")["pct"]
        .agg(n="count", avg="mean", min="min", max="max")
        .reset_index()
    )
    stats = stats.sort_values("type", key=lambda s: s.map(party_order), kind="stable")
    return stats[STAT_COLUMNS].reset_index(drop=True)


def plot_turnout_by_party(stats: pd.DataFrame, output_path: Union[str, Path], config: Config) -> Path:
    """
    Save a bar chart of average turnout per party system.

    Args:
        stats: Output of aggregate_turnout_by_party
        output_path: PNG destination
        config: Configuration instance (visualization.chart_* settings)

    Returns:
        The written path
    """
    output_path = Path(output_path)
    labels = stats["type"].tolist()
    averages = [round(float(v), 2) for v in stats["avg"]]

    fig, ax = plt.subplots(
        figsize=(
            config.get_visualization_setting("chart_width"),
            config.get_visualization_setting("chart_height"),
        )
    )
    ax.bar(
        labels,
        averages,
        color=BAR_COLOR,
        edgecolor=BAR_EDGE_COLOR,
        linewidth=2,
        label="Average voter turnout (%)",
    )

    for tick in ax.get_xticklabels() + ax.get_yticklabels():
        tick.set_fontsize(13)
        tick.set_fontweight("bold")
        tick.set_color(TEXT_COLOR)

    ax.set_xlabel("Party system type", fontsize=14, fontweight="bold", color=TEXT_COLOR)
    ax.set_ylabel("Average voter turnout (%)", fontsize=14, fontweight="bold", color=TEXT_COLOR)
    ax.legend(prop={"size": 14, "weight": "bold"})
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(
        output_path,
        bbox_inches="tight",
        dpi=config.get_visualization_setting("chart_dpi"),
        facecolor="white",
    )
    plt.close(fig)
    logger.success(f"  ✅ Chart saved: {output_path}")
    return output_path


def save_turnout_stats(stats: pd.DataFrame, output_path: Union[str, Path]) -> Path:
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    stats.to_csv(output_path, index=False, float_format="%.2f")
    logger.info(f"  💾 Chart statistics saved: {output_path}")
    return output_path
