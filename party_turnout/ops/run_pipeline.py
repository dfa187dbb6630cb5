#!/usr/bin/env python3
"""
Party System & Turnout Pipeline with Click CLI

Loads the three sources (party system classification, turnout export,
country boundaries), joins them on canonical country names and renders the
choropleth map and the turnout-by-party-system chart.

Usage:
    party-turnout                                   # Full pipeline (map + chart + GeoJSON)
    party-turnout run --skip-chart                  # Map only
    party-turnout map                               # Map only, shortcut
    party-turnout chart                             # Chart only
    party-turnout diagnostics                       # Print match rates, render nothing
    party-turnout --config my_config.yaml run
    party-turnout --set input_files.turnout_csv=data/turnout.tsv
    party-turnout --set "aliases.REPUBLIC OF KOREA=SOUTH KOREA"
    party-turnout -v                                # DEBUG logging
"""

import sys
import time
from typing import Any, Dict, Tuple

import click
from loguru import logger

from ..analysis.chart_turnout_by_party import (
    aggregate_turnout_by_party,
    plot_turnout_by_party,
    save_turnout_stats,
)
from ..analysis.map_party_turnout import export_joined_geojson, save_party_turnout_map
from ..processing.data_utils import DataLoadError, load_sources
from ..processing.join import DatasetJoiner, JoinedDataset
from ..processing.names import NameNormalizer
from .config_loader import Config

INPUT_KEYS = ("party_system_json", "turnout_csv", "countries_geojson")


class ConfigOverride(click.ParamType):
    """KEY=VALUE pairs with dot-notation keys."""

    name = "config_override"

    def convert(self, value, param, ctx) -> Tuple[str, Any]:
        if isinstance(value, tuple):
            return value
        if "=" not in value:
            self.fail(f"Invalid format: {value}. Use KEY=VALUE", param, ctx)

        key, val = value.split("=", 1)

        # Auto-parse value type
        if val.lower() in ("true", "false"):
            parsed_val: Any = val.lower() == "true"
        elif val.isdigit():
            parsed_val = int(val)
        elif "." in val and val.replace(".", "", 1).isdigit():
            parsed_val = float(val)
        else:
            parsed_val = val

        return key, parsed_val


def setup_logging(verbose: bool = False, enable_trace: bool = False) -> None:
    """
    Configure loguru logging with appropriate levels.

    Args:
        verbose: If True, set log level to DEBUG
        enable_trace: If True, enable TRACE level logging for deep debugging
    """
    logger.remove()

    if enable_trace:
        log_level = "TRACE"
    elif verbose:
        log_level = "DEBUG"
    else:
        log_level = "INFO"

    if enable_trace or verbose:
        log_format = "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | <level>{message}</level>"
    else:
        log_format = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <level>{message}</level>"

    logger.add(
        sys.stderr,
        format=log_format,
        level=log_level,
        colorize=True,
        backtrace=enable_trace,
        diagnose=enable_trace,
    )

    if verbose:
        logger.debug("🔧 Verbose logging enabled (DEBUG level)")
    if enable_trace:
        logger.trace("🔍 Trace logging enabled - maximum detail mode")


def build_joiner(config: Config) -> DatasetJoiner:
    return DatasetJoiner(
        normalizer=NameNormalizer.with_overrides(config.get_aliases()),
        country_fields=config.get_field_candidates("country"),
        turnout_fields=config.get_field_candidates("turnout"),
        year_fields=config.get_field_candidates("year"),
        feature_name_keys=config.get_field_candidates("feature_name"),
    )


def load_and_join(config: Config) -> JoinedDataset:
    """
    Load all sources and join them.

    Raises:
        DataLoadError: If any source cannot be loaded; nothing is rendered then
    """
    sources = load_sources(
        config.get_input_source("party_system_json"),
        config.get_input_source("turnout_csv"),
        config.get_input_source("countries_geojson"),
        timeout=config.get_system_setting("request_timeout"),
    )
    return build_joiner(config).join(sources.features, sources.turnout.rows, sources.classification)


def render_outputs(
    dataset: JoinedDataset, config: Config, make_map: bool = True, make_chart: bool = True
) -> Dict[str, str]:
    outputs: Dict[str, str] = {}

    if make_map:
        outputs["map"] = str(save_party_turnout_map(dataset, config, config.get_map_path()))
        outputs["geojson"] = str(export_joined_geojson(dataset, config.get_joined_geojson_path()))

    if make_chart:
        logger.info("📊 Creating turnout by party system chart...")
        stats = aggregate_turnout_by_party(dataset)
        outputs["chart"] = str(plot_turnout_by_party(stats, config.get_chart_path(), config))
        outputs["chart_csv"] = str(save_turnout_stats(stats, config.get_chart_csv_path()))

    return outputs


def _load_or_exit(config: Config) -> JoinedDataset:
    try:
        return load_and_join(config)
    except DataLoadError as e:
        logger.critical(f"❌ {e}")
        logger.debug(f"   Failing resource: {e.source}")
        raise click.ClickException(str(e)) from e


@click.group(invoke_without_command=True)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to config.yaml (default: $PARTY_TURNOUT_CONFIG, ./config.yaml, packaged default)",
)
@click.option(
    "--set",
    "config_overrides",
    multiple=True,
    type=ConfigOverride(),
    help="Set config values using dot notation (e.g., visualization.turnout_encoding=binned)",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable DEBUG level logging")
@click.option("--trace", is_flag=True, help="Enable TRACE level logging for deep debugging")
@click.option("--log-file", type=str, help="Also log to specified file")
@click.pass_context
def cli(ctx, config_file, config_overrides, verbose, trace, log_file):
    """
    Party System & Voter Turnout Maps

    \b
    Examples:
      party-turnout                                  # Map, chart and GeoJSON
      party-turnout diagnostics                      # Match rates only
      party-turnout --set visualization.turnout_encoding=binned map
    """
    setup_logging(verbose=verbose, enable_trace=trace)

    if log_file:
        logger.add(
            log_file,
            level="TRACE" if trace else ("DEBUG" if verbose else "INFO"),
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} | {message}",
            rotation="10 MB",
            retention="7 days",
        )
        logger.info(f"📄 Also logging to file: {log_file}")

    try:
        config = Config(
            config_file,
            overrides=Config.overrides_from_pairs(list(config_overrides)),
        )
        # Fail fast on a bad alias table or input key before any source is fetched
        NameNormalizer.with_overrides(config.get_aliases())
        for key in INPUT_KEYS:
            config.get_input_source(key)
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"❌ Configuration error: {e}")
        raise click.ClickException(f"Configuration error: {e}") from e

    logger.info(f"📋 Project: {config.get('project_name')}")
    config.print_config_summary()

    ctx.obj = config
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@cli.command()
@click.option("--dry-run", is_flag=True, help="Show what would be run without executing")
@click.option("--skip-map", is_flag=True, help="Skip map and GeoJSON generation")
@click.option("--skip-chart", is_flag=True, help="Skip chart generation")
@click.pass_context
def run(ctx, dry_run=False, skip_map=False, skip_chart=False):
    """Run the full pipeline: load, join, render."""
    config: Config = ctx.obj

    if dry_run:
        logger.info("🔍 DRY RUN - nothing will be loaded or written")
        for key in INPUT_KEYS:
            logger.info(f"   📥 {key}: {config.get_input_source(key)}")
        if not skip_map:
            logger.info(f"   🗺️ Map: {config.get_map_path()}")
            logger.info(f"   🌐 GeoJSON: {config.get_joined_geojson_path()}")
        if not skip_chart:
            logger.info(f"   📊 Chart: {config.get_chart_path()}")
        return

    start = time.time()
    dataset = _load_or_exit(config)
    outputs = render_outputs(dataset, config, make_map=not skip_map, make_chart=not skip_chart)

    logger.info("=" * 60)
    logger.success("🎉 PIPELINE COMPLETE")
    for name, path in outputs.items():
        logger.info(f"   {name}: {path}")
    logger.info(f"⏱️ Total time: {time.time() - start:.1f}s")


@cli.command("map")
@click.pass_context
def map_command(ctx):
    """Only generate the choropleth map and joined GeoJSON."""
    dataset = _load_or_exit(ctx.obj)
    render_outputs(dataset, ctx.obj, make_map=True, make_chart=False)


@cli.command("chart")
@click.pass_context
def chart_command(ctx):
    """Only generate the turnout by party system chart."""
    dataset = _load_or_exit(ctx.obj)
    render_outputs(dataset, ctx.obj, make_map=False, make_chart=True)


@cli.command()
@click.pass_context
def diagnostics(ctx):
    """Print how many countries matched turnout and party system data."""
    dataset = _load_or_exit(ctx.obj)
    result = dataset.match_diagnostics()
    click.echo(f"Turnout matched: {result.turnout_matched}/{result.total}")
    click.echo(f"Party matched: {result.party_matched}/{result.total}")

    unmatched = sorted(
        {f.canonical_name for f in dataset.features if f.canonical_name not in dataset.turnout_by_country}
    )
    if unmatched:
        logger.debug(f"Countries without turnout: {unmatched}")


if __name__ == "__main__":
    cli()
