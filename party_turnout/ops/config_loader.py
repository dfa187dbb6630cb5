"""
Configuration Loader for the Party System / Turnout Maps Pipeline

This module provides a centralized way to load and access configuration
settings from a config.yaml file.

Usage:
    from party_turnout.ops import Config

    config = Config()
    turnout_source = config.get_input_source('turnout_csv')
    html_dir = config.get_output_dir('html')
"""

import copy
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml  # type: ignore[import-untyped]
from loguru import logger

from ..processing.field_resolver import COUNTRY_FIELDS, FEATURE_NAME_KEYS, TURNOUT_FIELDS, YEAR_FIELDS

CONFIG_ENV_VAR = "PARTY_TURNOUT_CONFIG"
PACKAGED_CONFIG = Path(__file__).parent / "config.yaml"


class Config:
    """Configuration manager for the party system / turnout pipeline."""

    # Default values that can be overridden in config
    DEFAULTS: Dict[str, Any] = {
        "input_files": {
            "party_system_json": "data/party_system.json",
            "turnout_csv": "data/voter-turnout-by-country-2026.csv",
            "countries_geojson": "data/countries.geojson",
        },
        "directories": {"html": "html", "charts": "charts", "geospatial": "data/geospatial"},
        "fields": {
            "country": COUNTRY_FIELDS,
            "turnout": TURNOUT_FIELDS,
            "year": YEAR_FIELDS,
            "feature_name": FEATURE_NAME_KEYS,
        },
        "aliases": {},
        "visualization": {
            "map_center": [20, 0],
            "map_zoom": 2,
            "min_zoom": 1,
            "max_zoom": 6,
            "turnout_encoding": "continuous",
            "chart_dpi": 150,
            "chart_width": 10,
            "chart_height": 6,
        },
        "system": {"request_timeout": 60},
        "outputs": {
            "map_html": "party_system_turnout_map.html",
            "chart_png": "turnout_by_party_system.png",
            "chart_csv": "turnout_by_party_system.csv",
            "joined_geojson": "countries_party_turnout.geojson",
        },
    }

    def __init__(
        self,
        config_file: Optional[Union[str, Path]] = None,
        project_root_override: Optional[Union[str, Path]] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize configuration manager.

        Args:
            config_file: Path to config file. If None, looks for:
                        1. Environment variable PARTY_TURNOUT_CONFIG
                        2. config.yaml in current directory
                        3. the config.yaml shipped with the package
            project_root_override: Base directory for relative paths (defaults
                        to the config file's directory)
            overrides: Nested dict merged over the loaded values
        """
        if config_file is None:
            env_config = os.environ.get(CONFIG_ENV_VAR)
            if env_config and Path(env_config).exists():
                config_file = env_config
                logger.debug(f"Using config from environment: {config_file}")
            elif Path("config.yaml").exists():
                config_file = "config.yaml"
            else:
                config_file = PACKAGED_CONFIG
                logger.debug("Using packaged default config.yaml")

        self.config_path = Path(config_file).resolve()
        if not self.config_path.exists():
            raise FileNotFoundError(f"Config file not found: {self.config_path}")

        if project_root_override:
            self.project_root = Path(project_root_override).resolve()
            logger.debug(f"Using project root override: {self.project_root}")
        elif self.config_path == PACKAGED_CONFIG.resolve():
            self.project_root = Path.cwd()
        else:
            self.project_root = self.config_path.parent

        logger.debug(f"Loading config from: {self.config_path}")
        logger.debug(f"Project root: {self.project_root}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            self.data: Dict[str, Any] = yaml.safe_load(f) or {}

        if overrides:
            self._apply_nested_override(self.data, overrides)

    def _apply_nested_override(self, base_dict: Dict, override_dict: Dict) -> None:
        for key, value in override_dict.items():
            if isinstance(value, dict) and isinstance(base_dict.get(key), dict):
                self._apply_nested_override(base_dict[key], value)
            else:
                base_dict[key] = value

    @staticmethod
    def overrides_from_pairs(pairs: List[tuple]) -> Dict[str, Any]:
        """Turn ``[("a.b", 1)]`` into ``{"a": {"b": 1}}``."""
        overrides: Dict[str, Any] = {}
        for key, value in pairs:
            keys = key.split(".")
            current = overrides
            for k in keys[:-1]:
                current = current.setdefault(k, {})
            current[keys[-1]] = value
        return overrides

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation, falling back to DEFAULTS.

        Args:
            key_path: Dot-separated path to the configuration value
            default: Value returned if the key is in neither place

        Returns:
            Configuration value
        """
        for source in (self.data, self.DEFAULTS):
            value: Any = source
            for key in key_path.split("."):
                if isinstance(value, dict) and key in value:
                    value = value[key]
                else:
                    value = None
                    break
            if value is not None:
                return copy.deepcopy(value)
        return default

    def get_input_source(self, filename_key: str) -> str:
        """
        Location of an input: an http(s) URL as-is, or an absolute path
        resolved against the project root.
        """
        source = self.get(f"input_files.{filename_key}")
        if not source:
            raise ValueError(f"Input filename key '{filename_key}' not found in config: input_files")

        source = str(source)
        if source.lower().startswith(("http://", "https://")):
            return source
        return str(self.project_root / source)

    def get_output_dir(self, dir_key: str) -> Path:
        """Output directory ('html', 'charts', 'geospatial'), created on demand."""
        relative = self.get(f"directories.{dir_key}")
        if relative is None:
            raise ValueError(f"Unknown directory key: {dir_key}")
        directory = self.project_root / relative
        directory.mkdir(parents=True, exist_ok=True)
        return directory

    def get_output_path(self, output_key: str, dir_key: str) -> Path:
        filename = self.get(f"outputs.{output_key}")
        if not filename:
            raise ValueError(f"Unknown output file key: {output_key}")
        return self.get_output_dir(dir_key) / filename

    def get_map_path(self) -> Path:
        return self.get_output_path("map_html", "html")

    def get_chart_path(self) -> Path:
        return self.get_output_path("chart_png", "charts")

    def get_chart_csv_path(self) -> Path:
        return self.get_output_path("chart_csv", "charts")

    def get_joined_geojson_path(self) -> Path:
        return self.get_output_path("joined_geojson", "geospatial")

    def get_field_candidates(self, field_key: str) -> List[str]:
        candidates = self.get(f"fields.{field_key}")
        if not candidates:
            raise ValueError(f"No field candidates configured for: {field_key}")
        if isinstance(candidates, str):
            return [candidates]
        return [str(c) for c in candidates]

    def get_aliases(self) -> Dict[str, str]:
        """Extra country aliases layered over the built-in table."""
        aliases = self.get("aliases", {}) or {}
        if not isinstance(aliases, dict):
            raise ValueError("'aliases' must be a mapping of source spelling -> canonical name")
        return {str(k): str(v) for k, v in aliases.items()}

    def get_visualization_setting(self, setting_key: str) -> Any:
        return self.get(f"visualization.{setting_key}")

    def get_system_setting(self, setting_key: str) -> Any:
        return self.get(f"system.{setting_key}")

    def print_config_summary(self) -> None:
        """Log a summary of the current configuration."""
        logger.debug("📋 Configuration Summary")
        logger.debug("=" * 50)
        logger.debug(f"Project: {self.get('project_name', 'Unknown')}")
        logger.debug(f"Config file: {self.config_path}")
        logger.debug(f"Project root: {self.project_root}")

        logger.debug("📊 Input Sources:")
        for key in self.get("input_files", {}):
            source = self.get_input_source(key)
            if source.lower().startswith(("http://", "https://")):
                status = "🌐"
            else:
                status = "✅" if Path(source).exists() else "❌"
            logger.debug(f"  {status} {key}: {source}")

        aliases = self.get_aliases()
        if aliases:
            logger.debug(f"🔤 Extra country aliases: {len(aliases)}")
