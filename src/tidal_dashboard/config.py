"""
Project paths and dashboard settings.

Settings live in config/dashboard_settings.yaml and are deep-merged over the
built-in defaults below, so a partial settings file only needs the keys it
changes.
"""

from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import yaml

logger = logging.getLogger(__name__)

# Project structure configuration
PROJECT_ROOT = Path(__file__).parent.parent.parent
CONFIG_DIR = PROJECT_ROOT / "config"
SETTINGS_FILE = CONFIG_DIR / "dashboard_settings.yaml"

# Main directories
DATA_DIR = PROJECT_ROOT / "data"
OUTPUT_DIR = PROJECT_ROOT / "output"
LOG_DIR = OUTPUT_DIR / "logs"
SNAPSHOT_DIR = OUTPUT_DIR / "snapshots"

DEFAULT_SETTINGS: Dict[str, Any] = {
    'site': {
        'name': 'Bivalve, NJ',
        'usgs_site': '01412150',
        'noaa_station': '8536110',
        'nwps_gauge': 'bvvn4',
        'alert_point': {'lat': 39.0, 'lon': -74.9},
    },
    'thresholds': {
        'minor': 4.19,
        'moderate': 5.19,
        'major': 6.19,
    },
    'datum': {
        'source': 'NAVD',
        'target': 'NAVD88',
        'offset_ft': 0.0,
    },
    'api': {
        'user_agent': 'tidal-dashboard/0.1 (flood-stage dashboard)',
        'usgs_iv_url': 'https://waterservices.usgs.gov/nwis/iv/',
        'coops_datagetter_url': 'https://api.tidesandcurrents.noaa.gov/api/prod/datagetter',
        'coops_application': 'tidal_dashboard',
        'nws_alerts_url': 'https://api.weather.gov/alerts/active',
        'nwps_base_url': 'https://api.water.noaa.gov/nwps/v1',
    },
    'observations': {
        'recent_period': 'P3D',
        'monthly_period': 'P31D',
        'prediction_hours': 72,
        'near_match_tolerance_ft': 0.2,
    },
    'daily_stats': {
        'sentinel': 'agency_cd',
        'date_column': 'datetime',
        'high_column': '239251_72279_00021',
        'low_high_column': '239252_72279_00022',
        'event_hour': 12,
    },
    'data': {
        'directory': 'data',
        'annual_counts': 'annual_counts.json',
        'top_ten': 'top_ten.json',
        'events': 'events.json',
        'daily_stats': 'daily_stats.rdb',
        'forecast': 'nwps_forecast.json',
        'event_table_limit': 250,
    },
}


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_settings(settings_file: Optional[Path] = None) -> Dict[str, Any]:
    """Load dashboard settings from YAML.

    Args:
        settings_file: Path to a settings file. If None, uses
            config/dashboard_settings.yaml and falls back to the built-in
            defaults when that file does not exist.

    Returns:
        Settings dictionary with every default key present

    Raises:
        FileNotFoundError: If an explicitly given settings file is missing
        ValueError: If the file does not contain a YAML mapping
    """
    path = settings_file or SETTINGS_FILE
    if not path.exists():
        if settings_file is not None:
            raise FileNotFoundError(f"Settings file not found: {path}")
        logger.warning(f"No settings file at {path}, using built-in defaults")
        return deepcopy(DEFAULT_SETTINGS)

    with open(path) as f:
        loaded = yaml.safe_load(f) or {}

    if not isinstance(loaded, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")

    logger.debug(f"Loaded settings from {path}")
    return _deep_merge(DEFAULT_SETTINGS, loaded)


def resolve_data_dir(settings: Dict[str, Any]) -> Path:
    """Return the static data directory, relative paths taken from the project root."""
    directory = Path(settings['data']['directory'])
    if not directory.is_absolute():
        directory = PROJECT_ROOT / directory
    return directory


def ensure_directories():
    """Create the output directories if they don't exist."""
    for directory in (OUTPUT_DIR, LOG_DIR, SNAPSHOT_DIR):
        directory.mkdir(parents=True, exist_ok=True)
