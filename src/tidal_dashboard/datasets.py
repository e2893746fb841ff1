"""
Static datasets shipped alongside the dashboard.

The data directory holds:
- annual_counts.json: [{year, minor, moderate, major}, ...]
- top_ten.json: [{rank, date, peak, type}, ...]
- events.json: [{datetime, peak, type}, ...], the fallback event list
- daily_stats.rdb: USGS daily-statistics export (see daily_stats.py)
- nwps_forecast.json: [{t, ft}, ...] written by build-nwps-forecast
"""

from pathlib import Path
from typing import Any, Dict, List
import json
import logging

import pandas as pd

from .config import resolve_data_dir
from .models import FloodEvent, ObservationPoint
from .utils import coerce_float, parse_timestamp

logger = logging.getLogger(__name__)

ANNUAL_COUNT_COLUMNS = ['year', 'minor', 'moderate', 'major']
TOP_TEN_COLUMNS = ['rank', 'date', 'peak', 'type']


class DatasetError(Exception):
    """Raised when a static dataset is missing, unreadable or malformed."""


def _frame(records: List[Dict[str, Any]], required: List[str], name: str) -> pd.DataFrame:
    if not records:
        return pd.DataFrame(columns=required)
    df = pd.DataFrame.from_records(records)
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise DatasetError(f"{name} is missing columns: {', '.join(missing)}")
    return df[required].copy()


def _integer_column(df: pd.DataFrame, column: str, name: str) -> pd.Series:
    values = pd.to_numeric(df[column], errors='coerce')
    if values.isna().any():
        raise DatasetError(f"{name} has non-numeric values in column '{column}'")
    return values.astype(int)


class DatasetStore:
    """Reads the static datasets from a data directory."""

    def __init__(
        self,
        data_dir: Path,
        annual_counts_name: str = 'annual_counts.json',
        top_ten_name: str = 'top_ten.json',
        events_name: str = 'events.json',
        daily_stats_name: str = 'daily_stats.rdb',
        forecast_name: str = 'nwps_forecast.json'
    ):
        """Initialize the store.

        Args:
            data_dir: Directory holding the dataset files
            annual_counts_name: File name of the annual counts table
            top_ten_name: File name of the top-ten events table
            events_name: File name of the fallback events list
            daily_stats_name: File name of the daily-stats export
            forecast_name: File name of the NWPS forecast points
        """
        self.data_dir = Path(data_dir)
        self.annual_counts_name = annual_counts_name
        self.top_ten_name = top_ten_name
        self.events_name = events_name
        self.daily_stats_name = daily_stats_name
        self.forecast_name = forecast_name

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "DatasetStore":
        data = settings['data']
        return cls(
            data_dir=resolve_data_dir(settings),
            annual_counts_name=data['annual_counts'],
            top_ten_name=data['top_ten'],
            events_name=data['events'],
            daily_stats_name=data['daily_stats'],
            forecast_name=data['forecast'],
        )

    def load_text(self, name: str) -> str:
        path = self.data_dir / name
        try:
            return path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise DatasetError(f"Cannot read {path}: {e}") from e

    def load_json(self, name: str) -> List[Dict[str, Any]]:
        """Load a JSON array of records.

        Raises:
            DatasetError: If the file is missing, not JSON, or not an array
        """
        text = self.load_text(name)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise DatasetError(f"Invalid JSON in {name}: {e}") from e
        if not isinstance(data, list):
            raise DatasetError(f"{name} must contain a JSON array")
        logger.debug(f"Loaded {len(data)} records from {name}")
        return data

    def load_annual_counts(self) -> pd.DataFrame:
        """Annual flood-day counts, oldest year first, with a derived total."""
        df = _frame(self.load_json(self.annual_counts_name), ANNUAL_COUNT_COLUMNS, self.annual_counts_name)
        df['year'] = _integer_column(df, 'year', self.annual_counts_name)
        for column in ('minor', 'moderate', 'major'):
            df[column] = pd.to_numeric(df[column], errors='coerce').fillna(0).astype(int)
        df['total'] = df['minor'] + df['moderate'] + df['major']
        return df.sort_values('year').reset_index(drop=True)

    def load_top_ten(self) -> pd.DataFrame:
        """Top-ten historical events ordered by rank."""
        df = _frame(self.load_json(self.top_ten_name), TOP_TEN_COLUMNS, self.top_ten_name)
        df['rank'] = _integer_column(df, 'rank', self.top_ten_name)
        df['peak'] = pd.to_numeric(df['peak'], errors='coerce')
        return df.sort_values('rank').reset_index(drop=True)

    def load_fallback_events(self) -> List[FloodEvent]:
        """The pre-baked event list used when the daily stats cannot be parsed."""
        records = self.load_json(self.events_name)
        try:
            return [FloodEvent.from_dict(r) for r in records]
        except (KeyError, TypeError, ValueError) as e:
            raise DatasetError(f"Malformed record in {self.events_name}: {e}") from e

    def load_forecast(self) -> List[ObservationPoint]:
        """Forecast points written by the forecast-fetch utility, oldest first."""
        points = []
        for record in self.load_json(self.forecast_name):
            if not isinstance(record, dict):
                continue
            t = parse_timestamp(record.get('t'))
            ft = coerce_float(record.get('ft'))
            if t is None or ft is None:
                continue
            points.append(ObservationPoint(t=t, ft=ft))
        points.sort(key=lambda p: p.t)
        return points
