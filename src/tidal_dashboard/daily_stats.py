"""
Parser for the USGS daily-statistics RDB export.

The export is tab-delimited text. Comment lines start with '#', the header
line starts with the 'agency_cd' column, and it is followed by a field-format
line (e.g. '5s\t20d\t14n\t14n') and one record per day:

    # US Geological Survey
    agency_cd	datetime	239251_72279_00021	239252_72279_00022
    5s	20d	14n	14n
    USGS	2024-06-01	5.50	3.10

Each day carries a daily high and a daily low-of-the-highs; both become
FloodEvent records classified at parse time.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional
import logging
import math
import re

from .classification import Thresholds, classify
from .datasets import DatasetError, DatasetStore
from .models import FloodEvent

logger = logging.getLogger(__name__)

COMMENT_MARKER = "#"
DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
DISPLAY_FORMAT = "%Y-%m-%d %H:%M"


class DailyStatsFormatError(ValueError):
    """Raised when the daily-stats text lacks its header or required columns."""


@dataclass(frozen=True)
class DailyStatsColumns:
    """Column names used to locate the header and the values of interest."""
    sentinel: str = "agency_cd"
    date: str = "datetime"
    high: str = "239251_72279_00021"
    low_high: str = "239252_72279_00022"
    event_hour: int = 12

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "DailyStatsColumns":
        section = settings['daily_stats']
        return cls(
            sentinel=section['sentinel'],
            date=section['date_column'],
            high=section['high_column'],
            low_high=section['low_high_column'],
            event_hour=int(section['event_hour']),
        )


def _parse_value(raw: str) -> Optional[float]:
    try:
        value = float(raw)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def parse_daily_stats(
    text: str,
    thresholds: Thresholds,
    columns: DailyStatsColumns = DailyStatsColumns()
) -> List[FloodEvent]:
    """Parse daily-stats text into flood events, newest first.

    Args:
        text: Raw RDB text
        thresholds: Thresholds used to classify each event
        columns: Header sentinel and column names

    Returns:
        Up to two events per valid day, sorted newest-first

    Raises:
        DailyStatsFormatError: If the header line or a value column is missing
    """
    lines = text.splitlines()

    header_index = None
    for i, line in enumerate(lines):
        if line.startswith(COMMENT_MARKER):
            continue
        if line.startswith(columns.sentinel):
            header_index = i
            break
    if header_index is None:
        raise DailyStatsFormatError(
            f"No header line starting with '{columns.sentinel}' found"
        )

    header = lines[header_index].split("\t")
    idx = {name.strip(): i for i, name in enumerate(header)}
    missing = [c for c in (columns.date, columns.high, columns.low_high) if c not in idx]
    if missing:
        raise DailyStatsFormatError(f"Missing required columns: {', '.join(missing)}")

    dated_events = []
    for line in lines[header_index + 1:]:
        if not line.strip() or line.startswith(COMMENT_MARKER):
            continue
        parts = line.split("\t")
        if len(parts) < len(header):
            continue

        date_str = parts[idx[columns.date]].strip()
        if not DATE_PATTERN.match(date_str):
            continue
        try:
            day = datetime.strptime(date_str, "%Y-%m-%d")
        except ValueError:
            # matches the pattern but is not a calendar date, e.g. 2024-02-30
            continue
        stamp = day.replace(hour=columns.event_hour)

        for column in (columns.high, columns.low_high):
            peak = _parse_value(parts[idx[column]].strip())
            if peak is None:
                continue
            event = FloodEvent(
                datetime=stamp.strftime(DISPLAY_FORMAT),
                peak=peak,
                type=classify(peak, thresholds).value,
            )
            dated_events.append((stamp, event))

    dated_events.sort(key=lambda pair: pair[0], reverse=True)
    events = [event for _, event in dated_events]
    logger.debug(f"Parsed {len(events)} events from daily stats")
    return events


def load_flood_events(
    store: DatasetStore,
    thresholds: Thresholds,
    columns: DailyStatsColumns = DailyStatsColumns()
) -> List[FloodEvent]:
    """Load flood events from the daily-stats text, or the static list on failure.

    Any problem reading or parsing the daily-stats file falls back to the
    pre-baked events list. Errors loading that list propagate.
    """
    try:
        text = store.load_text(store.daily_stats_name)
        events = parse_daily_stats(text, thresholds, columns)
        logger.info(f"Loaded {len(events)} events from daily stats")
        return events
    except (DatasetError, DailyStatsFormatError) as e:
        logger.warning(f"Daily stats unavailable ({e}), using static events list")

    return store.load_fallback_events()
