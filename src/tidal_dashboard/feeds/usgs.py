"""
USGS WaterServices instantaneous-values feed.

The IV JSON nests each parameter's readings as
value.timeSeries[].values[0].value[], with the parameter's human-readable
name under variable.variableName. Tidal sites report several series, so the
water-level series is picked by name.
"""

from typing import Any, Dict, List, Optional
import logging

from ..models import ObservationPoint
from ..utils import coerce_float, parse_timestamp
from .client import FeedClient

logger = logging.getLogger(__name__)

DEFAULT_IV_URL = "https://waterservices.usgs.gov/nwis/iv/"
LEVEL_KEYWORDS = ("gage height", "water level", "tidal", "elevation")


def _time_series(payload: Any) -> List[Dict[str, Any]]:
    if not isinstance(payload, dict):
        return []
    value = payload.get("value")
    if not isinstance(value, dict):
        return []
    series = value.get("timeSeries")
    if not isinstance(series, list):
        return []
    return [s for s in series if isinstance(s, dict)]


def _variable_name(series: Dict[str, Any]) -> str:
    variable = series.get("variable")
    if not isinstance(variable, dict):
        return ""
    name = variable.get("variableName")
    return name.lower() if isinstance(name, str) else ""


def select_level_series(series_list: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Pick the first series named like a water level, else the first series."""
    for series in series_list:
        name = _variable_name(series)
        if any(keyword in name for keyword in LEVEL_KEYWORDS):
            return series
    return series_list[0] if series_list else None


def _series_values(series: Dict[str, Any]) -> List[Any]:
    values = series.get("values")
    if not isinstance(values, list) or not values or not isinstance(values[0], dict):
        return []
    records = values[0].get("value")
    return records if isinstance(records, list) else []


def parse_observation_payload(payload: Any) -> List[ObservationPoint]:
    """Turn an IV JSON payload into observation points.

    Readings with a missing timestamp or a value that is not a finite number
    are dropped. Missing containers give an empty list.
    """
    series = select_level_series(_time_series(payload))
    if series is None:
        return []

    points = []
    for record in _series_values(series):
        if not isinstance(record, dict):
            continue
        t = parse_timestamp(record.get("dateTime"))
        ft = coerce_float(record.get("value"))
        if t is None or ft is None:
            continue
        points.append(ObservationPoint(t=t, ft=ft))
    return points


class UsgsGaugeFeed:
    """Loads recent water-level observations for one USGS site."""

    def __init__(self, client: FeedClient, site: str, base_url: str = DEFAULT_IV_URL):
        self.client = client
        self.site = site
        self.base_url = base_url

    def fetch_observations(self, period: str) -> List[ObservationPoint]:
        """Fetch observations for an ISO-8601 retrieval period such as 'P3D'.

        Raises:
            FeedHttpError: On a non-2xx status
            FeedApiError: If the request fails or the body is not JSON
        """
        params = {
            "format": "json",
            "sites": self.site,
            "period": period,
        }
        payload = self.client.get_json(self.base_url, params=params)
        points = parse_observation_payload(payload)
        logger.info(f"USGS {self.site}: {len(points)} observations for {period}")
        return points
