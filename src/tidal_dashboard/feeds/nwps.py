"""
NOAA National Water Prediction Service (NWPS) stage forecasts.

The stageflow response has moved its forecast array around between API
revisions, so extraction tries a fixed list of known locations in order and
takes the first one holding a non-empty list.
"""

from typing import Any, Callable, Dict, List, Optional, Sequence
import logging

import pandas as pd

from ..utils import coerce_float
from .client import FeedApiError, FeedClient

logger = logging.getLogger(__name__)

DEFAULT_NWPS_BASE_URL = "https://api.water.noaa.gov/nwps/v1"

TIME_FIELDS = ("validTime", "t", "time", "dateTime", "datetime")
VALUE_FIELDS = ("primary", "stage", "value", "ft")


class ForecastShapeError(FeedApiError):
    """The forecast response is not a JSON object."""


def _path(*keys: str) -> Callable[[Dict[str, Any]], Optional[list]]:
    def accessor(payload: Dict[str, Any]) -> Optional[list]:
        node: Any = payload
        for key in keys:
            if not isinstance(node, dict):
                return None
            node = node.get(key)
        return node if isinstance(node, list) else None
    accessor.__name__ = ".".join(keys)
    return accessor


FORECAST_ACCESSORS: Sequence[Callable[[Dict[str, Any]], Optional[list]]] = (
    _path("forecast", "data"),
    _path("forecast"),
    _path("data"),
    _path("stageflow", "forecast", "data"),
    _path("stageflow", "data"),
)


def _first_present(entry: Dict[str, Any], fields: Sequence[str]) -> Any:
    for field in fields:
        value = entry.get(field)
        if value is not None and value != "":
            return value
    return None


def _iso_utc(raw: Any) -> Optional[pd.Timestamp]:
    if not isinstance(raw, str):
        return None
    try:
        stamp = pd.to_datetime(raw, utc=True)
    except (ValueError, TypeError, OverflowError):
        return None
    if pd.isna(stamp):
        return None
    return stamp


def find_forecast_entries(payload: Dict[str, Any]) -> List[Any]:
    for accessor in FORECAST_ACCESSORS:
        entries = accessor(payload)
        if entries:
            logger.debug(f"Forecast entries found at '{accessor.__name__}'")
            return entries
    return []


def extract_forecast_points(payload: Any) -> List[Dict[str, Any]]:
    """Normalize a stageflow payload into [{t, ft}] sorted oldest first.

    ``t`` is an ISO-8601 UTC timestamp with milliseconds and a 'Z' suffix.

    Raises:
        ForecastShapeError: If the payload is not a JSON object
    """
    if not isinstance(payload, dict):
        raise ForecastShapeError(
            f"Expected a JSON object from NWPS, got {type(payload).__name__}"
        )

    stamped = []
    for entry in find_forecast_entries(payload):
        if not isinstance(entry, dict):
            continue
        stamp = _iso_utc(_first_present(entry, TIME_FIELDS))
        ft = coerce_float(_first_present(entry, VALUE_FIELDS))
        if stamp is None or ft is None:
            continue
        stamped.append((stamp, ft))

    stamped.sort(key=lambda pair: pair[0])
    return [
        {
            "t": stamp.strftime("%Y-%m-%dT%H:%M:%S.") + f"{stamp.microsecond // 1000:03d}Z",
            "ft": ft,
        }
        for stamp, ft in stamped
    ]


class NwpsForecastFeed:
    """Loads the official stage forecast for an NWPS gauge."""

    def __init__(self, client: FeedClient, base_url: str = DEFAULT_NWPS_BASE_URL):
        self.client = client
        self.base_url = base_url.rstrip("/")

    def stageflow_url(self, gauge: str) -> str:
        return f"{self.base_url}/gauges/{gauge}/stageflow"

    def fetch_stageflow(self, gauge: str) -> Any:
        """Fetch the raw stageflow document for a gauge.

        Raises:
            FeedHttpError: On a non-2xx status
            FeedApiError: If the request fails or the body is not JSON
        """
        return self.client.get_json(self.stageflow_url(gauge))

    def fetch_forecast(self, gauge: str) -> List[Dict[str, Any]]:
        """Fetch and normalize the stage forecast for a gauge."""
        points = extract_forecast_points(self.fetch_stageflow(gauge))
        if not points:
            logger.warning(f"No forecast points found for gauge {gauge}")
        return points
