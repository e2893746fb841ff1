"""
NOAA CO-OPS tide predictions (datagetter API).

Predictions are requested at 6-minute intervals in GMT and English units.
The datagetter answers errors such as an unsupported datum with HTTP 200 and
an {"error": {"message": ...}} body, which is logged and treated as no data.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional
import logging

from ..classification import convert_datum
from ..models import ObservationPoint
from ..utils import coerce_float
from .client import FeedClient

logger = logging.getLogger(__name__)

DEFAULT_DATAGETTER_URL = "https://api.tidesandcurrents.noaa.gov/api/prod/datagetter"
PREDICTION_TIME_FORMAT = "%Y-%m-%d %H:%M"
DEFAULT_WINDOW_HOURS = 72


def _parse_prediction_time(raw: Any) -> Optional[datetime]:
    if not isinstance(raw, str):
        return None
    try:
        return datetime.strptime(raw, PREDICTION_TIME_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def parse_prediction_payload(payload: Any, offset_ft: float = 0.0) -> List[ObservationPoint]:
    """Turn a datagetter predictions payload into points in the target datum.

    Args:
        payload: Decoded JSON response
        offset_ft: Datum offset (target minus source) added to every value

    Returns:
        Prediction points; records with bad times or non-finite values dropped
    """
    if not isinstance(payload, dict):
        return []
    if "error" in payload:
        error = payload["error"]
        message = error.get("message") if isinstance(error, dict) else error
        logger.warning(f"CO-OPS returned an error: {message}")
        return []

    records = payload.get("predictions")
    if not isinstance(records, list):
        return []

    points = []
    for record in records:
        if not isinstance(record, dict):
            continue
        t = _parse_prediction_time(record.get("t"))
        value = coerce_float(record.get("v"))
        if t is None or value is None:
            continue
        points.append(ObservationPoint(t=t, ft=convert_datum(value, offset_ft)))
    return points


class TidePredictionFeed:
    """Loads tide predictions for one CO-OPS station."""

    def __init__(
        self,
        client: FeedClient,
        station: str,
        datum: str = "NAVD",
        offset_ft: float = 0.0,
        application: str = "tidal_dashboard",
        base_url: str = DEFAULT_DATAGETTER_URL
    ):
        """Initialize the feed.

        Args:
            client: Shared feed client
            station: 7-digit CO-OPS station identifier
            datum: Datum the predictions are requested in
            offset_ft: Offset from that datum to the threshold datum
            application: Application name reported to CO-OPS
            base_url: datagetter endpoint
        """
        self.client = client
        self.station = station
        self.datum = datum
        self.offset_ft = offset_ft
        self.application = application
        self.base_url = base_url

    def fetch_predictions(
        self,
        now: Optional[datetime] = None,
        hours: int = DEFAULT_WINDOW_HOURS
    ) -> List[ObservationPoint]:
        """Fetch predictions covering now through now + ``hours``.

        Raises:
            FeedHttpError: On a non-2xx status
            FeedApiError: If the request fails or the body is not JSON
        """
        now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
        end = now + timedelta(hours=hours)
        params = {
            "product": "predictions",
            "application": self.application,
            "begin_date": now.strftime("%Y%m%d"),
            "end_date": end.strftime("%Y%m%d"),
            "datum": self.datum,
            "station": self.station,
            "time_zone": "gmt",
            "units": "english",
            "interval": "6",
            "format": "json",
        }
        payload = self.client.get_json(self.base_url, params=params)
        points = parse_prediction_payload(payload, self.offset_ft)
        logger.info(f"CO-OPS {self.station}: {len(points)} predictions through {end:%Y-%m-%d %H:%M}Z")
        return points
