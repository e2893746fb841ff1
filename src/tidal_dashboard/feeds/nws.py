"""
NWS active alerts for the dashboard's alert point.

Only coastal flood products (advisory, watch, warning, statement) raise the
banner. The banner is best-effort: fetch_alert_status() never raises.
"""

from typing import Any, List, Optional
import logging

from ..models import AlertBanner, AlertResult
from .client import FeedApiError, FeedClient

logger = logging.getLogger(__name__)

DEFAULT_ALERTS_URL = "https://api.weather.gov/alerts/active"
DEFAULT_ALERT_LINK = "https://www.weather.gov/"
ALERT_EVENT_KEYWORD = "coastal flood"


def _features(payload: Any) -> List[dict]:
    if not isinstance(payload, dict):
        return []
    features = payload.get("features")
    if not isinstance(features, list):
        return []
    return [f for f in features if isinstance(f, dict)]


def find_coastal_flood_alert(payload: Any) -> Optional[AlertBanner]:
    """Banner for the first coastal flood feature in an alerts payload, if any."""
    for feature in _features(payload):
        props = feature.get("properties")
        if not isinstance(props, dict):
            continue
        event = props.get("event") or ""
        if not isinstance(event, str) or ALERT_EVENT_KEYWORD not in event.lower():
            continue
        return AlertBanner(
            title=event,
            headline=props.get("headline") or event,
            url=props.get("web") or props.get("uri") or DEFAULT_ALERT_LINK,
        )
    return None


class AlertFeed:
    """Looks up active coastal flood alerts for a point."""

    def __init__(self, client: FeedClient, lat: float, lon: float, base_url: str = DEFAULT_ALERTS_URL):
        self.client = client
        self.lat = lat
        self.lon = lon
        self.base_url = base_url

    def fetch_coastal_flood_alert(self) -> Optional[AlertBanner]:
        """Return the active coastal flood alert, or None when there is none.

        Raises:
            FeedHttpError: On a non-2xx status
            FeedApiError: If the request fails or the body is not JSON
        """
        params = {"point": f"{self.lat},{self.lon}"}
        payload = self.client.get_json(self.base_url, params=params)
        return find_coastal_flood_alert(payload)

    def fetch_alert_status(self) -> AlertResult:
        """Banner lookup that reports an unreachable feed instead of raising."""
        try:
            banner = self.fetch_coastal_flood_alert()
        except FeedApiError as e:
            logger.warning(f"Alert feed unavailable: {e}")
            return AlertResult.unavailable()

        if banner is None:
            logger.debug("No active coastal flood alert")
            return AlertResult.none()
        logger.info(f"Active alert: {banner.title}")
        return AlertResult.active(banner)
