"""
Dashboard assembly.

Builds one snapshot of everything the dashboard shows: the alert banner, the
historical tables, the live conditions derived from the gauge and tide feeds,
and the stored NWPS forecast.

Requests for a build are issued together on a thread pool. Each section is
joined all-or-nothing and fails on its own:
- alert banner: best-effort, an unreachable feed is reported as unavailable
- history tables: the daily stats fall back to the static event list; any
  other dataset failure leaves the section empty
- live conditions: any failing feed leaves the section empty
- forecast: best-effort, a missing forecast file leaves the section empty

All workers share the one FeedClient session. Feed requests only issue GETs
and must not change session state (headers, cookies, adapters) once a build
has started.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import json
import logging

import pandas as pd

from .aggregation import (
    filter_events,
    last_within_tolerance,
    latest_reading,
    max_since,
    today_min_max,
)
from .classification import FloodCategory, Thresholds, classify
from .daily_stats import DailyStatsColumns, load_flood_events
from .datasets import DatasetError, DatasetStore
from .feeds import AlertFeed, FeedApiError, FeedClient, TidePredictionFeed, UsgsGaugeFeed
from .models import (
    AlertResult,
    DailyRange,
    FloodEvent,
    NearMatch,
    ObservationPoint,
    PeakReading,
)

logger = logging.getLogger(__name__)

MAX_WORKERS = 8


@dataclass
class HistoryTables:
    """Static tables plus the flood event list."""
    annual_counts: pd.DataFrame
    top_ten: pd.DataFrame
    events: List[FloodEvent]


@dataclass
class LiveConditions:
    """Current conditions derived from the live feeds."""
    observations: List[ObservationPoint]
    predictions: List[ObservationPoint]
    current: Optional[ObservationPoint]
    category: FloodCategory
    monthly_max: PeakReading
    today: DailyRange
    # near_match is only looked up when the current level is at or above moderate
    near_match_checked: bool = False
    near_match: Optional[NearMatch] = None


@dataclass
class DashboardSnapshot:
    generated_at: datetime
    thresholds: Thresholds
    alert: AlertResult
    history: Optional[HistoryTables] = None
    live: Optional[LiveConditions] = None
    forecast: Optional[List[ObservationPoint]] = None
    event_limit: int = 250
    errors: Dict[str, str] = field(default_factory=dict)

    def event_table(self, min_ft: Optional[float] = None) -> List[FloodEvent]:
        """Events shown in the event table; the floor defaults to the minor threshold."""
        if self.history is None:
            return []
        floor = self.thresholds.minor if min_ft is None else min_ft
        return filter_events(self.history.events, floor, self.event_limit)

    def to_dict(self, min_ft: Optional[float] = None) -> Dict[str, Any]:
        """JSON-ready representation of the snapshot."""
        data: Dict[str, Any] = {
            'generated_at': self.generated_at.isoformat(),
            'thresholds': {
                'minor': self.thresholds.minor,
                'moderate': self.thresholds.moderate,
                'major': self.thresholds.major,
            },
            'alert': {
                'status': self.alert.status.value,
                'banner': None,
            },
            'history': None,
            'live': None,
            'forecast': None,
            'errors': dict(self.errors),
        }
        if self.alert.banner is not None:
            banner = self.alert.banner
            data['alert']['banner'] = {
                'title': banner.title,
                'headline': banner.headline,
                'url': banner.url,
            }

        if self.history is not None:
            data['history'] = {
                'annual_counts': json.loads(self.history.annual_counts.to_json(orient='records')),
                'top_ten': json.loads(self.history.top_ten.to_json(orient='records')),
                'events': [e.to_dict() for e in self.event_table(min_ft)],
            }

        if self.live is not None:
            live = self.live
            data['live'] = {
                'current': live.current.to_dict() if live.current else None,
                'category': live.category.value,
                'monthly_max': {
                    'ft': live.monthly_max.ft,
                    't': live.monthly_max.t.isoformat() if live.monthly_max.t else None,
                },
                'today': {'min': live.today.min, 'max': live.today.max},
                'near_match_checked': live.near_match_checked,
                'near_match': None,
                'observations': [p.to_dict() for p in live.observations],
                'predictions': [p.to_dict() for p in live.predictions],
            }
            if live.near_match is not None:
                data['live']['near_match'] = {
                    't': live.near_match.t.isoformat(),
                    'ft': live.near_match.ft,
                    'latest_t': live.near_match.latest_t.isoformat(),
                }

        if self.forecast is not None:
            data['forecast'] = [p.to_dict() for p in self.forecast]
        return data


def _chronological(points: List[ObservationPoint]) -> List[ObservationPoint]:
    return sorted(points, key=lambda p: p.t)


class Dashboard:
    """Loads every dashboard section for one monitoring site."""

    def __init__(
        self,
        settings: Dict[str, Any],
        client: Optional[FeedClient] = None,
        store: Optional[DatasetStore] = None
    ):
        """Initialize the dashboard.

        Args:
            settings: Settings from config.load_settings()
            client: Optional feed client; one is created from the settings otherwise
                and closed by close()
            store: Optional dataset store; one is created from the settings otherwise
        """
        self.settings = settings
        self.thresholds = Thresholds.from_settings(settings)
        self.columns = DailyStatsColumns.from_settings(settings)
        self._owns_client = client is None
        self.client = client or FeedClient(user_agent=settings['api']['user_agent'])
        self.store = store or DatasetStore.from_settings(settings)

        site = settings['site']
        api = settings['api']
        datum = settings['datum']
        self.gauge_feed = UsgsGaugeFeed(self.client, site['usgs_site'], base_url=api['usgs_iv_url'])
        self.tide_feed = TidePredictionFeed(
            self.client,
            site['noaa_station'],
            datum=datum['source'],
            offset_ft=float(datum['offset_ft']),
            application=api['coops_application'],
            base_url=api['coops_datagetter_url'],
        )
        self.alert_feed = AlertFeed(
            self.client,
            site['alert_point']['lat'],
            site['alert_point']['lon'],
            base_url=api['nws_alerts_url'],
        )

        obs = settings['observations']
        self.recent_period = obs['recent_period']
        self.monthly_period = obs['monthly_period']
        self.prediction_hours = int(obs['prediction_hours'])
        self.tolerance_ft = float(obs['near_match_tolerance_ft'])
        self.event_limit = int(settings['data']['event_table_limit'])

    def close(self) -> None:
        """Close the feed client if this dashboard created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "Dashboard":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def build(self, now: Optional[datetime] = None) -> DashboardSnapshot:
        """Fetch every section and derive the live conditions."""
        now = now or datetime.now(timezone.utc)
        logger.info(f"Building dashboard for {self.settings['site']['name']}")

        with ThreadPoolExecutor(max_workers=MAX_WORKERS) as executor:
            alert_future = executor.submit(self.alert_feed.fetch_alert_status)
            history_futures = {
                'annual_counts': executor.submit(self.store.load_annual_counts),
                'top_ten': executor.submit(self.store.load_top_ten),
                'events': executor.submit(load_flood_events, self.store, self.thresholds, self.columns),
            }
            forecast_future = executor.submit(self.store.load_forecast)
            live_futures = {
                'recent': executor.submit(self.gauge_feed.fetch_observations, self.recent_period),
                'monthly': executor.submit(self.gauge_feed.fetch_observations, self.monthly_period),
                'predictions': executor.submit(self.tide_feed.fetch_predictions, now, self.prediction_hours),
            }

            snapshot = DashboardSnapshot(
                generated_at=now,
                thresholds=self.thresholds,
                alert=alert_future.result(),
                event_limit=self.event_limit,
            )
            snapshot.history = self._collect_history(history_futures, snapshot.errors)
            snapshot.forecast = self._collect_forecast(forecast_future)
            snapshot.live = self._collect_live(live_futures, now, snapshot.errors)

        return snapshot

    def _collect_history(self, futures: Dict[str, Future], errors: Dict[str, str]) -> Optional[HistoryTables]:
        try:
            return HistoryTables(
                annual_counts=futures['annual_counts'].result(),
                top_ten=futures['top_ten'].result(),
                events=futures['events'].result(),
            )
        except DatasetError as e:
            logger.error(f"History tables unavailable: {e}")
            errors['history'] = str(e)
            return None

    def _collect_forecast(self, future: Future) -> Optional[List[ObservationPoint]]:
        try:
            return future.result()
        except DatasetError as e:
            logger.warning(f"Forecast unavailable: {e}")
            return None

    def _collect_live(self, futures: Dict[str, Future], now: datetime,
                      errors: Dict[str, str]) -> Optional[LiveConditions]:
        try:
            recent = _chronological(futures['recent'].result())
            monthly = _chronological(futures['monthly'].result())
            predictions = _chronological(futures['predictions'].result())
        except FeedApiError as e:
            logger.error(f"Live conditions unavailable: {e}")
            errors['live'] = str(e)
            return None

        return self.derive_live(recent, monthly, predictions, now)

    def derive_live(
        self,
        recent: List[ObservationPoint],
        monthly: List[ObservationPoint],
        predictions: List[ObservationPoint],
        now: Optional[datetime] = None
    ) -> LiveConditions:
        """Compute the current-conditions KPIs from chronological feeds."""
        current = latest_reading(recent)
        live = LiveConditions(
            observations=recent,
            predictions=predictions,
            current=current,
            category=classify(current.ft if current else None, self.thresholds),
            monthly_max=max_since(monthly),
            today=today_min_max(recent, now),
        )

        if current is not None and current.ft >= self.thresholds.moderate:
            live.near_match_checked = True
            live.near_match = last_within_tolerance(recent, current.ft, self.tolerance_ft)
            if live.near_match is None:
                logger.info(f"No reading within {self.tolerance_ft} ft of {current.ft:.2f} ft in window")

        if current is not None:
            logger.info(f"Current level {current.ft:.2f} ft ({live.category.value})")
        return live
