"""
Tests for dashboard assembly and section failure isolation.
"""

from datetime import datetime, timedelta, timezone
import json

import pytest
import responses

from tidal_dashboard.classification import FloodCategory
from tidal_dashboard.dashboard import Dashboard
from tidal_dashboard.models import AlertStatus, DailyRange, ObservationPoint

NOW = datetime(2024, 6, 1, 12, 30, tzinfo=timezone.utc)


@pytest.fixture
def dashboard(settings, client, store):
    return Dashboard(settings, client=client, store=store)


class TestDashboardBuild:
    """Test suite for Dashboard.build()."""

    @responses.activate
    def test_all_sections_loaded(self, dashboard, register_feeds):
        """Test a build where every feed and dataset is healthy."""
        register_feeds()

        snapshot = dashboard.build(now=NOW)

        assert snapshot.errors == {}
        assert snapshot.alert.status is AlertStatus.ACTIVE
        assert snapshot.alert.banner.title == "Coastal Flood Advisory"

        assert list(snapshot.history.annual_counts['year']) == [2020, 2021]
        assert list(snapshot.history.top_ten['rank']) == [1, 2]
        assert [e.peak for e in snapshot.history.events] == [5.50, 3.10, 4.40, 3.80]

        assert [p.ft for p in snapshot.forecast] == [4.1, 4.8]

        live = snapshot.live
        assert live.current.ft == 5.50
        assert live.category is FloodCategory.MODERATE
        assert live.today == DailyRange(min=1.0, max=5.5)
        assert live.monthly_max.ft == 6.0
        assert live.monthly_max.t == datetime(2024, 5, 20, 3, 0, tzinfo=timezone.utc)
        assert [p.ft for p in live.predictions] == [4.0, 4.1]

    @responses.activate
    def test_near_match_when_moderate(self, dashboard, register_feeds):
        """Test the look-back for the last reading close to the current level."""
        register_feeds()

        live = dashboard.build(now=NOW).live

        assert live.near_match_checked
        assert live.near_match.ft == 5.45
        assert live.near_match.t == datetime(2024, 6, 1, 12, 6, tzinfo=timezone.utc)
        assert live.near_match.latest_t == datetime(2024, 6, 1, 12, 18, tzinfo=timezone.utc)

    @responses.activate
    def test_event_table_floor(self, dashboard, register_feeds):
        register_feeds()

        snapshot = dashboard.build(now=NOW)

        assert [e.peak for e in snapshot.event_table()] == [5.50, 4.40]
        assert [e.peak for e in snapshot.event_table(min_ft=3.5)] == [5.50, 4.40, 3.80]

    @responses.activate
    def test_gauge_failure_only_drops_live_section(self, dashboard, register_feeds):
        """Test that a failing USGS feed leaves the other sections intact."""
        register_feeds(usgs_status=500)

        snapshot = dashboard.build(now=NOW)

        assert snapshot.live is None
        assert 'live' in snapshot.errors
        assert snapshot.history is not None
        assert snapshot.forecast is not None
        assert snapshot.alert.status is AlertStatus.ACTIVE

    @responses.activate
    def test_alert_failure_is_unavailable(self, dashboard, register_feeds):
        register_feeds(alerts_status=503)

        snapshot = dashboard.build(now=NOW)

        assert snapshot.alert.status is AlertStatus.UNAVAILABLE
        assert not snapshot.alert.show_banner
        assert snapshot.live is not None
        assert snapshot.errors == {}

    @responses.activate
    def test_prediction_error_body_keeps_live_section(self, dashboard, register_feeds):
        register_feeds(coops_payload={"error": {"message": "Wrong Datum"}})

        live = dashboard.build(now=NOW).live

        assert live is not None
        assert live.predictions == []
        assert live.current.ft == 5.50

    @responses.activate
    def test_dataset_failure_only_drops_history(self, dashboard, register_feeds, data_dir):
        """Test that a missing table leaves the live section intact."""
        register_feeds()
        (data_dir / "top_ten.json").unlink()

        snapshot = dashboard.build(now=NOW)

        assert snapshot.history is None
        assert 'history' in snapshot.errors
        assert snapshot.event_table() == []
        assert snapshot.live is not None

    @responses.activate
    def test_daily_stats_failure_uses_fallback_events(self, dashboard, register_feeds, data_dir):
        register_feeds()
        (data_dir / "daily_stats.rdb").write_text("garbage\n")

        snapshot = dashboard.build(now=NOW)

        assert [e.peak for e in snapshot.history.events] == [5.30, 4.71, 4.05]
        assert snapshot.errors == {}

    @responses.activate
    def test_missing_forecast_is_not_an_error(self, dashboard, register_feeds, data_dir):
        register_feeds()
        (data_dir / "nwps_forecast.json").unlink()

        snapshot = dashboard.build(now=NOW)

        assert snapshot.forecast is None
        assert snapshot.errors == {}

    @responses.activate
    def test_to_dict_is_json_serializable(self, dashboard, register_feeds):
        register_feeds()

        data = json.loads(json.dumps(dashboard.build(now=NOW).to_dict()))

        assert data['alert']['status'] == 'active'
        assert data['alert']['banner']['url'] == "https://alerts.weather.gov/example"
        assert data['thresholds'] == {'minor': 4.19, 'moderate': 5.19, 'major': 6.19}
        assert data['history']['annual_counts'][0] == {
            'year': 2020, 'minor': 11, 'moderate': 2, 'major': 1, 'total': 14,
        }
        assert [e['peak'] for e in data['history']['events']] == [5.50, 4.40]
        assert data['live']['category'] == 'Moderate'
        assert data['live']['near_match']['ft'] == 5.45
        assert data['forecast'][0]['ft'] == 4.1

    @responses.activate
    def test_undecodable_forecast_file_leaves_section_empty(self, dashboard, register_feeds, data_dir):
        """Test that a forecast file that is not UTF-8 does not stop the build."""
        register_feeds()
        (data_dir / "nwps_forecast.json").write_bytes(b"\xff\xfe[]")

        snapshot = dashboard.build(now=NOW)

        assert snapshot.forecast is None
        assert snapshot.history is not None
        assert snapshot.live is not None

    @responses.activate
    def test_mixed_type_years_still_build(self, dashboard, register_feeds, data_dir):
        register_feeds()
        (data_dir / "annual_counts.json").write_text(json.dumps([
            {"year": 2021, "minor": 9, "moderate": 4, "major": 0},
            {"year": "2020", "minor": 11, "moderate": 2, "major": 1},
        ]))

        snapshot = dashboard.build(now=NOW)

        assert list(snapshot.history.annual_counts['year']) == [2020, 2021]

    @responses.activate
    def test_bad_table_values_only_drop_history(self, dashboard, register_feeds, data_dir):
        register_feeds()
        (data_dir / "annual_counts.json").write_text(json.dumps([
            {"year": "unknown", "minor": 9, "moderate": 4, "major": 0},
        ]))

        snapshot = dashboard.build(now=NOW)

        assert snapshot.history is None
        assert 'history' in snapshot.errors
        assert snapshot.live is not None


class TestDashboardClose:
    """Tests for releasing the feed client."""

    def test_closes_own_client(self, settings, store, monkeypatch):
        dashboard = Dashboard(settings, store=store)
        closed = []
        monkeypatch.setattr(dashboard.client, 'close', lambda: closed.append(True))

        with dashboard:
            pass

        assert closed == [True]

    def test_leaves_given_client_open(self, settings, store, client, monkeypatch):
        closed = []
        monkeypatch.setattr(client, 'close', lambda: closed.append(True))

        with Dashboard(settings, client=client, store=store):
            pass

        assert closed == []


class TestDeriveLive:
    """Test suite for Dashboard.derive_live()."""

    def _points(self, *levels):
        return [ObservationPoint(t=NOW - timedelta(minutes=6 * (len(levels) - i)), ft=ft)
                for i, ft in enumerate(levels)]

    def test_no_near_match_below_moderate(self, dashboard):
        recent = self._points(4.4, 4.5, 4.6)
        live = dashboard.derive_live(recent, recent, [], now=NOW)

        assert live.category is FloodCategory.MINOR
        assert not live.near_match_checked
        assert live.near_match is None

    def test_no_match_in_window(self, dashboard):
        recent = self._points(1.0, 2.0, 3.0, 6.5)
        live = dashboard.derive_live(recent, recent, [], now=NOW)

        assert live.category is FloodCategory.MAJOR
        assert live.near_match_checked
        assert live.near_match is None

    def test_empty_feeds(self, dashboard):
        live = dashboard.derive_live([], [], [], now=NOW)

        assert live.current is None
        assert live.category is FloodCategory.NO_FLOOD
        assert live.today == DailyRange(min=None, max=None)
        assert live.monthly_max.ft is None
