import copy
import json
import os
import sys

import matplotlib
import pytest
import responses
from responses import matchers

# Add the src directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

matplotlib.use('Agg')

from tidal_dashboard.classification import Thresholds  # noqa: E402
from tidal_dashboard.config import DEFAULT_SETTINGS  # noqa: E402
from tidal_dashboard.datasets import DatasetStore  # noqa: E402
from tidal_dashboard.feeds.client import FeedClient  # noqa: E402

SAMPLE_ANNUAL_COUNTS = [
    {"year": 2021, "minor": 9, "moderate": 4, "major": 0},
    {"year": 2020, "minor": 11, "moderate": 2, "major": 1},
]

SAMPLE_TOP_TEN = [
    {"rank": 2, "date": "2020-10-30", "peak": 6.43, "type": "Major"},
    {"rank": 1, "date": "2012-10-29", "peak": 8.11, "type": "Major"},
]

SAMPLE_EVENTS = [
    {"datetime": "2023-12-18 12:00", "peak": 5.30, "type": "Moderate"},
    {"datetime": "2023-09-24 12:00", "peak": 4.71, "type": "Minor"},
    {"datetime": "2023-09-24 12:00", "peak": 4.05, "type": "No flood"},
]

SAMPLE_DAILY_STATS = (
    "# U.S. Geological Survey\n"
    "#\n"
    "agency_cd\tdatetime\t239251_72279_00021\t239252_72279_00022\n"
    "5s\t20d\t14n\t14n\n"
    "USGS\t2024-05-31\t4.40\t3.80\n"
    "USGS\t2024-06-01\t5.50\t3.10\n"
)


@pytest.fixture
def thresholds():
    """The site's flood thresholds in feet."""
    return Thresholds(minor=4.19, moderate=5.19, major=6.19)


@pytest.fixture
def client():
    """A feed client for tests."""
    with FeedClient(user_agent="tidal-dashboard-tests") as feed_client:
        yield feed_client


@pytest.fixture
def data_dir(tmp_path):
    """A data directory holding every static dataset."""
    directory = tmp_path / "data"
    directory.mkdir()
    (directory / "annual_counts.json").write_text(json.dumps(SAMPLE_ANNUAL_COUNTS))
    (directory / "top_ten.json").write_text(json.dumps(SAMPLE_TOP_TEN))
    (directory / "events.json").write_text(json.dumps(SAMPLE_EVENTS))
    (directory / "daily_stats.rdb").write_text(SAMPLE_DAILY_STATS)
    (directory / "nwps_forecast.json").write_text(json.dumps([
        {"t": "2024-06-02T12:00:00.000Z", "ft": 4.8},
        {"t": "2024-06-02T06:00:00.000Z", "ft": 4.1},
    ]))
    return directory


@pytest.fixture
def store(data_dir):
    return DatasetStore(data_dir)


def iv_payload(readings):
    """A USGS IV payload with one gage-height series."""
    return {"value": {"timeSeries": [{
        "variable": {"variableName": "Gage height, ft"},
        "values": [{"value": [{"dateTime": t, "value": v} for t, v in readings]}],
    }]}}


RECENT_READINGS = [
    ("2024-06-01T12:00:00.000Z", "1.00"),
    ("2024-06-01T12:06:00.000Z", "5.45"),
    ("2024-06-01T12:12:00.000Z", "3.00"),
    ("2024-06-01T12:18:00.000Z", "5.50"),
]

MONTHLY_READINGS = [
    ("2024-05-20T03:00:00.000Z", "6.00"),
    ("2024-05-25T03:00:00.000Z", "6.00"),
] + RECENT_READINGS

SAMPLE_PREDICTIONS = {"predictions": [
    {"t": "2024-06-01 12:00", "v": "4.000"},
    {"t": "2024-06-01 12:06", "v": "4.100"},
]}

SAMPLE_ALERTS = {"features": [{"properties": {
    "event": "Coastal Flood Advisory",
    "headline": "Coastal Flood Advisory until 6 PM EDT",
    "web": "https://alerts.weather.gov/example",
}}]}


@pytest.fixture
def settings(data_dir):
    """Default settings reading datasets from the test data directory."""
    test_settings = copy.deepcopy(DEFAULT_SETTINGS)
    test_settings['data']['directory'] = str(data_dir)
    return test_settings


@pytest.fixture
def register_feeds(settings):
    """Register live feed answers; use inside a responses-activated test."""
    api = settings['api']
    site = settings['site']

    def register(usgs_status=200, coops_payload=None, alerts_status=200):
        for period, readings in (('P3D', RECENT_READINGS), ('P31D', MONTHLY_READINGS)):
            responses.add(
                responses.GET,
                api['usgs_iv_url'],
                json=iv_payload(readings) if usgs_status == 200 else None,
                status=usgs_status,
                match=[matchers.query_param_matcher(
                    {"format": "json", "sites": site['usgs_site'], "period": period}
                )],
            )
        responses.add(
            responses.GET,
            api['coops_datagetter_url'],
            json=coops_payload if coops_payload is not None else SAMPLE_PREDICTIONS,
            status=200,
        )
        responses.add(
            responses.GET,
            api['nws_alerts_url'],
            json=SAMPLE_ALERTS if alerts_status == 200 else None,
            status=alerts_status,
        )

    return register
