"""
Remote data feeds.

This package wraps the public APIs the dashboard reads: USGS instantaneous
values, NOAA CO-OPS tide predictions, NWS active alerts and NWPS forecasts.
"""

from .client import FeedClient, FeedApiError, FeedHttpError
from .usgs import UsgsGaugeFeed
from .coops import TidePredictionFeed
from .nws import AlertFeed
from .nwps import NwpsForecastFeed, ForecastShapeError

__all__ = [
    'FeedClient',
    'FeedApiError',
    'FeedHttpError',
    'UsgsGaugeFeed',
    'TidePredictionFeed',
    'AlertFeed',
    'NwpsForecastFeed',
    'ForecastShapeError'
]
