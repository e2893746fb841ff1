"""Tidal flood-stage dashboard for a single monitoring site."""

from .classification import FloodCategory, Thresholds, classify, convert_datum
from .models import (
    AlertBanner,
    AlertResult,
    AlertStatus,
    DailyRange,
    FloodEvent,
    NearMatch,
    ObservationPoint,
    PeakReading,
)


__version__ = "0.1.0"
__all__ = [
    'FloodCategory',
    'Thresholds',
    'classify',
    'convert_datum',
    'AlertBanner',
    'AlertResult',
    'AlertStatus',
    'DailyRange',
    'FloodEvent',
    'NearMatch',
    'ObservationPoint',
    'PeakReading'
]
