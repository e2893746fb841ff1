"""
Summary statistics over observation sequences and event lists.

All helpers are linear scans over time-ordered ObservationPoint sequences
(oldest first) and have no side effects.
"""

from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from .models import DailyRange, FloodEvent, NearMatch, ObservationPoint, PeakReading

DEFAULT_EVENT_LIMIT = 250
NEAR_MATCH_MIN_POINTS = 3


def today_min_max(
    observations: Sequence[ObservationPoint],
    now: Optional[datetime] = None
) -> DailyRange:
    """Min and max level over the local calendar day containing ``now``.

    Naive timestamps are taken as local time.
    """
    now = (now or datetime.now()).astimezone()
    start = now.replace(hour=0, minute=0, second=0, microsecond=0)
    end = start + timedelta(days=1)

    todays = [p.ft for p in observations if start <= p.t.astimezone() < end]
    if not todays:
        return DailyRange(min=None, max=None)
    return DailyRange(min=min(todays), max=max(todays))


def max_since(observations: Sequence[ObservationPoint]) -> PeakReading:
    """Highest reading in the sequence; the earliest one wins a tie."""
    best = None
    for point in observations:
        if best is None or point.ft > best.ft:
            best = point
    if best is None:
        return PeakReading(ft=None, t=None)
    return PeakReading(ft=best.ft, t=best.t)


def last_within_tolerance(
    observations: Sequence[ObservationPoint],
    target: float,
    tolerance: float = 0.2
) -> Optional[NearMatch]:
    """Most recent earlier reading within ``tolerance`` feet of ``target``.

    The newest point is excluded from the search since it is the reading being
    compared. Sequences shorter than three points never match.
    """
    if len(observations) < NEAR_MATCH_MIN_POINTS:
        return None

    latest_t = observations[-1].t
    for point in reversed(observations[:-1]):
        if abs(point.ft - target) <= tolerance:
            return NearMatch(t=point.t, ft=point.ft, latest_t=latest_t)
    return None


def latest_reading(observations: Sequence[ObservationPoint]) -> Optional[ObservationPoint]:
    return observations[-1] if observations else None


def filter_events(
    events: Sequence[FloodEvent],
    min_ft: float,
    limit: int = DEFAULT_EVENT_LIMIT
) -> List[FloodEvent]:
    """Events with a peak at or above ``min_ft``, capped at ``limit`` rows."""
    return [e for e in events if e.peak >= min_ft][:limit]
