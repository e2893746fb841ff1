"""
Data records shared across the dashboard.

Observation sequences are expected oldest-to-newest; nothing here enforces
the ordering, callers sort.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ObservationPoint:
    """A single water-level reading or prediction."""
    t: datetime
    ft: float

    def to_dict(self) -> Dict[str, Any]:
        return {'t': self.t.isoformat(), 'ft': self.ft}


@dataclass(frozen=True)
class FloodEvent:
    """A historical high/low reading classified against the thresholds."""
    datetime: str  # display string, YYYY-MM-DD HH:MM
    peak: float
    type: str

    @classmethod
    def from_dict(cls, record: Dict[str, Any]) -> "FloodEvent":
        return cls(
            datetime=str(record['datetime']),
            peak=float(record['peak']),
            type=str(record['type']),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'datetime': self.datetime, 'peak': self.peak, 'type': self.type}


@dataclass(frozen=True)
class AlertBanner:
    """An active coastal-flood alert."""
    title: str
    headline: str
    url: str


class AlertStatus(str, Enum):
    ACTIVE = "active"
    NONE = "none"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class AlertResult:
    """Outcome of the alert lookup.

    ``NONE`` means the feed answered and no coastal-flood alert is active;
    ``UNAVAILABLE`` means the feed could not be read.
    """
    status: AlertStatus
    banner: Optional[AlertBanner] = None

    @classmethod
    def active(cls, banner: AlertBanner) -> "AlertResult":
        return cls(AlertStatus.ACTIVE, banner)

    @classmethod
    def none(cls) -> "AlertResult":
        return cls(AlertStatus.NONE)

    @classmethod
    def unavailable(cls) -> "AlertResult":
        return cls(AlertStatus.UNAVAILABLE)

    @property
    def show_banner(self) -> bool:
        return self.status is AlertStatus.ACTIVE


@dataclass(frozen=True)
class PeakReading:
    """Highest reading of a sequence; both fields None for an empty one."""
    ft: Optional[float]
    t: Optional[datetime]


@dataclass(frozen=True)
class NearMatch:
    """Last earlier reading close to the current level."""
    t: datetime
    ft: float
    latest_t: datetime


@dataclass(frozen=True)
class DailyRange:
    min: Optional[float]
    max: Optional[float]
