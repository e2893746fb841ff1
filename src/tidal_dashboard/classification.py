"""
Flood-stage classification and vertical datum conversion.

Water levels are compared against three ascending cutoffs (minor, moderate,
major). Tide predictions arrive in a different vertical datum than the
thresholds, so every predicted value is shifted with convert_datum() before it
is classified.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict
import math


class FloodCategory(str, Enum):
    """Flood severity labels, lowest to highest."""
    NO_FLOOD = "No flood"
    MINOR = "Minor"
    MODERATE = "Moderate"
    MAJOR = "Major"


@dataclass(frozen=True)
class Thresholds:
    """Flood-stage cutoffs in feet. Must be strictly ascending."""
    minor: float
    moderate: float
    major: float

    def __post_init__(self):
        if not (self.minor < self.moderate < self.major):
            raise ValueError(
                f"Thresholds must be strictly ascending, got "
                f"minor={self.minor}, moderate={self.moderate}, major={self.major}"
            )

    @classmethod
    def from_settings(cls, settings: Dict[str, Any]) -> "Thresholds":
        """Build thresholds from the 'thresholds' section of the settings."""
        section = settings['thresholds']
        return cls(
            minor=float(section['minor']),
            moderate=float(section['moderate']),
            major=float(section['major']),
        )


def _as_level(value: Any):
    # bool is an int subclass; a flag is not a water level
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def classify(value: Any, thresholds: Thresholds) -> FloodCategory:
    """Classify a water level against the thresholds.

    Args:
        value: Water level in feet. None, non-numeric and NaN values are
            accepted and classify as no flood.
        thresholds: Flood-stage cutoffs

    Returns:
        The FloodCategory for the value
    """
    level = _as_level(value)
    if level is None:
        return FloodCategory.NO_FLOOD
    if level >= thresholds.major:
        return FloodCategory.MAJOR
    if level >= thresholds.moderate:
        return FloodCategory.MODERATE
    if level >= thresholds.minor:
        return FloodCategory.MINOR
    return FloodCategory.NO_FLOOD


def convert_datum(value: float, offset_ft: float) -> float:
    """Shift a value from the source datum to the target datum.

    ``offset_ft`` is ``target_datum - source_datum`` and is added to the
    value. Converting back uses the negated offset.
    """
    return value + offset_ft
