"""
Small parsing helpers shared by the feed loaders and dataset readers.
"""

from datetime import datetime, timezone
from typing import Any, Optional
import math


def parse_timestamp(ts: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO8601 timestamp to a UTC-aware datetime.

    Handles both 'Z' suffix and numeric offsets; timestamps without an offset
    are taken as UTC. Returns None if parsing fails.
    """
    if not ts or not isinstance(ts, str):
        return None
    try:
        if ts.endswith("Z"):
            ts = ts[:-1] + "+00:00"
        parsed = datetime.fromisoformat(ts)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def coerce_float(val: Any) -> Optional[float]:
    """Coerce a value to a finite float, returning None on failure."""
    if val is None or isinstance(val, bool):
        return None
    try:
        f = float(val)
    except (TypeError, ValueError):
        return None
    return f if math.isfinite(f) else None
