"""
Water-level time-series chart.

Plots observed levels, tide predictions and the NWPS forecast against the
flood thresholds. Each call builds its own figure and closes it before
returning.
"""

from pathlib import Path
from typing import Optional, Sequence
import logging

import matplotlib.dates as mdates
import matplotlib.pyplot as plt

from .classification import Thresholds
from .models import ObservationPoint

logger = logging.getLogger(__name__)

THRESHOLD_STYLES = (
    ('minor', 'Minor', '#d97706'),
    ('moderate', 'Moderate', '#b91c1c'),
    ('major', 'Major', '#7e22ce'),
)


def _plot_series(ax, points: Sequence[ObservationPoint], label: str, **style) -> bool:
    if not points:
        return False
    ax.plot([p.t for p in points], [p.ft for p in points], label=label, **style)
    return True


def render_water_level_chart(
    observed: Sequence[ObservationPoint],
    predicted: Sequence[ObservationPoint],
    thresholds: Thresholds,
    output_path: Path,
    forecast: Optional[Sequence[ObservationPoint]] = None,
    title: Optional[str] = None
) -> Path:
    """Render the observed/predicted chart to a PNG file.

    Args:
        observed: Gauge observations, oldest first
        predicted: Tide predictions in the threshold datum, oldest first
        thresholds: Flood thresholds drawn as horizontal lines
        output_path: Where to write the image
        forecast: Optional NWPS forecast points
        title: Optional chart title

    Returns:
        The path written
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fig, ax = plt.subplots(figsize=(12, 5))
    try:
        _plot_series(ax, observed, 'Observed (USGS)', linewidth=2)
        _plot_series(ax, predicted, 'Predicted (NOAA)', linewidth=2)
        _plot_series(ax, forecast or [], 'Forecast (NWPS)', linewidth=1.5, linestyle='--')

        for attr, label, color in THRESHOLD_STYLES:
            ax.axhline(getattr(thresholds, attr), color=color, linewidth=1,
                       linestyle=':', label=f"{label} ({getattr(thresholds, attr):.2f} ft)")

        ax.set_ylabel('Feet')
        ax.xaxis.set_major_formatter(mdates.DateFormatter('%b %d, %H:%M'))
        ax.grid(alpha=0.3)
        ax.legend(loc='upper center', bbox_to_anchor=(0.5, -0.12), ncol=3, fontsize=8)
        if title:
            ax.set_title(title)

        fig.savefig(output_path, dpi=150, bbox_inches='tight')
    finally:
        plt.close(fig)

    logger.info(f"Saved chart to {output_path}")
    return output_path
