"""
Command line interface for building a dashboard snapshot.

Fetches every dashboard section once, logs the current conditions and writes
the snapshot as JSON, optionally with a PNG chart.
"""

import argparse
import json
import logging
from pathlib import Path
import sys

from . import config
from .chart import render_water_level_chart
from .dashboard import Dashboard, DashboardSnapshot
from .logging_utils import level_for, setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Build a tidal flood-stage dashboard snapshot'
    )

    parser.add_argument(
        '--config',
        type=Path,
        help='Settings file (default: config/dashboard_settings.yaml)'
    )

    parser.add_argument(
        '--output',
        type=Path,
        default=config.SNAPSHOT_DIR / 'dashboard.json',
        help='Where to write the snapshot JSON'
    )

    parser.add_argument(
        '--chart',
        type=Path,
        help='Also render the water-level chart to this PNG file'
    )

    parser.add_argument(
        '--min-ft',
        type=float,
        help='Lowest peak shown in the event table (default: minor threshold)'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser.parse_args(argv)


def _fmt(value) -> str:
    return "-" if value is None else f"{value:.2f}"


def log_summary(snapshot: DashboardSnapshot) -> None:
    """Log the headline numbers of a snapshot."""
    if snapshot.alert.show_banner:
        banner = snapshot.alert.banner
        logger.info(f"ALERT {banner.title}: {banner.headline} ({banner.url})")
    else:
        logger.info(f"Alert banner: {snapshot.alert.status.value}")

    live = snapshot.live
    if live is None:
        logger.info("Live conditions: unavailable")
    else:
        current = live.current.ft if live.current else None
        logger.info(f"Current level: {_fmt(current)} ft ({live.category.value})")
        logger.info(f"Today min/max: {_fmt(live.today.min)} / {_fmt(live.today.max)} ft")
        logger.info(f"Monthly max: {_fmt(live.monthly_max.ft)} ft at {live.monthly_max.t}")
        if live.near_match_checked:
            if live.near_match is not None:
                logger.info(f"Last this close: {live.near_match.t} ({_fmt(live.near_match.ft)} ft)")
            else:
                logger.info("Last this close: no match in window")

    if snapshot.history is not None:
        logger.info(f"Event table: {len(snapshot.event_table())} events at or above minor")


def main(argv=None):
    """Main execution function."""
    args = parse_args(argv)
    config.ensure_directories()
    setup_logging(level_for(args.verbose), log_file=config.LOG_DIR / 'dashboard.log')

    try:
        settings = config.load_settings(args.config)
        dashboard = Dashboard(settings)
    except (OSError, ValueError, KeyError) as e:
        logger.error(f"Cannot load settings: {e}")
        sys.exit(1)

    with dashboard:
        snapshot = dashboard.build()
    log_summary(snapshot)

    args.output.parent.mkdir(parents=True, exist_ok=True)
    with open(args.output, 'w') as f:
        json.dump(snapshot.to_dict(min_ft=args.min_ft), f, indent=2)
    logger.info(f"Snapshot saved to: {args.output}")

    if args.chart:
        if snapshot.live is None:
            logger.warning("Skipping chart, live conditions unavailable")
        else:
            render_water_level_chart(
                snapshot.live.observations,
                snapshot.live.predictions,
                snapshot.thresholds,
                args.chart,
                forecast=snapshot.forecast,
                title=settings['site']['name'],
            )


if __name__ == '__main__':
    main()
