"""
Offline NWPS forecast fetch.

Fetches the stage forecast for one NWPS gauge and writes it as a JSON list of
{t, ft} points, oldest first, for the dashboard to read. Exits with status 1
on any fetch or shape failure.
"""

import argparse
import json
import logging
import os
from pathlib import Path
import sys

from . import config
from .feeds import FeedApiError, FeedClient, NwpsForecastFeed
from .logging_utils import level_for, setup_logging

logger = logging.getLogger(__name__)

GAUGE_ENV_VAR = "NWPS_GAUGE"


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description='Fetch the NWPS stage forecast and write it as JSON'
    )

    parser.add_argument(
        '--gauge',
        help=f'NWPS gauge id (default: ${GAUGE_ENV_VAR}, then the configured gauge)'
    )

    parser.add_argument(
        '--output',
        type=Path,
        help='Output JSON file (default: <data dir>/nwps_forecast.json)'
    )

    parser.add_argument(
        '--config',
        type=Path,
        help='Settings file (default: config/dashboard_settings.yaml)'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Enable verbose logging'
    )

    return parser.parse_args(argv)


def write_forecast(points, output_path: Path) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, 'w') as f:
        json.dump(points, f, indent=2)
    return output_path


def main(argv=None):
    """Main execution function."""
    args = parse_args(argv)
    setup_logging(level_for(args.verbose))

    try:
        settings = config.load_settings(args.config)
        gauge = args.gauge or os.environ.get(GAUGE_ENV_VAR) or settings['site']['nwps_gauge']
        output_path = args.output or config.resolve_data_dir(settings) / settings['data']['forecast']

        with FeedClient(user_agent=settings['api']['user_agent']) as client:
            feed = NwpsForecastFeed(client, base_url=settings['api']['nwps_base_url'])
            points = feed.fetch_forecast(gauge)

        write_forecast(points, output_path)
        logger.info(f"Wrote {len(points)} points to {output_path}")

    except (FeedApiError, OSError, ValueError) as e:
        logger.error(f"NWPS forecast fetch failed: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
