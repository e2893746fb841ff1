"""
Logging setup for the command line tools.

Library modules never configure logging. They only do:

    import logging
    logger = logging.getLogger(__name__)

tide-dashboard and build-nwps-forecast call setup_logging() once at start-up.
The console shows the requested level; the optional log file always records
debug detail so a failed feed request can be traced after the fact.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

DEFAULT_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# HTTP and plotting libraries log every connection and font lookup at debug
QUIET_LOGGERS = ('urllib3', 'matplotlib', 'PIL')


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[Path] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Configure logging for a command line run.

    Args:
        level: Console logging level (default: INFO)
        log_file: Optional path to also write logs to, at debug level
        format_string: Optional custom format string
    """
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    handlers = [console]

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        handlers.append(file_handler)

    for handler in handlers:
        handler.setFormatter(formatter)

    logging.basicConfig(
        level=logging.DEBUG if log_file else level,
        handlers=handlers,
        force=True  # Override any existing configuration
    )

    third_party_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)


def level_for(verbose: bool) -> int:
    """Map a --verbose flag to a logging level."""
    return logging.DEBUG if verbose else logging.INFO
