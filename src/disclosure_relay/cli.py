"""
Command-line entry point.

    disclosure-relay            # scheduled run (respects the active window)
    disclosure-relay --test     # bypass the schedule gate, process 3 records
    disclosure-relay --health   # CMS connection + listing fetch check

Exit status: 0 on success or skip, 1 on fatal failure or failed health check.
"""

import argparse
import logging
import sys
from typing import List, Optional

from pydantic import ValidationError

from disclosure_relay.api.pipeline import ReleasePipeline
from disclosure_relay.config import get_app_config, get_relay_config

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def setup_logging(level: str = 'info') -> None:
    """Configure process-wide logging once."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        stream=sys.stdout
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='disclosure-relay',
        description='Relay new disclosures from the listing page to the CMS as drafts.'
    )
    parser.add_argument(
        '--test',
        action='store_true',
        help='Ignore the active window and process at most test_max_releases records'
    )
    parser.add_argument(
        '--health',
        action='store_true',
        help='Check CMS connectivity and the listing fetch, then exit'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the pipeline once.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)

    try:
        app_config = get_app_config()
        relay_config = get_relay_config()
    except (FileNotFoundError, ValidationError) as e:
        setup_logging()
        logger.error(f"Failed to load configuration: {e}")
        return 1

    setup_logging(relay_config.logging.level)

    pipeline = ReleasePipeline.from_config(app_config, relay_config)

    if args.health:
        return 0 if pipeline.health_check() else 1

    test_mode = args.test or app_config.test_mode

    try:
        pipeline.run(test_mode=test_mode)
    except RuntimeError:
        # Already logged and recorded by the pipeline
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
