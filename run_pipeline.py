"""
Scheduled entry script.

Intended to be invoked by an external scheduler (cron, CI schedule) every
few minutes:

    */2 6-23 * * 1-5  cd /srv/disclosure-relay && python run_pipeline.py

Use --test for a manual run and --health for a connectivity check.
"""

import sys

from disclosure_relay.cli import main

if __name__ == '__main__':
    sys.exit(main())
