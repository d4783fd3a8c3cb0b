"""
Expired-match sweep, run daily by an external scheduler (cron, k8s CronJob).

Usage
-----
    python -m bartr.jobs.expire_matches [--now 2025-01-31T00:00:00+00:00]

Prints the sweep summary as JSON and exits non-zero if any match failed.
"""

import argparse
import json
import logging
import sys
from datetime import datetime, timezone

from bartr.database.core.expiry import sweep_expired_matches

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Resolve matches that expired with one-sided submissions.")
    parser.add_argument(
        "--now",
        type=datetime.fromisoformat,
        default=None,
        help="Reference time (ISO 8601); defaults to the current UTC time.",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    args = parse_args(argv)
    now = args.now
    if now is not None and now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    result = sweep_expired_matches(now=now)
    print(json.dumps(result, indent=2))
    return 0 if result["success"] else 1


if __name__ == "__main__":
    sys.exit(main())
