"""Certificate expiry reminder runner.

Safe to run from cron as often as you like: the notification ledger keeps
each (certificate, tier) reminder to a single send.
"""

from __future__ import annotations

import argparse
from datetime import datetime, timezone
from typing import Optional

from compliancedb.database import WriteSessionLocal
from compliancedb.apps.training import reminders
from compliancedb.utils.dates import ensure_utc


def run(now: Optional[datetime] = None) -> dict:
    db = WriteSessionLocal()
    try:
        summary = reminders.run_tick(db, now=ensure_utc(now) if now else datetime.now(timezone.utc))
        db.commit()
        return summary.as_dict()
    finally:
        db.close()


def _parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Send certificate expiry reminders.")
    parser.add_argument(
        "--as-of",
        type=datetime.fromisoformat,
        default=None,
        help="ISO-8601 instant to evaluate the run at (backfill).",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    args = _parse_args()
    result = run(args.as_of)
    print("Training reminder runner completed:", result)
