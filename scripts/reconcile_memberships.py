"""Repair accepted applications without a membership and recount project member counters."""
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import logging

from teamswap.config import settings
from teamswap.database import SessionLocal
import teamswap.models  # noqa: F401
from teamswap.services import membership_service


def main():
    logging.basicConfig(level=settings.LOG_LEVEL, format="%(levelname)s %(name)s %(message)s")
    db = SessionLocal()
    try:
        report = membership_service.reconcile(db)
    finally:
        db.close()
    print(
        "Reconciliation done: "
        f"memberships_created={report['memberships_created']} "
        f"counters_fixed={report['counters_fixed']} "
        f"over_capacity={report['over_capacity']}"
    )
    return 1 if report["over_capacity"] else 0


if __name__ == "__main__":
    sys.exit(main())
