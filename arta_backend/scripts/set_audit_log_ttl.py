"""
Backfill ``expiresAt`` on audit log entries so the Firestore TTL policy
can remove them.  After running, add a TTL policy on ``expiresAt`` for
the audit collection in the Firebase console.
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from arta_backend.logger import get_logger
from arta_backend.repositories.document_store import MAX_BATCH_WRITES
from arta_backend.scripts._bootstrap import build_services


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Add expiresAt to existing audit logs")
    parser.add_argument(
        "--retention-days",
        type=int,
        default=None,
        help="Days to keep each entry (default: AUDIT_LOG_RETENTION_DAYS)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=MAX_BATCH_WRITES,
        help="Documents per page and write batch",
    )
    args = parser.parse_args(argv)
    logger = get_logger("scripts")

    services, config = build_services()
    retention = args.retention_days if args.retention_days is not None else config.AUDIT_LOG_RETENTION_DAYS
    try:
        updated = services["maintenance_service"].set_audit_log_ttl(
            retention_days=retention, batch_size=min(args.batch_size, MAX_BATCH_WRITES),
        )
    except Exception as exc:
        logger.error("Migration failed: %s", exc)
        return 1

    print(f"Migration complete. Total documents updated: {updated}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
