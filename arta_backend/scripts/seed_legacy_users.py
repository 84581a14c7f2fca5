"""
Seed legacy (hash-only) accounts into ``system_users``.

Accounts come from ``ADMIN_*``, ``EDITOR_*``, ``ANALYST_*`` and
``VIEWER_*`` environment variables (``_EMAIL`` and ``_PASSWORD``
required, ``_NAME`` and ``_DEPARTMENT`` optional).  Existing emails are
skipped.  Each seeded profile is linked to Firebase Auth on its owner's
first successful Firebase login.
"""

from __future__ import annotations

import argparse
import sys
from typing import Optional, Sequence

from arta_backend.scripts._bootstrap import build_services
from arta_backend.services.user_provisioning import ROLE_PREFIXES, users_from_env


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Seed legacy admin users into Firestore")
    parser.add_argument(
        "--roles",
        nargs="+",
        choices=sorted(ROLE_PREFIXES),
        default=list(ROLE_PREFIXES),
        help="Environment prefixes to read (default: all)",
    )
    args = parser.parse_args(argv)

    requests = users_from_env(args.roles)
    if not requests:
        print("No users configured. Set <ROLE>_EMAIL and <ROLE>_PASSWORD, e.g. ADMIN_EMAIL.")
        return 1

    services, _ = build_services()
    summary = services["user_provisioning_service"].seed_all(requests)

    for email in summary.created:
        print(f"Created: {email}")
    for email in summary.skipped:
        print(f"Skipped (already exists): {email}")
    for email, error in summary.errors.items():
        print(f"Error: {email}: {error}")
    if not summary.created:
        print("No new users were created.")
    return 1 if summary.has_errors else 0


if __name__ == "__main__":
    sys.exit(main())
